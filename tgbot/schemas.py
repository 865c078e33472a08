"""Telegram payload schemas"""

from __future__ import annotations

import uuid
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class TgModel(BaseModel):
    """
    Base for Telegram objects.
    Only fields used by this app are declared; everything else is kept as extra.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class Chat(TgModel):
    id: int | str
    type: Optional[str] = None


class TgUser(TgModel):
    id: int
    is_bot: bool = False
    first_name: str = ""
    username: Optional[str] = None


class PhotoSize(TgModel):
    file_id: str
    file_unique_id: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None


class Document(TgModel):
    file_id: str
    file_name: Optional[str] = None
    mime_type: Optional[str] = None


class Message(TgModel):
    message_id: int
    chat: Chat
    from_user: Optional[TgUser] = Field(None, alias="from")
    date: Optional[int] = None
    text: Optional[str] = None
    caption: Optional[str] = None
    photo: Optional[list[PhotoSize]] = None
    document: Optional[Document] = None
    business_connection_id: Optional[str] = None


class InlineQuery(TgModel):
    id: str
    query: str = ""
    from_user: Optional[TgUser] = Field(None, alias="from")
    offset: str = ""


class CallbackQuery(TgModel):
    id: str
    from_user: Optional[TgUser] = Field(None, alias="from")
    message: Optional[Message] = None
    data: Optional[str] = None


class Update(TgModel):
    """https://core.telegram.org/bots/api#update"""

    update_id: Optional[int] = None
    message: Optional[Message] = None
    inline_query: Optional[InlineQuery] = None
    callback_query: Optional[CallbackQuery] = None
    business_message: Optional[Message] = None


def _result_id() -> str:
    return uuid.uuid4().hex


class InputTextMessageContent(BaseModel):
    message_text: str
    parse_mode: str = ""


class InlineQueryResultArticle(BaseModel):
    type: Literal["article"] = "article"
    id: str = Field(default_factory=_result_id)
    title: str
    input_message_content: InputTextMessageContent


class InlineQueryResultPhoto(BaseModel):
    type: Literal["photo"] = "photo"
    id: str = Field(default_factory=_result_id)
    photo_url: str
    thumbnail_url: str


class InlineQueryResultVideo(BaseModel):
    type: Literal["video"] = "video"
    id: str = Field(default_factory=_result_id)
    video_url: str
    mime_type: str = "video/mp4"
    thumbnail_url: str
    title: str = "Video"


def article_result(title: str, content: str, parse_mode: str = "") -> dict[str, Any]:
    return InlineQueryResultArticle(
        title=title,
        input_message_content=InputTextMessageContent(
            message_text=content, parse_mode=parse_mode
        ),
    ).model_dump()


def photo_result(photo: str) -> dict[str, Any]:
    return InlineQueryResultPhoto(photo_url=photo, thumbnail_url=photo).model_dump()


def video_result(video: str) -> dict[str, Any]:
    return InlineQueryResultVideo(video_url=video, thumbnail_url=video).model_dump()
