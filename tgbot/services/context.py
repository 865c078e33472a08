"""
Per-update execution context.

An ``ExecutionContext`` binds one inbound ``Update`` to one bot identity and the
kind the update was classified as. Every reply operation re-derives its target
(chat id, reply-to message, business connection, inline query) from that kind.

Send operations (``reply``, ``reply_photo``, ``reply_video``, ``send_typing``,
``reply_inline``, ``answer_inline_query``) never raise: a failure is logged, a
fixed notice is sent back through the same channel when there is one, and
``None`` is returned. ``get_file`` sends the same kind of notice but re-raises,
since its caller has nothing to continue with.
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Mapping, Optional

from tgbot.schemas import Update, article_result, photo_result, video_result
from tgbot.services.classifier import MESSAGE_KINDS, UpdateKind, classify
from tgbot.services.telegram import JSONDict, TelegramApi, get_telegram_api
from tgbot.utils import FAILURE_NOTICES

logger = logging.getLogger(__name__)

Sent = Optional[JSONDict]
Fetched = JSONDict
Options = Optional[Mapping[str, Any]]


@dataclass(frozen=True)
class BotIdentity:
    token: str
    api: TelegramApi = field(default_factory=get_telegram_api)


def _isolated(intent: str):
    """Log, notify and swallow any failure of a send operation."""

    def decorator(func: Callable[..., Awaitable[Sent]]):
        @functools.wraps(func)
        async def wrapper(self: "ExecutionContext", *args, **kwargs) -> Sent:
            try:
                return await func(self, *args, **kwargs)
            except Exception:
                logger.exception(
                    "Error in %s (kind=%s, chat_id=%s)",
                    func.__name__,
                    self.kind.value or "none",
                    self.chat_id() or "-",
                )
                await self._notify_failure(FAILURE_NOTICES[intent])
                return None

        return wrapper

    return decorator


class ExecutionContext:
    """Context of one update being handled."""

    def __init__(self, bot: BotIdentity, update: Update):
        self.bot = bot
        self.update = update
        self._kind = classify(update)

    @property
    def kind(self) -> UpdateKind:
        return self._kind

    @property
    def api(self) -> TelegramApi:
        return self.bot.api

    @property
    def token(self) -> str:
        return self.bot.token

    # ------------------------------------------------------------------
    # Accessors. All of them return "" when the value is not addressable.
    # ------------------------------------------------------------------

    def chat_id(self) -> str:
        if self._kind in MESSAGE_KINDS and self.update.message is not None:
            return str(self.update.message.chat.id)
        if self._kind is UpdateKind.BUSINESS_MESSAGE and self.update.business_message is not None:
            return str(self.update.business_message.chat.id)
        return ""

    def message_id(self) -> str:
        if self.update.message is None:
            return ""
        return str(self.update.message.message_id)

    def business_connection_id(self) -> str:
        business = self.update.business_message
        if business is None or business.business_connection_id is None:
            return ""
        return str(business.business_connection_id)

    def inline_query_id(self) -> str:
        if self.update.inline_query is None:
            return ""
        return str(self.update.inline_query.id)

    def callback_chat_id(self) -> str:
        callback = self.update.callback_query
        if callback is None or callback.message is None:
            return ""
        return str(callback.message.chat.id)

    def text(self) -> str:
        """Text of the message or the inline query, whichever this update carries."""
        if self._kind is UpdateKind.INLINE and self.update.inline_query is not None:
            return self.update.inline_query.query
        if self.update.message is not None:
            return self.update.message.text or ""
        if self.update.business_message is not None:
            return self.update.business_message.text or ""
        return ""

    # ------------------------------------------------------------------
    # Reply router
    # ------------------------------------------------------------------

    @_isolated("message")
    async def reply(self, message: str, parse_mode: str = "", options: Options = None) -> Sent:
        """Reply with text through whatever channel this update came from."""
        opts = dict(options or {})
        if self._kind in MESSAGE_KINDS:
            return await self.api.send_message(
                self.token,
                {
                    **opts,
                    "chat_id": self.chat_id(),
                    "reply_to_message_id": self.message_id(),
                    "text": message,
                    "parse_mode": parse_mode,
                },
            )
        if self._kind is UpdateKind.BUSINESS_MESSAGE:
            return await self.api.send_message(
                self.token,
                {
                    **opts,
                    "chat_id": self.chat_id(),
                    "text": message,
                    "business_connection_id": self.business_connection_id(),
                    "parse_mode": parse_mode,
                },
            )
        if self._kind is UpdateKind.CALLBACK:
            chat_id = self.callback_chat_id()
            if not chat_id:
                return None
            return await self.api.send_message(
                self.token,
                {**opts, "chat_id": chat_id, "text": message, "parse_mode": parse_mode},
            )
        if self._kind is UpdateKind.INLINE:
            return await self.reply_inline("Response", message, parse_mode)
        return None

    @_isolated("photo")
    async def reply_photo(self, photo: str, caption: str = "", options: Options = None) -> Sent:
        """Reply with a photo url or file_id."""
        if self._kind in (UpdateKind.PHOTO, UpdateKind.MESSAGE):
            return await self.api.send_photo(
                self.token,
                {
                    **dict(options or {}),
                    "chat_id": self.chat_id(),
                    "reply_to_message_id": self.message_id(),
                    "photo": photo,
                    "caption": caption,
                },
            )
        if self._kind is UpdateKind.INLINE:
            return await self.api.answer_inline_query(
                self.token,
                {"inline_query_id": self.inline_query_id(), "results": [photo_result(photo)]},
            )
        return None

    @_isolated("video")
    async def reply_video(self, video: str, caption: str = "", options: Options = None) -> Sent:
        """Reply with a video url or file_id."""
        if self._kind in (UpdateKind.PHOTO, UpdateKind.MESSAGE):
            return await self.api.send_video(
                self.token,
                {
                    **dict(options or {}),
                    "chat_id": self.chat_id(),
                    "reply_to_message_id": self.message_id(),
                    "video": video,
                    "caption": caption,
                },
            )
        if self._kind is UpdateKind.INLINE:
            return await self.api.answer_inline_query(
                self.token,
                {"inline_query_id": self.inline_query_id(), "results": [video_result(video)]},
            )
        return None

    @_isolated("typing")
    async def send_typing(self) -> Sent:
        if self._kind in MESSAGE_KINDS:
            return await self.api.send_chat_action(
                self.token, {"chat_id": self.chat_id(), "action": "typing"}
            )
        if self._kind is UpdateKind.BUSINESS_MESSAGE:
            return await self.api.send_chat_action(
                self.token,
                {
                    "business_connection_id": self.business_connection_id(),
                    "chat_id": self.chat_id(),
                    "action": "typing",
                },
            )
        return None

    @_isolated("inline")
    async def reply_inline(self, title: str, message: str, parse_mode: str = "") -> Sent:
        """Answer the inline query with a single article."""
        if self._kind is not UpdateKind.INLINE:
            return None
        return await self.api.answer_inline_query(
            self.token,
            {
                "inline_query_id": self.inline_query_id(),
                "results": [article_result(title, message, parse_mode)],
            },
        )

    @_isolated("inline")
    async def answer_inline_query(self, results: list[Mapping[str, Any]]) -> Sent:
        inline_query_id = self.inline_query_id()
        if self._kind is not UpdateKind.INLINE or not inline_query_id:
            return None
        return await self.api.answer_inline_query(
            self.token,
            {"inline_query_id": inline_query_id, "results": [dict(r) for r in results]},
        )

    # ------------------------------------------------------------------
    # Fetch
    # ------------------------------------------------------------------

    async def get_file(self, file_id: str) -> Fetched:
        """Resolve a file_id. Unlike sends, failures are re-raised after notifying."""
        try:
            return await self.api.get_file(self.token, {"file_id": file_id})
        except Exception:
            logger.exception("Error in get_file (file_id=%s)", file_id)
            await self._notify_failure(FAILURE_NOTICES["file"])
            raise

    def file_url(self, file_path: str) -> str:
        return self.api.file_url(self.token, file_path)

    # ------------------------------------------------------------------
    # Degraded notification
    # ------------------------------------------------------------------

    def _notice_target(self) -> Optional[dict[str, str]]:
        if self._kind in MESSAGE_KINDS:
            chat_id = self.chat_id()
            return {"chat_id": chat_id} if chat_id else None
        if self._kind is UpdateKind.BUSINESS_MESSAGE:
            chat_id = self.chat_id()
            if not chat_id:
                return None
            return {"chat_id": chat_id, "business_connection_id": self.business_connection_id()}
        if self._kind is UpdateKind.CALLBACK:
            chat_id = self.callback_chat_id()
            return {"chat_id": chat_id} if chat_id else None
        return None

    async def _notify_failure(self, notice: str) -> Sent:
        target = self._notice_target()
        if target is None:
            return None
        try:
            return await self.api.send_message(
                self.token, {**target, "text": notice, "parse_mode": ""}
            )
        except Exception:
            logger.error("Failed to send error message (kind=%s)", self._kind.value, exc_info=True)
            return None
