"""Update classification"""

from __future__ import annotations

from enum import Enum

from tgbot.schemas import Update


class UpdateKind(str, Enum):
    MESSAGE = "message"
    PHOTO = "photo"
    INLINE = "inline"
    DOCUMENT = "document"
    CALLBACK = "callback"
    BUSINESS_MESSAGE = "business_message"
    NONE = ""


# Kinds whose chat is ``update.message.chat``
MESSAGE_KINDS = frozenset({UpdateKind.MESSAGE, UpdateKind.PHOTO, UpdateKind.DOCUMENT})


def classify(update: Update) -> UpdateKind:
    """
    Map an update to exactly one kind.

    Malformed updates may carry several shapes at once; the first match in this
    order wins: photo, text, inline query, document, callback query, business
    message. Anything else is ``UpdateKind.NONE``.
    """
    message = update.message
    if message is not None and message.photo is not None:
        return UpdateKind.PHOTO
    if message is not None and message.text:
        return UpdateKind.MESSAGE
    if update.inline_query is not None and update.inline_query.query:
        return UpdateKind.INLINE
    if message is not None and message.document is not None:
        return UpdateKind.DOCUMENT
    if update.callback_query is not None and update.callback_query.id:
        return UpdateKind.CALLBACK
    if update.business_message is not None:
        return UpdateKind.BUSINESS_MESSAGE
    return UpdateKind.NONE
