"""Chat history store"""

from __future__ import annotations

import logging
from typing import Any, Callable

from sqlalchemy import func
from sqlalchemy.orm import Session

from tgbot.config import settings
from tgbot.db import SessionLocal
from tgbot.models import ChatMessage
from tgbot.services.ai import ai_output_to_string
from tgbot.timezone import expiry_cutoff, now_local

logger = logging.getLogger(__name__)


def save_message(session: Session, chat_id: str, role: str, content: Any) -> ChatMessage:
    """Store one turn, truncated to the configured maximum length."""
    text = ai_output_to_string(content)
    if len(text) > settings.max_message_length:
        text = text[: settings.max_message_length]
    msg = ChatMessage(chat_id=str(chat_id), role=role, content=text, created_at=now_local())
    session.add(msg)
    session.commit()
    return msg


def get_chat_history(session: Session, chat_id: str) -> list[dict[str, str]]:
    """Most recent turns of a chat, oldest first."""
    rows = (
        session.query(ChatMessage)
        .filter_by(chat_id=str(chat_id))
        .order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc())
        .limit(settings.max_messages_per_chat)
        .all()
    )
    return [{"role": row.role, "content": row.content} for row in reversed(rows)]


def clear_history(session: Session, chat_id: str) -> int:
    deleted = session.query(ChatMessage).filter_by(chat_id=str(chat_id)).delete()
    session.commit()
    return deleted


def cleanup_old_messages(session_factory: Callable[[], Session] = SessionLocal) -> None:
    """
    Drop expired turns, then trim chats above the cleanup threshold down to
    the newest ``max_messages_per_chat`` turns.

    Runs as a background task after the webhook response; errors are logged only.
    """
    try:
        with session_factory() as db:
            cutoff = expiry_cutoff(settings.message_expiry_days)
            db.query(ChatMessage).filter(ChatMessage.created_at < cutoff).delete(
                synchronize_session=False
            )

            crowded = (
                db.query(ChatMessage.chat_id)
                .group_by(ChatMessage.chat_id)
                .having(func.count(ChatMessage.id) > settings.cleanup_threshold)
                .all()
            )
            for (chat_id,) in crowded:
                keep_ids = [
                    row.id
                    for row in db.query(ChatMessage.id)
                    .filter_by(chat_id=chat_id)
                    .order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc())
                    .limit(settings.max_messages_per_chat)
                ]
                if keep_ids:
                    db.query(ChatMessage).filter(
                        ChatMessage.chat_id == chat_id, ChatMessage.id.notin_(keep_ids)
                    ).delete(synchronize_session=False)
            db.commit()
        logger.info("Database cleanup completed successfully")
    except Exception:
        logger.exception("Error during database cleanup")
