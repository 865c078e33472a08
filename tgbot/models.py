"""models for DBs"""

from __future__ import annotations

from sqlalchemy import Column, DateTime, Integer, String, Text

from .db import Base
from .timezone import now_local


class ChatMessage(Base):
    """One turn of a chat's conversation history."""

    __tablename__ = "messages"
    id = Column(Integer, primary_key=True, autoincrement=True)
    chat_id = Column(String, nullable=False, index=True)
    role = Column(String, nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=now_local, nullable=False, index=True)
