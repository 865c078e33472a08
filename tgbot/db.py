"""Database engine and sessions for the chat history store."""

from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from tgbot.config import settings

# sqlite needs this for sessions used from FastAPI's threadpool and background tasks
_connect_args = {"check_same_thread": False} if settings.db_url.startswith("sqlite") else {}

engine = create_engine(settings.db_url, connect_args=_connect_args)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
Base = declarative_base()


def init_db(bind: Engine = engine) -> None:
    """Create the history tables if they are missing."""
    from tgbot import models  # noqa: F401

    Base.metadata.create_all(bind)


def get_db():
    """
    One session per webhook request.
    Handlers commit their own writes; the session is closed afterwards.
    """
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()
