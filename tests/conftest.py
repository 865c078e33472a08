"""Pytest configuration and fixtures"""

import os

os.environ.setdefault("DB_URL", "sqlite://")

from typing import Any

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from factories import TOKEN, FakeTelegramApi
from tgbot.db import init_db
from tgbot.schemas import Update
from tgbot.services.context import BotIdentity, ExecutionContext


@pytest.fixture
def fake_api():
    return FakeTelegramApi()


@pytest.fixture
def make_ctx(fake_api):
    def _make(payload: dict[str, Any], api: FakeTelegramApi | None = None) -> ExecutionContext:
        return ExecutionContext(
            BotIdentity(token=TOKEN, api=api or fake_api),
            Update.model_validate(payload),
        )

    return _make


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()
