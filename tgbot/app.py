"""the beautiful world start from here."""

from __future__ import annotations

import logging

from fastapi import FastAPI

from tgbot.config import default_options
from tgbot.db import init_db
from tgbot.logging_config import setup_logging
from tgbot.routers import bots, info, tg

setup_logging()
logger = logging.getLogger(__name__)

init_db()

app = FastAPI(title="Telegram chat bot (webhook)")
app.state.options = default_options()

app.include_router(info.router)
app.include_router(bots.router)
app.include_router(tg.router)

logger.info("Application ready (show_thinking=%s)", app.state.options.show_thinking)
