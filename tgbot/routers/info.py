"""Ruter Ingfo?"""

from __future__ import annotations

from textwrap import dedent

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from tgbot.config import settings
from tgbot.utils import CMD_HELP

router = APIRouter()

HTTP_HELP_TEXT = dedent(
    f"""
Telegram chat bot (HTTP Help)

Endpoints
---------
- GET  /                             : Health check
- GET  /help                         : This text
- POST /tg/{{bot_id}}/{{token}}          : Telegram webhook
- POST /bots/{{bot_id}}/webhook        : Install the webhook (form: token, key)
- GET  /bots/{{bot_id}}/webhook        : Webhook info (query: token, key)

Telegram commands
-----------------
{CMD_HELP}

Notes
-----
- PUBLIC_BASE_URL: {settings.public_base_url}
"""
).strip()


@router.get("/", response_class=PlainTextResponse)
def health() -> str:
    return "ok"


@router.get("/help", response_class=PlainTextResponse)
def http_help() -> str:
    return HTTP_HELP_TEXT
