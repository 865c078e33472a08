"""Ruter BOTS?"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, HTTPException, Query

from tgbot.config import settings
from tgbot.services.telegram import (
    JSONDict,
    TelegramApi,
    TelegramAPIError,
    get_telegram_api,
    set_telegram_webhook,
)
from tgbot.utils import parse_bot_id_from_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bots", tags=["Bots"])


def _check_admin_key(key_from_request: Optional[str]) -> bool:
    if not settings.admin_http_key:
        return True
    return (key_from_request or "") == settings.admin_http_key


def _validated_token(bot_id: str, token: str, key: Optional[str]) -> str:
    if not _check_admin_key(key):
        raise HTTPException(403, "Invalid admin key.")
    if parse_bot_id_from_token(token) != bot_id:
        raise HTTPException(400, "Token does not belong to this bot.")
    return token


@router.post("/{bot_id}/webhook")
async def install_webhook(
    bot_id: str,
    token: str = Form(...),
    public_base_url: Optional[str] = Form(None),
    key: Optional[str] = Form(None),
    api: TelegramApi = Depends(get_telegram_api),
) -> JSONDict:
    """Point the bot's Telegram webhook at ``{PUBLIC_BASE_URL}/tg/{bot_id}/{token}``."""
    _validated_token(bot_id, token, key)
    try:
        result = await set_telegram_webhook(api, token, bot_id, public_base_url)
    except TelegramAPIError as exc:
        logger.error("setWebhook failed for bot %s: %s", bot_id, exc.description)
        raise HTTPException(502, f"Telegram error: {exc.description}") from exc
    logger.info("Webhook installed for bot %s", bot_id)
    return result


@router.get("/{bot_id}/webhook")
async def webhook_info(
    bot_id: str,
    token: str = Query(...),
    key: Optional[str] = Query(None),
    api: TelegramApi = Depends(get_telegram_api),
) -> JSONDict:
    _validated_token(bot_id, token, key)
    try:
        return await api.get_webhook_info(token)
    except TelegramAPIError as exc:
        raise HTTPException(502, f"Telegram error: {exc.description}") from exc
