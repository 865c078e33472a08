"""Yet another tele services"""

from __future__ import annotations

from typing import Any, Mapping, Optional

import httpx

from tgbot.config import settings

JSONDict = dict[str, Any]


class TelegramAPIError(RuntimeError):
    """Raised when the Bot API answers with an error status or ``ok: false``."""

    def __init__(self, method: str, status_code: int, description: str = ""):
        super().__init__(f"Telegram error: {method} {status_code} {description}".strip())
        self.method = method
        self.status_code = status_code
        self.description = description


class TelegramApi:
    """
    Thin Bot API client.

    Every call takes the bot token and a parameter mapping, POSTs it as JSON to
    ``{base}/bot{token}/{method}`` and returns the decoded response.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.telegram_api_base).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self._transport = transport

    def method_url(self, token: str, method: str) -> str:
        return f"{self.base_url}/bot{token}/{method}"

    def file_url(self, token: str, file_path: str) -> str:
        return f"{self.base_url}/file/bot{token}/{file_path}"

    async def call(self, token: str, method: str, params: Mapping[str, Any]) -> JSONDict:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            r = await client.post(self.method_url(token, method), json=dict(params))
        try:
            data = r.json()
        except ValueError:
            data = {}
        if r.status_code >= 300 or not data.get("ok", True):
            raise TelegramAPIError(method, r.status_code, data.get("description") or r.text)
        return data

    async def send_message(self, token: str, params: Mapping[str, Any]) -> JSONDict:
        return await self.call(token, "sendMessage", params)

    async def send_photo(self, token: str, params: Mapping[str, Any]) -> JSONDict:
        return await self.call(token, "sendPhoto", params)

    async def send_video(self, token: str, params: Mapping[str, Any]) -> JSONDict:
        return await self.call(token, "sendVideo", params)

    async def send_chat_action(self, token: str, params: Mapping[str, Any]) -> JSONDict:
        return await self.call(token, "sendChatAction", params)

    async def answer_inline_query(self, token: str, params: Mapping[str, Any]) -> JSONDict:
        return await self.call(token, "answerInlineQuery", params)

    async def get_file(self, token: str, params: Mapping[str, Any]) -> JSONDict:
        return await self.call(token, "getFile", params)

    async def set_webhook(self, token: str, params: Mapping[str, Any]) -> JSONDict:
        return await self.call(token, "setWebhook", params)

    async def get_webhook_info(self, token: str) -> JSONDict:
        return await self.call(token, "getWebhookInfo", {})


_api: Optional[TelegramApi] = None


def get_telegram_api() -> TelegramApi:
    """Get or create the shared API client."""
    global _api
    if _api is None:
        _api = TelegramApi()
    return _api


def webhook_url(bot_id: str, token: str, base_url: Optional[str] = None) -> str:
    """Webhook target for a bot: {base}/tg/{bot_id}/{token}."""
    base = (base_url or settings.public_base_url).rstrip("/")
    return f"{base}/tg/{bot_id}/{token}"


async def set_telegram_webhook(
    api: TelegramApi,
    token: str,
    bot_id: str,
    base_url: Optional[str] = None,
    *,
    drop_pending_updates: bool = True,
) -> JSONDict:
    """Point the bot's webhook at this server."""
    payload: JSONDict = {
        "url": webhook_url(bot_id, token, base_url),
        "drop_pending_updates": drop_pending_updates,
    }
    return await api.set_webhook(token, payload)
