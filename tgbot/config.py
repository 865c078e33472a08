"""the beautiful world start from here."""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """App Settings"""

    db_url: str = os.getenv("DB_URL", "sqlite:///./tgbot.sqlite3")
    public_base_url: str = os.getenv("PUBLIC_BASE_URL", "https://yourdomain.exe")
    timezone: str = os.getenv("TIMEZONE", "UTC")
    admin_http_key: str = os.getenv("ADMIN_HTTP_KEY", "")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    telegram_api_base: str = os.getenv("TELEGRAM_API_BASE", "https://api.telegram.org")
    http_timeout_seconds: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "15"))

    # Whether replies are preceded by the model's reasoning block.
    show_thinking: bool = _env_bool("SHOW_THINKING")

    # Chat history limits
    max_messages_per_chat: int = int(os.getenv("MAX_MESSAGES_PER_CHAT", "20"))
    max_message_length: int = int(os.getenv("MAX_MESSAGE_LENGTH", "32000"))
    cleanup_threshold: int = int(os.getenv("CLEANUP_THRESHOLD", "100"))
    message_expiry_days: int = int(os.getenv("MESSAGE_EXPIRY_DAYS", "30"))

    # Primary chat model (OpenAI-compatible /chat/completions)
    chat_api_url: str = os.getenv("CHAT_API_URL", "")
    chat_api_key: str = os.getenv("CHAT_API_KEY", "")
    chat_model: str = os.getenv("CHAT_MODEL", "deepseek-r1")
    chat_max_tokens: int = int(os.getenv("CHAT_MAX_TOKENS", "32000"))
    ai_timeout_seconds: float = float(os.getenv("AI_TIMEOUT_SECONDS", "60"))

    # Cloudflare Workers AI (fallback chat, code and image models)
    cf_account_id: str = os.getenv("CF_ACCOUNT_ID", "")
    cf_api_token: str = os.getenv("CF_API_TOKEN", "")
    fallback_chat_model: str = os.getenv(
        "FALLBACK_CHAT_MODEL", "@cf/meta/llama-3.2-11b-vision-instruct"
    )
    code_model: str = os.getenv("CODE_MODEL", "@hf/thebloke/deepseek-coder-6.7b-instruct-awq")
    fallback_image_model: str = os.getenv(
        "FALLBACK_IMAGE_MODEL", "@cf/stabilityai/stable-diffusion-xl-base-1.0"
    )

    image_api_url: str = os.getenv("IMAGE_API_URL", "")


settings = Settings()


@dataclass
class BotOptions:
    """Per-deployment runtime toggles, changed by chat commands."""

    show_thinking: bool = False


def default_options() -> BotOptions:
    return BotOptions(show_thinking=settings.show_thinking)
