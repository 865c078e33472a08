"""Timezone helpers for history timestamps."""

from __future__ import annotations

import datetime as dt
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from tgbot.config import settings

DEFAULT_TIMEZONE = "UTC"


def _load_timezone(name: str, fallback: str = DEFAULT_TIMEZONE) -> tuple[ZoneInfo, str]:
    try:
        return ZoneInfo(name), name
    except ZoneInfoNotFoundError:
        return ZoneInfo(fallback), fallback


TZ, TZ_NAME = _load_timezone(settings.timezone or DEFAULT_TIMEZONE)


def now_local() -> dt.datetime:
    return dt.datetime.now(TZ)


def expiry_cutoff(days: int, now: dt.datetime | None = None) -> dt.datetime:
    """Timestamp before which stored turns count as expired."""
    return (now or now_local()) - dt.timedelta(days=days)
