"""Command dispatch"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Awaitable, Callable, Mapping

from fastapi import BackgroundTasks
from sqlalchemy.orm import Session

from tgbot.config import BotOptions
from tgbot.services.classifier import UpdateKind
from tgbot.services.context import ExecutionContext

if TYPE_CHECKING:
    from tgbot.services.ai import AIClient

logger = logging.getLogger(__name__)


@dataclass
class CommandContext:
    tg: ExecutionContext
    db: Session
    options: BotOptions
    ai: "AIClient"
    background: BackgroundTasks


Handler = Callable[[CommandContext, str], Awaitable[None]]


def parse_command(text: str) -> tuple[str, str]:
    """
    Split ``/cmd@botname rest of text`` into ``("/cmd", "rest of text")``.
    Returns ``("", text)`` when the text is not a command.
    """
    stripped = (text or "").strip()
    if not stripped.startswith("/"):
        return "", stripped
    head, *rest = stripped.split(maxsplit=1)
    command = head.split("@", 1)[0].lower()
    return command, (rest[0].strip() if rest else "")


def resolve_handler_key(tg: ExecutionContext, handlers: Mapping[str, Handler]) -> tuple[str, str]:
    """Pick the handler key and argument for an update."""
    kind = tg.kind
    if kind is UpdateKind.MESSAGE:
        command, argument = parse_command(tg.text())
        if command and command in handlers:
            return command, argument
        return kind.value, tg.text()
    if kind is UpdateKind.INLINE:
        return kind.value, tg.text()
    return kind.value, ""


async def dispatch(handlers: Mapping[str, Handler], ctx: CommandContext) -> bool:
    """Invoke the handler registered for this update. Returns False on no-op."""
    if ctx.tg.kind is UpdateKind.NONE:
        logger.info("Ignoring update with no recognized payload")
        return False

    key, argument = resolve_handler_key(ctx.tg, handlers)
    handler = handlers.get(key)
    if handler is None:
        logger.info("No handler registered for %r", key)
        return False

    logger.info("Dispatching %r (kind=%s)", key, ctx.tg.kind.value)
    await handler(ctx, argument)
    return True
