"""Telegram router: webhook endpoint and registered command handlers."""

from __future__ import annotations

import functools
import logging
import time
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session, sessionmaker

from tgbot.config import BotOptions, default_options
from tgbot.db import get_db
from tgbot.schemas import Update
from tgbot.services import history
from tgbot.services.ai import (
    SYSTEM_PROMPT_CHAT,
    AIClient,
    as_code_block,
    extract_image_url,
    extract_thinking_process,
    get_ai_client,
)
from tgbot.services.context import BotIdentity, ExecutionContext
from tgbot.services.dispatch import CommandContext, Handler, dispatch
from tgbot.services.telegram import TelegramApi, get_telegram_api
from tgbot.utils import (
    CMD_HELP,
    TEXT_CLEAR_FAILED,
    TEXT_CODE_FAILED,
    TEXT_CODE_USAGE,
    TEXT_COMMAND_FAILED,
    TEXT_FILE_FAILED,
    TEXT_FILE_RECEIVED,
    TEXT_FILE_UNREADABLE,
    TEXT_GENERATING_IMAGE,
    TEXT_HISTORY_CLEARED,
    TEXT_IMAGE_FAILED,
    TEXT_IMAGE_NO_URL,
    TEXT_IMAGE_USAGE,
    TEXT_MESSAGE_FAILED,
    TEXT_NO_ANSWER,
    TEXT_THINKING,
    TEXT_THINKING_OFF,
    TEXT_THINKING_ON,
    parse_bot_id_from_token,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tg", tags=["telegram"])


def get_options(request: Request) -> BotOptions:
    """Per-deployment options live on the app; created lazily for bare routers."""
    options = getattr(request.app.state, "options", None)
    if options is None:
        options = default_options()
        request.app.state.options = options
    return options


async def _handle_start(ctx: CommandContext, _arg: str) -> None:
    await ctx.tg.reply(CMD_HELP, "HTML")


async def _handle_epoch(ctx: CommandContext, _arg: str) -> None:
    await ctx.tg.reply(str(int(time.time())), "HTML")


async def _handle_cc(ctx: CommandContext, _arg: str) -> None:
    ctx.options.show_thinking = True
    await ctx.tg.reply(TEXT_THINKING_ON, "HTML")


async def _handle_dd(ctx: CommandContext, _arg: str) -> None:
    ctx.options.show_thinking = False
    await ctx.tg.reply(TEXT_THINKING_OFF, "HTML")


async def _handle_clear(ctx: CommandContext, _arg: str) -> None:
    try:
        deleted = history.clear_history(ctx.db, ctx.tg.chat_id())
        logger.info("Cleared %d history entries for chat %s", deleted, ctx.tg.chat_id())
    except Exception:
        logger.exception("Error in clear command")
        ctx.db.rollback()
        await ctx.tg.reply(TEXT_CLEAR_FAILED, "HTML")
        return
    await ctx.tg.reply(TEXT_HISTORY_CLEARED, "HTML")


async def _handle_code(ctx: CommandContext, arg: str) -> None:
    if not arg:
        await ctx.tg.reply(TEXT_CODE_USAGE, "HTML")
        return

    await ctx.tg.reply(TEXT_THINKING, "HTML")
    chat_id = ctx.tg.chat_id()
    try:
        code = await ctx.ai.generate_code(arg)
        history.save_message(ctx.db, chat_id, "user", arg)
        history.save_message(ctx.db, chat_id, "assistant", code)
    except Exception:
        logger.exception("Error in code command")
        await ctx.tg.reply(TEXT_CODE_FAILED, "HTML")
        return
    await ctx.tg.reply(as_code_block(code, arg), "Markdown")


async def _handle_photo_prompt(ctx: CommandContext, arg: str) -> None:
    if not arg:
        await ctx.tg.reply(TEXT_IMAGE_USAGE, "HTML")
        return

    await ctx.tg.reply(TEXT_GENERATING_IMAGE, "HTML")
    try:
        logger.info("Generating image with prompt: %s", arg)
        image_url = await ctx.ai.generate_image(arg)
    except Exception:
        logger.warning("Image API failed, falling back to image model", exc_info=True)
        try:
            image_url = extract_image_url(await ctx.ai.fallback_image(arg))
        except Exception:
            logger.exception("Fallback image model failed")
            await ctx.tg.reply(TEXT_IMAGE_FAILED, "HTML")
            return
        if not image_url:
            await ctx.tg.reply(TEXT_IMAGE_NO_URL, "HTML")
            return
    await ctx.tg.reply_photo(image_url)


async def _answer(ctx: CommandContext, chat_id: str, user_message: str) -> Optional[str]:
    """Ask the chat model, falling back to the secondary model. None if both fail."""
    messages = [
        {"role": "system", "content": SYSTEM_PROMPT_CHAT},
        *history.get_chat_history(ctx.db, chat_id),
        {"role": "user", "content": user_message},
    ]
    try:
        content = await ctx.ai.chat(messages)
    except Exception:
        logger.warning("Primary chat model failed, falling back", exc_info=True)
    else:
        thinking, final_response = extract_thinking_process(content)
        history.save_message(ctx.db, chat_id, "user", user_message)
        history.save_message(ctx.db, chat_id, "assistant", content)
        if ctx.options.show_thinking and thinking:
            await ctx.tg.reply(f"```\n{thinking}\n```", "Markdown")
        return final_response

    try:
        content = await ctx.ai.fallback_chat(messages)
    except Exception:
        logger.exception("Fallback chat model failed")
        return None
    history.save_message(ctx.db, chat_id, "user", user_message)
    history.save_message(ctx.db, chat_id, "assistant", content)
    return content


async def _handle_message(ctx: CommandContext, arg: str) -> None:
    chat_id = ctx.tg.chat_id()
    try:
        await ctx.tg.reply(TEXT_THINKING, "HTML")
        await ctx.tg.send_typing()
        answer = await _answer(ctx, chat_id, arg)
        if answer is None:
            await ctx.tg.reply(TEXT_NO_ANSWER, "HTML")
        else:
            await ctx.tg.reply(answer, "Markdown")
    except Exception:
        logger.exception("Error in message handler")
        ctx.db.rollback()
        await ctx.tg.reply(TEXT_MESSAGE_FAILED, "HTML")

    engine = ctx.db.get_bind()
    ctx.background.add_task(history.cleanup_old_messages, sessionmaker(bind=engine))


async def _handle_inline(ctx: CommandContext, arg: str) -> None:
    try:
        answer = await ctx.ai.chat(
            [{"role": "system", "content": SYSTEM_PROMPT_CHAT}, {"role": "user", "content": arg}]
        )
    except Exception:
        logger.exception("Error answering inline query")
        return
    _, final_response = extract_thinking_process(answer)
    await ctx.tg.reply(final_response)


async def _handle_document(ctx: CommandContext, _arg: str) -> None:
    message = ctx.tg.update.message
    document = message.document if message is not None else None
    if document is None or not document.file_id:
        await ctx.tg.reply(TEXT_FILE_UNREADABLE, "HTML")
        return

    try:
        file_response = await ctx.tg.get_file(document.file_id)
        file_path = file_response["result"]["file_path"]
    except Exception:
        logger.exception("Error handling document")
        await ctx.tg.reply(TEXT_FILE_FAILED, "HTML")
        return
    await ctx.tg.reply(TEXT_FILE_RECEIVED.format(url=ctx.tg.file_url(file_path)), "HTML")


def _command(handler: Handler) -> Handler:
    """Report any failure of a command back to the chat."""

    @functools.wraps(handler)
    async def wrapper(ctx: CommandContext, arg: str) -> None:
        try:
            await handler(ctx, arg)
        except Exception:
            logger.exception("Error in %s", handler.__name__)
            await ctx.tg.reply(TEXT_COMMAND_FAILED, "HTML")

    return wrapper


COMMAND_HANDLERS: dict[str, Handler] = {
    "/start": _command(_handle_start),
    "/epoch": _command(_handle_epoch),
    "/cc": _command(_handle_cc),
    "/dd": _command(_handle_dd),
    "/clear": _command(_handle_clear),
    "/code": _command(_handle_code),
    "/p": _command(_handle_photo_prompt),
    "message": _handle_message,
    "inline": _handle_inline,
    "document": _handle_document,
}


@router.post("/{bot_id}/{token}", response_class=PlainTextResponse)
async def telegram_webhook(
    bot_id: str,
    token: str,
    upd: Update,
    background: BackgroundTasks,
    db: Session = Depends(get_db),
    options: BotOptions = Depends(get_options),
    api: TelegramApi = Depends(get_telegram_api),
    ai: AIClient = Depends(get_ai_client),
):
    if parse_bot_id_from_token(token) != bot_id:
        logger.warning("Bot id %s does not match its token; update ignored", bot_id)
        return "ok"

    tg = ExecutionContext(BotIdentity(token=token, api=api), upd)
    logger.info("Update received (update_id=%s, kind=%s)", upd.update_id, tg.kind.value or "none")

    ctx = CommandContext(tg=tg, db=db, options=options, ai=ai, background=background)
    try:
        await dispatch(COMMAND_HANDLERS, ctx)
    except Exception:
        logger.exception("Error processing update %s", upd.update_id)
        return PlainTextResponse("Error processing request", status_code=500)
    return "ok"
