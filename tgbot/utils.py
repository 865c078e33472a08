"""the beautiful world start from here."""

from __future__ import annotations

CMD_HELP = (
    "Send me a message to talk to DeepSeek-R1. Use /clear to wipe history. "
    "Use /p to generate a photo. Use /code to generate code. "
    "Use /dd to disable thinking process display. Use /cc to enable thinking process display."
)

# Degraded notifications, keyed by the reply intent that failed.
FAILURE_NOTICES: dict[str, str] = {
    "message": "消息发送失败，请稍后再试。",
    "photo": "图片发送失败，请稍后再试。",
    "video": "视频发送失败，请稍后再试。",
    "typing": "操作失败，请稍后再试。",
    "inline": "操作失败，请稍后再试。",
    "file": "获取文件失败，请稍后再试。",
}

# Handler-level texts
TEXT_THINKING = "深度思考中......"
TEXT_GENERATING_IMAGE = "生成图片中......"
TEXT_COMMAND_FAILED = "处理命令时出错，请稍后再试。"
TEXT_MESSAGE_FAILED = "处理消息时出错，请稍后再试。"
TEXT_NO_ANSWER = "抱歉，我暂时无法回答您的问题，请稍后再试。"
TEXT_THINKING_ON = "思考过程显示已开启。"
TEXT_THINKING_OFF = "思考过程显示已关闭。"
TEXT_HISTORY_CLEARED = "聊天历史已清除。"
TEXT_CLEAR_FAILED = "清除历史记录时出错，请稍后再试。"
TEXT_CODE_USAGE = "请提供代码生成描述，例如：/code 一个简单的Python爬虫"
TEXT_CODE_FAILED = "代码生成时出错，请稍后再试。"
TEXT_IMAGE_USAGE = "请提供图片描述，例如：/p 小猫"
TEXT_IMAGE_FAILED = "无法生成图片，请稍后再试。"
TEXT_IMAGE_NO_URL = "图片生成成功，但无法获取图片URL。请稍后再试。"
TEXT_FILE_UNREADABLE = "无法处理文件，请稍后再试。"
TEXT_FILE_FAILED = "处理文件时出错，请稍后再试。"
TEXT_FILE_RECEIVED = "文件已接收，您可以通过以下链接访问：{url}"


def parse_bot_id_from_token(token: str) -> str | None:
    """
    Extract the numeric bot ID from a Telegram bot token.

    Example
    -------
    '123456789:AA...' → '123456789'
    """
    return token.split(":", 1)[0] if ":" in token else None
