import logging

from pythonjsonlogger import jsonlogger

from tgbot.config import settings


def setup_logging() -> None:
    """Configure structured JSON logging on the root logger."""
    handler = logging.StreamHandler()
    formatter = jsonlogger.JsonFormatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(settings.log_level.upper())
    root.handlers = [handler]

    # Request lines from httpx would leak bot tokens embedded in API urls.
    logging.getLogger("httpx").setLevel(logging.WARNING)
