"""Logging configuration: one stdout handler, module loggers via get_logger."""

import logging
import sys

from app.core.config import get_settings
from app.shared.context import current_context

_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s actor=%(actor_id)s] %(message)s"

# Third-party loggers that are noisy at DEBUG.
_QUIET_LOGGERS = ("asyncio", "httpx", "uvicorn.access", "sqlalchemy.pool")


class RequestContextFilter(logging.Filter):
    """Stamp each record with the request id and acting user ('-' when unset)."""

    def filter(self, record: logging.LogRecord) -> bool:
        context = current_context()
        record.request_id = context.request_id or "-"
        record.actor_id = context.actor_id or "-"
        return True


def setup_logging() -> None:
    """Configure the root logger once at startup.

    DEBUG when settings.debug, otherwise INFO. SQL statements are logged only
    when database_echo is set (the engine attaches its own handler then).
    """
    settings = get_settings()
    level = logging.DEBUG if settings.debug else logging.INFO
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestContextFilter())
    logging.basicConfig(
        level=level,
        format=_LOG_FORMAT,
        handlers=[handler],
        force=True,
    )
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.INFO))
    if not settings.database_echo:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Return the logger for a module (pass __name__)."""
    return logging.getLogger(name)
