import logging
import sys

from fitandflex.core.config import settings

_TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_JSON_FORMAT = (
    '{"timestamp": "%(asctime)s", "level": "%(levelname)s", '
    '"module": "%(name)s", "message": "%(message)s", '
    '"line": %(lineno)d, "function": "%(funcName)s"}'
)


def setup_logging() -> logging.Logger:
    """Configure the root logger from LOG_LEVEL and LOG_FORMAT."""

    level = getattr(logging, settings.LOG_LEVEL, logging.INFO)
    formatter = logging.Formatter(
        _JSON_FORMAT if settings.LOG_FORMAT == "json" else _TEXT_FORMAT
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("fitandflex").setLevel(level)

    root_logger.info(
        "Logging initialized level=%s format=%s", settings.LOG_LEVEL, settings.LOG_FORMAT
    )
    return root_logger


__all__ = ["setup_logging"]
