"""Process-wide logging setup."""

import logging

from app.config import settings

_configured = False


def configure_logging() -> None:
    """Configure application logging once per process."""
    global _configured
    if _configured:
        return

    level = getattr(logging, settings.log_level, logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    if not root_logger.handlers:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(logging.Formatter(settings.log_format))
        root_logger.addHandler(console_handler)
    else:
        for handler in root_logger.handlers:
            if handler.formatter is None:
                handler.setFormatter(logging.Formatter(settings.log_format))

    # SQL echo is controlled by LOG_LEVEL=DEBUG only
    if level > logging.DEBUG:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    _configured = True
