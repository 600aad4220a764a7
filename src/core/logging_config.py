"""Logging setup for the API process."""

import logging
from logging.handlers import RotatingFileHandler

from config import LOG_DIR, LOG_FILE, LOG_LEVEL, LOG_TO_FILE

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging() -> None:
    """Configure the root logger with a console handler and a rotating file.

    Safe to call more than once; handlers are only attached the first time.
    """
    root_logger = logging.getLogger()
    if getattr(root_logger, "_vocab_classroom_configured", False):
        return

    root_logger.setLevel(LOG_LEVEL)
    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if LOG_TO_FILE:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            LOG_DIR / LOG_FILE, maxBytes=5_000_000, backupCount=3
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    root_logger._vocab_classroom_configured = True
