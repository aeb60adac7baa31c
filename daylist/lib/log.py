import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from daylist import config

LOGGER_NAME = "daylist"


def setup_logging(log_path: Path | None = None, level: str | None = None) -> logging.Logger:
    """Attach a rotating file handler to the package logger (once)."""
    logger = logging.getLogger(LOGGER_NAME)
    if not logger.handlers:
        path = log_path if log_path else config.LOG_PATH
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(path, maxBytes=1_000_000, backupCount=3, encoding="utf-8")
        handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))
        logger.addHandler(handler)
    logger.setLevel(level or config.get_log_level())
    return logger
