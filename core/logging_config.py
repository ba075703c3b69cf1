# core/logging_config.py
import logging

from core.config import settings

LOGGER_NAME = "slipcheck"
LOG_FORMAT = "%(asctime)s %(levelname)-7s [%(name)s:%(env)s] %(message)s"


class _EnvFilter(logging.Filter):
    """Stamp every record with the deployment environment."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.env = settings.ENV
        return True


def setup_logger(level: str = None) -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO))

    # uvicorn --reload imports this module again
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.addFilter(_EnvFilter())
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False

    return logger


def mask_email(email: str) -> str:
    """bob@example.com -> b***@example.com"""
    if not email or "@" not in email:
        return "***"
    local, domain = email.split("@", 1)
    return f"{local[:1]}***@{domain}"


logger = setup_logger()
