"""Logging for fintoc-sync runs.

Each run logs to a dated file and to the console. Chatty client libraries
are held at WARNING unless the run is at DEBUG, and the Fintoc API key and
Actual passwords are masked before any record is written.
"""

import logging
from datetime import date
from typing import Iterable

from config import Config

LOGGER_NAME = "fintoc_sync"

# Loggers of the HTTP and database layers under fintoc and actualpy
QUIET_LOGGERS = ("actual", "fintoc", "httpx", "sqlalchemy", "urllib3")

REDACTED = "***"


class SecretFilter(logging.Filter):
    """Replace configured secrets in log messages."""

    def __init__(self, secrets: Iterable[str]):
        super().__init__()
        self.secrets = [s for s in secrets if s]

    def filter(self, record: logging.LogRecord) -> bool:
        if not self.secrets:
            return True
        message = record.getMessage()
        for secret in self.secrets:
            message = message.replace(secret, REDACTED)
        record.msg = message
        record.args = None
        return True


def setup_logging(config: Config) -> logging.Logger:
    """Configure the sync logger from config.log_level and config.log_dir.

    Returns:
        The configured application logger.
    """
    config.log_dir.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(config.log_level)

    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()

    secrets = SecretFilter(
        [
            config.fintoc_api_key,
            config.actual_password,
            config.actual_encryption_password or "",
        ]
    )

    file_handler = logging.FileHandler(
        config.log_dir / f"fintoc-sync-{date.today().isoformat()}.log"
    )
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter("%(levelname)s - %(message)s"))

    for handler in (file_handler, console_handler):
        handler.setLevel(config.log_level)
        handler.addFilter(secrets)
        logger.addHandler(handler)

    third_party_level = (
        logging.DEBUG if config.log_level.upper() == "DEBUG" else logging.WARNING
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(third_party_level)

    return logger


def get_logger() -> logging.Logger:
    """Get the application logger."""
    return logging.getLogger(LOGGER_NAME)
