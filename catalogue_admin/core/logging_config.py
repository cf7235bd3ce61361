"""Process-wide logging setup."""

import logging
import sys

from catalogue_admin.core.config import Settings

logger = logging.getLogger("catalogue_admin")

_NOISY_LOGGERS = ("aiosqlite", "sqlalchemy.engine", "aiosmtplib", "multipart")


def setup_logging(settings: Settings) -> None:
    """
    Configures the root logger for the application.
    Called once from the application lifespan; repeated calls are harmless.
    """
    logging.basicConfig(
        level=settings.logging.level.upper(),
        format=settings.logging.format,
        stream=sys.stdout,
    )
    if not settings.debug:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
