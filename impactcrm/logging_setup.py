"""Logging setup shared by the API server and the command line tools."""

import logging

from impactcrm.config import settings


def configure_logging(level: str | None = None) -> None:
    """Configure root logging from settings.

    Args:
        level: Optional level name overriding the configured one.
    """
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format=settings.log_format,
    )
    # Motor/pymongo heartbeat chatter drowns import logs at DEBUG
    logging.getLogger("pymongo").setLevel(logging.WARNING)
