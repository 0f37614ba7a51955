"""Root logging setup."""

import logging

from src.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure the root logger with the shared format."""
    name = (level or settings.log_level).upper()
    logging.basicConfig(
        format=LOG_FORMAT,
        level=getattr(logging, name, logging.INFO),
    )
