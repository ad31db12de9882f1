# breathe/log.py
from __future__ import annotations

import sys

from loguru import logger

from config.config import settings


def configure_logging(level: str | None = None) -> None:
    """Replace loguru's default sink with one at the configured level."""
    logger.remove()
    logger.add(sys.stderr, level=(level or settings.log_level).upper())
