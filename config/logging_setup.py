"""
Logging setup shared by the API server and CLI scripts.
"""

import logging
import sys
from typing import Optional

from config.settings import get_settings


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """Install a single console handler on the root logger."""
    settings = get_settings()
    level_name = (level or settings.log.level).upper()

    logger = logging.getLogger()
    logger.setLevel(getattr(logging, level_name, logging.INFO))

    # avoid duplicate handlers on re-entry
    if logger.handlers:
        logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter(settings.log.format))
    logger.addHandler(console_handler)
    return logger
