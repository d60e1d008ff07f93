"""Logging setup for the command line."""

import logging
import os
from typing import Optional

LOG_LEVEL_ENV = "ASSETBOOK_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: Optional[str] = None, verbose: bool = False) -> None:
    """Configure root logging once per process.

    Args:
        level: Level name such as "INFO". Falls back to ASSETBOOK_LOG_LEVEL, then WARNING.
        verbose: Force DEBUG regardless of level
    """
    if verbose:
        level = "DEBUG"
    elif level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "WARNING")

    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        numeric = logging.WARNING

    logging.basicConfig(level=numeric, format=LOG_FORMAT)
    logging.getLogger().setLevel(numeric)
    # SQL echo stays off unless explicitly debugging the engine
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
