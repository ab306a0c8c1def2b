# core/log.py
import logging
import os
import sys
from pathlib import Path
from typing import Optional

LOG_LEVEL_ENV = "LRCFETCH_LOG_LEVEL"


def setup_logging(
    level: Optional[str] = None, log_file: Optional[Path] = None, verbose: bool = False
) -> logging.Logger:
    """Configure the "lrcfetch" logger; the level falls back to $LRCFETCH_LOG_LEVEL, then INFO."""
    level = level or os.getenv(LOG_LEVEL_ENV) or "INFO"

    # connection pool chatter
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    logger = logging.getLogger("lrcfetch")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.handlers.clear()

    if verbose:
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    else:
        formatter = logging.Formatter("%(levelname)s: %(message)s")

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
