"""Logging configuration for codemux."""

import logging
import sys
from pathlib import Path

LOG_DIR = Path.home() / ".cache" / "codemux"
LOG_FILE = LOG_DIR / "codemux.log"

logger = logging.getLogger("codemux")


def setup_logging(verbose: bool = False, log_to_file: bool = False) -> None:
    """Configure logging for the command line application.

    Parameters
    ----------
    verbose : bool
        Log DEBUG and above to stderr instead of only warnings and errors
    log_to_file : bool
        Also write every record to ~/.cache/codemux/codemux.log
    """
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger.addHandler(console_handler)

    if log_to_file:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(LOG_FILE)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        logger.addHandler(file_handler)

    logger.debug("Logging initialized")


def get_logger(name: str | None = None) -> logging.Logger:
    """Get the codemux logger, or a child of it when ``name`` is given."""
    if name:
        return logging.getLogger(f"codemux.{name}")
    return logger
