"""Diagnostics logging for modkill."""

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "modkill"
DEBUG_ENV_VARS = ("MODKILL_DEBUG", "DEBUG")


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the modkill namespace."""
    if name == LOGGER_NAME or name.startswith(LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


def debug_requested() -> bool:
    """Whether a debug environment variable is set."""
    return any(os.environ.get(var) for var in DEBUG_ENV_VARS)


def setup_logging(verbose: bool = False) -> logging.Logger:
    """
    Configure the modkill logger to write to stderr through rich.

    Safe to call more than once; the level is updated and the handler is
    only installed the first time.

    Args:
        verbose: Force DEBUG level

    Returns:
        The root modkill logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    level = logging.DEBUG if verbose or debug_requested() else logging.WARNING
    logger.setLevel(level)

    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)

    return logger
