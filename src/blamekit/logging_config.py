"""
Logging configuration for blamekit.

Library components never configure logging; they log through a logger taken
from ``get_logger`` or injected by the caller. Only the CLI calls
``setup_logging``, with the verbosity resolved from ``BlameConfig``, so a
``verbosity`` set in blamekit.toml or ``BLAMEKIT_VERBOSITY`` behaves the same
as ``--verbose``/``--quiet``.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from .config import Verbosity

LOGGER_NAME = "blamekit"

LEVELS = {
    "quiet": logging.ERROR,
    "normal": logging.INFO,
    "verbose": logging.DEBUG,
}

# Marks handlers installed here so a second setup replaces them
_OWNED = "_blamekit_handler"


def setup_logging(verbosity: Verbosity = "normal", log_file: Optional[str] = None) -> logging.Logger:
    """
    Attach a rich stderr handler (and optionally a file handler) to the
    ``blamekit`` logger.

    Args:
        verbosity: quiet (errors only), normal (per-file and per-line
            attribution problems) or verbose (adds batch summaries)
        log_file: Optional file path to append logs to

    Returns:
        The configured ``blamekit`` logger
    """
    level = LEVELS.get(verbosity, logging.INFO)
    logger = logging.getLogger(LOGGER_NAME)

    for handler in list(logger.handlers):
        if getattr(handler, _OWNED, False):
            logger.removeHandler(handler)
            handler.close()

    console_handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        tracebacks_show_locals=verbosity == "verbose",
        markup=False,
        show_time=True,
        show_path=verbosity == "verbose",
    )
    handlers: list[logging.Handler] = [console_handler]

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a")
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
            )
        )
        handlers.append(file_handler)

    for handler in handlers:
        setattr(handler, _OWNED, True)
        handler.setLevel(level)
        logger.addHandler(handler)

    logger.setLevel(level)
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger under the ``blamekit`` namespace.

    Args:
        name: Module name (e.g., 'blamekit.blame.executor'); names outside
              the namespace are prefixed. None returns the root blamekit logger.
    """
    if name is None:
        return logging.getLogger(LOGGER_NAME)

    if not name.startswith(LOGGER_NAME):
        name = f"{LOGGER_NAME}.{name}"

    return logging.getLogger(name)
