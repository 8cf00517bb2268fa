"""Logging setup for libraryview.

Configures the ``libraryview`` package logger once. Debug output is enabled
by the LIBRARYVIEW_DEBUG environment variable or the CLI ``--debug`` flag.
Modules log through ``logging.getLogger(__name__)``.
"""

import logging
import os

DEBUG_ENV = "LIBRARYVIEW_DEBUG"


def debug_enabled() -> bool:
    return os.getenv(DEBUG_ENV, "0") == "1"


def setup_logger(debug: bool | None = None) -> logging.Logger:
    """Attach a stream handler to the package logger and set its level.

    Args:
        debug: Force debug on/off; None reads LIBRARYVIEW_DEBUG.

    Returns:
        The configured ``libraryview`` logger.
    """
    logger = logging.getLogger("libraryview")
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("[%(levelname)s] %(asctime)s %(message)s"))
        logger.addHandler(handler)
    if debug is None:
        debug = debug_enabled()
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)
    return logger
