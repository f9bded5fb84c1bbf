"""
Logging setup - file logger for engine activity.
"""

import logging
import os
from datetime import datetime


def setup_logger(log_dir: str = ".patchbox/logs",
                 level: int = logging.DEBUG) -> logging.Logger:
    """Attach a file handler to the ``patchbox`` logger and return it.

    Calling it again with the same directory does not add a second handler.
    """
    os.makedirs(log_dir, exist_ok=True)
    logger = logging.getLogger("patchbox")
    logger.setLevel(level)

    target_dir = os.path.abspath(log_dir)
    for handler in logger.handlers:
        if (isinstance(handler, logging.FileHandler)
                and os.path.dirname(handler.baseFilename) == target_dir):
            return logger

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = os.path.join(log_dir, f"patchbox_{timestamp}.log")

    # File handler - captures everything
    fh = logging.FileHandler(log_file, encoding="utf-8")
    fh.setLevel(level)
    fh.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(message)s", datefmt="%H:%M:%S"
    ))
    logger.addHandler(fh)

    return logger
