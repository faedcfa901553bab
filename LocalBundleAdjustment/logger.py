"""
Logging for LocalBundleAdjustment

Every module logs through a child of the "LocalBundleAdjustment" logger, so
one configure_root_logger() call sets level and outputs for the package.
"""

import logging
import sys
from pathlib import Path
from typing import Optional


ROOT_LOGGER_NAME = "LocalBundleAdjustment"

# [2025-10-31 10:15:30] [INFO] [LocalBundleAdjustment.graph.proximity] Message
LOG_FORMAT = '[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def get_logger(name: str) -> logging.Logger:
    """
    Get the logger of a package module

    Args:
        name: Dotted module name (e.g. 'graph.proximity', 'pipeline.local_ba')

    Returns:
        Logger named "LocalBundleAdjustment.<name>"
    """
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def configure_root_logger(level: str = "INFO",
                          log_file: Optional[str] = None,
                          console: bool = True) -> logging.Logger:
    """
    Configure the package logger, replacing any handler set by a previous call.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional path of a log file, appended to
        console: Whether to write to stdout

    Returns:
        The "LocalBundleAdjustment" logger
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(getattr(logging, level.upper()))

    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers = []
    if console:
        handlers.append(logging.StreamHandler(sys.stdout))
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, mode='a'))

    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    return root
