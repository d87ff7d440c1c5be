"""
Logging setup for the Veritas pipeline.

Everything logs under the "veritas" logger; each stage gets a child
("veritas.fetcher", "veritas.analyzer", ...) so a log line names its stage.
"""

import logging
import os
import sys
from typing import Optional, Union

ROOT_LOGGER_NAME = "veritas"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def parse_level(value: Union[str, int, None], default: int = logging.INFO) -> int:
    """Turn 'debug', 'WARNING', '10' or 10 into a logging level; junk gives `default`."""
    if isinstance(value, int):
        return value
    if not value:
        return default
    value = value.strip()
    if value.isdigit():
        return int(value)
    level = logging.getLevelName(value.upper())
    return level if isinstance(level, int) else default


def setup_logger(
    level: int = logging.INFO,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Configure the package logger and return it.

    Safe to call more than once: the stdout handler is installed on the first
    call, later calls only change the level (and add a file handler for a new
    `log_file`).

    Args:
        level: Logging level (default: INFO)
        log_file: Optional file to copy log lines into

    Returns:
        The "veritas" logger
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    if not any(getattr(h, "_veritas_console", False) for h in logger.handlers):
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        console_handler._veritas_console = True
        logger.addHandler(console_handler)

    if log_file and not any(
        isinstance(h, logging.FileHandler) and h.baseFilename == os.path.abspath(log_file)
        for h in logger.handlers
    ):
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    for handler in logger.handlers:
        handler.setLevel(level)
    return logger


logger = setup_logger()


def get_module_logger(stage: str) -> logging.Logger:
    """Child logger for one pipeline stage, e.g. get_module_logger("fetcher")."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{stage}")
