"""Logging setup for the mcp-runtime CLI."""

import logging
import sys

LOGGER_NAME = "mcp_runtime"
LOG_FORMAT = "[%(asctime)s] %(levelname)-8s %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"


def setup_logger(level: str = "WARNING") -> logging.Logger:
    """Configure the package logger to write to stderr.

    Stdout is reserved for tool output, so the handler always targets stderr.
    """
    level_num = getattr(logging, level.upper(), logging.WARNING)
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level_num)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)
    logger.propagate = False
    return logger


def get_logger(level: str = "WARNING") -> logging.Logger:
    """Return the configured CLI logger."""
    return setup_logger(level)
