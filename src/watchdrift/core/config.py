"""Configuration module for watchdrift."""

import logging
from importlib import metadata

DISTRIBUTION_NAME = "watchdrift"
LOGGER_NAME = "watchdrift"
LOG_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - "
    "%(filename)s:%(lineno)s - %(funcName)s - %(message)s"
)


def get_version() -> str:
    """Return the installed watchdrift version, or a placeholder if not installed."""
    try:
        return metadata.version(DISTRIBUTION_NAME)
    except metadata.PackageNotFoundError:
        return "Version unknown"


def get_logger() -> logging.Logger:
    """Gets the shared logger used by the readers, store, engine and CLI.

    The handler is attached once; later calls return the same logger so that
    the verbosity set by the orchestrator applies everywhere.
    """
    logger = logging.getLogger(LOGGER_NAME)
    if logger.handlers:
        return logger

    logger.setLevel(logging.INFO)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    return logger
