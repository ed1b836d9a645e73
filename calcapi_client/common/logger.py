"""Shared logger for the calculator client."""
import logging
import sys

LOGGER_NAME = "calcapi_client"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger(LOGGER_NAME)


def configure_logging(level: str = "INFO") -> None:
    """
    Attach a stream handler to the package logger and set its level.

    Calling it several times only updates the level, no duplicate handlers are added.

    :param str level: Logging level name (DEBUG, INFO, WARNING, ERROR)
    """
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(level.upper())
