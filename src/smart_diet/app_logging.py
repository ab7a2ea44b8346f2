"""Logging configuration helpers."""

import logging

LOGGER_NAME = "smart_diet"


def configure_logging(level: str | int = logging.INFO) -> logging.Logger:
    """Attach a single stream handler to the package logger and set its level.

    Repeated calls only adjust the level.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    if logger.handlers:
        return logger
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s: %(name)s: %(message)s")
    )
    logger.addHandler(handler)
    logger.propagate = False
    return logger
