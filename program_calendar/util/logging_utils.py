"""Centralized logger factory."""
from __future__ import annotations

import logging
from typing import Final

_LOG_FORMAT: Final = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_ROOT_LOGGER: Final = "program_calendar"


def configure_logging(level: str = "INFO") -> None:
    """Install the shared format once; later calls only adjust the level."""

    if logging.getLogger().handlers:
        logging.getLogger().setLevel(level)
        logging.getLogger(_ROOT_LOGGER).setLevel(level)
        return
    logging.basicConfig(level=level, format=_LOG_FORMAT)
    logging.getLogger(_ROOT_LOGGER).setLevel(level)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger"]
