"""Logging utilities for puzzle generation."""

from __future__ import annotations

import logging
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"


def configure_logging(level: Union[int, str] = logging.INFO) -> None:
    """Install a single stream handler on the root logger.

    The solver logs at DEBUG per attempt, so INFO keeps normal runs to one
    line per load and per generated puzzle. Accepts a level name such as
    ``"debug"`` as well as the numeric constants.
    """

    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt="%H:%M:%S"))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a namespaced logger, configuring defaults if needed."""

    if not logging.getLogger().handlers:
        configure_logging()
    return logging.getLogger(name or "minicross")
