"""Logging helpers; every logger lives under the ``idl_pilot`` namespace."""

from __future__ import annotations

import logging
import os
from logging import Logger

from rich.console import Console
from rich.logging import RichHandler

_LOGGER_NAME = "idl_pilot"

err_console = Console(stderr=True)


def _configure_root() -> Logger:
    root = logging.getLogger(_LOGGER_NAME)
    if not root.handlers:
        handler = RichHandler(console=err_console, show_path=False, markup=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)
        level = os.environ.get("LOG_LEVEL", "INFO").upper()
        root.setLevel(getattr(logging, level, logging.INFO))
    return root


def get_logger(name: str | None = None) -> Logger:
    root = _configure_root()
    if not name:
        return root
    return logging.getLogger(f"{_LOGGER_NAME}.{name}")
