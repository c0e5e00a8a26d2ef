"""Mini README: Application-wide logging helpers for the expense tracker.

Structure:
    * configure_root_logger - one-off root handler setup.
    * level_for_environment - map the configured environment to a level.
    * get_logger - factory returning module loggers with baseline config.

Usage:
    Modules call ``get_logger(__name__)`` at import time and keep the result
    in a module-level ``LOGGER``. Configuration is performed exactly once so
    reloading modules in development never stacks duplicate handlers.
"""

from __future__ import annotations

import logging
from typing import Optional

_LOGGER_INITIALISED = False


def level_for_environment(environment: str) -> int:
    """Return DEBUG for development-like environments, INFO otherwise."""

    if environment.strip().lower() in {"development", "dev", "local", "test"}:
        return logging.DEBUG
    return logging.INFO


def configure_root_logger(level: int = logging.INFO) -> None:
    """Configure the root logger with a debugging friendly formatter."""

    global _LOGGER_INITIALISED
    root_logger = logging.getLogger()
    if _LOGGER_INITIALISED:
        root_logger.setLevel(level)
        return

    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter(
            "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    root_logger.setLevel(level)
    root_logger.addHandler(handler)
    _LOGGER_INITIALISED = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a module-specific logger ensuring baseline configuration."""

    if not _LOGGER_INITIALISED:
        configure_root_logger()
    return logging.getLogger(name)
