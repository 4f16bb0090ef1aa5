"""Mini README: Application-wide logging helpers for Shuttlefund.

Structure:
    * configure_root_logger - install the shared formatter on the root logger once.
    * get_logger - factory returning module loggers with baseline configuration.

Usage:
    Modules call ``get_logger(__name__)`` at import time, which installs the
    handler at INFO level. The CLI and the web application later call
    ``configure_root_logger`` with the level from settings; repeated calls
    only adjust the level and never add duplicate handlers.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

_LOGGER_INITIALISED = False


def _resolve_level(level: Union[int, str]) -> int:
    """Translate level names such as ``"debug"`` into logging constants."""

    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_root_logger(level: Optional[Union[int, str]] = None) -> None:
    """Configure the root logger with a readable, timestamped formatter."""

    global _LOGGER_INITIALISED
    root_logger = logging.getLogger()
    if _LOGGER_INITIALISED:
        if level is not None:
            root_logger.setLevel(_resolve_level(level))
        return

    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter(
            "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    root_logger.setLevel(_resolve_level(level if level is not None else logging.INFO))
    root_logger.addHandler(handler)
    _LOGGER_INITIALISED = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a module-specific logger ensuring baseline configuration."""

    configure_root_logger()
    return logging.getLogger(name)
