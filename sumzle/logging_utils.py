"""
logging_utils.py

The "sumzle" logger and its per-module children.

Only the package logger gets a handler; module loggers such as
"sumzle.search" propagate to it. SUMZLE_LOG_LEVEL (e.g. DEBUG) overrides
the default INFO level.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

LOGGER_NAME = "sumzle"
LEVEL_ENV_VAR = "SUMZLE_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"


def _level_from_env() -> int:
    name = os.environ.get(LEVEL_ENV_VAR, "").strip().upper()
    level = logging.getLevelName(name) if name else logging.INFO
    # getLevelName returns a "Level x" string for unknown names
    return level if isinstance(level, int) else logging.INFO


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Return the package logger, or the child logger for `name`.

    `name` may be a module's __name__ ("sumzle.search") or a bare suffix
    ("search"). The package logger is configured on the first call only.
    """
    root = logging.getLogger(LOGGER_NAME)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
        root.setLevel(_level_from_env())

    if not name or name == LOGGER_NAME:
        return root
    if not name.startswith(LOGGER_NAME + "."):
        name = f"{LOGGER_NAME}.{name}"
    return logging.getLogger(name)
