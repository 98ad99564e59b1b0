"""
Hook logging.

Writes two kinds of append-only text logs under the hook log directory:

1. Per-hook log: <log_dir>/<hook-name>.log, events the hook itself records
   (blocks, clears, reminders, dispatches).
2. Shared performance log: <log_dir>/performance.log, one line per run:
       [2025-11-25 14:03:07] check-pending-questions 4ms blocked: Bash

Logs are observational only; nothing reads them back. If the log directory
cannot be created the handlers are skipped and the hook runs unlogged.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

LOG_FORMAT = "[%(asctime)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
PERFORMANCE_LOG = "performance.log"

_LOGGER_PREFIX = "codenv.hooks.log"


def _file_logger(name: str, path: Path) -> logging.Logger:
    logger = logging.getLogger(f"{_LOGGER_PREFIX}.{name}")
    logger.setLevel(logging.INFO)
    logger.propagate = False

    target = os.path.abspath(path)
    for handler in list(logger.handlers):
        if isinstance(handler, logging.FileHandler) and handler.baseFilename == target:
            return logger
        logger.removeHandler(handler)
        handler.close()

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, encoding="utf-8")
    except OSError as e:
        logging.getLogger(__name__).debug("Hook log disabled for %s: %s", name, e)
        logger.addHandler(logging.NullHandler())
        return logger

    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)
    return logger


def get_hook_logger(hook_name: str, log_dir: Path) -> logging.Logger:
    """Logger writing to <log_dir>/<hook_name>.log."""
    return _file_logger(hook_name, log_dir / f"{hook_name}.log")


def log_performance(
    log_dir: Path,
    hook_name: str,
    duration_ms: int,
    outcome: str,
) -> None:
    """Append `<hook> <duration>ms <outcome>` to performance.log."""
    logger = _file_logger("performance", log_dir / PERFORMANCE_LOG)
    logger.info("%s %dms %s", hook_name, duration_ms, outcome)


def close_hook_loggers() -> None:
    """Close every file handler opened here (test isolation, long-lived callers)."""
    manager = logging.Logger.manager
    for name, logger in list(manager.loggerDict.items()):
        if not name.startswith(_LOGGER_PREFIX) or not isinstance(logger, logging.Logger):
            continue
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
