"""
ErgoReach Diagnostics.
Routes every `ergoreach.*` module logger to the console (and optionally a
session file) using the LAYER 0 settings in CONFIG.
"""
import logging
import sys
from typing import Optional, Union

from ergoreach.config import CONFIG

PACKAGE_LOGGER = "ergoreach"


def resolve_level(level: Union[int, str]) -> int:
    """Accepts logging constants or their names ("debug", "INFO")."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return value


def setup_logging(level: Union[int, str, None] = None,
                  log_file: Optional[str] = None,
                  config: Optional[dict] = None) -> logging.Logger:
    """
    Attaches the ErgoReach handlers to the package logger.

    Only handlers installed by an earlier call are replaced; anything the
    host application attached (e.g. a test log capture) is left alone.
    """
    cfg = config or CONFIG
    level = resolve_level(level if level is not None else cfg["LOG_LEVEL"])
    log_file = log_file or cfg["LOG_FILE"]

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    for handler in [h for h in logger.handlers if getattr(h, "ergoreach_owned", False)]:
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(cfg["LOG_FORMAT"], datefmt=cfg["LOG_DATEFMT"])
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode='w', encoding='utf-8'))

    for handler in handlers:
        handler.ergoreach_owned = True
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.debug(f"Logging at {logging.getLevelName(level)}" + (f", session file {log_file}" if log_file else ""))
    return logger
