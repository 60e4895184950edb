# reelprobe/common/logging.py
from __future__ import annotations

import logging
from typing import Optional


def get_logger(name: str = "reelprobe", level: Optional[int | str] = None) -> logging.Logger:
    """
    Return a named logger for reelprobe modules.
    If the root logger has no handlers yet, we add a basicConfig once so probe
    diagnostics are visible when the package is used from a plain script.
    The level defaults to Settings.log_level.
    """
    if level is None:
        from reelprobe.common.settings import get_settings
        level = get_settings().log_level
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger(name)
    if not logging.getLogger().handlers and not logger.handlers:
        logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logger.setLevel(level)
    return logger
