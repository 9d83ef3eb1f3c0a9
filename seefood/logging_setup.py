# -*- coding: utf-8 -*-
"""Logging setup shared by the API process and scripts."""

from __future__ import annotations

import logging

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_HANDLER_NAME = "seefood"


def configure_logging(level: str | int = "INFO") -> logging.Logger:
    """Attach one stream handler to the ``seefood`` logger tree.

    Calling it again only updates the level.
    """
    logger = logging.getLogger("seefood")
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logger.setLevel(level)

    if not any(h.get_name() == _HANDLER_NAME for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(handler)
    # Connection-level chatter; request lines come from httpx itself.
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    return logger
