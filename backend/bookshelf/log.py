from __future__ import annotations
import logging
import os

from bookshelf.config import Environment, which

LOG_FORMAT = "%(asctime)s %(levelname)s %(filename)s:%(lineno)d %(message)s"


def resolve_level() -> int:
    name = os.getenv("LOG_LEVEL")
    if name:
        level = logging.getLevelName(name.strip().upper())
        if isinstance(level, int):
            return level
    return logging.DEBUG if which() is Environment.DEVELOPMENT else logging.INFO


def init_logging() -> int:
    level = resolve_level()
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)
    return level
