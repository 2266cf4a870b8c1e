from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine
from sqlalchemy.orm import DeclarativeBase

from bookshelf.config import database_url


class Base(DeclarativeBase):
    pass


def make_engine(url: str | URL | None = None, **kwargs) -> Engine:
    return create_engine(url or database_url(), future=True, **kwargs)
