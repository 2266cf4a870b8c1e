import os
import uuid

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from bookshelf.db import Base
from bookshelf.models import Book

TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL")
BACKENDS = {"sqlite": "sqlite_engine", "postgresql": "pg_engine"}


@pytest.fixture(scope="function")
def sqlite_engine(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'test.db'}", future=True)
    yield engine
    engine.dispose()


@pytest.fixture(scope="session")
def pg_engine():
    if not TEST_DATABASE_URL:
        pytest.skip("TEST_DATABASE_URL not set")
    engine = create_engine(TEST_DATABASE_URL, future=True)
    yield engine
    engine.dispose()


@pytest.fixture(params=list(BACKENDS))
def engine(request):
    """The books schema created through the ORM metadata on each backend."""
    engine = request.getfixturevalue(BACKENDS[request.param])
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(engine):
    session = sessionmaker(bind=engine, autoflush=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def owner_id():
    return uuid.uuid4()


@pytest.fixture
def book_data(owner_id):
    return {
        "title": "Dune",
        "author": "Herbert",
        "isbn": "9780441013593",
        "description": "A desert planet and the spice that binds an empire.",
        "user_id": owner_id,
    }


@pytest.fixture
def dune(db_session, book_data):
    book = Book(**book_data)
    db_session.add(book)
    db_session.commit()
    db_session.refresh(book)
    return book
