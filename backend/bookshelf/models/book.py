import uuid
from datetime import datetime

from sqlalchemy import FetchedValue, String, Uuid, event
from sqlalchemy.dialects import postgresql
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import DateTime

from bookshelf.db import Base
from bookshelf import ddl

TimestampMs = DateTime(timezone=True).with_variant(
    postgresql.TIMESTAMP(timezone=True, precision=3), "postgresql"
)


class Book(Base):
    """A book owned by a user.

    updated_at belongs to the database: the books_updated_at_trigger
    overwrites it on every UPDATE, whatever value the writer sent.
    """

    __tablename__ = "books"

    book_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4, server_default=ddl.random_uuid()
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    author: Mapped[str] = mapped_column(String(255), nullable=False)
    isbn: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(String(1024), nullable=False)
    # owner; users live elsewhere, so no foreign key
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        TimestampMs, nullable=False, server_default=ddl.current_timestamp_ms()
    )
    updated_at: Mapped[datetime] = mapped_column(
        TimestampMs,
        nullable=False,
        server_default=ddl.current_timestamp_ms(),
        server_onupdate=FetchedValue(),
    )

    def __repr__(self) -> str:
        return f"<Book {self.book_id} {self.title!r}>"


for _stmt in ddl.AFTER_CREATE:
    event.listen(Book.__table__, "after_create", _stmt)
for _stmt in ddl.AFTER_DROP:
    event.listen(Book.__table__, "after_drop", _stmt)
