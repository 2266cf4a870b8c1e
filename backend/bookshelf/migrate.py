from __future__ import annotations
import argparse
import hashlib
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Tuple

from sqlalchemy import (
    Column,
    DateTime,
    Integer,
    MetaData,
    Table,
    Text,
    delete,
    insert,
    select,
    text,
)
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from bookshelf.db import make_engine
from bookshelf.errors import MigrationError, MigrationChecksumError
from bookshelf.log import init_logging

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).with_name("migrations")
UP_SUFFIX = ".up.sql"
DOWN_SUFFIX = ".down.sql"

schema_migrations = Table(
    "schema_migrations",
    MetaData(),
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("filename", Text, nullable=False, unique=True),
    Column("checksum", Text, nullable=False),
    Column("applied_at", DateTime(timezone=True), nullable=False),
)


def sha256(s: str) -> str:
    return hashlib.sha256(s.encode("utf-8")).hexdigest()


def discover(migrations_dir: Path = MIGRATIONS_DIR) -> List[Path]:
    return sorted(migrations_dir.glob(f"*{UP_SUFFIX}"), key=lambda p: p.name)


def down_path(up: Path) -> Path:
    return up.with_name(up.name[: -len(UP_SUFFIX)] + DOWN_SUFFIX)


def ensure_schema_table(conn: Connection):
    schema_migrations.create(conn, checkfirst=True)


def applied_checksum(conn: Connection, filename: str) -> Optional[str]:
    return conn.execute(
        select(schema_migrations.c.checksum).where(schema_migrations.c.filename == filename)
    ).scalar()


def record_applied(conn: Connection, filename: str, checksum: str):
    conn.execute(
        insert(schema_migrations).values(
            filename=filename, checksum=checksum, applied_at=datetime.now(timezone.utc)
        )
    )


def _execute_script(conn: Connection, filename: str, sql: str):
    try:
        conn.execute(text(sql))
    except SQLAlchemyError as exc:
        raise MigrationError(filename, str(getattr(exc, "orig", None) or exc)) from exc


def run(engine: Optional[Engine] = None, migrations_dir: Path = MIGRATIONS_DIR) -> List[str]:
    """
    Apply every pending *.up.sql in file-name order, in one transaction.
    Returns the file names applied by this call.
    """
    files = discover(migrations_dir)
    if not files:
        logger.info("No migrations found in %s", migrations_dir)
        return []

    applied = []
    engine = engine or make_engine()
    with engine.begin() as conn:
        ensure_schema_table(conn)

        for f in files:
            filename = f.name
            sql = f.read_text()
            checksum = sha256(sql)
            recorded = applied_checksum(conn, filename)
            if recorded is not None:
                if recorded != checksum:
                    raise MigrationChecksumError(filename)
                logger.info("Skip %s (already applied)", filename)
                continue

            _execute_script(conn, filename, sql)
            record_applied(conn, filename, checksum)
            applied.append(filename)
            logger.info("Applied %s", filename)

    logger.info("All migrations up to date.")
    return applied


def revert(engine: Optional[Engine] = None, migrations_dir: Path = MIGRATIONS_DIR) -> Optional[str]:
    """Undo the most recently applied migration with its .down.sql."""
    engine = engine or make_engine()
    with engine.begin() as conn:
        ensure_schema_table(conn)
        filename = conn.execute(
            select(schema_migrations.c.filename)
            .order_by(schema_migrations.c.filename.desc())
            .limit(1)
        ).scalar()
        if filename is None:
            logger.info("Nothing to revert")
            return None

        down = down_path(migrations_dir / filename)
        if not down.exists():
            raise MigrationError(filename, f"no {down.name} to revert with")

        _execute_script(conn, down.name, down.read_text())
        conn.execute(delete(schema_migrations).where(schema_migrations.c.filename == filename))

    logger.info("Reverted %s", filename)
    return filename


def status(engine: Optional[Engine] = None, migrations_dir: Path = MIGRATIONS_DIR) -> List[Tuple[str, bool]]:
    engine = engine or make_engine()
    with engine.begin() as conn:
        ensure_schema_table(conn)
        done = set(conn.execute(select(schema_migrations.c.filename)).scalars())
    return [(f.name, f.name in done) for f in discover(migrations_dir)]


def main(argv=None):
    ap = argparse.ArgumentParser(description="Apply or revert the bookshelf SQL migrations.")
    ap.add_argument("command", nargs="?", choices=["up", "down", "status"], default="up")
    ap.add_argument("--migrations-dir", type=Path, default=MIGRATIONS_DIR)
    ap.add_argument("--database-url", default=None, help="overrides DATABASE_URL")
    args = ap.parse_args(argv)

    init_logging()
    engine = make_engine(args.database_url)
    try:
        if args.command == "up":
            run(engine, args.migrations_dir)
        elif args.command == "down":
            revert(engine, args.migrations_dir)
        else:
            for filename, applied in status(engine, args.migrations_dir):
                print(f"{'applied' if applied else 'pending'}  {filename}")
    finally:
        engine.dispose()


if __name__ == "__main__":
    main()
