"""
Dialect-specific pieces of the books schema.

PostgreSQL gets the same function and trigger as the SQL migration. SQLite
cannot assign to NEW, so its trigger re-stamps the row after the update.
Both store millisecond timestamps, and the SQLite text form matches the
format SQLAlchemy writes for DateTime so values compare correctly.
"""
from __future__ import annotations

from sqlalchemy import DDL
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.expression import FunctionElement
from sqlalchemy.types import DateTime, Uuid

UPDATED_AT_FUNCTION = "set_updated_at"
UPDATED_AT_TRIGGER = "books_updated_at_trigger"


class current_timestamp_ms(FunctionElement):
    type = DateTime(timezone=True)
    inherit_cache = True


@compiles(current_timestamp_ms)
def _pg_current_timestamp_ms(element, compiler, **kw):
    return "CURRENT_TIMESTAMP(3)"


@compiles(current_timestamp_ms, "sqlite")
def _sqlite_current_timestamp_ms(element, compiler, **kw):
    return "(strftime('%Y-%m-%d %H:%M:%f', 'now') || '000')"


class random_uuid(FunctionElement):
    type = Uuid()
    inherit_cache = True


@compiles(random_uuid)
def _pg_random_uuid(element, compiler, **kw):
    return "gen_random_uuid()"


@compiles(random_uuid, "sqlite")
def _sqlite_random_uuid(element, compiler, **kw):
    return "(lower(hex(randomblob(16))))"


pg_create_function = DDL(
    f"""
    CREATE OR REPLACE FUNCTION {UPDATED_AT_FUNCTION}() RETURNS TRIGGER AS $$
    BEGIN
        NEW.updated_at := now();
        RETURN NEW;
    END;
    $$ LANGUAGE plpgsql
    """
).execute_if(dialect="postgresql")

pg_create_trigger = DDL(
    f"""
    CREATE TRIGGER {UPDATED_AT_TRIGGER}
    BEFORE UPDATE ON %(table)s
    FOR EACH ROW EXECUTE PROCEDURE {UPDATED_AT_FUNCTION}()
    """
).execute_if(dialect="postgresql")

pg_drop_function = DDL(
    f"DROP FUNCTION IF EXISTS {UPDATED_AT_FUNCTION}()"
).execute_if(dialect="postgresql")

# %% is a literal percent once DDL formats in the table name.
sqlite_create_trigger = DDL(
    f"""
    CREATE TRIGGER IF NOT EXISTS {UPDATED_AT_TRIGGER}
    AFTER UPDATE ON %(table)s
    FOR EACH ROW
    BEGIN
        UPDATE %(table)s
        SET updated_at = strftime('%%Y-%%m-%%d %%H:%%M:%%f', 'now') || '000'
        WHERE book_id = NEW.book_id;
    END
    """
).execute_if(dialect="sqlite")

AFTER_CREATE = (pg_create_function, pg_create_trigger, sqlite_create_trigger)
AFTER_DROP = (pg_drop_function,)
