"""Portable SQL constructs.

PostgreSQL is the production store; SQLite backs the test suite. Constructs
here compile to the native form on each dialect.
"""
from typing import Any

from sqlalchemy import DateTime
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.expression import ColumnElement, FunctionElement

GRANULARITIES = ("hour", "day", "week", "month")

# Weeks start on Monday, matching PostgreSQL's date_trunc('week', ...)
_SQLITE_TRUNC: dict[str, tuple[str, tuple[str, ...]]] = {
    "hour": ("%Y-%m-%d %H:00:00", ()),
    "day": ("%Y-%m-%d 00:00:00", ()),
    "week": ("%Y-%m-%d 00:00:00", ("-6 days", "weekday 1")),
    "month": ("%Y-%m-01 00:00:00", ()),
}


class date_trunc(FunctionElement):
    """``date_trunc(granularity, column)`` returning a timestamp."""

    type = DateTime(timezone=True)
    # granularity is rendered inline, so compiled forms must not be shared
    inherit_cache = False

    def __init__(self, granularity: str, column: ColumnElement[Any]):
        if granularity not in GRANULARITIES:
            raise ValueError(f"Unsupported granularity: {granularity}")
        self.granularity = granularity
        super().__init__(column)


@compiles(date_trunc, "postgresql")
def _compile_date_trunc_pg(element: date_trunc, compiler, **kw) -> str:
    # Buckets follow the UTC calendar whatever the session TimeZone is
    return f"date_trunc('{element.granularity}', {compiler.process(element.clauses, **kw)}, 'UTC')"


@compiles(date_trunc, "sqlite")
def _compile_date_trunc_sqlite(element: date_trunc, compiler, **kw) -> str:
    fmt, modifiers = _SQLITE_TRUNC[element.granularity]
    args = [f"'{fmt}'", compiler.process(element.clauses, **kw)]
    args.extend(f"'{m}'" for m in modifiers)
    return f"strftime({', '.join(args)})"


def dialect_insert(db: AsyncSession, table):
    """Return an INSERT supporting ``on_conflict_do_update`` for the session's dialect."""
    name = db.get_bind().dialect.name
    if name == "postgresql":
        return postgresql.insert(table)
    if name == "sqlite":
        return sqlite.insert(table)
    raise NotImplementedError(f"Upsert is not supported on dialect {name!r}")
