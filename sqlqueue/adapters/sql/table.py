"""
Queue table definition — SQLAlchemy Core.

One table per queue identity, same shape for every queue:

  Id                     BIGINT PK, store-assigned (INTEGER AUTOINCREMENT on SQLite)
  EnqueueDateTime        TIMESTAMP WITH TIME ZONE, set at insert
  Status                 SMALLINT, 0 = to process, 1 = processing
  LastOperationDateTime  TIMESTAMP WITH TIME ZONE, updated on status change
  Data                   TEXT, codec output

Columns keep their store names; Python code addresses them by key
(table.c.id, table.c.status, ...).

Store time
----------
Timestamps are always taken from the database clock via store_now(), never
from the client. PostgreSQL renders CURRENT_TIMESTAMP. SQLite's
CURRENT_TIMESTAMP has second precision and a format that SQLAlchemy's SQLite
DateTime does not round-trip, so there store_now() renders a microsecond
string in the same layout SQLAlchemy binds datetimes with.

Timestamps are UTC. UTCDateTime converts aware values to UTC before binding
and marks values read back as UTC, so stores without a zone-aware column type
(SQLite) still hand out and compare aware datetimes.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    Integer,
    MetaData,
    SmallInteger,
    Table,
    Text,
    TypeDecorator,
    text,
)
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.expression import FunctionElement

from sqlqueue.domain.models import QueueStatus


class UTCDateTime(TypeDecorator):
    """DateTime(timezone=True) that always yields aware UTC datetimes."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect) -> datetime | None:
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value

    def process_result_value(self, value: datetime | None, dialect) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class store_now(FunctionElement):
    """Current timestamp as seen by the store."""

    type = UTCDateTime()
    inherit_cache = True


@compiles(store_now)
def _default_store_now(element, compiler, **kw):
    return "CURRENT_TIMESTAMP"


@compiles(store_now, "sqlite")
def _sqlite_store_now(element, compiler, **kw):
    return "strftime('%Y-%m-%d %H:%M:%f000', 'now')"


def queue_table(schema_name: str, name: str, metadata: MetaData | None = None) -> Table:
    """Build the Table for one queue. Each call gets its own MetaData by default."""
    return Table(
        name,
        metadata if metadata is not None else MetaData(),
        Column(
            "Id",
            BigInteger().with_variant(Integer, "sqlite"),
            key="id",
            primary_key=True,
            autoincrement=True,
        ),
        Column("EnqueueDateTime", UTCDateTime(), key="enqueue_time", nullable=False),
        Column(
            "Status",
            SmallInteger,
            key="status",
            nullable=False,
            server_default=text(str(int(QueueStatus.TO_PROCESS))),
        ),
        Column(
            "LastOperationDateTime",
            UTCDateTime(),
            key="last_operation_time",
            nullable=False,
        ),
        Column("Data", Text, key="data", nullable=False),
        schema=schema_name,
        sqlite_autoincrement=True,
    )
