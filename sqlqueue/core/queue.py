"""
SqlQueue — competing-consumer queue on a relational table.

Every operation is one SQL statement. Coordination between processes is left
to the store: peek() claims a row with a single UPDATE ... RETURNING whose
candidate sub-select uses FOR UPDATE SKIP LOCKED, so concurrent consumers land
on different unlocked rows instead of queueing behind each other's locks.

Transactions
------------
enqueue, peek, dequeue and reset_all_statuses accept an optional
`connection`. When given, the statement joins the caller's transaction and
nothing is committed on the caller's behalf. When omitted, the statement runs
in its own transaction and is committed before the method returns.

count() always reads on its own connection at READ UNCOMMITTED; the figure is
approximate while claims and dequeues are in flight.

Ordering
--------
None. peek() guarantees that no two consumers receive the same row; it does
not promise that rows come out in insertion order.

Recovery
--------
A row claimed outside a caller transaction stays PROCESSING until it is
dequeued or reset_all_statuses() is called. Nothing resets it automatically.
"""
from __future__ import annotations

import dataclasses
import logging
from datetime import datetime
from typing import TYPE_CHECKING, Generic, TypeVar

from sqlalchemy import URL, Connection, Engine, Table, Update, create_engine, delete, func, insert, select, update

from sqlqueue.adapters.sql.table import queue_table, store_now
from sqlqueue.core.bootstrap import SchemaBootstrapper
from sqlqueue.core.transaction import TransactionBinder
from sqlqueue.domain.errors import InvalidArgumentError
from sqlqueue.domain.models import QueueIdentity, QueueRecord, QueueStatus
from sqlqueue.ports.codec import Codec

if TYPE_CHECKING:
    from sqlqueue.config import QueueSettings

T = TypeVar("T")

_TO_PROCESS = int(QueueStatus.TO_PROCESS)
_PROCESSING = int(QueueStatus.PROCESSING)

logger = logging.getLogger(__name__)


def _require_text(argument: str, value: str | None, message: str) -> str:
    if value is None or not str(value).strip():
        raise InvalidArgumentError(argument, message)
    return value


@dataclasses.dataclass
class SqlQueue(Generic[T]):
    """
    Handle on one queue table.

    Parameters
    ----------
    url                  : SQLAlchemy Engine, URL, or URL string of the store
    schema_name          : schema holding the table ("public", "main", ...)
    name                 : table name of the queue
    codec                : maps elements to and from the Data column
    bootstrapper         : SchemaBootstrapper shared by the handles of one host.
                           When omitted the handle gets a private one, so every
                           handle built that way issues its own (idempotent)
                           CREATE TABLE IF NOT EXISTS. Pass one shared instance
                           to run the DDL once per identity per host.
    create_if_not_exists : when False the table is assumed to exist and no DDL
                           is issued

    A handle built from a URL, a URL string or from_settings() creates its own
    Engine and disposes it in close() (or on leaving a `with` block). An Engine
    passed in is left to its owner.
    """

    url: Engine | URL | str
    schema_name: str
    name: str
    codec: Codec[T]
    bootstrapper: SchemaBootstrapper | None = None
    create_if_not_exists: bool = True

    engine: Engine = dataclasses.field(init=False, repr=False)
    table: Table = dataclasses.field(init=False, repr=False)
    identity: QueueIdentity = dataclasses.field(init=False)
    _binder: TransactionBinder = dataclasses.field(init=False, repr=False)
    _owns_engine: bool = dataclasses.field(init=False, default=False, repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.url, (Engine, URL)):
            _require_text("url", self.url, "Missing queue connection URL.")
        _require_text("schema_name", self.schema_name, "Missing schema name.")
        _require_text("name", self.name, "Missing queue name.")
        if not isinstance(self.codec, Codec):
            raise InvalidArgumentError("codec", f"{self.codec!r} does not implement encode/decode.")

        if isinstance(self.url, Engine):
            self.engine = self.url
        else:
            self.engine = create_engine(self.url)
            self._owns_engine = True

        try:
            self.table = queue_table(self.schema_name, self.name)
            self.identity = QueueIdentity(
                location=self.engine.url.render_as_string(hide_password=True),
                schema_name=self.schema_name,
                name=self.name,
            )
            self._binder = TransactionBinder(self.engine)

            if self.bootstrapper is None:
                logger.debug("No shared bootstrapper for %s, using a private one", self.identity)
                self.bootstrapper = SchemaBootstrapper()
            if self.create_if_not_exists:
                self.bootstrapper.ensure_table(self.engine, self.table, self.identity)
        except BaseException:
            self.close()
            raise

    @classmethod
    def from_settings(
        cls,
        settings: "QueueSettings",
        codec: Codec[T],
        bootstrapper: SchemaBootstrapper | None = None,
    ) -> "SqlQueue[T]":
        """Build a handle from QueueSettings (see sqlqueue.config). The handle owns the engine."""
        engine = settings.create_engine()
        try:
            queue = cls(
                url=engine,
                schema_name=settings.schema_name,
                name=settings.name,
                codec=codec,
                bootstrapper=bootstrapper,
                create_if_not_exists=settings.create_if_not_exists,
            )
        except BaseException:
            engine.dispose()
            raise
        queue._owns_engine = True
        return queue

    # ------------------------------------------------------------------ #
    # Lifecycle                                                            #
    # ------------------------------------------------------------------ #

    def close(self) -> None:
        """Dispose the engine if this handle created it. Safe to call twice."""
        if self._owns_engine:
            self.engine.dispose()
            logger.debug("Disposed engine of %s", self.engine.url.render_as_string(hide_password=True))

    def __enter__(self) -> "SqlQueue[T]":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # ------------------------------------------------------------------ #
    # Write operations                                                     #
    # ------------------------------------------------------------------ #

    def enqueue(self, element: T, connection: Connection | None = None) -> None:
        """Insert one TO_PROCESS row holding the encoded element."""
        if element is None:
            raise InvalidArgumentError("element", "Try to enqueue null element.")

        data = self.codec.encode(element)
        stmt = insert(self.table).values(
            enqueue_time=store_now(),
            status=_TO_PROCESS,
            last_operation_time=store_now(),
            data=data,
        )
        with self._binder.scope(connection) as conn:
            conn.execute(stmt)
        logger.debug("Enqueued element on %s", self.identity)

    def peek(self, connection: Connection | None = None) -> tuple[int, T] | None:
        """
        Claim one TO_PROCESS row, mark it PROCESSING, and return (id, element).

        Returns None when no row is eligible. Pass the returned id to
        dequeue() once the element has been handled.
        """
        with self._binder.scope(connection) as conn:
            row = conn.execute(self._claim_statement()).one_or_none()

        if row is None:
            return None

        claimed_id, data = row
        logger.debug("Claimed record %d on %s", claimed_id, self.identity)
        # Decoded after the claim is committed (or joined): a payload the
        # codec rejects leaves the row PROCESSING.
        return claimed_id, self.codec.decode(data)

    def _claim_statement(self) -> Update:
        """
        UPDATE ... SET Status = 1 WHERE Id = (SELECT Id ... FOR UPDATE SKIP
        LOCKED LIMIT 1) RETURNING Id, Data.

        The sub-select reads an alias of the table so it is not correlated to
        the outer UPDATE. It has no ORDER BY. Dialects without row locks
        (SQLite) drop the FOR UPDATE clause and rely on the writer lock.
        """
        candidate = self.table.alias("candidate")
        next_id = (
            select(candidate.c.id)
            .where(candidate.c.status == _TO_PROCESS)
            .limit(1)
            .with_for_update(skip_locked=True)
            .scalar_subquery()
        )
        return (
            update(self.table)
            .where(self.table.c.id == next_id)
            .values(status=_PROCESSING, last_operation_time=store_now())
            .returning(self.table.c.id, self.table.c.data)
        )

    def dequeue(self, record_id: int, connection: Connection | None = None) -> None:
        """Delete the row with the given id. Missing ids are ignored."""
        stmt = delete(self.table).where(self.table.c.id == record_id)
        with self._binder.scope(connection) as conn:
            deleted = conn.execute(stmt).rowcount
        logger.debug("Dequeued record %d on %s (rows=%d)", record_id, self.identity, deleted)

    def reset_all_statuses(
        self,
        from_: datetime | None = None,
        connection: Connection | None = None,
    ) -> int:
        """
        Put rows back to TO_PROCESS so they can be claimed again.

        Without `from_` every row is reset. With `from_` only rows whose
        LastOperationDateTime equals `from_` exactly are reset; older rows
        are left untouched. Returns the number of rows reset.
        """
        stmt = update(self.table).values(
            status=_TO_PROCESS,
            last_operation_time=store_now(),
        )
        if from_ is not None:
            # FIXME: equality, not "older than"; claims made before the
            # cutoff stay PROCESSING.
            stmt = stmt.where(self.table.c.last_operation_time == from_)

        with self._binder.scope(connection) as conn:
            reset = conn.execute(stmt).rowcount
        logger.debug("Reset %d record(s) on %s", reset, self.identity)
        return reset

    # ------------------------------------------------------------------ #
    # Read operations                                                      #
    # ------------------------------------------------------------------ #

    def count(self) -> int:
        """Number of rows in any status. Approximate while writers are active."""
        with self._binder.relaxed_read() as conn:
            return conn.execute(select(func.count()).select_from(self.table)).scalar_one()

    def read_records(self, connection: Connection | None = None) -> list[QueueRecord]:
        """Read-only snapshot of every row, ordered by id."""
        stmt = select(*(column.label(column.key) for column in self.table.c)).order_by(
            self.table.c.id
        )
        with self._binder.scope(connection) as conn:
            rows = conn.execute(stmt).mappings().all()
        return [QueueRecord.model_validate(dict(row)) for row in rows]
