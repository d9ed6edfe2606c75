"""
TransactionBinder — decides the transactional scope of one queue operation.

Two scopes:

  caller scope  — the caller passes a Connection with a transaction in
                  progress. The operation runs on it; the binder never
                  commits, rolls back or closes it. The caller owns the
                  outcome.

  ad hoc scope  — no connection passed. The binder opens a connection and a
                  transaction for exactly this call (engine.begin()), commits
                  when the block exits normally and rolls back when it raises.
                  The connection is returned to the pool on every exit path.
"""
from __future__ import annotations

import contextlib
import dataclasses
from collections.abc import Iterator

from sqlalchemy import Connection, Engine


@dataclasses.dataclass(frozen=True)
class TransactionBinder:
    """Binds operations of one queue handle to a transactional scope."""

    engine: Engine

    @contextlib.contextmanager
    def scope(self, connection: Connection | None = None) -> Iterator[Connection]:
        if connection is not None:
            yield connection
            return
        with self.engine.begin() as ad_hoc:
            yield ad_hoc

    @contextlib.contextmanager
    def relaxed_read(self) -> Iterator[Connection]:
        """
        Read-only connection at READ UNCOMMITTED, independent of any caller
        transaction. Never commits; the connection is rolled back and released
        on exit.
        """
        with self.engine.connect() as connection:
            connection = connection.execution_options(isolation_level="READ UNCOMMITTED")
            yield connection
