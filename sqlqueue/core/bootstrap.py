"""
SchemaBootstrapper — creates queue tables once per bootstrapper lifetime.

The bootstrapper is owned by the host application. Share one instance among
every SqlQueue handle of a process to skip redundant DDL; create a fresh one
(or call clear()) to force the existence check again.

Concurrency
-----------
The memo (a set of QueueIdentity) is guarded by a single threading.Lock held
only while reading or writing it. Two threads racing on a fresh identity may
both issue the DDL; the statement is CREATE TABLE IF NOT EXISTS, so the store
arbitrates. Cross-process races are resolved the same way.

The memo is never invalidated by the store: a table dropped externally after
it was memoized is not recreated until the host calls forget() or clear().
"""
from __future__ import annotations

import logging
import threading

from sqlalchemy import Engine, Table
from sqlalchemy.schema import CreateTable

from sqlqueue.domain.models import QueueIdentity

logger = logging.getLogger(__name__)


class SchemaBootstrapper:
    """Memoizing table creator, keyed by QueueIdentity."""

    def __init__(self) -> None:
        self._created: set[QueueIdentity] = set()
        self._lock = threading.Lock()

    def is_bootstrapped(self, identity: QueueIdentity) -> bool:
        with self._lock:
            return identity in self._created

    def ensure_table(self, engine: Engine, table: Table, identity: QueueIdentity) -> bool:
        """
        Create `table` unless `identity` is already memoized.

        Returns True if DDL was issued, False on a memo hit. DDL failures
        propagate and leave the identity unmarked.
        """
        with self._lock:
            if identity in self._created:
                logger.debug("Queue table %s already bootstrapped", identity)
                return False

        with engine.begin() as connection:
            connection.execute(CreateTable(table, if_not_exists=True))

        with self._lock:
            self._created.add(identity)

        logger.info("Bootstrapped queue table %s", identity)
        return True

    def forget(self, identity: QueueIdentity) -> None:
        """Drop one identity from the memo; the next handle re-checks the table."""
        with self._lock:
            self._created.discard(identity)

    def clear(self) -> None:
        with self._lock:
            self._created.clear()
