"""
sqlqueue — durable competing-consumer queue on a relational table.

Every queue is one table. Producers insert rows; consumers claim rows with a
single UPDATE ... RETURNING whose candidate sub-select takes the row with
FOR UPDATE SKIP LOCKED, so any number of processes, on any number of
machines, can share a queue without a broker and without ever receiving the
same row twice.

Every write operation either runs in its own committed transaction or joins
a transaction the caller already holds, so enqueueing can be made atomic with
the caller's own writes.

Quick start
-----------
    from sqlalchemy import create_engine
    from sqlqueue import JsonCodec, SchemaBootstrapper, SqlQueue

    engine = create_engine("postgresql+psycopg://app@localhost/app")
    bootstrapper = SchemaBootstrapper()          # share one per process

    q = SqlQueue(engine, "public", "emails", JsonCodec(dict), bootstrapper)

    q.enqueue({"to": "user@example.com"})

    claimed = q.peek()
    if claimed is not None:
        record_id, element = claimed
        send(element)
        q.dequeue(record_id)

    # Enqueue inside your own transaction
    with engine.begin() as conn:
        conn.execute(...)
        q.enqueue({"to": "other@example.com"}, connection=conn)

    # A handle built from a URL owns its engine and disposes it on exit
    with SqlQueue("sqlite:///jobs.db", "main", "jobs", JsonCodec(int), bootstrapper) as jobs:
        jobs.enqueue(1)

Guarantees
----------
  - a claimed row is delivered to exactly one consumer
  - no ordering: rows are not delivered first-in first-out
  - no retries or backoff; store errors reach the caller unwrapped
  - a claim committed outside a caller transaction is permanent until the
    row is dequeued or reset_all_statuses() is called

Stores
------
  - PostgreSQL (pip install "sqlqueue[postgres]") — production
  - SQLite — single-machine development and tests

Custom codecs only need to implement the two-method Codec protocol:
  def encode(element) -> str
  def decode(data) -> element

Architecture
------------
Follows the Ports & Adapters pattern:
  domain/   — pure value types (QueueRecord, QueueStatus, QueueIdentity)
  ports/    — Protocol interfaces (Codec)
  core/     — queue logic (SqlQueue, SchemaBootstrapper, TransactionBinder)
  adapters/ — SQLAlchemy table definition
"""
from __future__ import annotations

from sqlqueue.adapters.sql.table import queue_table
from sqlqueue.config import QueueSettings
from sqlqueue.core.bootstrap import SchemaBootstrapper
from sqlqueue.core.codec import JsonCodec
from sqlqueue.core.queue import SqlQueue
from sqlqueue.core.transaction import TransactionBinder
from sqlqueue.domain.errors import InvalidArgumentError, SqlQueueError
from sqlqueue.domain.models import QueueIdentity, QueueRecord, QueueStatus
from sqlqueue.ports.codec import Codec

__all__ = [
    # Domain models
    "QueueRecord",
    "QueueStatus",
    "QueueIdentity",
    # Errors
    "SqlQueueError",
    "InvalidArgumentError",
    # Port (for typing custom codecs)
    "Codec",
    # Queue API
    "SqlQueue",
    "SchemaBootstrapper",
    "TransactionBinder",
    "JsonCodec",
    "QueueSettings",
    # Table definition
    "queue_table",
]
