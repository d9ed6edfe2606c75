"""
Domain models for sqlqueue — backed by Pydantic v2.

QueueRecord mirrors one row of a queue table. QueueIdentity names a physical
table and is the key the bootstrapper memoizes on.

All models are frozen (immutable). Rows are never mutated in memory; every
state change happens in the store and is observed by reading the row again.
"""

from datetime import datetime
from enum import IntEnum

from pydantic import BaseModel, ConfigDict


class QueueStatus(IntEnum):
    """Lifecycle states for a queued record, stored as a small integer."""

    TO_PROCESS = 0
    PROCESSING = 1


class QueueRecord(BaseModel):
    """
    A single row of a queue table.

    id                  — store-assigned identity, never reused
    enqueue_time        — store timestamp set at insert, never modified
    status              — current lifecycle state
    last_operation_time — store timestamp of the last status change
    data                — codec output; opaque to the queue
    """

    model_config = ConfigDict(frozen=True)

    id: int
    enqueue_time: datetime
    status: QueueStatus
    last_operation_time: datetime
    data: str

    @property
    def claimed(self) -> bool:
        return self.status == QueueStatus.PROCESSING


class QueueIdentity(BaseModel):
    """
    (store location, schema, queue name) — distinguishes physical tables.

    location is the engine URL rendered with the password hidden, so it is
    safe to log and stable across handles pointing at the same database.
    """

    model_config = ConfigDict(frozen=True)

    location: str
    schema_name: str
    name: str

    def __str__(self) -> str:
        return f"{self.location}/{self.schema_name}.{self.name}"
