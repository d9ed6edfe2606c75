"""
Codec — the single port in sqlqueue.

Any object satisfying this structural Protocol can map queue elements to and
from the text stored in the Data column. No base class or registration is
required — Python's structural subtyping (duck typing + Protocol) is
sufficient.

Contract
--------
encode(element) -> str
  - Must produce text that decode() accepts.
  - Called once per enqueue, before any I/O.

decode(data) -> element
  - Called once per successful peek, after the claim has been committed or
    joined to the caller's transaction.
  - Failures propagate to the caller unchanged. The claimed row stays in
    PROCESSING status; recover it with reset_all_statuses().
"""

from __future__ import annotations

from typing import Protocol, TypeVar, runtime_checkable

T = TypeVar("T")


@runtime_checkable
class Codec(Protocol[T]):
    """
    Minimal interface required by SqlQueue.

    Implementing codecs (built-in):
      - JsonCodec — pydantic TypeAdapter, JSON text
    """

    def encode(self, element: T) -> str: ...

    def decode(self, data: str) -> T: ...
