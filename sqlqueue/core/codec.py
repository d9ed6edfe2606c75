"""
JsonCodec — serialize and deserialize queue elements using Pydantic v2.

A TypeAdapter built for the element type handles the wire format:
  - scalars, lists and dicts map to plain JSON
  - pydantic models and dataclasses are dumped field by field
  - datetime fields are serialized as ISO-8601 strings
  - Enum values are serialized as their values

Examples (JsonCodec(int), JsonCodec(list[str])):
------------------------------------------------
  345            <->  "345"
  ["a", "b"]     <->  "[\"a\",\"b\"]"

decode() validates against the element type, so a stored payload that no
longer matches it raises pydantic.ValidationError.
"""
from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import TypeAdapter

T = TypeVar("T")


class JsonCodec(Generic[T]):
    """Codec for any type pydantic can validate."""

    def __init__(self, element_type: Any) -> None:
        self.element_type = element_type
        self._adapter: TypeAdapter[T] = TypeAdapter(element_type)

    def __repr__(self) -> str:
        return f"JsonCodec({self.element_type!r})"

    def encode(self, element: T) -> str:
        """Serialize an element to JSON text."""
        return self._adapter.dump_json(element).decode("utf-8")

    def decode(self, data: str) -> T:
        """Deserialize JSON text to an element, validating its type."""
        return self._adapter.validate_json(data)
