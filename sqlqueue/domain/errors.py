"""
Exception hierarchy for sqlqueue.

SqlQueueError
└── InvalidArgumentError  — rejected argument, raised before any I/O

Store failures (sqlalchemy.exc.*) and codec failures (pydantic.ValidationError)
are not wrapped; they reach the caller as raised by the underlying library.
"""

from __future__ import annotations


class SqlQueueError(Exception):
    """Base class for all sqlqueue exceptions."""


class InvalidArgumentError(SqlQueueError, ValueError):
    """
    Raised when a queue handle or operation receives an unusable argument.

    Attributes
    ----------
    argument : str
        Name of the offending parameter.
    """

    def __init__(self, argument: str, message: str) -> None:
        self.argument = argument
        super().__init__(message)
