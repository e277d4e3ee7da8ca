"""
repraxis/errors.py - Exception hierarchy for the fact database

Every error raised by the database, parser and query engine derives from
RePraxisError and from the closest builtin, so callers can catch either.

Clause-level query failure is not an error: it produces a failed
QueryResult instead.
"""
from __future__ import annotations


class RePraxisError(Exception):
    """Base class for all RePraxis errors."""


class SentenceParseError(RePraxisError, ValueError):
    """Raised when a sentence is malformed (e.g. an unterminated '[')."""


class NodeTypeError(RePraxisError, TypeError):
    """Raised when an operation is not defined for a node's type."""


class NodeCardinalityError(RePraxisError, ValueError):
    """Raised when a path segment is reused with a different cardinality."""


class MissingNodeError(RePraxisError, KeyError):
    """Raised when a child node is looked up but does not exist."""

    def __init__(self, symbol: str, message: str | None = None):
        self.symbol = symbol
        super().__init__(message or f"No child node found with symbol: {symbol}")

    def __str__(self) -> str:
        return str(self.args[0])


class UnrecognizedClauseError(RePraxisError, ValueError):
    """Raised when a query clause does not match a known shape."""
