"""Custom exceptions for docquery."""

from __future__ import annotations

import asyncio

__all__ = [
    "DocQueryError",
    "MissingArgumentError",
    "NoResponseError",
    "NoResultsError",
    "QueryCancelledError",
    "QueryShapeError",
    "ResultTypeError",
    "TransientSearchError",
    "TranslationError",
    "UnknownFieldError",
]


class DocQueryError(Exception):
    """Base exception for all docquery errors."""


class MissingArgumentError(DocQueryError, ValueError):
    """Raised when a required argument or collaborator is ``None``."""

    def __init__(self, name: str) -> None:
        super().__init__(f"'{name}' must not be None")
        self.name = name


class QueryShapeError(DocQueryError, ValueError):
    """Raised when an expression's shape does not fit the requested query type."""


class NoResponseError(DocQueryError, RuntimeError):
    """Raised when the search service produced no response at all."""


class ResultTypeError(DocQueryError, TypeError):
    """Raised when a materialized result does not conform to the requested type."""


class TranslationError(DocQueryError):
    """Raised when a query expression cannot be translated into a search request."""


class UnknownFieldError(TranslationError):
    """Raised when a query references an attribute the element type does not declare."""


class NoResultsError(DocQueryError, LookupError):
    """Raised when a single result was required but the search matched nothing."""


class TransientSearchError(DocQueryError):
    """Raised by connections for failures worth retrying (timeouts, dropped sockets)."""


class QueryCancelledError(asyncio.CancelledError):
    """Raised when the caller's cancellation token fired while a search was outstanding.

    Subclasses ``asyncio.CancelledError`` so it behaves as a cancellation
    signal rather than an ordinary failure.
    """
