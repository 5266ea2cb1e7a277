"""Protocol definitions for docquery's pluggable collaborators."""

from .callback import QueryCallback
from .connection import Connection
from .mapping import DocumentMapping
from .materializer import Materializer
from .retry import RetryPolicy
from .translator import Translator

__all__ = [
    "Connection",
    "DocumentMapping",
    "Materializer",
    "QueryCallback",
    "RetryPolicy",
    "Translator",
]
