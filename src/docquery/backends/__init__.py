"""Built-in connection backends."""

from .memory import InMemoryConnection, RawSearchResponse, matches

__all__ = ["InMemoryConnection", "RawSearchResponse", "matches"]
