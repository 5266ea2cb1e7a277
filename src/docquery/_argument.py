"""Argument checks shared by constructors and entry points."""

from __future__ import annotations

from typing import TypeVar

from docquery.exceptions import MissingArgumentError

T = TypeVar("T")


def ensure_not_none(name: str, value: T | None) -> T:
    """Return *value*, raising ``MissingArgumentError`` if it is ``None``."""
    if value is None:
        raise MissingArgumentError(name)
    return value


def ensure_non_negative(name: str, value: int) -> int:
    """Return *value*, raising ``ValueError`` if it is negative."""
    if value < 0:
        msg = f"{name} must be a non-negative integer, got {value}"
        raise ValueError(msg)
    return value
