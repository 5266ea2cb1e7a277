"""Translator protocol."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from docquery.models.expression import QueryExpression
from docquery.protocols.mapping import DocumentMapping

if TYPE_CHECKING:
    from docquery.translation.translator import Translation


@runtime_checkable
class Translator(Protocol):
    """Protocol for turning a query expression into a request and materializer."""

    def translate(self, mapping: DocumentMapping, expression: QueryExpression) -> Translation:
        """Translate *expression* using *mapping*.

        Implementations must be pure: the same inputs always yield an equal
        request, and nothing is read from or written to the network.
        """
        ...
