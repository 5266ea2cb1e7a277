"""Field mapping protocol between typed elements and stored documents."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class DocumentMapping(Protocol):
    """Protocol describing how element types map onto documents."""

    def get_document_type(self, element_type: type) -> str:
        """Return the document collection name holding *element_type* records."""
        ...

    def get_field_name(self, element_type: type, attribute: str) -> str:
        """Return the document field that stores *attribute* of *element_type*.

        Raises:
            UnknownFieldError: If *element_type* declares no such attribute.
        """
        ...

    def materialize_document(self, element_type: type, source: dict[str, Any]) -> Any:
        """Build an *element_type* instance from a stored document."""
        ...
