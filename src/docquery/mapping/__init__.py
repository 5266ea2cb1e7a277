"""Field mapping between element types and documents."""

from .typed import TypedDocumentMapping, camel_case, pluralize

__all__ = ["TypedDocumentMapping", "camel_case", "pluralize"]
