"""Default mapping between Python element types and stored documents."""

from __future__ import annotations

import dataclasses
import re
from typing import Any

from pydantic import BaseModel

from docquery.exceptions import UnknownFieldError


_SIBILANT_ENDINGS = ("s", "x", "z", "ch", "sh")


def camel_case(name: str) -> str:
    """Convert ``snake_case`` (or ``PascalCase``) to ``camelCase``."""
    head, *rest = name.split("_")
    return head[:1].lower() + head[1:] + "".join(part[:1].upper() + part[1:] for part in rest)


def pluralize(name: str) -> str:
    """Naive English plural, good enough for document collection names."""
    if re.search(r"[^aeiou]y$", name, flags=re.IGNORECASE):
        return name[:-1] + "ies"
    if name.lower().endswith(_SIBILANT_ENDINGS):
        return name + "es"
    return name + "s"


def declared_attributes(element_type: type) -> tuple[str, ...] | None:
    """Return the attribute names *element_type* declares, or ``None`` if it is open-ended."""
    if isinstance(element_type, type) and issubclass(element_type, BaseModel):
        return tuple(element_type.model_fields)
    if dataclasses.is_dataclass(element_type):
        return tuple(f.name for f in dataclasses.fields(element_type))
    return None


class TypedDocumentMapping:
    """Maps pydantic models, dataclasses and plain dicts onto documents.

    Implements the ``DocumentMapping`` protocol.

    Parameters:
        camel_case_fields: Store ``snake_case`` attributes as ``camelCase``
            document fields.  Default True.
        pluralize_types: Pluralize the element type name to get the
            document collection name (``Robot`` -> ``robots``).  Default True.
        lower_case_types: Lower-case the collection name.  Default True.
        type_names: Explicit collection names per element type.  Takes
            precedence over the naming rules above; required for ``dict``.
    """

    __slots__ = ("_camel_case_fields", "_lower_case_types", "_pluralize_types", "_type_names")

    def __init__(
        self,
        camel_case_fields: bool = True,
        pluralize_types: bool = True,
        lower_case_types: bool = True,
        type_names: dict[type, str] | None = None,
    ) -> None:
        self._camel_case_fields = camel_case_fields
        self._pluralize_types = pluralize_types
        self._lower_case_types = lower_case_types
        self._type_names: dict[type, str] = dict(type_names or {})

    def __repr__(self) -> str:
        return (
            f"TypedDocumentMapping(camel_case_fields={self._camel_case_fields}, "
            f"pluralize_types={self._pluralize_types}, "
            f"lower_case_types={self._lower_case_types})"
        )

    def get_document_type(self, element_type: type) -> str:
        explicit = self._type_names.get(element_type)
        if explicit is not None:
            return explicit
        name = element_type.__name__
        if self._pluralize_types:
            name = pluralize(name)
        if self._lower_case_types:
            name = name.lower()
        return name

    def get_field_name(self, element_type: type, attribute: str) -> str:
        declared = declared_attributes(element_type)
        if declared is not None:
            root = attribute.split(".", 1)[0]
            if root not in declared:
                msg = f"{element_type.__name__} has no attribute '{root}'"
                raise UnknownFieldError(msg)
        if not self._camel_case_fields:
            return attribute
        return ".".join(camel_case(part) for part in attribute.split("."))

    def materialize_document(self, element_type: type, source: dict[str, Any]) -> Any:
        declared = declared_attributes(element_type)
        if declared is None:
            if element_type is dict:
                return dict(source)
            return element_type(**source)

        values: dict[str, Any] = {}
        for attribute in declared:
            field_name = self.get_field_name(element_type, attribute)
            if field_name in source:
                values[attribute] = source[field_name]

        if issubclass(element_type, BaseModel):
            return element_type.model_validate(values)
        return element_type(**values)
