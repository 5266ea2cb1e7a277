"""Query translation and result materialization."""

from .materializers import (
    AggregateMaterializer,
    CountMaterializer,
    FirstMaterializer,
    ListMaterializer,
)
from .translator import QueryTranslator, Translation, translate

__all__ = [
    "AggregateMaterializer",
    "CountMaterializer",
    "FirstMaterializer",
    "ListMaterializer",
    "QueryTranslator",
    "Translation",
    "translate",
]
