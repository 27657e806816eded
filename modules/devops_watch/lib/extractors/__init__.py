# devops_watch/extractors/__init__.py
from __future__ import annotations

from .base import BaseExtractor
from .generic import PLACEHOLDER_TITLE, GenericBodyExtractor
from .structured import StructuredListingExtractor

# The closed set of page extractors a site entry may name.
EXTRACTORS: dict[str, type[BaseExtractor]] = {
    GenericBodyExtractor.kind: GenericBodyExtractor,
    StructuredListingExtractor.kind: StructuredListingExtractor,
}


def get(kind: str) -> type[BaseExtractor]:
    """Extractor class for a kind (case-insensitive). Raises KeyError if unknown."""
    key = (kind or "").strip().lower()
    if key not in EXTRACTORS:
        raise KeyError(f"No extractor for kind {kind!r}.")
    return EXTRACTORS[key]


__all__ = [
    "EXTRACTORS",
    "PLACEHOLDER_TITLE",
    "BaseExtractor",
    "GenericBodyExtractor",
    "StructuredListingExtractor",
    "get",
]
