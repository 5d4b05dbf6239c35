"""Field kinds and the per-document-type schemas that declare them."""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from types import MappingProxyType


class FieldKind(StrEnum):
    """How a field's values are compared."""

    LOCALIZED = "localized"
    SCALAR = "scalar"
    STRUCTURED = "structured"
    TEXT = "text"


DocumentSchema = Mapping[str, FieldKind]


def document_schema(**fields: FieldKind) -> DocumentSchema:
    """Build a read-only schema, keeping declaration order."""
    return MappingProxyType(dict(fields))


WIKI_PAGE = document_schema(
    title=FieldKind.LOCALIZED,
    body=FieldKind.LOCALIZED,
    slug=FieldKind.SCALAR,
    original_language=FieldKind.SCALAR,
)

BLOG_POST = document_schema(
    title=FieldKind.LOCALIZED,
    body=FieldKind.LOCALIZED,
    summary=FieldKind.LOCALIZED,
    slug=FieldKind.SCALAR,
    original_language=FieldKind.SCALAR,
)

CITATION = document_schema(
    key=FieldKind.SCALAR,
    data=FieldKind.STRUCTURED,
)

CITATION_CLAIM = document_schema(
    claim_id=FieldKind.SCALAR,
    assertion=FieldKind.LOCALIZED,
    quote=FieldKind.LOCALIZED,
    quote_language=FieldKind.SCALAR,
    locator_type=FieldKind.SCALAR,
    locator_value=FieldKind.LOCALIZED,
    locator_label=FieldKind.LOCALIZED,
)

PAGE_CHECK = document_schema(
    type=FieldKind.SCALAR,
    status=FieldKind.SCALAR,
    check_results=FieldKind.LOCALIZED,
    notes=FieldKind.LOCALIZED,
    metrics=FieldKind.STRUCTURED,
    target_rev_id=FieldKind.SCALAR,
    completed_at=FieldKind.SCALAR,
)
