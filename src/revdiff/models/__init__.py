"""Data models for revisions, field diffs and document schemas."""

from revdiff.models.base import DocumentBase
from revdiff.models.diff import (
    ChangeType,
    FieldDiff,
    LocalizedDiff,
    LocalizedEntry,
    ScalarDiff,
    StructuredChange,
    StructuredDiff,
    TextDiff,
    TextDiffStats,
    TextFieldDiff,
    WordChange,
    WordChangeType,
)
from revdiff.models.revision import Revision, RevisionMeta, link_revisions, order_revisions
from revdiff.models.schema import (
    BLOG_POST,
    CITATION,
    CITATION_CLAIM,
    PAGE_CHECK,
    WIKI_PAGE,
    DocumentSchema,
    FieldKind,
    document_schema,
)

__all__ = [
    "BLOG_POST",
    "CITATION",
    "CITATION_CLAIM",
    "PAGE_CHECK",
    "WIKI_PAGE",
    "ChangeType",
    "DocumentBase",
    "DocumentSchema",
    "FieldDiff",
    "FieldKind",
    "LocalizedDiff",
    "LocalizedEntry",
    "Revision",
    "RevisionMeta",
    "ScalarDiff",
    "StructuredChange",
    "StructuredDiff",
    "TextDiff",
    "TextDiffStats",
    "TextFieldDiff",
    "WordChange",
    "WordChangeType",
    "document_schema",
    "link_revisions",
    "order_revisions",
]
