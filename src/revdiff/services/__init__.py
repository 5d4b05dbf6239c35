"""Revision comparison and patch write paths over an external revision store."""

from revdiff.services.revisions import (
    RevisionComparison,
    RevisionStore,
    apply_field_patch,
    compare_revisions,
    diff_history,
    diff_revisions,
    revision_history,
)

__all__ = [
    "RevisionComparison",
    "RevisionStore",
    "apply_field_patch",
    "compare_revisions",
    "diff_history",
    "diff_revisions",
    "revision_history",
]
