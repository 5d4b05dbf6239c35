"""Revision diffing and patch application for multilingual documents."""

from revdiff.diff import (
    build_text_diff,
    diff_field,
    diff_fields,
    diff_localized_field,
    diff_scalar_field,
    diff_structured_field,
    diff_text_field,
)
from revdiff.errors import (
    PatchError,
    PatchNoOpError,
    PatchNotApplicableError,
    PatchTargetMismatchError,
    RevdiffError,
    RevisionMismatchError,
    RevisionNotFoundError,
    UnsupportedFormatError,
)
from revdiff.patch import PatchDialect, apply_patch, normalize_patch

__version__ = "0.1.0"
__all__ = [
    "PatchDialect",
    "PatchError",
    "PatchNoOpError",
    "PatchNotApplicableError",
    "PatchTargetMismatchError",
    "RevdiffError",
    "RevisionMismatchError",
    "RevisionNotFoundError",
    "UnsupportedFormatError",
    "apply_patch",
    "build_text_diff",
    "diff_field",
    "diff_fields",
    "diff_localized_field",
    "diff_scalar_field",
    "diff_structured_field",
    "diff_text_field",
    "normalize_patch",
]
