"""Diff engine: scalar, structured, text and localized field comparison."""

from revdiff.diff.fields import (
    diff_field,
    diff_fields,
    diff_localized_field,
    diff_scalar_field,
    diff_structured_field,
    diff_text_field,
)
from revdiff.diff.normalize import canonicalize, normalize_scalar, stable_stringify
from revdiff.diff.structured import diff_structured_value, is_equal
from revdiff.diff.text import build_text_diff, build_word_diff, normalize_for_diff

__all__ = [
    "build_text_diff",
    "build_word_diff",
    "canonicalize",
    "diff_field",
    "diff_fields",
    "diff_localized_field",
    "diff_scalar_field",
    "diff_structured_field",
    "diff_structured_value",
    "diff_text_field",
    "is_equal",
    "normalize_for_diff",
    "normalize_scalar",
    "stable_stringify",
]
