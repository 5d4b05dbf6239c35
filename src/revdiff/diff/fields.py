"""Per-field diffing for localized maps, scalars, structured values and text.

Each function returns ``None`` exactly when both sides are equal under its
own equality rule. The caller declares the field kind; values are never
inspected to guess it.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from revdiff.diff.normalize import normalize_scalar
from revdiff.diff.structured import diff_structured_value, is_equal
from revdiff.diff.text import DEFAULT_CONTEXT_LINES, build_text_diff
from revdiff.models.diff import (
    FieldDiff,
    LocalizedDiff,
    LocalizedEntry,
    ScalarDiff,
    StructuredChange,
    StructuredDiff,
    TextDiff,
    TextFieldDiff,
)
from revdiff.models.schema import DocumentSchema, FieldKind


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _as_localized_map(value: Any) -> Mapping[str, Any]:
    # Stored data that is not a mapping is treated as "no translations".
    return value if isinstance(value, Mapping) else {}


def diff_localized_field(
    field_name: str,
    from_value: Mapping[str, str | None] | None,
    to_value: Mapping[str, str | None] | None,
    *,
    context_lines: int = DEFAULT_CONTEXT_LINES,
) -> LocalizedDiff | None:
    from_map = _as_localized_map(from_value)
    to_map = _as_localized_map(to_value)
    from_keys = set(from_map)
    to_keys = set(to_map)

    added = [
        LocalizedEntry(lang=lang, value=_as_text(to_map[lang]))
        for lang in sorted(to_keys - from_keys)
    ]
    removed = [
        LocalizedEntry(lang=lang, value=_as_text(from_map[lang]))
        for lang in sorted(from_keys - to_keys)
    ]
    modified: dict[str, TextDiff] = {}
    for lang in sorted(from_keys & to_keys):
        from_text = _as_text(from_map[lang])
        to_text = _as_text(to_map[lang])
        if from_text != to_text:
            modified[lang] = build_text_diff(
                f"{field_name}.{lang}", from_text, to_text, context_lines=context_lines
            )

    if not added and not removed and not modified:
        return None
    return LocalizedDiff(added=added, removed=removed, modified=modified)


def diff_scalar_field(field_name: str, from_value: Any, to_value: Any) -> ScalarDiff | None:  # noqa: ARG001
    from_text = normalize_scalar(from_value)
    to_text = normalize_scalar(to_value)
    if from_text == to_text:
        return None
    return ScalarDiff(from_value=from_text, to_value=to_text)


def diff_structured_field(
    field_name: str,  # noqa: ARG001
    from_value: Any,
    to_value: Any,
) -> StructuredDiff | None:
    if is_equal(from_value, to_value):
        return None
    changes: list[StructuredChange] = []
    diff_structured_value(from_value, to_value, "", changes)
    if not changes:
        return None
    return StructuredDiff(changes=changes)


def diff_text_field(
    field_name: str,
    from_value: str | None,
    to_value: str | None,
    *,
    context_lines: int = DEFAULT_CONTEXT_LINES,
) -> TextFieldDiff | None:
    from_text = _as_text(from_value)
    to_text = _as_text(to_value)
    if from_text == to_text:
        return None
    return TextFieldDiff(
        diff=build_text_diff(field_name, from_text, to_text, context_lines=context_lines)
    )


def diff_field(
    kind: FieldKind,
    field_name: str,
    from_value: Any,
    to_value: Any,
    *,
    context_lines: int = DEFAULT_CONTEXT_LINES,
) -> FieldDiff | None:
    """Diff one field using the comparison declared for its kind."""
    match FieldKind(kind):
        case FieldKind.LOCALIZED:
            return diff_localized_field(
                field_name, from_value, to_value, context_lines=context_lines
            )
        case FieldKind.SCALAR:
            return diff_scalar_field(field_name, from_value, to_value)
        case FieldKind.STRUCTURED:
            return diff_structured_field(field_name, from_value, to_value)
        case FieldKind.TEXT:
            return diff_text_field(field_name, from_value, to_value, context_lines=context_lines)


def diff_fields(
    schema: DocumentSchema,
    from_values: Mapping[str, Any],
    to_values: Mapping[str, Any],
    *,
    context_lines: int = DEFAULT_CONTEXT_LINES,
) -> dict[str, FieldDiff]:
    """Diff every field declared in ``schema``, keeping only the ones that changed."""
    result: dict[str, FieldDiff] = {}
    for name, kind in schema.items():
        field_diff = diff_field(
            kind,
            name,
            from_values.get(name),
            to_values.get(name),
            context_lines=context_lines,
        )
        if field_diff is not None:
            result[name] = field_diff
    return result
