"""Helpers for locale-keyed text maps.

An absent locale means "not translated". In merge input, a ``None`` value
deletes that locale, while the ``UNSET`` sentinel leaves the whole field
untouched.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any, Final, Literal

LocalizedMap = dict[str, str]


class _Unset(Enum):
    UNSET = "UNSET"

    def __repr__(self) -> str:
        return "UNSET"


UNSET: Final = _Unset.UNSET


def sanitize_localized_map(value: Mapping[str, Any] | None) -> LocalizedMap | None:
    """Keep only string entries; an empty result becomes ``None``."""
    if value is None:
        return None
    result = {lang: text for lang, text in value.items() if isinstance(text, str)}
    return result or None


def merge_localized_map(
    existing: Mapping[str, Any] | None,
    incoming: Mapping[str, str | None] | None | Literal[_Unset.UNSET],
) -> LocalizedMap | None | Literal[_Unset.UNSET]:
    """Overlay ``incoming`` on ``existing``; ``None`` values delete locales."""
    if incoming is UNSET:
        return UNSET
    if incoming is None:
        return None
    result = sanitize_localized_map(existing) or {}
    for lang, text in incoming.items():
        if text is None:
            result.pop(lang, None)
        elif isinstance(text, str):
            result[lang] = text
    return result or None


def resolve_localized(lang: str, value: Mapping[str, Any] | None) -> str | None:
    if not value:
        return None
    text = value.get(lang)
    return text if isinstance(text, str) else None
