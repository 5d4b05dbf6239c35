"""Canonical forms for scalar comparison and order-independent equality.

``canonicalize`` turns arbitrary Python values into a JSON-compatible tree:
mapping keys become strings, sequences become lists, sets become sorted
lists, dates become ISO-8601 UTC strings and pydantic models are dumped.
``stable_stringify`` serializes that tree with keys sorted at every level, so
two values with the same structure always produce the same text regardless
of key insertion order.
"""

from __future__ import annotations

import json
import math
from collections.abc import Mapping, Set
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel

CIRCULAR = "[Circular]"


def format_datetime(value: date) -> str:
    """Render a date or datetime as ``YYYY-MM-DDTHH:MM:SS.mmmZ``.

    Naive datetimes are taken as UTC; a bare date is midnight UTC.
    """
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day, tzinfo=UTC)
    elif value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    utc = value.astimezone(UTC)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_number(value: int | float | Decimal) -> str:
    if isinstance(value, Decimal):
        if not value.is_finite():
            value = float(value)
        elif value == value.to_integral_value():
            return str(int(value))
        else:
            return str(value)
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return str(int(value))


def canonicalize(value: Any) -> Any:
    """Return a JSON-compatible tree equivalent to ``value``."""
    return _canonical(value, set())


def _canonical(value: Any, ancestors: set[int]) -> Any:
    if value is None or isinstance(value, (str, bool)):
        return value
    if isinstance(value, int):
        return int(value)
    if isinstance(value, float):
        return int(value) if value.is_integer() else value
    if isinstance(value, Decimal):
        if value.is_finite() and value == value.to_integral_value():
            return int(value)
        return float(value)
    if isinstance(value, date):
        return format_datetime(value)
    if isinstance(value, Enum):
        return _canonical(value.value, ancestors)
    if isinstance(value, BaseModel):
        return _canonical(value.model_dump(mode="json"), ancestors)
    if isinstance(value, (Mapping, list, tuple, Set)):
        marker = id(value)
        if marker in ancestors:
            return CIRCULAR
        ancestors.add(marker)
        try:
            if isinstance(value, Mapping):
                return {str(key): _canonical(item, ancestors) for key, item in value.items()}
            items = [_canonical(item, ancestors) for item in value]
            if isinstance(value, Set):
                items.sort(key=_dumps)
            return items
        finally:
            ancestors.discard(marker)
    return str(value)


def _dumps(tree: Any) -> str:
    return json.dumps(tree, indent=2, sort_keys=True, ensure_ascii=False)


def stable_stringify(value: Any) -> str:
    """Deterministic JSON text for ``value`` with keys sorted recursively."""
    return _dumps(canonicalize(value))


def normalize_scalar(value: Any) -> str | None:
    """Comparable string form of a primitive, date or structured value."""
    if value is None:
        return None
    if isinstance(value, date):
        return format_datetime(value)
    if isinstance(value, str):
        return str(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float, Decimal)):
        return format_number(value)
    return stable_stringify(value)
