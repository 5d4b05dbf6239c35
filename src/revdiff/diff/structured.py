"""Deep comparison of nested mappings and sequences with JSON-Pointer paths."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from revdiff.diff.normalize import canonicalize, stable_stringify
from revdiff.models.diff import ChangeType, StructuredChange


def is_equal(left: Any, right: Any) -> bool:
    """Structural equality: mapping key order is ignored, sequence order is not."""
    return stable_stringify(left) == stable_stringify(right)


def escape_path_segment(segment: str) -> str:
    return segment.replace("~", "~0").replace("/", "~1")


def join_path(base: str, segment: str) -> str:
    return f"{base}/{escape_path_segment(segment)}"


def diff_structured_value(
    from_value: Any,
    to_value: Any,
    base_path: str,
    changes: list[StructuredChange],
) -> None:
    """Append the changes turning ``from_value`` into ``to_value`` to ``changes``.

    Both values are compared in canonical form, so tuples behave like lists,
    sets like sorted lists and pydantic models like their JSON dumps.
    """
    _diff(canonicalize(from_value), canonicalize(to_value), base_path, changes)


def _diff(
    from_tree: Any,
    to_tree: Any,
    base_path: str,
    changes: list[StructuredChange],
) -> None:
    if is_equal(from_tree, to_tree):
        return

    if isinstance(from_tree, list) or isinstance(to_tree, list):
        from_items = from_tree if isinstance(from_tree, list) else []
        to_items = to_tree if isinstance(to_tree, list) else []
        emitted = len(changes)
        for index in range(max(len(from_items), len(to_items))):
            path = join_path(base_path, str(index))
            if index >= len(from_items):
                changes.append(
                    StructuredChange(
                        path=path,
                        type=ChangeType.ADDED,
                        to_value=stable_stringify(to_items[index]),
                    )
                )
            elif index >= len(to_items):
                changes.append(
                    StructuredChange(
                        path=path,
                        type=ChangeType.REMOVED,
                        from_value=stable_stringify(from_items[index]),
                    )
                )
            else:
                _diff(from_items[index], to_items[index], path, changes)
        # An empty list against a non-list (e.g. [] vs {}) walks no indices.
        if len(changes) == emitted:
            _modified(from_tree, to_tree, base_path, changes)
        return

    if isinstance(from_tree, Mapping) and isinstance(to_tree, Mapping):
        for key in sorted(set(from_tree) | set(to_tree)):
            path = join_path(base_path, key)
            if key not in from_tree:
                changes.append(
                    StructuredChange(
                        path=path,
                        type=ChangeType.ADDED,
                        to_value=stable_stringify(to_tree[key]),
                    )
                )
            elif key not in to_tree:
                changes.append(
                    StructuredChange(
                        path=path,
                        type=ChangeType.REMOVED,
                        from_value=stable_stringify(from_tree[key]),
                    )
                )
            else:
                _diff(from_tree[key], to_tree[key], path, changes)
        return

    _modified(from_tree, to_tree, base_path, changes)


def _modified(
    from_tree: Any,
    to_tree: Any,
    base_path: str,
    changes: list[StructuredChange],
) -> None:
    changes.append(
        StructuredChange(
            path=base_path or "/",
            type=ChangeType.MODIFIED,
            from_value=stable_stringify(from_tree),
            to_value=stable_stringify(to_tree),
        )
    )
