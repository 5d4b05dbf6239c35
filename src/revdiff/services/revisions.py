"""Revision comparison and patch-based writes against an external revision store."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, Field

from revdiff.config import load_settings
from revdiff.diff.fields import diff_fields
from revdiff.errors import (
    PatchError,
    RevisionMismatchError,
    RevisionNotFoundError,
)
from revdiff.localized import sanitize_localized_map
from revdiff.models.diff import FieldDiff
from revdiff.models.revision import Revision, RevisionMeta, link_revisions
from revdiff.models.schema import DocumentSchema, FieldKind
from revdiff.patch.apply import apply_patch
from revdiff.patch.normalize import PatchDialect, check_patch_size

logger = logging.getLogger(__name__)

PATCH_TAGS = ("update", "patch")


@runtime_checkable
class RevisionStore(Protocol):
    """Persistence collaborator that owns revision rows and write atomicity."""

    async def get_current(self, document_id: str) -> Revision | None: ...

    async def get_revision(self, document_id: str, rev_id: str) -> Revision | None: ...

    async def list_revisions(self, document_id: str) -> list[Revision]: ...

    async def create_revision(self, revision: Revision) -> Revision: ...


class RevisionComparison(BaseModel):
    """Change report between two revisions of one document."""

    document_id: str
    from_rev_id: str
    to_rev_id: str
    from_meta: RevisionMeta
    to_meta: RevisionMeta
    fields: dict[str, FieldDiff] = Field(default_factory=dict)

    @property
    def changed(self) -> bool:
        return bool(self.fields)


def compare_revisions(
    schema: DocumentSchema,
    from_rev: Revision,
    to_rev: Revision,
    *,
    context_lines: int | None = None,
) -> RevisionComparison:
    """Diff every schema field of two revisions.

    ``context_lines`` defaults to ``REVDIFF_DIFF_CONTEXT``.
    """
    if context_lines is None:
        context_lines = load_settings().diff.context_lines
    return RevisionComparison(
        document_id=to_rev.document_id,
        from_rev_id=from_rev.rev_id,
        to_rev_id=to_rev.rev_id,
        from_meta=from_rev.meta(),
        to_meta=to_rev.meta(),
        fields=diff_fields(schema, from_rev.fields, to_rev.fields, context_lines=context_lines),
    )


async def diff_revisions(
    store: RevisionStore,
    schema: DocumentSchema,
    document_id: str,
    from_rev_id: str,
    to_rev_id: str | None = None,
    *,
    context_lines: int | None = None,
) -> RevisionComparison:
    """Compare two stored revisions; ``to_rev_id`` defaults to the current one."""
    current = await store.get_current(document_id)
    if current is None:
        raise RevisionNotFoundError(document_id)

    from_rev = await store.get_revision(document_id, from_rev_id)
    if from_rev is None:
        raise RevisionNotFoundError(document_id, from_rev_id)

    if to_rev_id is None or to_rev_id == current.rev_id:
        to_rev = current
    else:
        to_rev = await store.get_revision(document_id, to_rev_id)
        if to_rev is None:
            raise RevisionNotFoundError(document_id, to_rev_id)

    return compare_revisions(schema, from_rev, to_rev, context_lines=context_lines)


def diff_history(
    schema: DocumentSchema,
    revisions: Iterable[Revision],
    *,
    context_lines: int | None = None,
) -> list[RevisionComparison]:
    """Compare each revision with its predecessor, newest first."""
    if context_lines is None:
        context_lines = load_settings().diff.context_lines
    ordered = link_revisions(revisions)
    comparisons = [
        compare_revisions(schema, previous, rev, context_lines=context_lines)
        for previous, rev in zip(ordered, ordered[1:], strict=False)
    ]
    comparisons.reverse()
    return comparisons


async def revision_history(store: RevisionStore, document_id: str) -> list[Revision]:
    """All revisions of a document, newest first, with predecessor links."""
    revisions = link_revisions(await store.list_revisions(document_id))
    revisions.reverse()
    return revisions


def _patch_target_text(kind: FieldKind, value: object, locale: str | None) -> str:
    if kind == FieldKind.LOCALIZED:
        current_map = sanitize_localized_map(value if isinstance(value, Mapping) else None)
        return (current_map or {}).get(locale or "", "")
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


async def apply_field_patch(
    store: RevisionStore,
    schema: DocumentSchema,
    document_id: str,
    *,
    field: str,
    patch: str,
    dialect: PatchDialect | str,
    locale: str | None = None,
    base_rev_id: str | None = None,
    user_id: str | None = None,
    tags: Iterable[str] = (),
    summary: Mapping[str, str | None] | None = None,
    expected_field: str | None = None,
    max_patch_bytes: int | None = None,
) -> Revision:
    """Patch one text or localized field of the current revision and store the result.

    Reads the current revision once, applies the patch to that snapshot and
    writes a new revision pointing back at it. ``base_rev_id`` rejects the
    write when another revision has become current in the meantime. Patches
    larger than ``max_patch_bytes`` (default ``REVDIFF_MAX_PATCH_BYTES``) are
    rejected before the store is read.
    """
    kind = schema.get(field)
    if kind not in (FieldKind.LOCALIZED, FieldKind.TEXT):
        raise ValueError(f"Field {field!r} is not a text or localized field and cannot be patched.")
    if kind == FieldKind.LOCALIZED and not locale:
        raise ValueError(f"Patching localized field {field!r} requires a locale.")

    if max_patch_bytes is None:
        max_patch_bytes = load_settings().patch.max_patch_bytes
    check_patch_size(patch, max_patch_bytes)

    current = await store.get_current(document_id)
    if current is None:
        raise RevisionNotFoundError(document_id)
    if base_rev_id is not None and base_rev_id != current.rev_id:
        logger.warning(
            "Patch rejected: document=%s base=%s current=%s",
            document_id,
            base_rev_id,
            current.rev_id,
        )
        raise RevisionMismatchError(current.rev_id, base_rev_id)

    value = current.fields.get(field)
    current_text = _patch_target_text(kind, value, locale)
    try:
        patched = apply_patch(current_text, patch, dialect, expected_field=expected_field)
    except PatchError as exc:
        logger.warning(
            "Patch rejected: document=%s field=%s code=%s",
            document_id,
            field,
            exc.code,
        )
        raise

    if kind == FieldKind.LOCALIZED:
        current_map = sanitize_localized_map(value if isinstance(value, Mapping) else None)
        new_value: object = {**(current_map or {}), locale: patched}
    else:
        new_value = patched

    revision = Revision(
        document_id=document_id,
        rev_user=user_id,
        rev_tags=[*PATCH_TAGS, *tags],
        rev_summary=sanitize_localized_map(summary),
        previous_rev_id=current.rev_id,
        fields={**current.fields, field: new_value},
    )
    created = await store.create_revision(revision)
    logger.info(
        "Revision created: document=%s rev=%s previous=%s field=%s",
        document_id,
        created.rev_id,
        current.rev_id,
        field,
    )
    return created
