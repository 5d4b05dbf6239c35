"""Tests for revision comparison and patch writes against a revision store."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from revdiff.errors import (
    PatchNoOpError,
    PatchNotApplicableError,
    RevisionMismatchError,
    RevisionNotFoundError,
    UnsupportedFormatError,
)
from revdiff.models.diff import LocalizedDiff, ScalarDiff, TextFieldDiff
from revdiff.models.revision import Revision
from revdiff.models.schema import PAGE_CHECK, WIKI_PAGE, FieldKind, document_schema
from revdiff.services.revisions import (
    RevisionStore,
    apply_field_patch,
    compare_revisions,
    diff_history,
    diff_revisions,
    revision_history,
)

_T0 = datetime(2024, 1, 1, tzinfo=UTC)

PATCH = (
    "--- a/body\n"
    "+++ b/body\n"
    "@@ -1,3 +1,3 @@\n"
    " line1\n"
    "-line2\n"
    "+line2 updated\n"
    " line3\n"
)

NOTES_SCHEMA = document_schema(notes=FieldKind.TEXT, status=FieldKind.SCALAR)


def _rev(rev_id: str, minutes: int, **fields: object) -> Revision:
    return Revision(
        document_id="doc-1",
        rev_id=rev_id,
        rev_date=_T0 + timedelta(minutes=minutes),
        fields=fields,
    )


@pytest.fixture
def store() -> AsyncMock:
    mock = AsyncMock(spec=RevisionStore)
    mock.create_revision.side_effect = lambda revision: revision
    return mock


class TestCompareRevisions:
    """Test comparing two revisions in memory."""

    def test_reports_changed_fields(self) -> None:
        """Verify only changed fields appear with both metadata blocks."""
        old = _rev("r1", 0, title={"en": "A"}, slug="a")
        new = _rev("r2", 1, title={"en": "B"}, slug="a")

        result = compare_revisions(WIKI_PAGE, old, new)

        assert result.from_rev_id == "r1"
        assert result.to_rev_id == "r2"
        assert result.from_meta.rev_id == "r1"
        assert list(result.fields) == ["title"]
        assert isinstance(result.fields["title"], LocalizedDiff)
        assert result.changed is True

    def test_identical_revisions(self) -> None:
        """Verify identical snapshots report no changes."""
        old = _rev("r1", 0, slug="a")
        new = _rev("r2", 1, slug="a")

        assert compare_revisions(WIKI_PAGE, old, new).changed is False

    def test_context_lines_default_from_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Verify text hunks use REVDIFF_DIFF_CONTEXT when no context is passed."""
        monkeypatch.setenv("REVDIFF_DIFF_CONTEXT", "0")
        before = "".join(f"line{i}\n" for i in range(1, 11))
        old = _rev("r1", 0, notes=before)
        new = _rev("r2", 1, notes=before.replace("line5\n", "changed\n"))

        result = compare_revisions(NOTES_SCHEMA, old, new)

        notes = result.fields["notes"]
        assert isinstance(notes, TextFieldDiff)
        assert "@@ -5 +5 @@\n-line5\n+changed\n" in notes.diff.unified_diff
        assert " line4\n" not in notes.diff.unified_diff

    def test_serializes_to_json(self) -> None:
        """Verify the comparison dumps with field kind tags."""
        result = compare_revisions(PAGE_CHECK, _rev("r1", 0, status="open"), _rev("r2", 1, status="done"))

        dumped = result.model_dump(mode="json")

        assert dumped["fields"]["status"] == {"kind": "scalar", "from_value": "open", "to_value": "done"}


class TestDiffRevisions:
    """Test store-backed comparison."""

    async def test_defaults_to_current(self, store: AsyncMock) -> None:
        """Verify the current revision is used when no target is given."""
        current = _rev("r2", 1, slug="b")
        store.get_current.return_value = current
        store.get_revision.return_value = _rev("r1", 0, slug="a")

        result = await diff_revisions(store, WIKI_PAGE, "doc-1", "r1")

        assert result.to_rev_id == "r2"
        assert result.fields["slug"] == ScalarDiff(from_value="a", to_value="b")
        store.get_revision.assert_awaited_once_with("doc-1", "r1")

    async def test_explicit_target(self, store: AsyncMock) -> None:
        """Verify an explicit target revision is loaded."""
        store.get_current.return_value = _rev("r3", 2)
        revisions = {"r1": _rev("r1", 0, slug="a"), "r2": _rev("r2", 1, slug="b")}
        store.get_revision.side_effect = lambda doc, rev: revisions.get(rev)

        result = await diff_revisions(store, WIKI_PAGE, "doc-1", "r1", "r2")

        assert (result.from_rev_id, result.to_rev_id) == ("r1", "r2")

    async def test_missing_document(self, store: AsyncMock) -> None:
        """Verify a document without revisions is not found."""
        store.get_current.return_value = None

        with pytest.raises(RevisionNotFoundError) as exc_info:
            await diff_revisions(store, WIKI_PAGE, "doc-1", "r1")

        assert exc_info.value.code == "not_found"
        assert exc_info.value.details == {"document_id": "doc-1", "rev_id": None}

    async def test_missing_from_revision(self, store: AsyncMock) -> None:
        """Verify an unknown source revision is not found."""
        store.get_current.return_value = _rev("r2", 1)
        store.get_revision.return_value = None

        with pytest.raises(RevisionNotFoundError, match="Revision not found: r1"):
            await diff_revisions(store, WIKI_PAGE, "doc-1", "r1")

    async def test_missing_to_revision(self, store: AsyncMock) -> None:
        """Verify an unknown target revision is not found."""
        store.get_current.return_value = _rev("r3", 2)
        store.get_revision.side_effect = lambda doc, rev: _rev("r1", 0) if rev == "r1" else None

        with pytest.raises(RevisionNotFoundError, match="Revision not found: r9"):
            await diff_revisions(store, WIKI_PAGE, "doc-1", "r1", "r9")


class TestHistory:
    """Test history listings."""

    def test_diff_history_newest_first(self) -> None:
        """Verify consecutive pairs are compared, newest pair first."""
        revisions = [_rev("r2", 1, slug="b"), _rev("r1", 0, slug="a"), _rev("r3", 2, slug="c")]

        result = diff_history(WIKI_PAGE, revisions)

        assert [(c.from_rev_id, c.to_rev_id) for c in result] == [("r2", "r3"), ("r1", "r2")]

    def test_single_revision_has_no_history(self) -> None:
        """Verify one revision produces no comparisons."""
        assert diff_history(WIKI_PAGE, [_rev("r1", 0)]) == []

    async def test_revision_history(self, store: AsyncMock) -> None:
        """Verify revisions are returned newest first with links rebuilt."""
        store.list_revisions.return_value = [_rev("r1", 0), _rev("r3", 2), _rev("r2", 1)]

        result = await revision_history(store, "doc-1")

        assert [(r.rev_id, r.previous_rev_id) for r in result] == [
            ("r3", "r2"),
            ("r2", "r1"),
            ("r1", None),
        ]


class TestApplyFieldPatch:
    """Test the patch write path."""

    async def test_patches_localized_field(self, store: AsyncMock) -> None:
        """Verify one locale is patched and a new revision is stored."""
        current = _rev(
            "r1",
            0,
            body={"en": "line1\nline2\nline3\n", "de": "Zeile"},
            slug="page",
        )
        store.get_current.return_value = current

        created = await apply_field_patch(
            store,
            WIKI_PAGE,
            "doc-1",
            field="body",
            patch=PATCH,
            dialect="unified",
            locale="en",
            user_id="u-1",
            tags=["agent:editor"],
            summary={"en": "Fix line 2", "de": None},
        )

        assert created.fields["body"] == {"en": "line1\nline2 updated\nline3\n", "de": "Zeile"}
        assert created.fields["slug"] == "page"
        assert created.previous_rev_id == "r1"
        assert created.rev_id != "r1"
        assert created.rev_user == "u-1"
        assert created.rev_tags == ["update", "patch", "agent:editor"]
        assert created.agent == "editor"
        assert created.rev_summary == {"en": "Fix line 2"}
        store.create_revision.assert_awaited_once()
        assert current.fields["body"]["en"] == "line1\nline2\nline3\n"

    async def test_patches_missing_locale(self, store: AsyncMock) -> None:
        """Verify a missing locale is patched from the empty string."""
        store.get_current.return_value = _rev("r1", 0, body={"en": "x\n"})

        created = await apply_field_patch(
            store,
            WIKI_PAGE,
            "doc-1",
            field="body",
            patch="@@ -0,0 +1 @@\n+Hallo\n",
            dialect="unified",
            locale="de",
        )

        assert created.fields["body"] == {"en": "x\n", "de": "Hallo\n"}

    async def test_patches_text_field(self, store: AsyncMock) -> None:
        """Verify plain text fields are patched without a locale."""
        store.get_current.return_value = _rev("r1", 0, notes="line1\nline2\nline3\n")
        patch = PATCH.replace("a/body", "a/notes").replace("b/body", "b/notes")

        created = await apply_field_patch(
            store, NOTES_SCHEMA, "doc-1", field="notes", patch=patch, dialect="unified"
        )

        assert created.fields["notes"] == "line1\nline2 updated\nline3\n"

    async def test_codex_expected_field(self, store: AsyncMock) -> None:
        """Verify codex patches are checked against the target field."""
        store.get_current.return_value = _rev("r1", 0, notes="a\n")
        patch = "*** Begin Patch\n*** Update File: notes\n@@ -1 +1 @@\n-a\n+b\n*** End Patch"

        created = await apply_field_patch(
            store,
            NOTES_SCHEMA,
            "doc-1",
            field="notes",
            patch=patch,
            dialect="codex",
            expected_field="notes",
        )

        assert created.fields["notes"] == "b\n"

    async def test_base_revision_mismatch(self, store: AsyncMock) -> None:
        """Verify a stale base revision rejects the write."""
        store.get_current.return_value = _rev("r2", 1, notes="a\n")

        with pytest.raises(RevisionMismatchError) as exc_info:
            await apply_field_patch(
                store,
                NOTES_SCHEMA,
                "doc-1",
                field="notes",
                patch="@@ -1 +1 @@\n-a\n+b\n",
                dialect="unified",
                base_rev_id="r1",
            )

        assert exc_info.value.retryable is True
        assert exc_info.value.details == {"current_rev_id": "r2", "base_rev_id": "r1"}
        store.create_revision.assert_not_awaited()

    async def test_matching_base_revision(self, store: AsyncMock) -> None:
        """Verify a matching base revision is accepted."""
        store.get_current.return_value = _rev("r1", 0, notes="a\n")

        created = await apply_field_patch(
            store,
            NOTES_SCHEMA,
            "doc-1",
            field="notes",
            patch="@@ -1 +1 @@\n-a\n+b\n",
            dialect="unified",
            base_rev_id="r1",
        )

        assert created.previous_rev_id == "r1"

    async def test_missing_document(self, store: AsyncMock) -> None:
        """Verify patching a document without revisions fails."""
        store.get_current.return_value = None

        with pytest.raises(RevisionNotFoundError):
            await apply_field_patch(
                store, NOTES_SCHEMA, "doc-1", field="notes", patch=PATCH, dialect="unified"
            )

    async def test_patch_error_leaves_store_untouched(self, store: AsyncMock) -> None:
        """Verify a rejected patch creates no revision."""
        store.get_current.return_value = _rev("r1", 0, notes="other\n")

        with pytest.raises(PatchNotApplicableError):
            await apply_field_patch(
                store, NOTES_SCHEMA, "doc-1", field="notes", patch=PATCH, dialect="unified"
            )

        store.create_revision.assert_not_awaited()

    async def test_reapplying_is_no_op(self, store: AsyncMock) -> None:
        """Verify re-sending an applied patch raises a no-op error."""
        store.get_current.return_value = _rev("r2", 1, notes="line1\nline2 updated\nline3\n")

        with pytest.raises(PatchNoOpError):
            await apply_field_patch(
                store, NOTES_SCHEMA, "doc-1", field="notes", patch=PATCH, dialect="unified"
            )

    async def test_patch_too_large(self, store: AsyncMock) -> None:
        """Verify oversized patches are rejected before reading the store."""
        with pytest.raises(UnsupportedFormatError):
            await apply_field_patch(
                store,
                NOTES_SCHEMA,
                "doc-1",
                field="notes",
                patch=PATCH,
                dialect="unified",
                max_patch_bytes=10,
            )

        store.get_current.assert_not_awaited()

    async def test_default_size_limit_from_settings(
        self, store: AsyncMock, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Verify REVDIFF_MAX_PATCH_BYTES applies when no limit is passed."""
        monkeypatch.setenv("REVDIFF_MAX_PATCH_BYTES", "16")

        with pytest.raises(UnsupportedFormatError, match="the limit is 16"):
            await apply_field_patch(
                store, NOTES_SCHEMA, "doc-1", field="notes", patch=PATCH, dialect="unified"
            )

        store.get_current.assert_not_awaited()

    @pytest.mark.parametrize("field", ["status", "unknown"])
    async def test_non_text_field(self, store: AsyncMock, field: str) -> None:
        """Verify only text and localized fields can be patched."""
        with pytest.raises(ValueError, match="cannot be patched"):
            await apply_field_patch(
                store, NOTES_SCHEMA, "doc-1", field=field, patch=PATCH, dialect="unified"
            )

    async def test_localized_requires_locale(self, store: AsyncMock) -> None:
        """Verify localized fields need a locale."""
        with pytest.raises(ValueError, match="requires a locale"):
            await apply_field_patch(
                store, WIKI_PAGE, "doc-1", field="body", patch=PATCH, dialect="unified"
            )
