"""Field diff results: one tagged variant per field kind."""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, Field


class ChangeType(StrEnum):
    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"


class WordChangeType(StrEnum):
    ADDED = "added"
    REMOVED = "removed"
    UNCHANGED = "unchanged"


class WordChange(BaseModel):
    """A run of words and whitespace with the same change type."""

    type: WordChangeType
    value: str


class TextDiffStats(BaseModel):
    added_lines: int = 0
    removed_lines: int = 0


class TextDiff(BaseModel):
    """A unified diff of one text value plus line statistics.

    ``word_diff`` covers both texts in order: joining the unchanged and
    removed runs gives ``from_text``, the unchanged and added runs ``to_text``.
    """

    unified_diff: str
    stats: TextDiffStats = Field(default_factory=TextDiffStats)
    word_diff: list[WordChange] = Field(default_factory=list)
    from_text: str
    to_text: str


class LocalizedEntry(BaseModel):
    lang: str
    value: str


class LocalizedDiff(BaseModel):
    kind: Literal["localized"] = "localized"
    added: list[LocalizedEntry] = Field(default_factory=list)
    removed: list[LocalizedEntry] = Field(default_factory=list)
    modified: dict[str, TextDiff] = Field(default_factory=dict)


class ScalarDiff(BaseModel):
    kind: Literal["scalar"] = "scalar"
    from_value: str | None = None
    to_value: str | None = None


class StructuredChange(BaseModel):
    """One path-addressed change; ``from_value``/``to_value`` hold stable JSON."""

    path: str
    type: ChangeType
    from_value: str | None = None
    to_value: str | None = None


class StructuredDiff(BaseModel):
    kind: Literal["structured"] = "structured"
    changes: list[StructuredChange] = Field(default_factory=list)


class TextFieldDiff(BaseModel):
    kind: Literal["text"] = "text"
    diff: TextDiff


FieldDiff = Annotated[
    LocalizedDiff | ScalarDiff | StructuredDiff | TextFieldDiff,
    Field(discriminator="kind"),
]
