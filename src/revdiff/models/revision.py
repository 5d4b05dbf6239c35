"""Revision model: immutable snapshots of a document's field values."""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field

from revdiff.models.base import DocumentBase

AGENT_TAG_PREFIX = "agent:"
AGENT_VERSION_TAG_PREFIX = "agent_version:"


class RevisionMeta(BaseModel):
    """Metadata block shown beside each side of a change report."""

    rev_id: str
    rev_date: datetime
    rev_user: str | None = None
    rev_tags: list[str] = Field(default_factory=list)


class Revision(DocumentBase):
    """One timestamped snapshot of a document."""

    document_id: str
    rev_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    rev_date: datetime = Field(default_factory=lambda: datetime.now(UTC))
    rev_user: str | None = None
    rev_tags: list[str] = Field(default_factory=list)
    rev_summary: dict[str, str] | None = None
    previous_rev_id: str | None = None
    old: bool = False
    deleted: bool = False
    fields: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_current(self) -> bool:
        return not self.old and not self.deleted

    @property
    def agent(self) -> str | None:
        """Agent name from the first ``agent:<name>`` tag, if any."""
        return _tag_value(self.rev_tags, AGENT_TAG_PREFIX)

    @property
    def agent_version(self) -> str | None:
        return _tag_value(self.rev_tags, AGENT_VERSION_TAG_PREFIX)

    def meta(self) -> RevisionMeta:
        return RevisionMeta(
            rev_id=self.rev_id,
            rev_date=self.rev_date,
            rev_user=self.rev_user,
            rev_tags=list(self.rev_tags),
        )


def _tag_value(tags: Iterable[str], prefix: str) -> str | None:
    for tag in tags:
        if tag.startswith(prefix):
            return tag[len(prefix):]
    return None


def order_revisions(revisions: Iterable[Revision]) -> list[Revision]:
    """Sort revisions oldest first, breaking timestamp ties by revision id."""
    return sorted(revisions, key=lambda rev: (rev.rev_date, rev.rev_id))


def link_revisions(revisions: Iterable[Revision]) -> list[Revision]:
    """Return ordered copies with ``previous_rev_id`` rebuilt from that order."""
    linked: list[Revision] = []
    previous: str | None = None
    for rev in order_revisions(revisions):
        linked.append(rev.model_copy(update={"previous_rev_id": previous}))
        previous = rev.rev_id
    return linked
