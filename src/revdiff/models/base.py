"""Base document model shared by every revisioned record."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from pydantic import BaseModel, Field


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(UTC)


class DocumentBase(BaseModel):
    """Common identity and bookkeeping fields for stored documents."""

    id: str = Field(default_factory=_new_id)
    created_at: datetime = Field(default_factory=_utcnow)
    deleted_at: datetime | None = None
