"""Error taxonomy for patch application and revision lookups.

Every error carries a stable ``code``, a human-readable message, a
``details`` dict with enough context for an automated caller to correct
itself, and a ``retryable`` flag.
"""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import BaseModel, Field


class ErrorBody(BaseModel):
    code: str
    message: str
    details: dict[str, Any] = Field(default_factory=dict)
    retryable: bool = False


class ErrorPayload(BaseModel):
    """Serializable error envelope returned to tool and API callers."""

    error: ErrorBody


class RevdiffError(Exception):
    """Base class for all errors raised by the revision core."""

    code: ClassVar[str] = "internal_error"
    retryable: ClassVar[bool] = False

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_payload(self) -> ErrorPayload:
        return ErrorPayload(
            error=ErrorBody(
                code=self.code,
                message=self.message,
                details=self.details,
                retryable=self.retryable,
            )
        )


class PatchError(RevdiffError, ValueError):
    """Raised when a patch cannot be normalized or applied."""


class UnsupportedFormatError(PatchError):
    """Malformed or disallowed patch syntax. The patch must be re-derived."""

    code = "unsupported_format"


class PatchTargetMismatchError(PatchError):
    """The patch names a different field than the one being edited."""

    code = "target_mismatch"

    def __init__(self, expected: str, actual: str) -> None:
        super().__init__(
            f'Patch target mismatch. Expected "{expected}", got "{actual}".',
            {"expected": expected, "actual": actual},
        )


class PatchNotApplicableError(PatchError):
    """Hunk context or line numbers do not match the current text.

    Usually resolved by re-reading the current content and regenerating the patch.
    """

    code = "not_applicable"
    retryable = True


class PatchNoOpError(PatchError):
    """The patch applied but left the text unchanged."""

    code = "no_op"


class RevisionNotFoundError(RevdiffError):
    code = "not_found"

    def __init__(self, document_id: str, rev_id: str | None = None) -> None:
        if rev_id is None:
            message = f"Document not found: {document_id}"
        else:
            message = f"Revision not found: {rev_id}"
        super().__init__(message, {"document_id": document_id, "rev_id": rev_id})


class RevisionMismatchError(RevdiffError):
    """The write was based on a revision that is no longer current."""

    code = "precondition_failed"
    retryable = True

    def __init__(self, current_rev_id: str | None, base_rev_id: str) -> None:
        super().__init__(
            f"Revision mismatch: current is {current_rev_id or 'unknown'}, "
            f"base was {base_rev_id}.",
            {"current_rev_id": current_rev_id, "base_rev_id": base_rev_id},
        )
