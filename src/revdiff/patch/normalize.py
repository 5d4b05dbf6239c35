"""Patch dialect validation and rewriting into canonical unified-diff text.

Two dialects are accepted:

``unified``
    A standard ``---``/``+++``/``@@`` diff. Validated and passed through.

``codex``
    The sectioned format emitted by coding agents::

        *** Begin Patch
        *** Update File: body
        @@ -1,2 +1,2 @@
         context
        -old line
        +new line
        *** End Patch

    Rewritten to a unified diff with a synthetic ``--- a/<target>`` /
    ``+++ b/<target>`` header so that both dialects share one strict apply
    path.
"""

from __future__ import annotations

import logging
import re
from enum import StrEnum

from revdiff.errors import PatchTargetMismatchError, UnsupportedFormatError

logger = logging.getLogger(__name__)

BEGIN_PATCH = "*** Begin Patch"
END_PATCH = "*** End Patch"
END_OF_FILE = "*** End of File"
UPDATE_FILE = "*** Update File: "
ADD_FILE = "*** Add File:"
DELETE_FILE = "*** Delete File:"
MOVE_TO = "*** Move to:"

HUNK_HEADER_RE = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@$")
_BODY_PREFIXES = ("@@", "+", "-", " ")
_UNSUPPORTED = "Patch format not supported."


class PatchDialect(StrEnum):
    UNIFIED = "unified"
    CODEX = "codex"


def coerce_dialect(dialect: PatchDialect | str) -> PatchDialect:
    try:
        return PatchDialect(dialect)
    except ValueError:
        raise UnsupportedFormatError(
            f'{_UNSUPPORTED} Unknown dialect "{dialect}". Expected "unified" or "codex".',
            {"dialect": str(dialect)},
        ) from None


def check_patch_size(patch_text: str, max_patch_bytes: int) -> None:
    """Reject patches whose UTF-8 encoding exceeds ``max_patch_bytes``."""
    size = len(patch_text.encode("utf-8"))
    if size > max_patch_bytes:
        raise UnsupportedFormatError(
            f"{_UNSUPPORTED} Patch is {size} bytes; the limit is {max_patch_bytes}.",
            {"size": size, "limit": max_patch_bytes},
        )


def validate_hunk_headers(lines: list[str], dialect: PatchDialect) -> None:
    """Reject any ``@@`` line that is not ``@@ -a[,b] +c[,d] @@``."""
    for line in lines:
        if line.startswith("@@") and not HUNK_HEADER_RE.match(line):
            raise UnsupportedFormatError(
                f'{_UNSUPPORTED} Invalid @@ hunk header: "{line}". '
                'Expected "@@ -<start>,<count> +<start>,<count> @@".',
                {"line": line, "dialect": dialect.value},
            )


def _normalize_unified(patch_text: str) -> str:
    if BEGIN_PATCH in patch_text:
        raise UnsupportedFormatError(
            f"{_UNSUPPORTED} Expected unified diff format.",
            {"dialect": PatchDialect.UNIFIED.value},
        )
    if "@@" not in patch_text:
        raise UnsupportedFormatError(
            f"{_UNSUPPORTED} Missing @@ hunk header.",
            {"dialect": PatchDialect.UNIFIED.value},
        )
    validate_hunk_headers(patch_text.split("\n"), PatchDialect.UNIFIED)
    return patch_text


def _normalize_codex(patch_text: str, expected_field: str | None) -> str:
    dialect = PatchDialect.CODEX.value
    lines = patch_text.split("\n")
    if lines[0] != BEGIN_PATCH:
        raise UnsupportedFormatError(
            f'{_UNSUPPORTED} Expected "{BEGIN_PATCH}" header.',
            {"line": lines[0], "dialect": dialect},
        )

    target: str | None = None
    body: list[str] = []
    for line in lines[1:]:
        if line.startswith(UPDATE_FILE):
            if target is not None:
                raise UnsupportedFormatError(
                    f"{_UNSUPPORTED} Multiple update targets found.",
                    {"line": line, "dialect": dialect},
                )
            target = line[len(UPDATE_FILE):].strip()
            continue
        if line.startswith((ADD_FILE, DELETE_FILE, MOVE_TO)):
            raise UnsupportedFormatError(
                f"{_UNSUPPORTED} Only a single *** Update File operation is supported.",
                {"line": line, "dialect": dialect},
            )
        if line in (END_PATCH, END_OF_FILE):
            continue
        if line.startswith(_BODY_PREFIXES):
            body.append(line)

    if not target:
        raise UnsupportedFormatError(
            f'{_UNSUPPORTED} Missing "{UPDATE_FILE.strip()}" line.',
            {"dialect": dialect},
        )
    if not any(line.startswith("@@") for line in body):
        raise UnsupportedFormatError(
            f"{_UNSUPPORTED} Missing @@ hunk header.",
            {"dialect": dialect},
        )
    validate_hunk_headers(body, PatchDialect.CODEX)

    normalized_target = target[1:] if target.startswith("/") else target
    if expected_field is not None and normalized_target != expected_field:
        raise PatchTargetMismatchError(expected_field, target)

    header = f"--- a/{normalized_target}\n+++ b/{normalized_target}"
    return "\n".join([header, *body]) + "\n"


def normalize_patch(
    patch_text: str,
    dialect: PatchDialect | str,
    *,
    expected_field: str | None = None,
) -> str:
    """Validate ``patch_text`` and return it as canonical unified-diff text.

    ``expected_field`` guards ``codex`` patches: the ``*** Update File``
    target must name it (a single leading ``/`` is ignored).
    """
    resolved = coerce_dialect(dialect)
    match resolved:
        case PatchDialect.UNIFIED:
            normalized = _normalize_unified(patch_text)
        case PatchDialect.CODEX:
            normalized = _normalize_codex(patch_text, expected_field)
    logger.debug("Patch normalized: dialect=%s bytes=%d", resolved, len(normalized))
    return normalized
