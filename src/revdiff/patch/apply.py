"""Zero-fuzz application of a normalized patch to a known base text.

Each hunk must sit exactly at its ``-<start>`` line and every context and
removed line must equal the current line byte for byte. There is no search
for a better offset and no whitespace leniency: either every hunk applies
or the call raises and the caller keeps the original text.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from revdiff.errors import PatchNoOpError, PatchNotApplicableError, UnsupportedFormatError
from revdiff.patch.normalize import HUNK_HEADER_RE, PatchDialect, coerce_dialect, normalize_patch

logger = logging.getLogger(__name__)

CONTEXT = " "
REMOVE = "-"
ADD = "+"
NO_NEWLINE_MARKER = "\\"


@dataclass
class HunkLine:
    op: str
    text: str
    no_newline: bool = False


@dataclass
class Hunk:
    header: str
    old_start: int
    old_count: int
    new_start: int
    new_count: int
    lines: list[HunkLine] = field(default_factory=list)

    @property
    def added_lines(self) -> int:
        return sum(1 for line in self.lines if line.op == ADD)

    @property
    def removed_lines(self) -> int:
        return sum(1 for line in self.lines if line.op == REMOVE)

    def old_side(self) -> list[HunkLine]:
        return [line for line in self.lines if line.op != ADD]

    def new_side(self) -> list[HunkLine]:
        return [line for line in self.lines if line.op != REMOVE]


def _format_error(message: str, line: str | None = None) -> UnsupportedFormatError:
    details = {"line": line} if line is not None else {}
    return UnsupportedFormatError(f"Patch format not supported. {message}", details)


def parse_hunks(patch_text: str) -> list[Hunk]:
    """Split canonical unified-diff text into hunks.

    Lines before the first hunk (``---``/``+++``, ``diff --git``, ``index``)
    are skipped. A hunk body must contain exactly the number of old and new
    lines its header declares; an empty line inside a body is read as an
    empty context line.
    """
    lines = patch_text.split("\n")
    hunks: list[Hunk] = []
    current: Hunk | None = None
    old_left = new_left = 0
    seen_file_header = False

    i = 0
    while i < len(lines):
        line = lines[i]
        i += 1

        if line.startswith(NO_NEWLINE_MARKER):
            if current is None or not current.lines:
                raise _format_error("Unexpected end-of-file marker.", line)
            current.lines[-1].no_newline = True
            continue

        if current is not None and (old_left > 0 or new_left > 0):
            op, text = (CONTEXT, "") if line == "" else (line[0], line[1:])
            if op not in (CONTEXT, REMOVE, ADD):
                raise _format_error(
                    f'Hunk "{current.header}" has fewer lines than its header declares.', line
                )
            if op != ADD:
                old_left -= 1
            if op != REMOVE:
                new_left -= 1
            if old_left < 0 or new_left < 0:
                raise _format_error(
                    f'Hunk "{current.header}" line counts do not match its header.', line
                )
            current.lines.append(HunkLine(op, text))
            continue

        if line.startswith("@@"):
            match = HUNK_HEADER_RE.match(line)
            if not match:
                raise _format_error(f'Invalid @@ hunk header: "{line}".', line)
            old_start, old_count, new_start, new_count = match.groups()
            current = Hunk(
                header=line,
                old_start=int(old_start),
                old_count=int(old_count) if old_count is not None else 1,
                new_start=int(new_start),
                new_count=int(new_count) if new_count is not None else 1,
            )
            hunks.append(current)
            old_left, new_left = current.old_count, current.new_count
            continue

        if line.startswith("--- ") and i < len(lines) and lines[i].startswith("+++ "):
            if seen_file_header or current is not None:
                raise _format_error("A patch may only touch one field.", line)
            seen_file_header = True
            i += 1
            continue

        if line == "" or current is None:
            continue

        raise _format_error(
            f'Unexpected line after hunk "{current.header}"; line counts do not match its header.',
            line,
        )

    if current is not None and (old_left > 0 or new_left > 0):
        raise _format_error(f'Hunk "{current.header}" is truncated.')
    if not hunks:
        raise _format_error("Missing @@ hunk header.")
    return hunks


def _split_text(text: str) -> tuple[list[str], bool]:
    """Return the lines of ``text`` and whether it ends with a newline."""
    if text == "":
        return [], True
    lines = text.split("\n")
    if text.endswith("\n"):
        return lines[:-1], True
    return lines, False


def _hunk_start(start: int, count: int) -> int:
    # A zero-length side means "insert after line <start>".
    return start if count == 0 else start - 1


def _matches_at(lines: list[str], position: int, expected: list[HunkLine]) -> bool:
    if position < 0 or position + len(expected) > len(lines):
        return False
    return all(lines[position + offset] == item.text for offset, item in enumerate(expected))


def _already_applied(lines: list[str], hunks: list[Hunk]) -> bool:
    return all(
        _matches_at(lines, _hunk_start(hunk.new_start, hunk.new_count), hunk.new_side())
        for hunk in hunks
    )


def _apply_hunks(lines: list[str], hunks: list[Hunk]) -> tuple[list[str], Hunk | None]:
    """Apply every hunk; returns the new lines and the hunk touching end of file."""
    result: list[str] = []
    cursor = 0
    eof_hunk: Hunk | None = None

    for hunk in hunks:
        start = _hunk_start(hunk.old_start, hunk.old_count)
        if start < cursor or start > len(lines):
            raise PatchNotApplicableError(
                f'Patch could not be applied to the current content: hunk "{hunk.header}" '
                f"starts at line {hunk.old_start}, which is out of order or past the end "
                f"({len(lines)} lines).",
                {"hunk": hunk.header, "line": hunk.old_start},
            )
        result.extend(lines[cursor:start])
        position = start
        for item in hunk.lines:
            if item.op == ADD:
                result.append(item.text)
                continue
            actual = lines[position] if position < len(lines) else None
            if actual != item.text:
                raise PatchNotApplicableError(
                    f'Patch could not be applied to the current content: hunk "{hunk.header}" '
                    f"expected {item.text!r} at line {position + 1}, found {actual!r}.",
                    {
                        "hunk": hunk.header,
                        "line": position + 1,
                        "expected": item.text,
                        "actual": actual,
                    },
                )
            if item.op == CONTEXT:
                result.append(actual)
            position += 1
        cursor = position
        if cursor == len(lines):
            eof_hunk = hunk

    result.extend(lines[cursor:])
    return result, eof_hunk


def apply_patch(
    current_text: str,
    patch_text: str,
    dialect: PatchDialect | str,
    *,
    expected_field: str | None = None,
) -> str:
    """Apply ``patch_text`` to ``current_text`` and return the new text.

    Raises ``UnsupportedFormatError`` or ``PatchTargetMismatchError`` from
    normalization, ``PatchNotApplicableError`` when a hunk does not match
    exactly, and ``PatchNoOpError`` when the result equals the input.
    """
    resolved = coerce_dialect(dialect)
    normalized = normalize_patch(patch_text, resolved, expected_field=expected_field)
    hunks = parse_hunks(normalized)
    lines, ends_with_newline = _split_text(current_text)

    try:
        new_lines, eof_hunk = _apply_hunks(lines, hunks)
    except PatchNotApplicableError:
        # A rejected patch whose new side already sits at every hunk is reported as a no-op.
        if _already_applied(lines, hunks):
            raise PatchNoOpError(
                "Patch did not change the content: its changes are already present.",
                {"already_applied": True},
            ) from None
        raise

    if eof_hunk is not None:
        if any(item.no_newline for item in eof_hunk.new_side()):
            ends_with_newline = False
        elif any(item.no_newline for item in eof_hunk.old_side()):
            ends_with_newline = True

    patched = "\n".join(new_lines)
    if new_lines and ends_with_newline:
        patched += "\n"

    if patched == current_text:
        raise PatchNoOpError("Patch did not change the content.")

    logger.debug(
        "Patch applied: dialect=%s hunks=%d added=%d removed=%d",
        resolved,
        len(hunks),
        sum(hunk.added_lines for hunk in hunks),
        sum(hunk.removed_lines for hunk in hunks),
    )
    return patched
