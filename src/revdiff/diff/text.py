"""Line-oriented unified diffs, add/remove statistics and word diffs for text values."""

from __future__ import annotations

import difflib
import re
from collections.abc import Iterator, Sequence

from revdiff.models.diff import TextDiff, TextDiffStats, WordChange, WordChangeType

DEFAULT_CONTEXT_LINES = 2
MAX_EDIT_DISTANCE = 2000

_WORD_RE = re.compile(r"[\w']+|[^\w\s]|\s+")


def normalize_for_diff(value: str) -> str:
    """Guarantee a trailing newline so output does not depend on the final byte."""
    return value if value.endswith("\n") else f"{value}\n"


def count_lines(text: str) -> int:
    """Number of lines in ``text``; a final newline does not start a new line."""
    if not text:
        return 0
    lines = text.split("\n")
    return len(lines) - 1 if text.endswith("\n") else len(lines)


def _split_lines(text: str) -> list[str]:
    # Only "\n" separates lines; str.splitlines would also split on \r, \f, \u2028.
    return [f"{line}\n" for line in text.split("\n")[:-1]]


def _shortest_edit_blocks(
    a: Sequence[str], b: Sequence[str], max_edits: int
) -> list[tuple[int, int, int]] | None:
    """Matching blocks of a Myers shortest edit script, or None past ``max_edits``.

    ``trace[d]`` is the furthest-x frontier per diagonal before round ``d``;
    walking it backwards from the end recovers the diagonal runs (snakes).
    """
    n, m = len(a), len(b)
    frontier = {1: 0}
    trace: list[dict[int, int]] = []
    for d in range(min(n + m, max_edits) + 1):
        trace.append(frontier.copy())
        for k in range(-d, d + 1, 2):
            if k == -d or (k != d and frontier[k - 1] < frontier[k + 1]):
                x = frontier[k + 1]
            else:
                x = frontier[k - 1] + 1
            y = x - k
            while x < n and y < m and a[x] == b[y]:
                x += 1
                y += 1
            frontier[k] = x
            if x >= n and y >= m:
                return _backtrack(trace, n, m)
    return None


def _backtrack(trace: list[dict[int, int]], n: int, m: int) -> list[tuple[int, int, int]]:
    blocks: list[tuple[int, int, int]] = []
    x, y = n, m
    for d in range(len(trace) - 1, -1, -1):
        frontier = trace[d]
        k = x - y
        if k == -d or (k != d and frontier[k - 1] < frontier[k + 1]):
            prev_k = k + 1
        else:
            prev_k = k - 1
        prev_x = frontier[prev_k]
        prev_y = prev_x - prev_k
        run = min(x - prev_x, y - prev_y)
        if run > 0:
            blocks.append((x - run, y - run, run))
        x, y = prev_x, prev_y
    blocks.reverse()
    blocks.append((n, m, 0))
    return blocks


class _Matcher(difflib.SequenceMatcher):
    """SequenceMatcher whose matching blocks form a shortest edit script.

    difflib's longest-block heuristic can anchor a repetitive text at the wrong
    repeat and report whole runs as removed and re-added. Above
    ``MAX_EDIT_DISTANCE`` edits the texts are mostly rewritten anyway, and the
    heuristic (without autojunk) takes over.
    """

    def __init__(self, a: Sequence[str], b: Sequence[str]) -> None:
        super().__init__(None, a, b, autojunk=False)

    def get_matching_blocks(self) -> list[difflib.Match]:
        if self.matching_blocks is None:
            blocks = _shortest_edit_blocks(self.a, self.b, MAX_EDIT_DISTANCE)
            if blocks is None:
                return super().get_matching_blocks()
            self.matching_blocks = [difflib.Match(*block) for block in blocks]
        return self.matching_blocks


def _format_range(start: int, stop: int) -> str:
    beginning = start + 1
    length = stop - start
    if length == 1:
        return str(beginning)
    if not length:
        beginning -= 1
    return f"{beginning},{length}"


def _unified_lines(
    label: str,
    matcher: difflib.SequenceMatcher,
    context_lines: int,
) -> Iterator[str]:
    from_lines, to_lines = matcher.a, matcher.b
    started = False
    for group in matcher.get_grouped_opcodes(context_lines):
        if not started:
            started = True
            yield f"--- {label}\n"
            yield f"+++ {label}\n"
        first, last = group[0], group[-1]
        yield (
            f"@@ -{_format_range(first[1], last[2])} "
            f"+{_format_range(first[3], last[4])} @@\n"
        )
        for tag, i1, i2, j1, j2 in group:
            if tag == "equal":
                for line in from_lines[i1:i2]:
                    yield f" {line}"
                continue
            if tag in ("replace", "delete"):
                for line in from_lines[i1:i2]:
                    yield f"-{line}"
            if tag in ("replace", "insert"):
                for line in to_lines[j1:j2]:
                    yield f"+{line}"


def build_word_diff(from_text: str, to_text: str) -> list[WordChange]:
    """Word-level changes between two texts, keeping whitespace as its own tokens."""
    from_words = _WORD_RE.findall(from_text)
    to_words = _WORD_RE.findall(to_text)

    changes: list[WordChange] = []

    def emit(change_type: WordChangeType, words: list[str]) -> None:
        if not words:
            return
        value = "".join(words)
        if changes and changes[-1].type == change_type:
            changes[-1] = WordChange(type=change_type, value=changes[-1].value + value)
        else:
            changes.append(WordChange(type=change_type, value=value))

    for tag, i1, i2, j1, j2 in _Matcher(from_words, to_words).get_opcodes():
        if tag == "equal":
            emit(WordChangeType.UNCHANGED, from_words[i1:i2])
            continue
        emit(WordChangeType.REMOVED, from_words[i1:i2])
        emit(WordChangeType.ADDED, to_words[j1:j2])
    return changes


def build_text_diff(
    label: str,
    from_text: str,
    to_text: str,
    *,
    context_lines: int = DEFAULT_CONTEXT_LINES,
) -> TextDiff:
    """Diff two texts, using ``label`` as both the old and new file name."""
    from_lines = _split_lines(normalize_for_diff(from_text))
    to_lines = _split_lines(normalize_for_diff(to_text))
    matcher = _Matcher(from_lines, to_lines)

    added = removed = 0
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag in ("replace", "delete"):
            removed += count_lines("".join(from_lines[i1:i2]))
        if tag in ("replace", "insert"):
            added += count_lines("".join(to_lines[j1:j2]))

    return TextDiff(
        unified_diff="".join(_unified_lines(label, matcher, context_lines)),
        stats=TextDiffStats(added_lines=added, removed_lines=removed),
        word_diff=build_word_diff(from_text, to_text),
        from_text=from_text,
        to_text=to_text,
    )
