"""Command-line entry point for diffing texts and applying patches to files.

Usage:
    revdiff diff OLD NEW [--label body]
    revdiff apply BASE PATCH [--dialect codex] [--expect-field body] [--output OUT] [--json]

Exit codes:
    0 = OK
    1 = patch rejected (format, target, context mismatch or no-op)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from revdiff.config import load_settings
from revdiff.diff.text import build_text_diff
from revdiff.errors import PatchError
from revdiff.logging import configure_logging
from revdiff.patch.apply import apply_patch
from revdiff.patch.normalize import PatchDialect, check_patch_size

EXIT_OK = 0
EXIT_REJECTED = 1

logger = logging.getLogger(__name__)


def _read(path: str) -> str:
    return Path(path).read_text(encoding="utf-8")


def cmd_diff(args: argparse.Namespace, context_lines: int) -> int:
    label = args.label or Path(args.new).name
    result = build_text_diff(label, _read(args.old), _read(args.new), context_lines=context_lines)
    sys.stdout.write(result.unified_diff)
    print(f"+{result.stats.added_lines} -{result.stats.removed_lines}")
    return EXIT_OK


def cmd_apply(args: argparse.Namespace, max_patch_bytes: int) -> int:
    patch_text = _read(args.patch)
    try:
        check_patch_size(patch_text, max_patch_bytes)
        patched = apply_patch(
            _read(args.base),
            patch_text,
            args.dialect,
            expected_field=args.expect_field,
        )
    except PatchError as exc:
        if args.json:
            print(json.dumps(exc.to_payload().model_dump(mode="json"), indent=2))
        else:
            print(exc.message, file=sys.stderr)
        return EXIT_REJECTED

    if args.output:
        Path(args.output).write_text(patched, encoding="utf-8")
        logger.info("Patched text written: path=%s", args.output)
    else:
        sys.stdout.write(patched)
    return EXIT_OK


def build_parser(default_dialect: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="revdiff", description=__doc__.splitlines()[0])
    sub = parser.add_subparsers(dest="command", required=True)

    diff = sub.add_parser("diff", help="Print a unified diff between two text files")
    diff.add_argument("old", help="path to the older text")
    diff.add_argument("new", help="path to the newer text")
    diff.add_argument("--label", help="file name used in the diff header")

    apply = sub.add_parser("apply", help="Apply a patch to a text file with zero fuzz")
    apply.add_argument("base", help="path to the current text")
    apply.add_argument("patch", help="path to the patch")
    apply.add_argument(
        "--dialect",
        choices=[dialect.value for dialect in PatchDialect],
        default=default_dialect,
    )
    apply.add_argument("--expect-field", help="required *** Update File target (codex)")
    apply.add_argument("--output", help="write the patched text here instead of stdout")
    apply.add_argument("--json", action="store_true", help="print errors as a JSON payload")
    return parser


def main(argv: list[str] | None = None) -> int:
    settings = load_settings()
    configure_logging(settings.app.log_level)
    args = build_parser(settings.patch.default_dialect).parse_args(argv)

    if args.command == "diff":
        return cmd_diff(args, settings.diff.context_lines)
    return cmd_apply(args, settings.patch.max_patch_bytes)


if __name__ == "__main__":
    sys.exit(main())
