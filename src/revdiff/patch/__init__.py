"""Patch engine: dialect normalization and zero-fuzz application."""

from revdiff.patch.apply import Hunk, apply_patch, parse_hunks
from revdiff.patch.normalize import PatchDialect, normalize_patch

__all__ = ["Hunk", "PatchDialect", "apply_patch", "normalize_patch", "parse_hunks"]
