"""Configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, field


def _env(key: str, default: str = "") -> str:
    return os.environ.get(key, default)


def _env_int(key: str, default: int) -> int:
    raw = _env(key)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class AppConfig:
    env: str = field(default_factory=lambda: _env("REVDIFF_ENV", "development"))
    log_level: str = field(default_factory=lambda: _env("REVDIFF_LOG_LEVEL", "INFO"))

    @property
    def is_development(self) -> bool:
        return self.env == "development"


@dataclass(frozen=True)
class DiffConfig:
    context_lines: int = field(default_factory=lambda: _env_int("REVDIFF_DIFF_CONTEXT", 2))


@dataclass(frozen=True)
class PatchConfig:
    default_dialect: str = field(
        default_factory=lambda: _env("REVDIFF_PATCH_DIALECT", "unified")
    )
    max_patch_bytes: int = field(
        default_factory=lambda: _env_int("REVDIFF_MAX_PATCH_BYTES", 1_000_000)
    )


@dataclass(frozen=True)
class Settings:
    app: AppConfig = field(default_factory=AppConfig)
    diff: DiffConfig = field(default_factory=DiffConfig)
    patch: PatchConfig = field(default_factory=PatchConfig)


def load_settings() -> Settings:
    """Build settings from the current environment."""
    return Settings()
