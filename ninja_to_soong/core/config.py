"""Environment-driven settings."""

from __future__ import annotations

import os
from dataclasses import dataclass

_TRUE_VALUES = {"1", "true", "yes"}


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in _TRUE_VALUES


@dataclass(frozen=True)
class Settings:
    log_level: str = "INFO"
    log_format: str = "console"
    skip_gen_ninja: bool = False
    skip_build: bool = False

    @classmethod
    def from_env(cls) -> Settings:
        """Read settings from ``N2S_*`` environment variables."""
        return cls(
            log_level=os.environ.get("N2S_LOG_LEVEL", "INFO").upper(),
            log_format=os.environ.get("N2S_LOG_FORMAT", "console").lower(),
            skip_gen_ninja=_env_flag("N2S_SKIP_GEN_NINJA"),
            skip_build=_env_flag("N2S_SKIP_BUILD"),
        )


def get_settings() -> Settings:
    return Settings.from_env()
