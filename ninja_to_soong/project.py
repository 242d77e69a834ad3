"""Per-project policy consumed by the module generation engine.

The engine is project agnostic: every filtering, renaming or extension rule
goes through a ``Project`` instance passed in by the caller. All hooks have
permissive defaults so a subclass only overrides what it needs.
"""

from __future__ import annotations

from dataclasses import dataclass

from ninja_to_soong.models.module import SoongModule


@dataclass(frozen=True)
class ModuleRequest:
    """An output path to generate, with optional overrides."""

    path: str
    name: str | None = None
    stem: str | None = None
    module_type: str | None = None


class Project:
    """Default policy: keep everything, rename nothing."""

    name: str = "project"

    def get_name(self) -> str:
        return self.name

    # Filters: return False to drop the item.

    def filter_target(self, target: str) -> bool:
        return True

    def filter_source(self, source: str) -> bool:
        return True

    def filter_include(self, include: str) -> bool:
        return True

    def filter_cflag(self, cflag: str) -> bool:
        return True

    def filter_define(self, define: str) -> bool:
        return True

    def filter_link_flag(self, flag: str) -> bool:
        return True

    def filter_lib(self, lib: str) -> bool:
        return True

    def filter_gen_header(self, header: str) -> bool:
        """False keeps the header out of ``generated_headers``; it is then copied instead."""
        return True

    # Maps.

    def map_lib(self, lib: str) -> str | None:
        """Module name to use for a library path, or None for the default naming."""
        return None

    def map_cmd_output(self, output: str) -> str:
        return output

    def map_module_name(self, target: str, kind: str) -> str:
        return kind

    # Extensions.

    def extend_module(self, target: str, module: SoongModule) -> SoongModule:
        return module

    def extend_cflags(self, target: str) -> list[str]:
        return []

    def extend_shared_libs(self, target: str) -> list[str]:
        return []

    # Per-target metadata.

    def get_target_header_libs(self, target: str) -> list[str]:
        return []

    def get_deps_prefix(self) -> list[tuple[str, str]]:
        """(path prefix, dependency name) pairs for inputs owned by other projects."""
        return []

    def optimize_target_for_size(self, target: str) -> bool:
        return False

    def get_target_stem(self, target: str) -> str | None:
        return None

    def get_genrule_anchor(self) -> str | None:
        """Source-relative file used to locate the source root inside genrule commands."""
        return None

    def parse_custom_command_inputs(
        self, inputs: list[str]
    ) -> tuple[list[str], list[str], dict[str, str]] | None:
        """Override the classification of a custom command's inputs.

        Returns (extra srcs entries, raw inputs used as sources, raw input ->
        dependency module name), or None to use the default classification.
        """
        return None
