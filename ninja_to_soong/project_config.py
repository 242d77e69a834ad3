"""JSON project files and the config-driven policy built from them."""

from __future__ import annotations

import json
import os
from fnmatch import fnmatch
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from ninja_to_soong.adapters.registry import list_adapters
from ninja_to_soong.exceptions import ProjectConfigError
from ninja_to_soong.project import ModuleRequest, Project


class TargetSpec(BaseModel):
    path: str
    name: str | None = None
    stem: str | None = None
    module_type: str | None = None

    def to_request(self) -> ModuleRequest:
        return ModuleRequest(path=self.path, name=self.name, stem=self.stem, module_type=self.module_type)


class LicenseSpec(BaseModel):
    name: str | None = None
    kinds: list[str] = Field(default_factory=list)
    texts: list[str] = Field(default_factory=list)


class ConfigureSpec(BaseModel):
    args: list[str] = Field(default_factory=list)


class ProjectConfig(BaseModel):
    """Schema of a project file."""

    name: str
    generator: str
    src_path: str
    build_path: str | None = None
    arches: dict[str, str] = Field(default_factory=dict)
    ndk_path: str = ""
    targets: list[TargetSpec]
    license: LicenseSpec = Field(default_factory=LicenseSpec)
    visibility: list[str] = Field(default_factory=list)
    configure: ConfigureSpec | None = None

    ignore_targets: list[str] = Field(default_factory=list)
    ignore_sources: list[str] = Field(default_factory=list)
    ignore_includes: list[str] = Field(default_factory=list)
    ignore_cflags: list[str] = Field(default_factory=list)
    ignore_defines: list[str] = Field(default_factory=list)
    ignore_link_flags: list[str] = Field(default_factory=list)
    ignore_libs: list[str] = Field(default_factory=list)
    ignore_gen_headers: list[str] = Field(default_factory=list)

    lib_map: dict[str, str] = Field(default_factory=dict)
    header_libs: dict[str, list[str]] = Field(default_factory=dict)
    optimize_for_size: list[str] = Field(default_factory=list)
    extra_cflags: dict[str, list[str]] = Field(default_factory=dict)
    extra_shared_libs: dict[str, list[str]] = Field(default_factory=dict)
    stems: dict[str, str] = Field(default_factory=dict)
    deps_prefix: dict[str, str] = Field(default_factory=dict)
    genrule_anchor: str | None = None
    output: str = "Android.bp"

    @field_validator("generator")
    @classmethod
    def _known_generator(cls, v: str) -> str:
        if v not in list_adapters():
            raise ValueError(f"unknown generator '{v}' (expected one of: {', '.join(list_adapters())})")
        return v

    @model_validator(mode="after")
    def _one_build_layout(self) -> ProjectConfig:
        if bool(self.build_path) == bool(self.arches):
            raise ValueError("exactly one of 'build_path' or 'arches' must be set")
        return self

    @classmethod
    def load(cls, path: str | Path) -> ProjectConfig:
        """Load and validate a project file; relative paths resolve against its directory."""
        path = Path(path)
        try:
            data = json.loads(path.read_text())
        except OSError as e:
            raise ProjectConfigError(f"cannot read project file {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise ProjectConfigError(f"invalid JSON in {path}: {e}") from e
        try:
            config = cls.model_validate(data)
        except ValidationError as e:
            raise ProjectConfigError(f"invalid project file {path}:\n{e}") from e
        return config.resolve_paths(path.parent)

    def resolve_paths(self, base: str | Path) -> ProjectConfig:
        def resolve(value: str) -> str:
            if not value:
                return value
            return os.path.normpath(os.path.join(str(base), os.path.expanduser(value)))

        return self.model_copy(
            update={
                "src_path": resolve(self.src_path),
                "build_path": resolve(self.build_path) if self.build_path else None,
                "arches": {arch: resolve(p) for arch, p in self.arches.items()},
                "ndk_path": resolve(self.ndk_path),
                "output": resolve(self.output),
            }
        )

    def requests(self) -> list[ModuleRequest]:
        return [target.to_request() for target in self.targets]

    def build_paths(self) -> list[tuple[str | None, str]]:
        """(arch, build directory) pairs; arch is None for single-build projects."""
        if self.build_path:
            return [(None, self.build_path)]
        return list(self.arches.items())


def _matches(value: str, patterns: list[str]) -> bool:
    return any(fnmatch(value, pattern) for pattern in patterns)


class ConfigProject(Project):
    """Policy driven by a ProjectConfig; filters are glob patterns."""

    def __init__(self, config: ProjectConfig) -> None:
        self.config = config
        self.name = config.name

    def filter_target(self, target: str) -> bool:
        return not _matches(target, self.config.ignore_targets)

    def filter_source(self, source: str) -> bool:
        return not _matches(source, self.config.ignore_sources)

    def filter_include(self, include: str) -> bool:
        return not _matches(include, self.config.ignore_includes)

    def filter_cflag(self, cflag: str) -> bool:
        return not _matches(cflag, self.config.ignore_cflags)

    def filter_define(self, define: str) -> bool:
        return not _matches(define, self.config.ignore_defines)

    def filter_link_flag(self, flag: str) -> bool:
        return not _matches(flag, self.config.ignore_link_flags)

    def filter_lib(self, lib: str) -> bool:
        return not _matches(lib, self.config.ignore_libs)

    def filter_gen_header(self, header: str) -> bool:
        return not _matches(header, self.config.ignore_gen_headers)

    def map_lib(self, lib: str) -> str | None:
        return self.config.lib_map.get(lib)

    def extend_cflags(self, target: str) -> list[str]:
        return list(self.config.extra_cflags.get(target, []))

    def extend_shared_libs(self, target: str) -> list[str]:
        return list(self.config.extra_shared_libs.get(target, []))

    def get_target_header_libs(self, target: str) -> list[str]:
        return list(self.config.header_libs.get(target, []))

    def get_deps_prefix(self) -> list[tuple[str, str]]:
        return list(self.config.deps_prefix.items())

    def optimize_target_for_size(self, target: str) -> bool:
        return _matches(target, self.config.optimize_for_size)

    def get_target_stem(self, target: str) -> str | None:
        return self.config.stems.get(target)

    def get_genrule_anchor(self) -> str | None:
        return self.config.genrule_anchor
