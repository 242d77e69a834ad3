"""Tests for project files and the config-driven policy."""

from __future__ import annotations

import json

import pytest

from ninja_to_soong.exceptions import ProjectConfigError
from ninja_to_soong.project import ModuleRequest
from ninja_to_soong.project_config import ConfigProject, ProjectConfig

MINIMAL = {
    "name": "foo",
    "generator": "cmake",
    "src_path": "src",
    "build_path": "out",
    "targets": [{"path": "libfoo.so", "stem": "libfoo_v2"}],
}


def _write(tmp_path, data, name="project.json"):
    path = tmp_path / name
    path.write_text(json.dumps(data) if not isinstance(data, str) else data)
    return path


class TestLoad:
    def test_relative_paths_resolved(self, tmp_path):
        config = ProjectConfig.load(_write(tmp_path, MINIMAL))
        assert config.src_path == str(tmp_path / "src")
        assert config.build_path == str(tmp_path / "out")
        assert config.output == str(tmp_path / "Android.bp")
        assert config.ndk_path == ""
        assert config.build_paths() == [(None, str(tmp_path / "out"))]

    def test_absolute_paths_kept(self, tmp_path):
        config = ProjectConfig.load(_write(tmp_path, {**MINIMAL, "src_path": "/abs/src", "ndk_path": "/opt/ndk"}))
        assert config.src_path == "/abs/src"
        assert config.ndk_path == "/opt/ndk"

    def test_arches(self, tmp_path):
        data = {**MINIMAL, "build_path": None, "arches": {"arm64": "out/arm64", "x86_64": "out/x86_64"}}
        config = ProjectConfig.load(_write(tmp_path, data))
        assert config.build_paths() == [
            ("arm64", str(tmp_path / "out" / "arm64")),
            ("x86_64", str(tmp_path / "out" / "x86_64")),
        ]

    def test_build_path_and_arches_exclusive(self, tmp_path):
        with pytest.raises(ProjectConfigError, match="exactly one of"):
            ProjectConfig.load(_write(tmp_path, {**MINIMAL, "arches": {"arm64": "out"}}))

    def test_neither_build_path_nor_arches(self, tmp_path):
        data = {key: value for key, value in MINIMAL.items() if key != "build_path"}
        with pytest.raises(ProjectConfigError, match="exactly one of"):
            ProjectConfig.load(_write(tmp_path, data))

    def test_unknown_generator(self, tmp_path):
        with pytest.raises(ProjectConfigError, match="unknown generator 'bazel'"):
            ProjectConfig.load(_write(tmp_path, {**MINIMAL, "generator": "bazel"}))

    def test_missing_field(self, tmp_path):
        data = {key: value for key, value in MINIMAL.items() if key != "targets"}
        with pytest.raises(ProjectConfigError, match="targets"):
            ProjectConfig.load(_write(tmp_path, data))

    def test_invalid_json(self, tmp_path):
        with pytest.raises(ProjectConfigError, match="invalid JSON"):
            ProjectConfig.load(_write(tmp_path, "{not json"))

    def test_missing_file(self, tmp_path):
        with pytest.raises(ProjectConfigError, match="cannot read project file"):
            ProjectConfig.load(tmp_path / "nope.json")

    def test_requests(self, tmp_path):
        config = ProjectConfig.load(_write(tmp_path, MINIMAL))
        assert config.requests() == [ModuleRequest(path="libfoo.so", stem="libfoo_v2")]


class TestConfigProject:
    @pytest.fixture
    def project(self):
        config = ProjectConfig.model_validate(
            {
                **MINIMAL,
                "ignore_targets": ["*_test"],
                "ignore_sources": ["*/win32/*"],
                "ignore_includes": ["/usr/*"],
                "ignore_cflags": ["-W*"],
                "ignore_defines": ["DEBUG*"],
                "ignore_link_flags": ["-Wl,--gc-sections"],
                "ignore_libs": ["libpthread*"],
                "ignore_gen_headers": ["gen/*.inc"],
                "lib_map": {"third_party/libz.a": "libz"},
                "header_libs": {"libfoo.so": ["libvulkan_headers"]},
                "optimize_for_size": ["*.a"],
                "extra_cflags": {"libfoo.so": ["-DANDROID"]},
                "extra_shared_libs": {"libfoo.so": ["liblog"]},
                "stems": {"libfoo.so": "libfoo_vendor"},
                "deps_prefix": {"/opt/llvm": "llvm"},
                "genrule_anchor": "CMakeLists.txt",
            }
        )
        return ConfigProject(config)

    def test_name(self, project):
        assert project.get_name() == "foo"

    def test_filters(self, project):
        assert not project.filter_target("foo_test")
        assert project.filter_target("libfoo.so")
        assert not project.filter_source("/src/win32/io.c")
        assert project.filter_source("/src/posix/io.c")
        assert not project.filter_include("/usr/include")
        assert not project.filter_cflag("-Wall")
        assert project.filter_cflag("-O2")
        assert not project.filter_define("DEBUG_LEVEL=2")
        assert not project.filter_link_flag("-Wl,--gc-sections")
        assert not project.filter_lib("libpthread")
        assert not project.filter_gen_header("gen/tables.inc")
        assert project.filter_gen_header("gen/config.h")

    def test_lookups(self, project):
        assert project.map_lib("third_party/libz.a") == "libz"
        assert project.map_lib("other.a") is None
        assert project.get_target_header_libs("libfoo.so") == ["libvulkan_headers"]
        assert project.get_target_header_libs("libbar.so") == []
        assert project.optimize_target_for_size("libbar.a")
        assert not project.optimize_target_for_size("libfoo.so")
        assert project.extend_cflags("libfoo.so") == ["-DANDROID"]
        assert project.extend_shared_libs("libfoo.so") == ["liblog"]
        assert project.get_target_stem("libfoo.so") == "libfoo_vendor"
        assert project.get_deps_prefix() == [("/opt/llvm", "llvm")]
        assert project.get_genrule_anchor() == "CMakeLists.txt"

    def test_defaults(self):
        project = ConfigProject(ProjectConfig.model_validate(MINIMAL))
        assert project.filter_cflag("-Wall")
        assert project.map_module_name("libfoo.so", "cc_library_shared") == "cc_library_shared"
        assert project.map_cmd_output("gen/a.h") == "gen/a.h"
        assert project.get_genrule_anchor() is None
