"""Tests for the CMake / Meson / GN adapters and the shared decoding helpers."""

from __future__ import annotations

import pytest

from ninja_to_soong.adapters import common
from ninja_to_soong.adapters.cmake import CmakeNinjaTarget
from ninja_to_soong.adapters.gn import GnNinjaTarget
from ninja_to_soong.adapters.meson import MesonNinjaTarget
from ninja_to_soong.adapters.registry import get_adapter, list_adapters
from ninja_to_soong.exceptions import GraphError
from ninja_to_soong.models.edge import BuildEdge, RuleCommand, RuleKind


def _edge(rule, outputs=("out",), inputs=(), variables=None, globals=None, rule_command=None):
    return BuildEdge(
        rule=rule,
        outputs=list(outputs),
        inputs=list(inputs),
        variables=dict(variables or {}),
        globals=dict(globals or {}),
        rule_command=rule_command,
    )


# ── common helpers ──


class TestLinkLibraries:
    LINK = (
        "-Wl,--whole-archive libw.a -Wl,--no-whole-archive libs.a "
        "-Wl,-Bstatic -lz -Wl,-Bdynamic -llog -lm libfoo.so.1 -pthread"
    )

    def test_static(self):
        assert common.get_libs(self.LINK, common.LibraryKind.STATIC) == ["libs.a", "libz"]

    def test_shared(self):
        assert common.get_libs(self.LINK, common.LibraryKind.SHARED) == ["liblog", "libfoo.so.1"]

    def test_whole_archive(self):
        assert common.get_libs(self.LINK, common.LibraryKind.STATIC_WHOLE) == ["libw.a"]

    def test_system_libs_dropped(self):
        libs = common.get_link_libraries("-ldl -lm -lc -lpthread -latomic")
        assert (libs.static, libs.shared, libs.static_whole) == ([], [], [])

    def test_library_tokens(self):
        assert common.is_library_token("-lz")
        assert common.is_library_token("out/libfoo.so.1.2")
        assert common.is_library_token("libbar.a")
        assert not common.is_library_token("-Wl,--as-needed")
        assert not common.is_library_token("foo.o")


class TestDecodingHelpers:
    def test_defines_split_on_marker(self):
        assert common.get_defines("-DFOO -DBAR") == ["FOO", "BAR"]

    def test_defines_unescape_parentheses(self):
        assert common.get_defines("-DCALL=f\\(x\\)") == ["CALL=f(x)"]

    def test_includes(self):
        assert common.get_includes("-I/src/inc -isystem ../third_party", "/out") == [
            "/src/inc",
            "/third_party",
        ]

    def test_version_script_equals(self):
        assert common.get_link_flags("-Wl,--version-script=/src/v.map -shared") == ("/src/v.map", ["-shared"])

    def test_version_script_comma(self):
        assert common.get_link_flags("-Wl,--version-script,/src/v.map") == ("/src/v.map", [])

    def test_version_script_separate_token(self):
        assert common.get_link_flags("-Wl,--version-script -Wl,/src/v.map -s") == ("/src/v.map", ["-s"])

    def test_no_version_script(self):
        assert common.get_link_flags("-Wl,-z,defs") == (None, ["-Wl,-z,defs"])

    def test_cmd_unescapes_spaces(self):
        assert common.get_cmd("echo a$ b") == "echo a b"


# ── CMake ──


class TestCmakeAdapter:
    @pytest.mark.parametrize(
        "rule,kind",
        [
            ("C_SHARED_LIBRARY_LINKER__foo_Release", RuleKind.SHARED_LIBRARY),
            ("CXX_SHARED_MODULE_LINKER__foo_", RuleKind.SHARED_LIBRARY),
            ("C_STATIC_LIBRARY_LINKER__foo_", RuleKind.STATIC_LIBRARY),
            ("CXX_EXECUTABLE_LINKER__foo_", RuleKind.BINARY),
            ("CXX_COMPILER__foo_Release", RuleKind.COMPILATION_UNIT),
            ("ASM_COMPILER__foo_", RuleKind.COMPILATION_UNIT),
            ("CMAKE_SYMLINK_LIBRARY", RuleKind.SYMBOLIC_LINK),
            ("phony", RuleKind.PHONY),
            ("SOMETHING_ELSE", RuleKind.UNCLASSIFIED),
        ],
    )
    def test_rule_kinds(self, rule, kind):
        assert CmakeNinjaTarget(_edge(rule)).get_rule().kind is kind

    def test_compile_unit_data(self):
        target = CmakeNinjaTarget(
            _edge(
                "C_COMPILER__foo_",
                inputs=["/src/foo.c"],
                variables={
                    "DEFINES": "-DFOO -DBAR",
                    "INCLUDES": "-I/src/include -I../gen",
                    "FLAGS": "-O2 -Wall",
                },
            )
        )
        assert target.get_sources("/out") == ["/src/foo.c"]
        assert set(target.get_defines()) == {"FOO", "BAR"}
        assert target.get_includes("/out") == ["/src/include", "/gen"]
        assert target.get_cflags() == ["-O2", "-Wall"]

    def test_compile_unit_needs_one_input(self):
        target = CmakeNinjaTarget(_edge("C_COMPILER__foo_", inputs=["a.c", "b.c"]))
        with pytest.raises(GraphError, match="expected one input"):
            target.get_sources("/out")

    def test_link_data(self):
        target = CmakeNinjaTarget(
            _edge(
                "C_SHARED_LIBRARY_LINKER__foo_",
                variables={
                    "LINK_FLAGS": "-Wl,--version-script=/src/foo.map -Wl,-z,defs",
                    "LINK_LIBRARIES": "libbar.a -llog -lm",
                },
            )
        )
        assert target.get_link_flags() == ("/src/foo.map", ["-Wl,-z,defs"])
        libs = target.get_link_libraries()
        assert libs.static == ["libbar.a"]
        assert libs.shared == ["liblog"]
        assert target.get_sources("/out") == []

    def test_custom_command_strips_cd(self):
        target = CmakeNinjaTarget(
            _edge("CUSTOM_COMMAND", variables={"COMMAND": "cd /out/gen && python3 /src/gen.py a$ b"})
        )
        rule = target.get_rule()
        assert rule.kind is RuleKind.CUSTOM_COMMAND
        assert rule.command == RuleCommand("python3 /src/gen.py a b")
        assert target.get_raw_command() == "python3 /src/gen.py a b"

    def test_cmake_copy_is_kept(self):
        target = CmakeNinjaTarget(
            _edge("CUSTOM_COMMAND", variables={"COMMAND": "cd /out && /usr/bin/cmake -E copy /src/a /out/b"})
        )
        assert target.get_raw_command() == "/usr/bin/cmake -E copy /src/a /out/b"

    def test_cmake_invocation_is_self_reconfiguration(self):
        target = CmakeNinjaTarget(
            _edge("CUSTOM_COMMAND", variables={"COMMAND": "cd /out && /usr/bin/cmake -E touch stamp"})
        )
        rule = target.get_rule()
        assert rule.kind is RuleKind.CUSTOM_COMMAND
        assert rule.command is None
        assert target.get_raw_command() is None

    @pytest.mark.parametrize("rule", ["RERUN_CMAKE", "CLEAN", "HELP", "VERIFY_GLOBS"])
    def test_cmake_maintenance_rules(self, rule):
        assert CmakeNinjaTarget(_edge(rule)).get_raw_command() is None

    def test_custom_command_without_command(self):
        with pytest.raises(GraphError, match="without COMMAND"):
            CmakeNinjaTarget(_edge("CUSTOM_COMMAND")).get_rule()


# ── Meson ──


class TestMesonAdapter:
    SHARED_LINK = {"LINK_ARGS": "'-Wl,--as-needed' '-shared' '-fPIC' 'libbar.a' '-lz'"}

    def test_linker_with_fpic_is_shared(self):
        assert MesonNinjaTarget(_edge("c_LINKER", variables=self.SHARED_LINK)).get_rule().kind is RuleKind.SHARED_LIBRARY

    def test_linker_without_fpic_is_binary(self):
        target = MesonNinjaTarget(_edge("cpp_LINKER", variables={"LINK_ARGS": "'-Wl,--as-needed'"}))
        assert target.get_rule().kind is RuleKind.BINARY

    @pytest.mark.parametrize(
        "rule,kind",
        [
            ("STATIC_LINKER", RuleKind.STATIC_LIBRARY),
            ("c_COMPILER", RuleKind.COMPILATION_UNIT),
            ("cpp_COMPILER", RuleKind.COMPILATION_UNIT),
            ("phony", RuleKind.PHONY),
            ("CUSTOM_THING", RuleKind.UNCLASSIFIED),
        ],
    )
    def test_rule_kinds(self, rule, kind):
        assert MesonNinjaTarget(_edge(rule)).get_rule().kind is kind

    def test_link_args_split(self):
        target = MesonNinjaTarget(_edge("c_LINKER", variables=self.SHARED_LINK))
        assert target.get_link_flags() == (None, ["-Wl,--as-needed", "-shared", "-fPIC"])
        libs = target.get_link_libraries()
        assert libs.static == ["libbar.a"]
        assert libs.shared == ["libz"]

    def test_compile_args(self):
        target = MesonNinjaTarget(
            _edge("c_COMPILER", inputs=["../src/foo.c"], variables={"ARGS": "'-I../src/inc' '-DFOO=1' '-O2'"})
        )
        assert target.get_includes("/work/build") == ["/work/src/inc"]
        assert target.get_defines() == ["FOO=1"]
        assert target.get_cflags() == ["-O2"]
        assert target.get_sources("/work/build") == ["/work/src/foo.c"]

    def test_custom_command_after_separator(self):
        target = MesonNinjaTarget(
            _edge(
                "CUSTOM_COMMAND",
                variables={"COMMAND": "/usr/bin/meson --internal exe --capture gen.h -- /usr/bin/python3 ../gen.py"},
            )
        )
        assert target.get_raw_command() == "/usr/bin/python3 ../gen.py"

    def test_regenerate_is_self_reconfiguration(self):
        assert MesonNinjaTarget(_edge("REGENERATE_BUILD")).get_raw_command() is None
        target = MesonNinjaTarget(
            _edge("CUSTOM_COMMAND", variables={"COMMAND": "/usr/bin/meson --internal regenerate /src /out"})
        )
        assert target.get_rule().kind is RuleKind.CUSTOM_COMMAND
        assert target.get_raw_command() is None


# ── GN ──


class TestGnAdapter:
    @pytest.mark.parametrize(
        "rule,kind",
        [
            ("solink", RuleKind.SHARED_LIBRARY),
            ("solink_module", RuleKind.SHARED_LIBRARY),
            ("alink", RuleKind.STATIC_LIBRARY),
            ("clang_x64_alink", RuleKind.STATIC_LIBRARY),
            ("link", RuleKind.BINARY),
            ("cxx", RuleKind.COMPILATION_UNIT),
            ("cc", RuleKind.COMPILATION_UNIT),
            ("objcxx", RuleKind.COMPILATION_UNIT),
            ("stamp", RuleKind.PHONY),
            ("phony", RuleKind.PHONY),
            ("weird", RuleKind.UNCLASSIFIED),
        ],
    )
    def test_rule_kinds(self, rule, kind):
        assert GnNinjaTarget(_edge(rule)).get_rule().kind is kind

    def test_gn_rule_is_self_reconfiguration(self):
        target = GnNinjaTarget(_edge("gn"))
        assert target.get_rule().kind is RuleKind.CUSTOM_COMMAND
        assert target.get_raw_command() is None

    def test_action_command_expansion(self):
        target = GnNinjaTarget(
            _edge(
                "gen__rule",
                outputs=["gen/a.h"],
                inputs=["../../a.txt"],
                variables={"defines_arg": "-DX"},
                rule_command=RuleCommand("python ../../gen.py --out $out --in ${in} $defines_arg $$HOME"),
            )
        )
        assert target.get_raw_command() == "python ../../gen.py --out gen/a.h --in ../../a.txt -DX $HOME"

    def test_action_response_file(self):
        target = GnNinjaTarget(
            _edge(
                "gen__rule",
                outputs=["gen/a.h"],
                inputs=["../../a.txt", "../../b.txt"],
                rule_command=RuleCommand("tool @$rspfile", rsp_file="$out.rsp", rsp_content="$in"),
            )
        )
        command = target.get_rule().command
        assert command == RuleCommand("tool @$rspfile", rsp_file="gen/a.h.rsp", rsp_content="../../a.txt ../../b.txt")

    def test_action_without_rule_block(self):
        with pytest.raises(GraphError, match="no rule block"):
            GnNinjaTarget(_edge("gen__rule")).get_rule()

    def test_copy(self):
        target = GnNinjaTarget(_edge("copy", outputs=["gen/a.txt"], inputs=["../../a.txt"]))
        assert target.get_raw_command() == "cp ../../a.txt gen/a.txt"

    def test_copy_needs_single_input(self):
        with pytest.raises(GraphError):
            GnNinjaTarget(_edge("toolchain_copy", inputs=["a", "b"])).get_rule()

    def test_file_scope_settings(self):
        scope = {
            "defines": "-DFOO -DBAR=1",
            "include_dirs": "-I../../include -Igen",
            "cflags": "-O2",
            "cflags_c": "-std=c11",
            "cflags_cc": "-std=c++17",
        }
        cxx = GnNinjaTarget(_edge("cxx", inputs=["../../a.cc"], globals=scope))
        cc = GnNinjaTarget(_edge("cc", inputs=["../../a.c"], globals=scope))
        assert cxx.get_defines() == ["FOO", "BAR=1"]
        assert cxx.get_includes("/src/out/arm64") == ["/src/include", "/src/out/arm64/gen"]
        assert cxx.get_cflags() == ["-O2", "-std=c++17"]
        assert cc.get_cflags() == ["-O2", "-std=c11"]

    def test_edge_binding_overrides_file_scope(self):
        target = GnNinjaTarget(_edge("cc", variables={"cflags": "-O3"}, globals={"cflags": "-O2"}))
        assert target.get_cflags() == ["-O3"]

    def test_library_reports_itself(self):
        target = GnNinjaTarget(
            _edge(
                "solink",
                outputs=["./libfoo.so"],
                variables={"libs": "-llog", "solibs": "./libdep.so", "ldflags": "-Wl,-z,defs"},
            )
        )
        libs = target.get_link_libraries()
        assert libs.shared == ["liblog", "./libdep.so", "./libfoo.so"]
        assert target.get_link_flags() == (None, ["-Wl,-z,defs"])

        archive = GnNinjaTarget(_edge("alink", outputs=["obj/libbase.a"]))
        assert archive.get_link_libraries().static == ["obj/libbase.a"]


class TestRegistry:
    def test_lookup(self):
        assert get_adapter("cmake") is CmakeNinjaTarget
        assert get_adapter("meson") is MesonNinjaTarget
        assert get_adapter("gn") is GnNinjaTarget
        assert list_adapters() == ["cmake", "gn", "meson"]

    def test_unknown(self):
        with pytest.raises(ValueError, match="unknown generator 'bazel'"):
            get_adapter("bazel")

    def test_indents(self):
        assert get_adapter("meson").indent == " "
        assert get_adapter("cmake").indent == "  "
