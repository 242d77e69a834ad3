"""Meson's ninja dialect (one-space variable indent, ARGS / LINK_ARGS)."""

from __future__ import annotations

from ninja_to_soong.adapters import common
from ninja_to_soong.adapters.base import NinjaTarget
from ninja_to_soong.exceptions import GraphError
from ninja_to_soong.models.edge import LinkLibraries, Rule, RuleCommand, RuleKind

_LINKER_RULES = {"c_LINKER", "cpp_LINKER", "c_LINKER_RSP", "cpp_LINKER_RSP"}
_STATIC_RULES = {"STATIC_LINKER", "STATIC_LINKER_RSP"}
_CUSTOM_RULES = {"CUSTOM_COMMAND", "CUSTOM_COMMAND_DEP"}


def _unquote(token: str) -> str:
    return token.strip("'")


class MesonNinjaTarget(NinjaTarget):
    name = "meson"
    indent = " "

    def _args(self) -> list[str]:
        return [_unquote(arg) for arg in (self.var("ARGS") or "").split()]

    def _link_args(self) -> list[str]:
        return [_unquote(arg) for arg in (self.var("LINK_ARGS") or "").split()]

    def get_rule(self) -> Rule:
        rule = self.edge.rule
        if rule in _LINKER_RULES:
            # Meson gives no other hint between shared libraries and executables.
            _, link_flags = self.get_link_flags()
            if "-fPIC" in link_flags:
                return Rule(RuleKind.SHARED_LIBRARY)
            return Rule(RuleKind.BINARY)
        if rule in _STATIC_RULES:
            return Rule(RuleKind.STATIC_LIBRARY)
        if rule.endswith("_COMPILER"):
            return Rule(RuleKind.COMPILATION_UNIT)
        if rule == "REGENERATE_BUILD":
            return Rule(RuleKind.CUSTOM_COMMAND)
        if rule in _CUSTOM_RULES:
            return Rule(RuleKind.CUSTOM_COMMAND, self._get_command())
        if rule == "phony":
            return Rule(RuleKind.PHONY)
        return Rule(RuleKind.UNCLASSIFIED)

    def _get_command(self) -> RuleCommand | None:
        command = self.var("COMMAND")
        if command is None:
            raise GraphError("custom command without COMMAND", self.edge)
        _, sep, tail = command.partition(" -- ")
        command = common.get_cmd(tail if sep else command)
        if "--internal regenerate" in command:
            return None
        return RuleCommand(command)

    def get_sources(self, build_path: str) -> list[str]:
        if self.get_rule().kind is not RuleKind.COMPILATION_UNIT:
            return []
        if len(self.edge.inputs) != 1:
            raise GraphError(f"expected one input for a compile unit, got {len(self.edge.inputs)}", self.edge)
        return common.get_sources(self.edge.inputs, build_path)

    def get_includes(self, build_path: str) -> list[str]:
        includes = [arg for arg in self._args() if arg.startswith("-I")]
        return common.get_includes(" ".join(includes), build_path)

    def get_defines(self) -> list[str]:
        defines = [arg[2:] for arg in self._args() if arg.startswith("-D")]
        return [define.replace("\\(", "(").replace("\\)", ")") for define in defines if define]

    def get_cflags(self) -> list[str]:
        return [arg for arg in self._args() if not arg.startswith("-I") and not arg.startswith("-D")]

    def get_link_flags(self) -> tuple[str | None, list[str]]:
        flags = [
            arg
            for arg in self._link_args()
            if not common.is_library_token(arg) and not common.is_linkage_marker(arg)
        ]
        return common.get_link_flags(" ".join(flags))

    def get_link_libraries(self) -> LinkLibraries:
        libs = [
            arg
            for arg in self._link_args()
            if common.is_library_token(arg) or common.is_linkage_marker(arg)
        ]
        return common.get_link_libraries(" ".join(libs))
