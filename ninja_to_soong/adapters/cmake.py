"""CMake's ninja dialect.

Rule names carry the language and target type
(``CXX_SHARED_LIBRARY_LINKER__foo_Release``); compile and link data are
space-joined strings under ``FLAGS``, ``DEFINES``, ``INCLUDES``,
``LINK_FLAGS`` and ``LINK_LIBRARIES``. Custom commands are
``cd <dir> && <cmd>`` under ``COMMAND``.
"""

from __future__ import annotations

import re

from ninja_to_soong.adapters import common
from ninja_to_soong.adapters.base import NinjaTarget
from ninja_to_soong.exceptions import GraphError
from ninja_to_soong.models.edge import LinkLibraries, Rule, RuleCommand, RuleKind

_SHARED_RE = re.compile(r"^(C|CXX)_SHARED_(LIBRARY|MODULE)")
_STATIC_RE = re.compile(r"^(C|CXX)_STATIC_LIBRARY")
_EXECUTABLE_RE = re.compile(r"^(C|CXX)_EXECUTABLE")
_COMPILER_RE = re.compile(r"^(C|CXX|ASM\w*)_COMPILER")
_CMAKE_COPY_RE = re.compile(r"bin/cmake\s+-E\s+(copy|copy_if_different)\s")

# Edges that re-run or maintain cmake itself.
_CMAKE_SELF_RULES = {"RERUN_CMAKE", "CLEAN", "HELP", "VERIFY_GLOBS"}


class CmakeNinjaTarget(NinjaTarget):
    name = "cmake"
    indent = "  "

    def get_rule(self) -> Rule:
        rule = self.edge.rule
        if _SHARED_RE.match(rule):
            return Rule(RuleKind.SHARED_LIBRARY)
        if _STATIC_RE.match(rule):
            return Rule(RuleKind.STATIC_LIBRARY)
        if _EXECUTABLE_RE.match(rule):
            return Rule(RuleKind.BINARY)
        if _COMPILER_RE.match(rule):
            return Rule(RuleKind.COMPILATION_UNIT)
        if rule.startswith("CMAKE_SYMLINK"):
            return Rule(RuleKind.SYMBOLIC_LINK)
        if rule == "phony":
            return Rule(RuleKind.PHONY)
        if rule in _CMAKE_SELF_RULES:
            return Rule(RuleKind.CUSTOM_COMMAND)
        if rule.startswith("CUSTOM_COMMAND"):
            return Rule(RuleKind.CUSTOM_COMMAND, self._get_command())
        return Rule(RuleKind.UNCLASSIFIED)

    def _get_command(self) -> RuleCommand | None:
        command = self.var("COMMAND")
        if command is None:
            raise GraphError("custom command without COMMAND", self.edge)
        _, sep, tail = command.partition(" && ")
        command = common.get_cmd(tail if sep else command)
        if "bin/cmake" in command and not _CMAKE_COPY_RE.search(command):
            return None
        return RuleCommand(command)

    def get_sources(self, build_path: str) -> list[str]:
        if self.get_rule().kind is not RuleKind.COMPILATION_UNIT:
            return []
        if len(self.edge.inputs) != 1:
            raise GraphError(f"expected one input for a compile unit, got {len(self.edge.inputs)}", self.edge)
        return common.get_sources(self.edge.inputs, build_path)

    def get_includes(self, build_path: str) -> list[str]:
        return common.get_includes(self.var("INCLUDES") or "", build_path)

    def get_defines(self) -> list[str]:
        return common.get_defines(self.var("DEFINES") or "")

    def get_cflags(self) -> list[str]:
        return common.get_cflags(self.var("FLAGS") or "")

    def get_link_flags(self) -> tuple[str | None, list[str]]:
        return common.get_link_flags(self.var("LINK_FLAGS") or "")

    def get_link_libraries(self) -> LinkLibraries:
        return common.get_link_libraries(self.var("LINK_LIBRARIES") or "")
