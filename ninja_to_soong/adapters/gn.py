"""GN's ninja dialect.

GN writes compile settings (``defines``, ``include_dirs``, ``cflags*``) as
file-scope bindings of each target's own ninja file, and custom actions as
dedicated ``rule <target>__rule`` blocks whose command references edge
variables.
"""

from __future__ import annotations

import re

from ninja_to_soong.adapters import common
from ninja_to_soong.adapters.base import NinjaTarget
from ninja_to_soong.exceptions import GraphError
from ninja_to_soong.models.edge import LinkLibraries, Rule, RuleCommand, RuleKind

# Longest first so that "solink_module" wins over "link".
_TOOLS = [
    ("solink_module", RuleKind.SHARED_LIBRARY),
    ("objcxx", RuleKind.COMPILATION_UNIT),
    ("solink", RuleKind.SHARED_LIBRARY),
    ("alink", RuleKind.STATIC_LIBRARY),
    ("stamp", RuleKind.PHONY),
    ("phony", RuleKind.PHONY),
    ("link", RuleKind.BINARY),
    ("objc", RuleKind.COMPILATION_UNIT),
    ("cxx", RuleKind.COMPILATION_UNIT),
    ("asm", RuleKind.COMPILATION_UNIT),
    ("cc", RuleKind.COMPILATION_UNIT),
]

_CFLAGS_BY_TOOL = {
    "cc": ["cflags", "cflags_c"],
    "cxx": ["cflags", "cflags_cc"],
    "objc": ["cflags", "cflags_objc"],
    "objcxx": ["cflags", "cflags_objcc"],
    "asm": ["cflags", "asmflags"],
}

_VAR_RE = re.compile(r"\$(\$|:| |\{(\w+)\}|(\w+))")


def _tool(rule: str) -> str | None:
    for tool, _ in _TOOLS:
        if rule == tool or rule.endswith("_" + tool):
            return tool
    return None


class GnNinjaTarget(NinjaTarget):
    name = "gn"
    indent = "  "

    def _lookup(self, key: str) -> str | None:
        """Edge-local binding first, then the file scope."""
        value = self.edge.variables.get(key)
        if value is None:
            value = self.edge.globals.get(key)
        return value

    def expand(self, text: str) -> str:
        """Expand ``$in``/``$out`` and edge or file bindings in *text*."""

        def replace(match: re.Match) -> str:
            token = match.group(1)
            if token in ("$", ":", " "):
                return token
            key = match.group(2) or match.group(3)
            if key == "in":
                return " ".join(self.edge.inputs)
            if key == "out":
                return " ".join(self.edge.outputs)
            if key == "rspfile":
                # Resolved later, once the response file lives in $(genDir).
                return match.group(0)
            return self._lookup(key) or ""

        return _VAR_RE.sub(replace, text)

    def get_rule(self) -> Rule:
        rule = self.edge.rule
        if rule.endswith("__rule"):
            return Rule(RuleKind.CUSTOM_COMMAND, self._get_command())
        if rule == "gn":
            return Rule(RuleKind.CUSTOM_COMMAND)
        if rule == "copy" or rule.endswith("_copy"):
            return Rule(RuleKind.CUSTOM_COMMAND, self._get_copy_command())
        tool = _tool(rule)
        if tool is None:
            return Rule(RuleKind.UNCLASSIFIED)
        return Rule(dict(_TOOLS)[tool])

    def _get_command(self) -> RuleCommand:
        rule_command = self.edge.rule_command
        if rule_command is None:
            raise GraphError(f"no rule block for '{self.edge.rule}'", self.edge)
        return RuleCommand(
            command=self.expand(rule_command.command),
            rsp_file=self.expand(rule_command.rsp_file) if rule_command.rsp_file else None,
            rsp_content=self.expand(rule_command.rsp_content) if rule_command.rsp_content else None,
        )

    def _get_copy_command(self) -> RuleCommand:
        if len(self.edge.inputs) != 1 or len(self.edge.outputs) != 1:
            raise GraphError("copy needs exactly one input and one output", self.edge)
        return RuleCommand(f"cp {self.edge.inputs[0]} {self.edge.outputs[0]}")

    def get_includes(self, build_path: str) -> list[str]:
        return common.get_includes(self._lookup("include_dirs") or "", build_path)

    def get_defines(self) -> list[str]:
        return common.get_defines(self._lookup("defines") or "")

    def get_cflags(self) -> list[str]:
        keys = _CFLAGS_BY_TOOL.get(_tool(self.edge.rule) or "", ["cflags"])
        cflags = []
        for key in keys:
            cflags.extend(common.get_cflags(self._lookup(key) or ""))
        return cflags

    def get_link_flags(self) -> tuple[str | None, list[str]]:
        return common.get_link_flags(self._lookup("ldflags") or "")

    def get_link_libraries(self) -> LinkLibraries:
        libs = common.get_link_libraries(self._lookup("libs") or "")
        libs.extend(common.get_link_libraries(self._lookup("solibs") or ""))
        # Archives and shared objects show up as plain link inputs in GN, so
        # each library edge reports itself.
        kind = self.get_rule().kind
        if kind is RuleKind.SHARED_LIBRARY:
            libs.shared.append(self.edge.outputs[0])
        elif kind is RuleKind.STATIC_LIBRARY:
            libs.static.append(self.edge.outputs[0])
        return libs
