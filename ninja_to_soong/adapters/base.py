"""Abstract adapter that normalizes one generator's ninja dialect."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ninja_to_soong.adapters import common
from ninja_to_soong.models.edge import BuildEdge, LinkLibraries, Rule, RuleKind


class NinjaTarget(ABC):
    """
    Wraps one BuildEdge and exposes the data module generation needs.
    Each generator (CMake, Meson, GN) encodes the same information under
    different variable names; subclasses decode their own dialect.
    """

    #: Adapter identifier used on the command line and in project files.
    name: str = ""
    #: Indent of variable lines in the ninja files this generator emits.
    indent: str = "  "

    def __init__(self, edge: BuildEdge) -> None:
        self.edge = edge

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.edge.location or self.edge.outputs[0]})"

    def var(self, key: str) -> str | None:
        return self.edge.variables.get(key)

    @abstractmethod
    def get_rule(self) -> Rule:
        """Classify the edge. Must be pure."""
        ...

    def get_sources(self, build_path: str) -> list[str]:
        if self.get_rule().kind is not RuleKind.COMPILATION_UNIT:
            return []
        return common.get_sources(self.edge.inputs, build_path)

    def get_includes(self, build_path: str) -> list[str]:
        return []

    def get_defines(self) -> list[str]:
        return []

    def get_cflags(self) -> list[str]:
        return []

    def get_link_flags(self) -> tuple[str | None, list[str]]:
        return None, []

    def get_link_libraries(self) -> LinkLibraries:
        return LinkLibraries()

    def get_raw_command(self) -> str | None:
        """The custom command, or None for anything else and for self-reconfiguration."""
        rule = self.get_rule()
        if rule.kind is not RuleKind.CUSTOM_COMMAND or rule.command is None:
            return None
        return rule.command.command
