"""Data models for parsed ninja build edges and their classification."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class RuleKind(Enum):
    """What an edge builds, as far as module generation is concerned."""

    SHARED_LIBRARY = "shared_library"
    STATIC_LIBRARY = "static_library"
    BINARY = "binary"
    CUSTOM_COMMAND = "custom_command"
    SYMBOLIC_LINK = "symbolic_link"
    PHONY = "phony"
    COMPILATION_UNIT = "compilation_unit"
    UNCLASSIFIED = "unclassified"


@dataclass(frozen=True)
class RuleCommand:
    """A decoded custom command, with optional response-file information."""

    command: str
    rsp_file: str | None = None
    rsp_content: str | None = None


@dataclass(frozen=True)
class Rule:
    """Classification of an edge.

    ``command`` is only meaningful for CUSTOM_COMMAND. A custom command with
    ``command=None`` is a self-reconfiguration step of the generator and must
    not produce a module.
    """

    kind: RuleKind
    command: RuleCommand | None = None


@dataclass
class LinkLibraries:
    """Libraries decoded from link arguments, split by linkage."""

    static: list[str] = field(default_factory=list)
    shared: list[str] = field(default_factory=list)
    static_whole: list[str] = field(default_factory=list)

    def extend(self, other: LinkLibraries) -> None:
        self.static.extend(other.static)
        self.shared.extend(other.shared)
        self.static_whole.extend(other.static_whole)


@dataclass
class BuildEdge:
    """One ``build`` statement of a ninja file.

    ``variables`` are the edge-local bindings, ``globals`` the file-scope
    bindings of the file that declared the edge, ``rule_command`` the body of
    the matching ``rule`` block when the file declared one.
    """

    rule: str
    outputs: list[str]
    implicit_outputs: list[str] = field(default_factory=list)
    inputs: list[str] = field(default_factory=list)
    implicit_deps: list[str] = field(default_factory=list)
    order_only_deps: list[str] = field(default_factory=list)
    variables: dict[str, str] = field(default_factory=dict)
    globals: dict[str, str] = field(default_factory=dict)
    rule_command: RuleCommand | None = None
    location: str = ""

    @property
    def name(self) -> str:
        """Canonical name source: the first explicit output."""
        return self.outputs[0]

    def all_outputs(self) -> list[str]:
        return self.outputs + self.implicit_outputs

    def all_inputs(self) -> list[str]:
        return self.inputs + self.implicit_deps + self.order_only_deps

    def describe(self) -> str:
        lines = [f"BuildEdge({self.location or '<unknown>'})", f"  rule: {self.rule}"]
        for label, values in (
            ("outputs", self.outputs),
            ("implicit_outputs", self.implicit_outputs),
            ("inputs", self.inputs),
            ("implicit_deps", self.implicit_deps),
            ("order_only_deps", self.order_only_deps),
        ):
            if values:
                lines.append(f"  {label}: {' '.join(values)}")
        for key in sorted(self.variables):
            lines.append(f"  {key} = {self.variables[key]}")
        return "\n".join(lines)
