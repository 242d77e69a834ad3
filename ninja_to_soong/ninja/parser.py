"""Parse ninja build files into BuildEdge records.

Only the subset of the ninja syntax that CMake, Meson and GN emit is
understood:

  build <outs> [| <implicit outs>]: <rule> <ins> [| <implicit deps>] [|| <order-only deps>]
    key = value
  rule <name>
    command = ...
  subninja <file> / include <file>
  key = value                      (file-scope binding)

Paths are whitespace-delimited; escaped spaces (``$ ``) inside paths are not
supported, only ``$:`` is unescaped.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from ninja_to_soong.exceptions import ParseError
from ninja_to_soong.models.edge import BuildEdge, RuleCommand

logger = logging.getLogger(__name__)

DEFAULT_INDENT = "  "

# A ':' that is not escaped as '$:'.
_COLUMN_RE = re.compile(r"(?<!\$):")
_SECOND_COLUMN_RE = re.compile(r"(?<!\$) : ")


def _split_paths(section: str) -> list[str]:
    return [token.replace("$:", ":") for token in section.split()]


def _logical_lines(text: str) -> list[tuple[int, str]]:
    """Join ``$``-continued lines, keeping the number of the first physical line."""
    result: list[tuple[int, str]] = []
    pending: str | None = None
    start = 0
    for number, raw in enumerate(text.splitlines(), start=1):
        if pending is None:
            start = number
            current = raw
        else:
            current = pending + " " + raw.lstrip()
        trailing = len(current) - len(current.rstrip("$"))
        if trailing % 2 == 1:
            pending = current[:-1].rstrip()
            continue
        pending = None
        result.append((start, current))
    if pending is not None:
        result.append((start, pending))
    return result


def parse_key_value(line: str, source: str = "<string>", line_number: int = 0) -> tuple[str, str]:
    """Parse ``key = value``: the key is trimmed, the value only left-trimmed."""
    key, sep, value = line.partition("=")
    if not sep:
        raise ParseError("expected 'key = value'", source, line_number, line)
    return key.strip(), value.lstrip()


def parse_build_line(
    line: str, source: str = "<string>", line_number: int = 0
) -> tuple[str, list[str], list[str], list[str], list[str], list[str]]:
    """Split a ``build`` line into its sections.

    Returns:
        (rule, outputs, implicit_outputs, inputs, implicit_deps, order_only_deps)
    """
    stripped = line.strip()
    if not stripped.startswith("build"):
        raise ParseError("missing 'build' keyword", source, line_number, line)
    body = stripped[len("build") :]

    match = _COLUMN_RE.search(body)
    if match is None:
        raise ParseError("missing ':' between outputs and rule", source, line_number, line)
    output_section = body[: match.start()]
    input_section = body[match.end() :]
    if _SECOND_COLUMN_RE.search(input_section):
        raise ParseError("duplicated ':' column", source, line_number, line)

    output_parts = output_section.split("|")
    if len(output_parts) > 2:
        raise ParseError("more than one '|' in outputs", source, line_number, line)
    outputs = _split_paths(output_parts[0])
    implicit_outputs = _split_paths(output_parts[1]) if len(output_parts) == 2 else []
    if not outputs:
        raise ParseError("build statement without outputs", source, line_number, line)

    order_parts = input_section.split("||")
    if len(order_parts) > 2:
        raise ParseError("more than one '||' in dependencies", source, line_number, line)
    order_only_deps = _split_paths(order_parts[1]) if len(order_parts) == 2 else []

    dep_parts = order_parts[0].split("|")
    if len(dep_parts) > 2:
        raise ParseError("more than one '|' in dependencies", source, line_number, line)
    implicit_deps = _split_paths(dep_parts[1]) if len(dep_parts) == 2 else []

    rule_and_inputs = dep_parts[0].split()
    if not rule_and_inputs:
        raise ParseError("missing rule name", source, line_number, line)
    rule = rule_and_inputs[0]
    inputs = [token.replace("$:", ":") for token in rule_and_inputs[1:]]

    return rule, outputs, implicit_outputs, inputs, implicit_deps, order_only_deps


class _NinjaParser:
    """Parse state shared by a build.ninja file and the files it includes."""

    def __init__(self, build_dir: str | Path, indent: str) -> None:
        self.build_dir = Path(build_dir)
        self.indent = indent
        self.rules: dict[str, RuleCommand] = {}
        self.producers: dict[str, str] = {}
        self.edges: list[BuildEdge] = []

    def finish(self) -> list[BuildEdge]:
        for edge in self.edges:
            edge.rule_command = self.rules.get(edge.rule)
        return self.edges

    def parse_file(self, path: Path) -> None:
        logger.debug("Parsing %s", path)
        try:
            text = path.read_text()
        except OSError as e:
            raise ParseError(f"cannot read ninja file: {e}", str(path)) from e
        self.parse_text(text, str(path))

    def _read_block(self, lines: list[tuple[int, str]], idx: int) -> tuple[list[tuple[int, str]], int]:
        """Collect the indented lines following ``lines[idx - 1]``."""
        block = []
        while idx < len(lines) and lines[idx][1].startswith(self.indent):
            if lines[idx][1].strip():
                block.append(lines[idx])
            idx += 1
        return block, idx

    def parse_text(self, text: str, source: str) -> None:
        lines = _logical_lines(text)
        file_edges: list[BuildEdge] = []
        file_globals: dict[str, str] = {}

        idx = 0
        while idx < len(lines):
            number, line = lines[idx]
            idx += 1
            if not line.strip() or line.startswith("#") or line.startswith("default "):
                continue
            if line.startswith("pool "):
                _, idx = self._read_block(lines, idx)
            elif line.startswith("build "):
                body, idx = self._read_block(lines, idx)
                edge = self._parse_edge(line, number, body, source)
                file_edges.append(edge)
            elif line.startswith("rule "):
                body, idx = self._read_block(lines, idx)
                self._parse_rule(line, number, body, source)
            elif line.startswith("subninja ") or line.startswith("include "):
                parts = line.split()
                if len(parts) != 2:
                    raise ParseError("expected exactly one file name", source, number, line)
                self.parse_file(self.build_dir / parts[1])
            else:
                key, value = parse_key_value(line, source, number)
                file_globals[key] = value

        for edge in file_edges:
            edge.globals = dict(file_globals)
        self.edges.extend(file_edges)

    def _parse_edge(self, line: str, number: int, body: list[tuple[int, str]], source: str) -> BuildEdge:
        rule, outputs, implicit_outputs, inputs, implicit_deps, order_only = parse_build_line(
            line, source, number
        )
        variables = {}
        for var_number, var_line in body:
            key, value = parse_key_value(var_line, source, var_number)
            variables[key] = value

        location = f"{source}:{number}"
        for output in outputs + implicit_outputs:
            previous = self.producers.get(output)
            if previous is not None:
                raise ParseError(
                    f"'{output}' is produced by two edges (first at {previous})", source, number, line
                )
            self.producers[output] = location

        return BuildEdge(
            rule=rule,
            outputs=outputs,
            implicit_outputs=implicit_outputs,
            inputs=inputs,
            implicit_deps=implicit_deps,
            order_only_deps=order_only,
            variables=variables,
            location=location,
        )

    def _parse_rule(self, line: str, number: int, body: list[tuple[int, str]], source: str) -> None:
        parts = line.split()
        if len(parts) != 2:
            raise ParseError("expected exactly one rule name", source, number, line)
        bindings = {}
        for var_number, var_line in body:
            key, value = parse_key_value(var_line, source, var_number)
            bindings[key] = value
        command = bindings.get("command")
        if command is None:
            return
        self.rules[parts[1]] = RuleCommand(
            command=command,
            rsp_file=bindings.get("rspfile"),
            rsp_content=bindings.get("rspfile_content"),
        )


def parse_ninja_text(
    text: str,
    build_dir: str | Path = ".",
    indent: str = DEFAULT_INDENT,
    source: str = "<string>",
) -> list[BuildEdge]:
    """Parse ninja text. ``subninja``/``include`` are resolved against *build_dir*."""
    parser = _NinjaParser(build_dir, indent)
    parser.parse_text(text, source)
    return parser.finish()


def parse_ninja_file(path: str | Path, build_dir: str | Path | None = None, indent: str = DEFAULT_INDENT) -> list[BuildEdge]:
    path = Path(path)
    parser = _NinjaParser(build_dir if build_dir is not None else path.parent, indent)
    parser.parse_file(path)
    return parser.finish()


def parse_build_ninja(build_dir: str | Path, indent: str = DEFAULT_INDENT) -> list[BuildEdge]:
    """Parse ``<build_dir>/build.ninja`` and every file it pulls in."""
    build_dir = Path(build_dir)
    edges = parse_ninja_file(build_dir / "build.ninja", build_dir, indent)
    logger.info("Parsed %d build edges from %s", len(edges), build_dir)
    return edges
