"""Rewrite custom-command strings into genrule ``cmd`` strings.

Paths in the command are replaced by ``$(location ...)`` references in a
fixed order: outputs, then inputs, then dependencies. Every replacement is
first stored as an opaque placeholder in a ``LocationTable`` and expanded at
the very end, so text produced by one step is never matched by a later one
(an input that is a prefix of an output cannot corrupt the output's
reference).
"""

from __future__ import annotations

import logging
import re

from ninja_to_soong.models.edge import RuleCommand
from ninja_to_soong.paths import file_name, strip_prefix

logger = logging.getLogger(__name__)

_INTERPRETER_RE = re.compile(r"(?:(?<=\s)|^)(?:\S*/)?python[0-9.]*\s+")
# Placeholders are built from private-use characters, which never match \w.
_PLACEHOLDER_RE = re.compile("\ue000(.)\ue001")
_PLACEHOLDER_BASE = 0xF0000
_COPY_RE = re.compile(r"^\s*(?:\S*/)?(?:cp|cmake\s+-E\s+(?:copy|copy_if_different))\s+(\S+)\s+(\S+)\s*$")

# Characters that extend a path token on either side.
_PATH_CHARS = r"\w./+-"


class LocationTable:
    """Placeholders for already rewritten text."""

    def __init__(self) -> None:
        self._values: list[str] = []

    def hold(self, text: str) -> str:
        self._values.append(text)
        return "\ue000" + chr(_PLACEHOLDER_BASE + len(self._values) - 1) + "\ue001"

    def location(self, target: str) -> str:
        return self.hold(f"$(location {target})")

    def expand(self, text: str) -> str:
        return _PLACEHOLDER_RE.sub(lambda m: self._values[ord(m.group(1)) - _PLACEHOLDER_BASE], text)


def _path_pattern(path: str, after_space: bool = False) -> re.Pattern:
    before = r"(?<=\s)" if after_space else rf"(?<![{_PATH_CHARS}])"
    return re.compile(before + re.escape(path) + rf"(?![{_PATH_CHARS}])")


def _by_length(paths) -> list[str]:
    return sorted(set(p for p in paths if p), key=lambda p: (-len(p), p))


def strip_interpreter(cmd: str) -> str:
    """Step 1: drop ``python3 `` / ``/usr/bin/python3.11 `` invocations."""
    return _INTERPRETER_RE.sub("", cmd)


def strip_build_path(cmd: str, build_path: str) -> str:
    """Step 2: make build-tree paths relative to the build directory."""
    return cmd.replace(build_path.rstrip("/") + "/", "")


def replace_outputs(cmd: str, outputs: dict[str, str], table: LocationTable) -> str:
    """Step 3: output path (or a space-prefixed basename) -> ``$(location out)``."""
    patterns: list[tuple[str, bool, str]] = []
    for output, mapped in outputs.items():
        patterns.append((output, False, mapped))
        patterns.append((file_name(output), True, mapped))
    patterns.sort(key=lambda item: (-len(item[0]), item[1], item[0]))
    for text, after_space, mapped in patterns:
        if not text:
            continue
        cmd = _path_pattern(text, after_space).sub(lambda _m, m=mapped: table.location(m), cmd)
    return cmd


def replace_inputs(cmd: str, inputs: dict[str, str], table: LocationTable) -> str:
    """Step 4: source input -> ``$(location src/relative/path)``."""
    for raw in _by_length(inputs):
        cmd = _path_pattern(raw).sub(lambda _m, r=inputs[raw]: table.location(r), cmd)
    return cmd


def replace_deps(cmd: str, deps: dict[str, str], table: LocationTable) -> str:
    """Step 5: path produced by another module -> ``$(location :module)``."""
    for raw in _by_length(deps):
        cmd = _path_pattern(raw).sub(lambda _m, r=deps[raw]: table.location(":" + r), cmd)
    return cmd


def replace_source_root(
    cmd: str, src_path: str, anchor: str | None, table: LocationTable
) -> tuple[str, str | None]:
    """Step 6: residual source-root references, resolved from an anchor source.

    Returns the command and the anchor when it was used (it must then be
    listed in ``srcs``).
    """
    src_path = src_path.rstrip("/")
    if not src_path:
        return cmd, None
    # The source root is usually followed by "/<relative path>".
    pattern = re.compile(rf"(?<![{_PATH_CHARS}]){re.escape(src_path)}(?![\w.+-])")
    if not pattern.search(cmd):
        return cmd, None
    if anchor is None:
        logger.warning("No anchor source to rewrite '%s' in command: %s", src_path, table.expand(cmd))
        return cmd, None
    depth = anchor.count("/")
    root = f"$$(dirname $(location {anchor}))" + "/.." * depth
    return pattern.sub(lambda _m: table.hold(root), cmd), anchor


def add_response_file(cmd: str, rsp_file: str, rsp_content: str) -> str:
    """Step 7: write the response file into $(genDir) before running *cmd*."""
    rsp = f"$(genDir)/{rsp_file}"
    cmd = cmd.replace("${rspfile}", rsp).replace("$rspfile", rsp)
    return f'echo "{rsp_content}" > {rsp} && {cmd}'


def _substitute_paths(
    text: str,
    build_path: str,
    outputs: dict[str, str],
    inputs: dict[str, str],
    deps: dict[str, str],
    table: LocationTable,
) -> str:
    text = strip_build_path(text, build_path)
    text = replace_outputs(text, outputs, table)
    text = replace_inputs(text, inputs, table)
    return replace_deps(text, deps, table)


def rewrite_command(
    command: RuleCommand,
    build_path: str,
    src_path: str,
    outputs: dict[str, str],
    inputs: dict[str, str],
    deps: dict[str, str],
    anchor: str | None = None,
) -> tuple[str, str | None]:
    """Run the full rewrite pipeline.

    Args:
        command: Decoded command, with optional response file.
        build_path: Absolute build directory.
        src_path: Absolute source directory.
        outputs: Build-relative output path -> name listed in ``out``.
        inputs: Input path as written in the command -> source-relative path.
        deps: Input path as written in the command -> producing module name.
        anchor: Source-relative file used for residual source-root references.

    Returns:
        (rewritten command, anchor source to add to ``srcs`` or None)
    """
    table = LocationTable()
    cmd = strip_interpreter(command.command)
    cmd = _substitute_paths(cmd, build_path, outputs, inputs, deps, table)
    cmd, used_anchor = replace_source_root(cmd, src_path, anchor, table)
    if command.rsp_file:
        content = _substitute_paths(command.rsp_content or "", build_path, outputs, inputs, deps, table)
        rsp_file = strip_prefix(command.rsp_file, build_path)
        cmd = add_response_file(cmd, rsp_file, content)
    return table.expand(cmd), used_anchor


def parse_copy_command(cmd: str) -> tuple[str, str] | None:
    """(source, destination) when *cmd* is a plain two-argument copy."""
    match = _COPY_RE.match(cmd)
    if match is None:
        return None
    return match.group(1), match.group(2)
