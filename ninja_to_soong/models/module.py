"""Soong module model: a property bag with a deterministic text rendering.

Property values are plain Python values, discriminated by type:

    str          -> string property          ``name: "foo",``
    list[str]    -> string-set property      ``srcs: ["a.c"],``
    bool         -> boolean property         ``optimize_for_size: true,``
    dict         -> nested property block    ``arch: { arm64: { ... } },``

String sets are de-duplicated and sorted when rendered, so the insertion
order of values never leaks into the generated file.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, Union

from ninja_to_soong.exceptions import PropertyError

PropValue = Union[str, list[str], bool, dict]

INDENT = "    "

# Fixed rendering order. Keys not listed here render after the listed ones of
# the same value type, alphabetically.
STR_KEYS = ["name", "stem", "version_script", "cmd"]
SET_KEYS = [
    "srcs",
    "out",
    "tools",
    "cflags",
    "ldflags",
    "shared_libs",
    "static_libs",
    "whole_static_libs",
    "local_include_dirs",
    "export_include_dirs",
    "header_libs",
    "generated_headers",
    "visibility",
    "license_kinds",
    "license_text",
    "default_visibility",
    "default_applicable_licenses",
]
BOOL_KEYS = ["optimize_for_size", "use_clang_lld", "host_supported", "vendor_available"]


class PropKind(Enum):
    STR = "str"
    STR_SET = "str_set"
    BOOL = "bool"
    NESTED = "nested"


def prop_kind(value: PropValue) -> PropKind:
    """Return the variant of a property value (bool is checked before str)."""
    if isinstance(value, bool):
        return PropKind.BOOL
    if isinstance(value, str):
        return PropKind.STR
    if isinstance(value, (list, tuple, set, frozenset)):
        return PropKind.STR_SET
    if isinstance(value, dict):
        return PropKind.NESTED
    raise PropertyError(f"unsupported property value type: {type(value).__name__}")


def _quote(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _ordered_keys(props: dict[str, PropValue]) -> list[str]:
    buckets: dict[PropKind, list[str]] = {kind: [] for kind in PropKind}
    for key, value in props.items():
        buckets[prop_kind(value)].append(key)

    ordered: list[str] = []
    for kind, known in (
        (PropKind.STR, STR_KEYS),
        (PropKind.STR_SET, SET_KEYS),
        (PropKind.BOOL, BOOL_KEYS),
        (PropKind.NESTED, []),
    ):
        present = buckets[kind]
        ordered.extend(key for key in known if key in present)
        ordered.extend(sorted(key for key in present if key not in known))
    return ordered


def render_props(props: dict[str, PropValue], level: int = 1) -> str:
    """Render ``key: value,`` lines for *props* at the given indent level."""
    indent = INDENT * level
    result = ""
    for key in _ordered_keys(props):
        value = props[key]
        kind = prop_kind(value)
        if kind is PropKind.STR:
            if not value:
                continue
            rendered = _quote(value)
        elif kind is PropKind.BOOL:
            rendered = "true" if value else "false"
        elif kind is PropKind.STR_SET:
            values = sorted(set(v for v in value if v))
            if not values:
                continue
            if len(values) == 1:
                rendered = f"[{_quote(values[0])}]"
            else:
                inner = "".join(f"{INDENT * (level + 1)}{_quote(v)},\n" for v in values)
                rendered = f"[\n{inner}{indent}]"
        else:
            body = render_props(value, level + 1)
            if not body:
                continue
            rendered = f"{{\n{body}{indent}}}"
        result += f"{indent}{key}: {rendered},\n"
    return result


class SoongModule:
    """One Soong module declaration, e.g. ``cc_library_shared { ... }``."""

    def __init__(self, kind: str, props: dict[str, PropValue] | None = None) -> None:
        self.kind = kind
        self.props: dict[str, PropValue] = dict(props or {})

    def __repr__(self) -> str:
        return f"SoongModule({self.kind!r}, name={self.name!r})"

    @classmethod
    def new_copy_genrule(cls, name: str, src: str, out: str) -> SoongModule:
        return (
            cls("genrule")
            .add_prop("name", name)
            .add_prop("cmd", "cp $(in) $(out)")
            .add_prop("srcs", [src])
            .add_prop("out", [out])
        )

    @classmethod
    def new_symlink_genrule(cls, name: str, src: str, out: str) -> SoongModule:
        return (
            cls("genrule")
            .add_prop("name", name)
            .add_prop("cmd", "ln -s $(in) $(out)")
            .add_prop("srcs", [src])
            .add_prop("out", [out])
        )

    @property
    def name(self) -> str | None:
        value = self.props.get("name")
        return value if isinstance(value, str) else None

    def add_prop(self, key: str, value: PropValue) -> SoongModule:
        """Add a new property. Adding an existing key is an error."""
        if key in self.props:
            raise PropertyError(f"property '{key}' already set on {self!r}")
        prop_kind(value)
        self.props[key] = list(value) if isinstance(value, (set, frozenset, tuple)) else value
        return self

    def extend_prop(self, key: str, values: list[str], create: bool = False) -> SoongModule:
        """Append *values* to a string-set property.

        With ``create=True`` a missing property is created; otherwise a
        missing property is an error.
        """
        current = self.props.get(key)
        if current is None:
            if not create:
                raise PropertyError(f"cannot extend missing property '{key}' on {self!r}")
            self.props[key] = list(values)
            return self
        if prop_kind(current) is not PropKind.STR_SET:
            raise PropertyError(f"property '{key}' of {self!r} is not a string set")
        current.extend(values)
        return self

    def get_prop(self, key: str) -> PropValue | None:
        return self.props.get(key)

    def pop_prop(self, key: str) -> PropValue | None:
        return self.props.pop(key, None)

    def update_prop(self, key: str, func: Callable[[PropValue], PropValue]) -> SoongModule:
        if key in self.props:
            self.props[key] = func(self.props[key])
        return self

    def prop_names(self) -> list[str]:
        return list(self.props)

    def render(self) -> str:
        return f"{self.kind} {{\n{render_props(self.props)}}}\n"
