"""Path helpers shared by the parser, adapters and generator.

Ninja paths are handled as plain POSIX strings: they are compared and
substituted textually, never resolved against the real file system.
"""

from __future__ import annotations

import posixpath


def canonicalize_path(path: str, build_path: str) -> str:
    """Make *path* absolute relative to *build_path*, resolving ``..`` lexically."""
    if posixpath.isabs(path):
        return path
    return posixpath.normpath(posixpath.join(build_path, path))


def strip_prefix(path: str, prefix: str) -> str:
    """Return *path* relative to *prefix*, or *path* unchanged when outside it."""
    if not prefix:
        return path
    prefix = prefix.rstrip("/")
    if path == prefix:
        return ""
    if path.startswith(prefix + "/"):
        return path[len(prefix) + 1 :]
    return path


def is_under(path: str, prefix: str) -> bool:
    if not prefix:
        return False
    prefix = prefix.rstrip("/")
    return path == prefix or path.startswith(prefix + "/")


def path_to_id(path: str) -> str:
    """Turn a path into a module identifier: ``a/b.so`` -> ``a_b_so``."""
    return path.replace("/", "_").replace(".", "_")


def file_name(path: str) -> str:
    return posixpath.basename(path)


def file_stem(path: str) -> str:
    """File name up to its first dot: ``lib/libfoo.so.1`` -> ``libfoo``."""
    return file_name(path).split(".", 1)[0]


def file_ext(path: str) -> str:
    """Everything after the first dot of the file name (may be empty)."""
    name = file_name(path)
    return name.split(".", 1)[1] if "." in name else ""
