"""Decoding helpers shared by the generator adapters.

All helpers take the raw, space-joined variable text of an edge and return
plain lists; splitting is whitespace-based.
"""

from __future__ import annotations

from enum import Enum

from ninja_to_soong.models.edge import LinkLibraries
from ninja_to_soong.paths import canonicalize_path, file_ext, file_name

# Provided by the platform's libc; never turned into module references.
SYSTEM_LIBS = {"dl", "m", "c", "pthread", "atomic"}


class LibraryKind(Enum):
    SHARED = "shared"
    STATIC = "static"
    STATIC_WHOLE = "static_whole"


def _ext_parts(token: str) -> list[str]:
    return file_ext(file_name(token)).split(".")


def is_static_archive(token: str) -> bool:
    return "a" in _ext_parts(token)


def is_shared_object(token: str) -> bool:
    return "so" in _ext_parts(token)


def is_library_token(token: str) -> bool:
    """True for ``-lfoo``, ``*.a`` and ``*.so*`` tokens."""
    if token.startswith("-Wl,"):
        return False
    return token.startswith("-l") or is_static_archive(token) or is_shared_object(token)


def is_linkage_marker(token: str) -> bool:
    return token in (
        "-Wl,-Bstatic",
        "-Wl,-Bdynamic",
        "-Wl,--whole-archive",
        "-Wl,--no-whole-archive",
    )


def get_libs(text: str, kind: LibraryKind) -> list[str]:
    """Return the libraries of *kind* linked by *text*.

    ``-Wl,-Bstatic``/``-Wl,-Bdynamic`` switch the linkage of following ``-l``
    flags, ``-Wl,--whole-archive`` opens a region whose archives are linked
    whole, ``-Wl,--no-whole-archive`` closes it.
    """
    libs = []
    state: LibraryKind | None = None
    saved_state: LibraryKind | None = None
    for token in text.split():
        if token == "-pthread":
            continue
        if token.startswith("-Wl,"):
            arg = token[len("-Wl,") :]
            if arg == "-Bstatic":
                state = LibraryKind.STATIC
            elif arg == "-Bdynamic":
                state = LibraryKind.SHARED
            elif arg == "--whole-archive":
                saved_state = state
                state = LibraryKind.STATIC_WHOLE
            elif arg == "--no-whole-archive":
                state = saved_state
            continue
        if token.startswith("-l"):
            name = token[2:]
            if name in SYSTEM_LIBS:
                continue
            if state == kind or (state is None and kind == LibraryKind.SHARED):
                libs.append(f"lib{name}")
        elif token.startswith("-"):
            continue
        elif is_static_archive(token):
            whole = state == LibraryKind.STATIC_WHOLE
            if (kind == LibraryKind.STATIC and not whole) or (kind == LibraryKind.STATIC_WHOLE and whole):
                libs.append(token)
        elif is_shared_object(token):
            if kind == LibraryKind.SHARED:
                libs.append(token)
    return libs


def get_link_libraries(text: str) -> LinkLibraries:
    return LinkLibraries(
        static=get_libs(text, LibraryKind.STATIC),
        shared=get_libs(text, LibraryKind.SHARED),
        static_whole=get_libs(text, LibraryKind.STATIC_WHOLE),
    )


def get_defines(text: str) -> list[str]:
    defines = []
    for define in text.split("-D"):
        define = define.strip()
        if define:
            defines.append(define.replace("\\(", "(").replace("\\)", ")"))
    return defines


def get_includes(text: str, build_path: str) -> list[str]:
    includes = []
    for token in text.split():
        if token == "-isystem":
            continue
        if token.startswith("-I"):
            token = token[2:]
        if token:
            includes.append(canonicalize_path(token, build_path))
    return includes


def get_link_flags(text: str) -> tuple[str | None, list[str]]:
    """Split link flags into (version script, remaining flags)."""
    version_script = None
    flags = []
    expect_script = False
    for token in text.split():
        if expect_script:
            expect_script = False
            if token.startswith("-Wl,"):
                version_script = token[len("-Wl,") :]
                continue
        if token.startswith("-Wl,--version-script="):
            version_script = token[len("-Wl,--version-script=") :]
        elif token.startswith("-Wl,--version-script,"):
            version_script = token[len("-Wl,--version-script,") :]
        elif token == "-Wl,--version-script":
            expect_script = True
        else:
            flags.append(token)
    return version_script, flags


def get_cflags(text: str) -> list[str]:
    return text.split()


def get_sources(inputs: list[str], build_path: str) -> list[str]:
    return [canonicalize_path(path, build_path) for path in inputs]


def get_cmd(command: str) -> str:
    """Unescape ninja's ``$ `` (escaped space)."""
    return command.replace("$ ", " ")
