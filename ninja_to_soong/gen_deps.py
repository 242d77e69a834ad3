"""Generated dependencies: files produced at build time that the blueprint needs."""

from __future__ import annotations

import logging
import re
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)

_LINE_DIRECTIVE_RE = re.compile(r"^\s*#\s*line\b.*$\n?", re.MULTILINE)
_STRIP_LINE_SUFFIXES = (".c", ".cpp", ".h")


def write_gen_deps(path: str | Path, deps: list[str]) -> Path:
    """Write one dependency per line, sorted and de-duplicated."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = sorted(set(deps))
    path.write_text("".join(f"{dep}\n" for dep in lines))
    logger.info("Wrote %d generated dependencies to %s", len(lines), path)
    return path


def strip_line_directives(text: str) -> str:
    """Remove ``#line`` directives, which embed build-machine paths."""
    return _LINE_DIRECTIVE_RE.sub("", text)


def copy_gen_deps(deps: list[str], build_path: str | Path, dst: str | Path) -> list[Path]:
    """Copy *deps* (relative to *build_path*) under *dst*, keeping relative paths."""
    build_path = Path(build_path)
    dst = Path(dst)
    copied = []
    for dep in sorted(set(deps)):
        src = build_path / dep
        if not src.is_file():
            logger.warning("Generated dependency not found: %s", src)
            continue
        target = dst / dep
        target.parent.mkdir(parents=True, exist_ok=True)
        if src.suffix in _STRIP_LINE_SUFFIXES:
            target.write_text(strip_line_directives(src.read_text(errors="replace")))
        else:
            shutil.copyfile(src, target)
        copied.append(target)
    logger.info("Copied %d generated dependencies to %s", len(copied), dst)
    return copied
