"""Custom exceptions for ninja-to-soong."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ninja_to_soong.models.edge import BuildEdge


class ConverterError(Exception):
    """Base exception for all conversion errors."""


class ParseError(ConverterError):
    """Raised when a build.ninja file is malformed."""

    def __init__(self, message: str, source: str = "<string>", line_number: int = 0, line: str = ""):
        self.source = source
        self.line_number = line_number
        self.line = line
        where = f"{source}:{line_number}" if line_number else source
        detail = f": '{line}'" if line else ""
        super().__init__(f"{where}: {message}{detail}")


class GraphError(ConverterError):
    """Raised when an edge cannot be classified or resolved."""

    def __init__(self, message: str, edge: BuildEdge | None = None):
        self.edge = edge
        if edge is not None:
            message = f"{message}\n{edge.describe()}"
        super().__init__(message)


class PolicyViolation(ConverterError):
    """Raised when project policy data is inconsistent with what the engine expects."""


class PropertyError(ConverterError):
    """Raised when a module property is added twice or extended with the wrong type."""


class ConfigureError(ConverterError):
    """Raised when an external build-configuration tool fails."""


class ProjectConfigError(ConverterError):
    """Raised when a project file cannot be loaded or validated."""
