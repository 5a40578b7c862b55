"""Exceptions raised by the graph container and the layout pipeline."""


class LayoutError(Exception):
    """Base class for every error raised by layered-layout."""


class StructuralViolationError(LayoutError, ValueError):
    """A hierarchy change would make a node its own ancestor."""


class InvalidOperationError(LayoutError):
    """A compound-only operation was called on a flat graph."""


class PreconditionError(LayoutError, KeyError):
    """A traversal was started from a node the graph does not contain."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class DegenerateGeometryError(LayoutError, ValueError):
    """A boundary intersection was requested from the rectangle's own centre."""


class ConfigurationError(LayoutError, ValueError):
    """A graph-level option has a value outside its accepted set."""


class DocumentError(LayoutError, ValueError):
    """A JSON graph document is missing a required field or has the wrong shape."""
