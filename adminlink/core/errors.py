"""Error types raised while linking boundary levels."""


class AdminLinkError(Exception):
    """Base class for all boundary linking errors."""


class GeometryError(AdminLinkError):
    """A predicate or bounding-box call failed for one geometry or part pair.

    Always recovered locally: the pair is treated as non-matching.
    """


class StructuralError(AdminLinkError):
    """An input record lacks required geometry or property fields."""

    def __init__(self, position: int, reason: str):
        super().__init__(f"Invalid feature at index {position + 1}: {reason}")
        self.position = position
        self.reason = reason


class InputSourceError(AdminLinkError):
    """A required input source is missing or unparsable; the run cannot continue."""
