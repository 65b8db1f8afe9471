"""Exceptions raised by the transform fusion graph."""


class FrameFusionError(Exception):
    """Base class for all framefuse errors."""


class UnknownFrameError(FrameFusionError, KeyError):
    """An operation referenced a frame that was never added to the graph."""

    def __init__(self, frame: str) -> None:
        super().__init__(frame)
        self.frame = frame

    def __str__(self) -> str:
        return f"Unknown frame: {self.frame!r}"


class InconsistentGraphError(FrameFusionError):
    """A step of a reconstructed path has no matching edge."""

    def __init__(self, source: str, target: str) -> None:
        super().__init__(f"No edge between consecutive path frames {source!r} -> {target!r}")
        self.source = source
        self.target = target


class DegenerateAverageError(FrameFusionError):
    """An average was requested without any accumulated samples."""


class MalformedConfigError(FrameFusionError, ValueError):
    """The seed document is missing fields or holds invalid values."""
