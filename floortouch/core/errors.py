"""Exception hierarchy.

Contract violations are programming errors and are never caught inside the
core. Empty results (no region, region too small, no frame yet) are not errors
and are returned as `None`.
"""

from __future__ import annotations


class FloorTouchError(Exception):
    """Base class for all package errors."""


class ContractViolation(FloorTouchError):
    """A caller broke a precondition of a core operation."""


class FrameShapeError(ContractViolation, ValueError):
    """A frame has the wrong shape: not 2-D, or not matching its counterpart."""

    def __init__(
        self, expected: tuple[int, ...] | None, actual: tuple[int, ...], message: str | None = None
    ) -> None:
        self.expected = tuple(expected) if expected is not None else None
        self.actual = tuple(actual)
        super().__init__(message or f"frame shape mismatch: expected {self.expected}, got {self.actual}")

    @classmethod
    def not_2d(cls, actual: tuple[int, ...]) -> FrameShapeError:
        """A single-channel 2-D frame was required."""

        return cls(None, actual, f"expected a 2-D single-channel frame, got shape {tuple(actual)}")


class InsufficientPointsError(ContractViolation, ValueError):
    """Too few boundary points for an ellipse fit."""

    def __init__(self, count: int, required: int = 5) -> None:
        self.count = int(count)
        self.required = int(required)
        super().__init__(f"ellipse fit needs at least {self.required} points, got {self.count}")


class SourceUnavailableError(FloorTouchError, RuntimeError):
    """The frame source cannot deliver frames (device lost or stream exhausted)."""
