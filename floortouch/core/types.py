"""Shared type definitions used across the package.

This module intentionally centralizes small, stable types (frames, regions,
touch points and per-frame summaries) so detection and pipeline code can stay
strongly typed.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

# uint16, shape (H, W)
DepthFrame = np.ndarray
# uint8, shape (H, W)
IntensityFrame = np.ndarray
# uint8, shape (H, W, 3), BGR
ColorFrame = np.ndarray

Point = tuple[float, float]


@dataclass
class Region:
    """Outer boundary of one connected foreground blob."""

    points: np.ndarray  # shape: (N, 2) -> x, y
    index: int = 0

    @property
    def point_count(self) -> int:
        return int(len(self.points))


@dataclass
class TouchPoint:
    """Estimated floor contact for the current frame."""

    x: float
    y: float
    size: int
    area: float = 0.0
    axes: tuple[float, float] = (0.0, 0.0)
    angle: float = 0.0

    @property
    def center(self) -> Point:
        return (self.x, self.y)


@dataclass
class FrameSummary:
    """Metadata payload associated with a processed frame."""

    frame_id: int
    timestamp: float
    calibrated: bool
    touch: TouchPoint | None
    region_count: int
    fps: float
    calibrated_now: bool = False
    frame_size: tuple[int, int] = (0, 0)
    profile: dict[str, float] | None = None
