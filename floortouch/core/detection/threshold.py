"""Band-pass noise suppression.

Two OpenCV thresholds run in a fixed order: the upper cut first, then the lower
cut. With the default "zero" policy everything above `upper` is treated as an
outlier (passing objects, glare) and removed, and everything at or below
`lower` is treated as floor noise. What survives lies in `(lower, upper]`.
"""

from __future__ import annotations

from typing import Literal

import cv2

from floortouch.core.types import IntensityFrame

DEFAULT_LOWER_BOUND = 10
DEFAULT_UPPER_BOUND = 50

ClipMode = Literal["zero", "clamp"]


def validate_bounds(lower: int, upper: int) -> tuple[int, int]:
    """Return `(lower, upper)` as ints, raising `ValueError` if out of range."""

    lo, hi = int(lower), int(upper)
    if not 0 <= lo <= 255 or not 0 <= hi <= 255:
        raise ValueError("threshold bounds must be in [0, 255]")
    if lo > hi:
        raise ValueError("lower bound must be <= upper bound")
    return lo, hi


def threshold(
    frame: IntensityFrame,
    lower: int = DEFAULT_LOWER_BOUND,
    upper: int = DEFAULT_UPPER_BOUND,
    clip_mode: ClipMode = "zero",
) -> IntensityFrame:
    """Apply the upper then lower cut and return a new frame."""

    lo, hi = validate_bounds(lower, upper)
    if clip_mode == "zero":
        _, out = cv2.threshold(frame, hi, 0, cv2.THRESH_TOZERO_INV)
    elif clip_mode == "clamp":
        _, out = cv2.threshold(frame, hi, 0, cv2.THRESH_TRUNC)
    else:
        raise ValueError("clip_mode must be zero|clamp")
    _, out = cv2.threshold(out, lo, 0, cv2.THRESH_TOZERO)
    return out
