"""Overlay drawing helpers (OpenCV)."""

from __future__ import annotations

import cv2
import numpy as np

from floortouch.core.types import IntensityFrame, TouchPoint

MARKER_RADIUS = 20
MARKER_THICKNESS = 2
MARKER_INTENSITY = 100


def draw_touch(
    frame: IntensityFrame,
    touch: TouchPoint | None,
    radius: int = MARKER_RADIUS,
    thickness: int = MARKER_THICKNESS,
    intensity: int = MARKER_INTENSITY,
) -> IntensityFrame:
    """Return a copy of `frame` with a circle drawn around the touch point."""

    img = np.array(frame, copy=True)
    if touch is None:
        return img
    center = (int(round(touch.x)), int(round(touch.y)))
    color = (int(intensity),) * 3 if img.ndim == 3 else int(intensity)
    cv2.circle(img, center, int(radius), color, int(thickness), cv2.LINE_8)
    return img
