"""Depth-to-intensity conversion and background subtraction."""

from __future__ import annotations

import cv2
import numpy as np

from floortouch.core.errors import FrameShapeError
from floortouch.core.types import DepthFrame, IntensityFrame

DEFAULT_DEPTH_GAIN = 32.0
# Maps the expected in-range depth delta into the visible 0..255 band.
DEFAULT_DEPTH_SCALE = 0.006
DEFAULT_DIFFERENCE_GAIN = 2.0

_UINT16_MAX = float(np.iinfo(np.uint16).max)


def depth_to_intensity(
    depth: DepthFrame,
    depth_gain: float = DEFAULT_DEPTH_GAIN,
    depth_scale: float = DEFAULT_DEPTH_SCALE,
) -> IntensityFrame:
    """Convert raw depth samples into an 8-bit intensity frame.

    The depth is first amplified by `depth_gain`, saturating at the 16-bit
    maximum, then rescaled by `depth_scale`, rounded and saturated into 0..255.
    """

    if depth.ndim != 2:
        raise FrameShapeError.not_2d(depth.shape)
    amplified = np.clip(depth.astype(np.float32) * float(depth_gain), 0.0, _UINT16_MAX)
    return cv2.convertScaleAbs(amplified, alpha=float(depth_scale))


def subtract(
    current: IntensityFrame,
    baseline: IntensityFrame,
    gain: float = DEFAULT_DIFFERENCE_GAIN,
) -> IntensityFrame:
    """Return `abs(current - baseline) * gain`, saturated at 255.

    Raises:
        FrameShapeError: when the two frames do not share dimensions.
    """

    if current.shape != baseline.shape:
        raise FrameShapeError(expected=baseline.shape, actual=current.shape)
    diff = cv2.absdiff(current, baseline)
    if gain == 1.0:
        return diff
    return cv2.convertScaleAbs(diff, alpha=float(gain))
