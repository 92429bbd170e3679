"""Touch-point estimation via least-squares ellipse fitting."""

from __future__ import annotations

import logging
import math

import cv2
import numpy as np

from floortouch.core.detection.regions import region_area
from floortouch.core.errors import InsufficientPointsError
from floortouch.core.types import Point, Region, TouchPoint

logger = logging.getLogger(__name__)

DEFAULT_MIN_POINTS = 100
# cv2.fitEllipse needs at least five points.
MIN_FIT_POINTS = 5


def fit_ellipse(points: np.ndarray) -> tuple[Point, tuple[float, float], float]:
    """Fit an ellipse to `points` and return `(center, axes, angle)`.

    Raises:
        InsufficientPointsError: when fewer than five points are given.
    """

    pts = np.asarray(points, dtype=np.float32).reshape(-1, 2)
    if len(pts) < MIN_FIT_POINTS:
        raise InsufficientPointsError(len(pts), MIN_FIT_POINTS)
    (cx, cy), (ax, ay), angle = cv2.fitEllipse(pts)
    return (float(cx), float(cy)), (float(ax), float(ay)), float(angle)


def estimate(region: Region | None, min_points: int = DEFAULT_MIN_POINTS) -> TouchPoint | None:
    """Return the touch point for `region`, or `None` if it looks like noise.

    Regions whose boundary has `min_points` points or fewer are rejected, as
    are regions too small to fit an ellipse at all.
    """

    if region is None:
        return None
    count = region.point_count
    if count <= int(min_points) or count < MIN_FIT_POINTS:
        logger.debug("Region %d rejected (%d boundary points)", region.index, count)
        return None

    (cx, cy), axes, angle = fit_ellipse(region.points)
    if not (math.isfinite(cx) and math.isfinite(cy)):
        logger.debug("Ellipse fit for region %d is degenerate", region.index)
        return None
    return TouchPoint(
        x=cx,
        y=cy,
        size=count,
        area=region_area(region.points),
        axes=axes,
        angle=angle,
    )
