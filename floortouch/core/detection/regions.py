"""Connected-region extraction and dominant-region selection."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

import cv2
import numpy as np

from floortouch.core.types import IntensityFrame, Region


def extract_regions(frame: IntensityFrame) -> Iterator[Region]:
    """Yield the outer boundary of every non-zero cluster in `frame`.

    Holes are not reported. Every boundary pixel is kept as a vertex (no chain
    approximation), so `Region.point_count` tracks the blob perimeter. The
    returned iterator is single-pass; the input frame is left untouched.
    """

    contours, _hierarchy = cv2.findContours(
        np.ascontiguousarray(frame, dtype=np.uint8).copy(),
        cv2.RETR_EXTERNAL,
        cv2.CHAIN_APPROX_NONE,
    )
    for i, contour in enumerate(contours):
        yield Region(points=contour.reshape(-1, 2).astype(np.int32, copy=False), index=i)


def region_area(points: np.ndarray) -> float:
    """Return the (non-negative) polygon area enclosed by `points`."""

    pts = np.asarray(points)
    if len(pts) < 3:
        return 0.0
    return float(abs(cv2.contourArea(pts.reshape(-1, 1, 2).astype(np.int32, copy=False))))


def select_dominant(regions: Iterable[Region]) -> Region | None:
    """Return the region with the largest positive area, or `None`.

    Regions that enclose no area (single pixels, one-pixel lines) never win,
    so an input made only of those yields `None`. Ties resolve to the region
    encountered first.
    """

    best: Region | None = None
    best_area = 0.0
    for region in regions:
        area = region_area(region.points)
        if area > best_area:
            best = region
            best_area = area
    return best
