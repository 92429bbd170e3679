"""Floor calibration.

Holds the baseline intensity frame that represents the empty floor. The
calibrator is owned by a pipeline instance so several pipelines can run side by
side with independent baselines.
"""

from __future__ import annotations

import logging

import numpy as np

from floortouch.core.types import IntensityFrame

logger = logging.getLogger(__name__)


class FloorCalibrator:
    """Single-slot store for the calibrated floor baseline."""

    def __init__(self) -> None:
        self._baseline: IntensityFrame | None = None

    @property
    def baseline(self) -> IntensityFrame | None:
        return self._baseline

    @property
    def is_calibrated(self) -> bool:
        return self._baseline is not None

    def calibrate(self, frame: IntensityFrame) -> IntensityFrame:
        """Store a copy of `frame` as the baseline and return it."""

        self._baseline = np.array(frame, dtype=np.uint8, copy=True)
        h, w = self._baseline.shape[:2]
        logger.info("Floor baseline captured (%dx%d)", w, h)
        return self._baseline

    def clear(self) -> None:
        """Drop the baseline; the next processed frame recaptures it."""

        if self._baseline is not None:
            logger.info("Floor baseline cleared")
        self._baseline = None
