"""Touch-detection pipeline orchestration.

This module ties together floor calibration, background subtraction, noise
suppression, region extraction and touch estimation into a single per-frame
processing pipeline.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, replace

import numpy as np

from floortouch.core.analytics.rate import RateMeter
from floortouch.core.detection.background import (
    DEFAULT_DEPTH_GAIN,
    DEFAULT_DEPTH_SCALE,
    DEFAULT_DIFFERENCE_GAIN,
    depth_to_intensity,
    subtract,
)
from floortouch.core.detection.calibration import FloorCalibrator
from floortouch.core.detection.regions import extract_regions, select_dominant
from floortouch.core.detection.threshold import (
    DEFAULT_LOWER_BOUND,
    DEFAULT_UPPER_BOUND,
    threshold,
    validate_bounds,
)
from floortouch.core.detection.touch import DEFAULT_MIN_POINTS, estimate
from floortouch.core.errors import FrameShapeError
from floortouch.core.overlay.draw import MARKER_INTENSITY, MARKER_RADIUS, MARKER_THICKNESS, draw_touch
from floortouch.core.types import DepthFrame, FrameSummary, IntensityFrame, Region, TouchPoint

logger = logging.getLogger(__name__)

UNINITIALIZED = "uninitialized"
CALIBRATED = "calibrated"


@dataclass(frozen=True)
class PipelineConfig:
    """Tuning parameters for `TouchPipeline`."""

    depth_gain: float = DEFAULT_DEPTH_GAIN
    depth_scale: float = DEFAULT_DEPTH_SCALE
    difference_gain: float = DEFAULT_DIFFERENCE_GAIN
    lower_bound: int = DEFAULT_LOWER_BOUND
    upper_bound: int = DEFAULT_UPPER_BOUND
    clip_mode: str = "zero"
    min_points: int = DEFAULT_MIN_POINTS
    marker_radius: int = MARKER_RADIUS
    marker_thickness: int = MARKER_THICKNESS
    marker_intensity: int = MARKER_INTENSITY


class _CountingIterator:
    """Wrap a region iterator and count how many regions it produced."""

    def __init__(self, regions):
        self._it = iter(regions)
        self.count = 0

    def __iter__(self):
        return self

    def __next__(self) -> Region:
        region = next(self._it)
        self.count += 1
        return region


class TouchPipeline:
    """End-to-end per-frame touch detection.

    Responsibilities:
    - own the floor baseline (captured lazily from the first frame)
    - subtract the baseline, suppress noise and find the dominant region
    - estimate a single touch point and draw it on the visualization frame

    The pipeline is not thread-safe; callers that share one instance across
    threads must serialize `process*`, `recalibrate` and `reset`.
    """

    def __init__(self, config: PipelineConfig | None = None) -> None:
        self.config = config or PipelineConfig()
        validate_bounds(self.config.lower_bound, self.config.upper_bound)
        self.calibrator = FloorCalibrator()
        self.frame_id = 0
        self._rate = RateMeter(alpha=0.1)

    @property
    def state(self) -> str:
        return CALIBRATED if self.calibrator.is_calibrated else UNINITIALIZED

    @property
    def baseline(self) -> IntensityFrame | None:
        return self.calibrator.baseline

    def recalibrate(self) -> None:
        """Forget the baseline; the next frame is captured as the new floor."""

        logger.info("Recalibration requested")
        self.calibrator.clear()

    def reset(self, lower: int, upper: int) -> None:
        """Reconfigure the noise band."""

        lo, hi = validate_bounds(lower, upper)
        self.config = replace(self.config, lower_bound=lo, upper_bound=hi)
        logger.info("Noise band reset to (%d, %d]", lo, hi)

    def configure(self, config: PipelineConfig) -> None:
        """Swap the whole tuning set.

        The baseline is kept unless the depth conversion changes, since it is
        stored in intensity units.
        """

        validate_bounds(config.lower_bound, config.upper_bound)
        old = self.config
        self.config = config
        if (old.depth_gain, old.depth_scale) != (config.depth_gain, config.depth_scale):
            logger.info("Depth conversion changed; baseline will be recaptured")
            self.calibrator.clear()

    def to_intensity(self, depth: DepthFrame) -> IntensityFrame:
        """Convert a raw depth frame with the configured gain and scale."""

        return depth_to_intensity(depth, self.config.depth_gain, self.config.depth_scale)

    def _process_internal(
        self, depth: DepthFrame, profile: bool
    ) -> tuple[FrameSummary, IntensityFrame, dict[str, float]]:
        """Process one frame and return (summary, visualization, timings)."""

        timings: dict[str, float] = {}
        cfg = self.config
        t0 = time.perf_counter()

        intensity = self.to_intensity(np.array(depth, copy=True))
        t1 = time.perf_counter()

        calibrated_now = False
        baseline = self.calibrator.baseline
        if baseline is None:
            baseline = self.calibrator.calibrate(intensity)
            calibrated_now = True
        elif baseline.shape != intensity.shape:
            raise FrameShapeError(expected=baseline.shape, actual=intensity.shape)

        delta = subtract(intensity, baseline, cfg.difference_gain)
        t2 = time.perf_counter()

        band = threshold(delta, cfg.lower_bound, cfg.upper_bound, cfg.clip_mode)
        t3 = time.perf_counter()

        regions = _CountingIterator(extract_regions(band))
        dominant = select_dominant(regions)
        t4 = time.perf_counter()

        touch: TouchPoint | None = estimate(dominant, cfg.min_points)
        t5 = time.perf_counter()

        visualization = draw_touch(
            band,
            touch,
            radius=cfg.marker_radius,
            thickness=cfg.marker_thickness,
            intensity=cfg.marker_intensity,
        )
        t6 = time.perf_counter()

        self.frame_id += 1
        fps = self._rate.tick()

        if touch is not None:
            logger.debug(
                "Frame %d: touch at (%.1f, %.1f) size=%d", self.frame_id, touch.x, touch.y, touch.size
            )

        if profile:
            timings["intensity_ms"] = (t1 - t0) * 1000.0
            timings["subtract_ms"] = (t2 - t1) * 1000.0
            timings["threshold_ms"] = (t3 - t2) * 1000.0
            timings["regions_ms"] = (t4 - t3) * 1000.0
            timings["estimate_ms"] = (t5 - t4) * 1000.0
            timings["overlay_ms"] = (t6 - t5) * 1000.0
            timings["pipeline_ms"] = (t6 - t0) * 1000.0

        h, w = intensity.shape[:2]
        summary = FrameSummary(
            frame_id=self.frame_id,
            timestamp=time.time(),
            calibrated=True,
            touch=touch,
            region_count=regions.count,
            fps=fps,
            calibrated_now=calibrated_now,
            frame_size=(w, h),
            profile=dict(timings) if profile else None,
        )
        return summary, visualization, timings

    def process(self, depth: DepthFrame) -> tuple[IntensityFrame, TouchPoint | None]:
        """Process a depth frame and return (visualization, touch point or None)."""

        summary, visualization, _timings = self._process_internal(depth, profile=False)
        return visualization, summary.touch

    def process_frame(self, depth: DepthFrame) -> tuple[FrameSummary, IntensityFrame]:
        """Process a depth frame and return (summary, visualization)."""

        summary, visualization, _timings = self._process_internal(depth, profile=False)
        return summary, visualization

    def process_with_profile(
        self, depth: DepthFrame
    ) -> tuple[FrameSummary, IntensityFrame, dict[str, float]]:
        """Process a depth frame and return (summary, visualization, timings).

        The `timings` dict contains stage durations in milliseconds.
        """

        return self._process_internal(depth, profile=True)
