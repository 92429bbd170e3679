from dataclasses import replace

import numpy as np
import pytest

from floortouch.core.analytics.pipeline import CALIBRATED, UNINITIALIZED, TouchPipeline
from floortouch.core.video_sources.base import SyntheticSource


def test_process_with_profile_reports_stage_timings():
    pipeline = TouchPipeline()
    depth = np.full((48, 64), 1200, dtype=np.uint16)

    summary, vis, timings = pipeline.process_with_profile(depth)

    for key in (
        "intensity_ms",
        "subtract_ms",
        "threshold_ms",
        "regions_ms",
        "estimate_ms",
        "overlay_ms",
        "pipeline_ms",
    ):
        assert key in timings
        assert timings[key] >= 0.0
    assert summary.profile == timings
    assert summary.frame_id == 1
    assert summary.frame_size == (64, 48)
    assert vis.shape == (48, 64)


def test_frame_counter_and_summary_without_profile():
    pipeline = TouchPipeline()
    depth = np.full((48, 64), 1200, dtype=np.uint16)
    first, _ = pipeline.process_frame(depth)
    second, _ = pipeline.process_frame(depth)
    assert (first.frame_id, second.frame_id) == (1, 2)
    assert second.profile is None
    assert second.calibrated is True
    assert second.region_count == 0


def test_default_constants_detect_synthetic_foot():
    source = SyntheticSource(seed=0)
    pipeline = TouchPipeline()

    depth, _ = source.read()
    _, touch = pipeline.process(depth)
    assert touch is None

    depth, _ = source.read()
    _, touch = pipeline.process(depth)
    expected = source.foot_center(1)
    assert touch is not None
    assert touch.x == pytest.approx(expected[0], abs=1.5)
    assert touch.y == pytest.approx(expected[1], abs=1.5)


def test_configure_keeps_baseline_unless_depth_conversion_changes():
    pipeline = TouchPipeline()
    pipeline.process(np.full((48, 64), 1200, dtype=np.uint16))

    pipeline.configure(replace(pipeline.config, lower_bound=5, min_points=40))
    assert pipeline.state == CALIBRATED
    assert (pipeline.config.lower_bound, pipeline.config.min_points) == (5, 40)

    pipeline.configure(replace(pipeline.config, depth_scale=0.003))
    assert pipeline.state == UNINITIALIZED

    with pytest.raises(ValueError):
        pipeline.configure(replace(pipeline.config, lower_bound=60, upper_bound=50))
    assert pipeline.config.lower_bound == 5
