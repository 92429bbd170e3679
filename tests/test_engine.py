from __future__ import annotations

import time

import numpy as np
import pytest

import floortouch.api.services.engine as engine_mod
from floortouch.core.analytics.pipeline import CALIBRATED, UNINITIALIZED
from floortouch.core.config.settings import TouchSettings
from floortouch.core.video_sources.base import SyntheticSource

PNG_MAGIC = b"\x89PNG"


@pytest.fixture()
def engine() -> engine_mod.TouchEngine:
    settings = TouchSettings(source="synthetic", frame_width=160, frame_height=120, target_fps=0)
    return engine_mod.TouchEngine(settings)


def _frames(n: int = 2):
    src = SyntheticSource(width=160, height=120, foot_radius=30)
    return [src.read() for _ in range(n)]


def test_make_source_synthetic(engine: engine_mod.TouchEngine):
    src = engine._make_source()
    assert isinstance(src, SyntheticSource)
    assert (src.width, src.height) == (160, 120)


def test_start_sets_error_when_source_init_fails(engine: engine_mod.TouchEngine, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(engine, "_make_source", lambda: (_ for _ in ()).throw(RuntimeError("boom")))

    engine.start()
    assert engine.running is False
    assert engine.last_error == "Failed to initialize depth source"


def test_process_one_publishes_summary_and_buffers(engine: engine_mod.TouchEngine):
    (d0, c0), (d1, c1) = _frames()
    engine._process_one(d0, c0)
    engine._process_one(d1, c1)

    summary = engine.latest_summary()
    assert summary is not None
    assert summary.frame_id == 2
    assert summary.touch is not None
    assert engine.pipeline_state() == CALIBRATED
    assert engine.last_error is None

    for kind in ("raw", "depth", "output"):
        png = engine.snapshot_png(kind)
        assert png is not None and png.startswith(PNG_MAGIC)


def test_snapshot_before_first_frame_and_unknown_kind(engine: engine_mod.TouchEngine):
    assert engine.snapshot_png("output") is None
    with pytest.raises(KeyError):
        engine.snapshot_png("thermal")


def test_snapshot_raw_missing_when_source_has_no_color(engine: engine_mod.TouchEngine):
    (d0, _c0), = _frames(1)
    engine._process_one(d0, None)
    assert engine.snapshot_png("raw") is None
    assert engine.snapshot_png("depth") is not None


def test_process_one_records_pipeline_failure(engine: engine_mod.TouchEngine):
    (d0, c0), = _frames(1)
    engine._process_one(d0, c0)
    engine._process_one(np.zeros((10, 10), dtype=np.uint16), None)
    assert engine.last_error == "Pipeline processing failed"
    assert engine.latest_summary().frame_id == 1


def test_recalibrate_and_reset_go_through_pipeline(engine: engine_mod.TouchEngine):
    (d0, c0), = _frames(1)
    engine._process_one(d0, c0)
    engine.recalibrate()
    assert engine.pipeline_state() == UNINITIALIZED

    engine.reset(5, 40)
    assert (engine.pipeline.config.lower_bound, engine.pipeline.config.upper_bound) == (5, 40)
    with pytest.raises(ValueError):
        engine.reset(50, 40)


def test_profile_steps_attach_timings():
    settings = TouchSettings(source="synthetic", frame_width=64, frame_height=48, profile_steps=True, target_fps=0)
    eng = engine_mod.TouchEngine(settings)
    eng._process_one(np.full((48, 64), 1200, dtype=np.uint16), None)
    assert "pipeline_ms" in eng.latest_summary().profile


def test_process_one_publishes_jpeg_with_its_summary(engine: engine_mod.TouchEngine):
    (d0, c0), (d1, c1) = _frames()
    engine._process_one(d0, c0)
    engine._process_one(d1, c1)

    frame, summary = engine.latest_stream_packet()
    assert frame is not None and frame.startswith(b"\xff\xd8")
    assert summary is engine.latest_summary()
    assert summary.frame_id == 2


def test_apply_keeps_baseline_for_band_changes(engine: engine_mod.TouchEngine):
    (d0, c0), = _frames(1)
    engine._process_one(d0, c0)

    engine.apply(engine.settings.model_copy(update={"lower_bound": 4, "upper_bound": 40, "min_points": 60}))
    assert engine.pipeline_state() == CALIBRATED
    assert (engine.pipeline.config.lower_bound, engine.pipeline.config.min_points) == (4, 60)
    assert engine.settings.upper_bound == 40

    engine.apply(engine.settings.model_copy(update={"depth_gain": 16.0}))
    assert engine.pipeline_state() == UNINITIALIZED


def test_frame_slot_keeps_only_newest_pair():
    slot = engine_mod._FrameSlot()
    first, second = _frames()
    slot.put(first)
    slot.put(second)
    assert slot.dropped == 1
    assert slot.take(timeout=0.1) is second
    assert slot.take(timeout=0.01) is None
    slot.close()
    assert slot.take(timeout=5.0) is None


def test_latest_stream_packet_empty(engine: engine_mod.TouchEngine):
    assert engine.latest_stream_packet() == (None, None)


def test_capture_loop_stops_and_closes_source_when_exhausted(engine: engine_mod.TouchEngine):
    source = SyntheticSource(width=16, height=12, max_frames=3)
    closed = []
    source.close = lambda: closed.append(True)
    engine.source = source
    engine.running = True

    engine._capture_loop()

    assert engine.running is False
    assert engine.last_error is not None
    assert "exhausted" in engine.last_error
    assert closed == [True]
    assert engine.source is None
    # The last captured pair is still handed to detection.
    assert engine._slot.take(timeout=0.1) is not None


def test_stream_fps_tracks_capture_rate(engine: engine_mod.TouchEngine, monkeypatch: pytest.MonkeyPatch):
    ticks = iter([0.0, 0.1, 0.2, 0.3])
    monkeypatch.setattr(engine, "_input_rate", engine_mod.RateMeter(alpha=0.2, clock=lambda: next(ticks)))
    engine.source = SyntheticSource(width=16, height=12, max_frames=4)
    engine.running = True

    engine._capture_loop()

    assert engine.stream_fps() == pytest.approx(10.0)


def test_engine_runs_end_to_end(engine: engine_mod.TouchEngine):
    engine.start()
    try:
        deadline = time.time() + 5.0
        while time.time() < deadline:
            frame, summary = engine.latest_stream_packet()
            if frame is not None and summary is not None and summary.frame_id >= 2:
                break
            time.sleep(0.02)
        frame, summary = engine.latest_stream_packet()
        assert frame is not None
        assert summary is not None
        assert engine.stream_fps() >= 0.0
    finally:
        engine.stop()
    assert engine.running is False
