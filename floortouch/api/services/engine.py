from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field

import cv2
import numpy as np

from floortouch.core.analytics.pipeline import TouchPipeline
from floortouch.core.analytics.rate import RateMeter
from floortouch.core.config.settings import TouchSettings, pipeline_config_from_settings
from floortouch.core.errors import SourceUnavailableError
from floortouch.core.types import ColorFrame, DepthFrame, FrameSummary
from floortouch.core.video_sources.base import DepthSource, FramePair, OpenNISource, SyntheticSource

logger = logging.getLogger(__name__)

SNAPSHOT_KINDS = ("raw", "depth", "output")


class _FrameSlot:
    """Single-entry handoff from capture to detection.

    A new pair replaces one that has not been taken yet, so detection always
    works on the newest frame and never builds a backlog.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._pair: FramePair | None = None
        self._closed = False
        self.dropped = 0

    def put(self, pair: FramePair) -> None:
        with self._cond:
            if self._pair is not None:
                self.dropped += 1
            self._pair = pair
            self._cond.notify()

    def take(self, timeout: float) -> FramePair | None:
        with self._cond:
            if self._pair is None and not self._closed:
                self._cond.wait(timeout)
            pair, self._pair = self._pair, None
            return pair

    def open(self) -> None:
        with self._cond:
            self._closed = False
            self._pair = None

    def close(self) -> None:
        with self._cond:
            self._closed = True
            self._cond.notify_all()


@dataclass
class _Published:
    """Everything derived from one processed frame, swapped in as a unit."""

    summary: FrameSummary
    jpeg: bytes | None
    buffers: dict[str, np.ndarray] = field(default_factory=dict)


class TouchEngine:
    """Owns a depth source and a `TouchPipeline` and runs them in the background.

    The capture thread reads `(depth, color)` pairs into a latest-wins slot.
    The detection thread takes the newest pair, runs the pipeline, JPEG-encodes
    the visualization and publishes summary, stream frame and snapshot buffers
    together. Pairs that arrive while detection is busy are dropped.

    Every call into the pipeline goes through `_pipeline_lock`, so control
    requests (`recalibrate`, `reset`, `apply`) never interleave with a frame.
    """

    def __init__(self, settings: TouchSettings) -> None:
        self.settings = settings
        self.pipeline = TouchPipeline(pipeline_config_from_settings(settings))
        self._pipeline_lock = threading.Lock()
        self._slot = _FrameSlot()
        self._input_rate = RateMeter(alpha=0.2)
        self._published: _Published | None = None
        self._lock = threading.Lock()
        self._threads: list[threading.Thread] = []
        self.source: DepthSource | None = None
        self.running = False
        self.last_error: str | None = None

    def _make_source(self) -> DepthSource:
        if self.settings.source == "synthetic":
            return SyntheticSource(
                width=self.settings.frame_width,
                height=self.settings.frame_height,
                noise=self.settings.synthetic_noise,
            )
        return OpenNISource()

    def start(self) -> None:
        """Open the depth source and start the capture and detection threads.

        Calling it while already running is a no-op. When the source cannot be
        opened the engine stays stopped and `last_error` says why.
        """

        if self.running:
            return
        try:
            self.source = self._make_source()
        except Exception:
            self.last_error = "Failed to initialize depth source"
            logger.exception(self.last_error)
            return
        self.running = True
        self.last_error = None
        self._slot.open()
        self._input_rate.reset()
        self._threads = [
            threading.Thread(target=self._capture_loop, name="floortouch-capture", daemon=True),
            threading.Thread(target=self._detect_loop, name="floortouch-detect", daemon=True),
        ]
        for thread in self._threads:
            thread.start()
        logger.info("Touch engine started (source=%s)", self.settings.source)

    def stop(self) -> None:
        self.running = False
        self._slot.close()
        for thread in self._threads:
            if thread.is_alive() and thread is not threading.current_thread():
                thread.join(timeout=2)
        self._threads = []
        self._close_source()
        logger.info("Touch engine stopped (%d frames dropped under load)", self._slot.dropped)

    def _close_source(self) -> None:
        source, self.source = self.source, None
        if source is not None:
            source.close()

    def recalibrate(self) -> None:
        """Clear the floor baseline; the next frame becomes the new one."""

        with self._pipeline_lock:
            self.pipeline.recalibrate()

    def reset(self, lower: int, upper: int) -> None:
        with self._pipeline_lock:
            self.pipeline.reset(lower, upper)

    def apply(self, settings: TouchSettings) -> None:
        """Adopt new detection settings without reopening the source."""

        with self._pipeline_lock:
            self.pipeline.configure(pipeline_config_from_settings(settings))
        self.settings = settings

    def pipeline_state(self) -> str:
        with self._pipeline_lock:
            return self.pipeline.state

    def _capture_loop(self) -> None:
        logger.debug("Capture loop started")
        while self.running and self.source is not None:
            try:
                pair = self.source.read()
            except SourceUnavailableError as exc:
                self.last_error = f"Depth source unavailable: {exc}"
                logger.error(self.last_error)
                self.running = False
                self._slot.close()
                self._close_source()
                break
            if pair is None:
                time.sleep(0.01)
                continue
            with self._lock:
                self._input_rate.tick()
            self._slot.put(pair)
            # Sensors pace themselves; the synthetic source is paced here.
            target_fps = float(self.settings.target_fps)
            if self.settings.source == "synthetic" and target_fps > 0:
                time.sleep(1.0 / target_fps)

    def _detect_loop(self) -> None:
        logger.debug("Detection loop started")
        while self.running:
            pair = self._slot.take(timeout=0.5)
            if pair is None:
                continue
            depth, color = pair
            self._process_one(depth, color)

    def _process_one(self, depth: DepthFrame, color: ColorFrame | None) -> None:
        """Run the pipeline on one pair and publish what it produced."""

        try:
            with self._pipeline_lock:
                if self.settings.profile_steps:
                    summary, visualization, _timings = self.pipeline.process_with_profile(depth)
                else:
                    summary, visualization = self.pipeline.process_frame(depth)
                intensity = self.pipeline.to_intensity(depth)
        except Exception:
            self.last_error = "Pipeline processing failed"
            logger.exception(self.last_error)
            return
        self.last_error = None

        quality = [int(cv2.IMWRITE_JPEG_QUALITY), int(self.settings.jpeg_quality)]
        ok, jpg = cv2.imencode(".jpg", visualization, quality)
        if not ok:
            logger.warning("JPEG encoding failed for frame %d", summary.frame_id)
        buffers = {"depth": intensity, "output": visualization}
        if color is not None:
            buffers["raw"] = color
        published = _Published(summary=summary, jpeg=jpg.tobytes() if ok else None, buffers=buffers)
        with self._lock:
            self._published = published

    def latest_summary(self) -> FrameSummary | None:
        with self._lock:
            return self._published.summary if self._published is not None else None

    def latest_stream_packet(self) -> tuple[bytes | None, FrameSummary | None]:
        """Return the newest (jpeg_bytes, summary) pair, both from the same frame."""

        with self._lock:
            if self._published is None:
                return None, None
            return self._published.jpeg, self._published.summary

    def snapshot_png(self, kind: str) -> bytes | None:
        """Return a PNG of the latest `raw`, `depth` or `output` buffer, if any."""

        if kind not in SNAPSHOT_KINDS:
            raise KeyError(kind)
        with self._lock:
            buffer = self._published.buffers.get(kind) if self._published is not None else None
        if buffer is None:
            return None
        ok, png = cv2.imencode(".png", buffer)
        return png.tobytes() if ok else None

    def stream_fps(self) -> float:
        """Smoothed rate at which the source delivers frames."""

        with self._lock:
            return float(self._input_rate.rate)
