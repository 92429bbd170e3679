"""Depth source abstractions.

The pipeline consumes frames through a small interface (`DepthSource`) so the
capture implementation (OpenNI sensor or synthetic frames) can be swapped
without affecting the detection code.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import cv2
import numpy as np

from floortouch.core.errors import SourceUnavailableError
from floortouch.core.types import ColorFrame, DepthFrame

logger = logging.getLogger(__name__)

FramePair = tuple[DepthFrame, ColorFrame | None]


class DepthSource(ABC):
    """Base interface for anything that can produce depth frames."""

    @abstractmethod
    def read(self) -> FramePair | None:
        """Return the next `(depth, color)` pair, or `None` when no frame is ready yet.

        Raises:
            SourceUnavailableError: when the source can no longer deliver frames.
        """

        raise NotImplementedError

    @abstractmethod
    def close(self) -> None:
        """Release any underlying resources."""

        raise NotImplementedError


class OpenNISource(DepthSource):
    """A `DepthSource` backed by OpenCV's OpenNI2 capture backend (Kinect, Xtion, Astra)."""

    def __init__(self, max_failures: int = 30) -> None:
        backend = getattr(cv2, "CAP_OPENNI2", None)
        if backend is None:
            raise SourceUnavailableError("OpenCV was built without OpenNI2 support")
        self.cap = cv2.VideoCapture(int(backend))
        if not self.cap.isOpened():
            raise SourceUnavailableError("Failed to open OpenNI2 depth sensor")
        self._max_failures = int(max_failures)
        self._failures = 0
        logger.info("Opened OpenNI2 depth sensor")

    def _fail(self, stage: str) -> None:
        self._failures += 1
        if self._failures >= self._max_failures:
            raise SourceUnavailableError(
                f"Depth sensor stopped delivering frames ({self._failures} consecutive failed {stage})"
            )

    def read(self) -> FramePair | None:
        """Grab one synchronized depth/colour pair from the sensor.

        Failed grabs and failed depth retrieves both count towards
        `max_failures`; a delivered depth map resets the count.
        """

        if not self.cap.grab():
            self._fail("grabs")
            return None

        ok, depth = self.cap.retrieve(flag=cv2.CAP_OPENNI_DEPTH_MAP)
        if not ok or depth is None:
            self._fail("retrieves")
            return None
        self._failures = 0

        ok_color, color = self.cap.retrieve(flag=cv2.CAP_OPENNI_BGR_IMAGE)
        return depth, (color if ok_color else None)

    def close(self) -> None:
        """Release the underlying OpenCV capture."""

        self.cap.release()


class SyntheticSource(DepthSource):
    """Generates a flat floor with a disc-shaped foot sweeping across it.

    The first `empty_frames` frames show the bare floor so lazy calibration
    captures a clean baseline.
    """

    def __init__(
        self,
        width: int = 640,
        height: int = 480,
        floor_depth: int = 1200,
        foot_height: int = 60,
        foot_radius: int = 40,
        speed: float = 4.0,
        noise: float = 0.0,
        empty_frames: int = 1,
        max_frames: int | None = None,
        seed: int | None = None,
    ) -> None:
        self.width = int(width)
        self.height = int(height)
        self.floor_depth = int(floor_depth)
        self.foot_height = int(foot_height)
        self.foot_radius = int(foot_radius)
        self.speed = float(speed)
        self.noise = float(noise)
        self.empty_frames = int(empty_frames)
        self.max_frames = max_frames
        self._rng = np.random.default_rng(seed)
        self._index = 0
        self._closed = False

    def foot_center(self, index: int) -> tuple[int, int] | None:
        """Return the foot centre for frame `index`, or `None` while the floor is empty."""

        if index < self.empty_frames:
            return None
        span = max(1, self.width - 2 * self.foot_radius)
        step = int((index - self.empty_frames) * self.speed)
        # Bounce back and forth across the frame.
        offset = step % (2 * span)
        if offset >= span:
            offset = 2 * span - offset
        return self.foot_radius + offset, self.height // 2

    def read(self) -> FramePair | None:
        """Render the next synthetic frame."""

        if self._closed:
            raise SourceUnavailableError("Synthetic source is closed")
        if self.max_frames is not None and self._index >= self.max_frames:
            raise SourceUnavailableError("Synthetic source exhausted")

        depth = np.full((self.height, self.width), self.floor_depth, dtype=np.float32)
        center = self.foot_center(self._index)
        if center is not None:
            cv2.circle(
                depth,
                center,
                self.foot_radius,
                float(self.floor_depth - self.foot_height),
                -1,
            )
        if self.noise > 0:
            depth += self._rng.normal(0.0, self.noise, depth.shape).astype(np.float32)
        depth16 = np.clip(np.rint(depth), 0, np.iinfo(np.uint16).max).astype(np.uint16)

        preview = cv2.normalize(depth16, None, 0, 255, cv2.NORM_MINMAX).astype(np.uint8)
        color = cv2.cvtColor(preview, cv2.COLOR_GRAY2BGR)
        self._index += 1
        return depth16, color

    def close(self) -> None:
        self._closed = True
