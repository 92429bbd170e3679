import numpy as np
import pytest

from floortouch.core.detection.background import depth_to_intensity, subtract
from floortouch.core.errors import ContractViolation, FrameShapeError


def test_self_subtraction_is_all_zero():
    rng = np.random.default_rng(0)
    for _ in range(5):
        frame = rng.integers(0, 256, size=(48, 64), dtype=np.uint8)
        out = subtract(frame, frame.copy())
        assert out.dtype == np.uint8
        assert not out.any()


def test_subtract_is_absolute_and_symmetric():
    a = np.array([[10, 200]], dtype=np.uint8)
    b = np.array([[30, 150]], dtype=np.uint8)
    assert subtract(a, b, gain=1.0).tolist() == [[20, 50]]
    assert subtract(b, a, gain=1.0).tolist() == [[20, 50]]


def test_subtract_applies_gain_and_saturates():
    current = np.array([[20, 200, 128]], dtype=np.uint8)
    baseline = np.zeros_like(current)
    out = subtract(current, baseline)  # default gain 2
    assert out.tolist() == [[40, 255, 255]]


def test_subtract_rejects_shape_mismatch():
    with pytest.raises(FrameShapeError) as excinfo:
        subtract(np.zeros((4, 4), np.uint8), np.zeros((4, 5), np.uint8))
    assert isinstance(excinfo.value, ContractViolation)
    assert isinstance(excinfo.value, ValueError)
    assert excinfo.value.expected == (4, 5)


def test_depth_to_intensity_default_constants():
    depth = np.array([[0, 1200, 1140, 2100]], dtype=np.uint16)
    out = depth_to_intensity(depth)
    assert out.dtype == np.uint8
    # 1200 * 32 * 0.006 = 230.4, 1140 * 32 * 0.006 = 218.88
    assert out.tolist() == [[0, 230, 219, 255]]


def test_depth_to_intensity_unit_gain_is_identity_in_range():
    depth = np.array([[0, 30, 80, 255, 300]], dtype=np.uint16)
    out = depth_to_intensity(depth, depth_gain=1.0, depth_scale=1.0)
    assert out.tolist() == [[0, 30, 80, 255, 255]]


def test_depth_to_intensity_rejects_non_2d_input():
    with pytest.raises(FrameShapeError, match="2-D") as excinfo:
        depth_to_intensity(np.zeros((4, 4, 3), dtype=np.uint16))
    assert excinfo.value.expected is None
    assert excinfo.value.actual == (4, 4, 3)
