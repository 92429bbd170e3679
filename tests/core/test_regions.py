import cv2
import numpy as np

from floortouch.core.detection.regions import extract_regions, region_area, select_dominant
from floortouch.core.types import Region


def _square(x: int, y: int, side: int) -> np.ndarray:
    return np.array([[x, y], [x + side, y], [x + side, y + side], [x, y + side]], dtype=np.int32)


def test_region_area_of_square():
    assert region_area(_square(0, 0, 10)) == 100.0
    # Orientation does not change the sign.
    assert region_area(_square(0, 0, 10)[::-1]) == 100.0
    assert region_area(np.array([[1, 1], [2, 2]], dtype=np.int32)) == 0.0


def test_extract_regions_on_empty_frame_is_empty():
    regions = extract_regions(np.zeros((40, 40), dtype=np.uint8))
    assert list(regions) == []


def test_extract_regions_is_single_pass_iterator():
    frame = np.zeros((40, 40), dtype=np.uint8)
    cv2.rectangle(frame, (5, 5), (15, 15), 30, -1)
    regions = extract_regions(frame)
    assert iter(regions) is regions
    assert len(list(regions)) == 1
    assert list(regions) == []


def test_extract_regions_reports_outer_boundaries_only():
    frame = np.zeros((60, 60), dtype=np.uint8)
    cv2.rectangle(frame, (10, 10), (50, 50), 30, -1)
    cv2.rectangle(frame, (20, 20), (40, 40), 0, -1)  # hole
    before = frame.copy()

    regions = list(extract_regions(frame))

    assert len(regions) == 1
    assert regions[0].points.shape[1] == 2
    assert np.array_equal(frame, before)


def test_extract_regions_keeps_every_boundary_pixel():
    frame = np.zeros((60, 60), dtype=np.uint8)
    cv2.rectangle(frame, (10, 10), (29, 29), 30, -1)
    (region,) = list(extract_regions(frame))
    # 20x20 block: 4 * 19 boundary pixels without chain approximation.
    assert region.point_count == 76


def test_select_dominant_empty_and_single():
    assert select_dominant([]) is None
    assert select_dominant(iter([])) is None
    only = Region(points=_square(0, 0, 3))
    assert select_dominant([only]) is only


def test_select_dominant_ignores_regions_without_area():
    frame = np.zeros((40, 400), dtype=np.uint8)
    cv2.line(frame, (20, 20), (370, 20), 30, 1)
    (line,) = list(extract_regions(frame))
    assert line.point_count > 300
    assert region_area(line.points) == 0.0
    assert select_dominant([line]) is None

    block = Region(points=_square(0, 0, 4), index=1)
    assert select_dominant([line, block]) is block


def test_select_dominant_picks_largest_area():
    small = Region(points=_square(0, 0, 5), index=0)
    large = Region(points=_square(20, 20, 12), index=1)
    medium = Region(points=_square(50, 50, 8), index=2)
    assert select_dominant([small, large, medium]) is large


def test_select_dominant_ties_go_to_first_encountered():
    first = Region(points=_square(0, 0, 10), index=0)
    second = Region(points=_square(30, 30, 10), index=1)
    assert select_dominant([first, second]) is first
    assert select_dominant([second, first]) is second


def test_select_dominant_uses_area_not_perimeter():
    # Long thin strip: more boundary points, smaller area.
    strip = Region(
        points=np.array([[x, 0] for x in range(60)] + [[x, 1] for x in range(59, -1, -1)], dtype=np.int32),
        index=0,
    )
    block = Region(points=_square(0, 10, 10), index=1)
    assert strip.point_count > block.point_count
    assert select_dominant([strip, block]) is block


def test_select_dominant_on_extracted_regions():
    frame = np.zeros((100, 100), dtype=np.uint8)
    cv2.rectangle(frame, (5, 5), (14, 14), 30, -1)
    cv2.circle(frame, (60, 60), 25, 30, -1)
    dominant = select_dominant(extract_regions(frame))
    assert dominant is not None
    xs, ys = dominant.points[:, 0], dominant.points[:, 1]
    assert xs.min() >= 30 and ys.min() >= 30
