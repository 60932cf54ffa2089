import math

import numpy as np
import pytest

from platerec.geometry import (
    Contour,
    Rect,
    RotatedBox,
    contour_area,
    convex_hull,
    find_external_contours,
    min_area_rect,
)


def _close_sets(actual, expected, tol=1e-6):
    return len(actual) == len(expected) and all(
        any(math.isclose(a[0], e[0], abs_tol=tol) and math.isclose(a[1], e[1], abs_tol=tol) for a in actual)
        for e in expected
    )


def test_contour_area_rectangle():
    assert contour_area([(0, 0), (4, 0), (4, 3), (0, 3)]) == 12.0


def test_contour_area_orientation_independent():
    pts = [(0, 0), (5, 1), (3, 4), (1, 3)]
    assert contour_area(pts) == contour_area(list(reversed(pts)))


def test_contour_area_degenerate():
    assert contour_area([(1, 1), (2, 2)]) == 0.0


def test_bounding_rect_counts_pixels():
    contour = Contour(((2, 1), (6, 1), (6, 4), (2, 4)))
    assert contour.bounding_rect() == Rect(2, 1, 5, 4)


def test_rect_edges():
    rect = Rect(3, 4, 10, 20)
    assert (rect.right, rect.bottom, rect.area) == (13, 24, 200)


def test_filled_rectangle_gives_corners():
    mask = np.zeros((10, 15), dtype=np.uint8)
    mask[2:6, 3:10] = 255
    contours = find_external_contours(mask)
    assert len(contours) == 1
    assert set(contours[0].points) == {(3, 2), (9, 2), (9, 5), (3, 5)}
    assert contours[0].bounding_rect() == Rect(3, 2, 7, 4)
    assert contours[0].area() == (9 - 3) * (5 - 2)


def test_contours_come_in_reverse_scan_order():
    mask = np.zeros((20, 20), dtype=bool)
    mask[1:4, 1:4] = True
    mask[12:16, 5:9] = True
    contours = find_external_contours(mask)
    assert [c.bounding_rect().y for c in contours] == [12, 1]


def test_blob_inside_ring_is_not_external():
    mask = np.zeros((20, 20), dtype=bool)
    mask[2:18, 2:18] = True
    mask[4:16, 4:16] = False
    mask[8:11, 8:11] = True
    contours = find_external_contours(mask)
    assert len(contours) == 1
    assert contours[0].bounding_rect() == Rect(2, 2, 16, 16)


def test_diagonal_pixels_join():
    mask = np.zeros((6, 6), dtype=bool)
    mask[1, 1] = mask[2, 2] = mask[3, 3] = True
    contours = find_external_contours(mask)
    assert len(contours) == 1
    assert contours[0].bounding_rect() == Rect(1, 1, 3, 3)


def test_single_pixel_and_empty():
    mask = np.zeros((5, 5), dtype=bool)
    assert find_external_contours(mask) == []
    mask[2, 3] = True
    assert find_external_contours(mask) == [Contour(((3, 2),))]


def test_blob_touching_border():
    mask = np.ones((4, 7), dtype=bool)
    contours = find_external_contours(mask)
    assert contours[0].bounding_rect() == Rect(0, 0, 7, 4)


def test_find_contours_rejects_colour():
    with pytest.raises(ValueError):
        find_external_contours(np.zeros((2, 2, 3)))


def test_convex_hull_drops_interior_points():
    square = [(0, 0), (4, 0), (4, 4), (0, 4)]
    hull = convex_hull(square + [(2, 2), (1, 3), (2, 0)])
    assert set(hull) == set(square)


def test_rotated_box_edges_follow_height_then_width():
    box = RotatedBox((10.0, 20.0), 30.0, 8.0, -25.0)
    p0, p1, p2, p3 = box.points()
    assert math.isclose(math.dist(p0, p1), box.height)
    assert math.isclose(math.dist(p1, p2), box.width)
    assert math.isclose((p0[0] + p2[0]) / 2, 10.0)
    assert math.isclose((p1[1] + p3[1]) / 2, 20.0)


def test_min_area_rect_upright():
    box = min_area_rect([(0, 0), (10, 0), (10, 4), (0, 4)])
    assert -90.0 <= box.angle < 0.0
    assert math.isclose(box.width * box.height, 40.0)
    assert _close_sets(box.points(), [(0, 0), (10, 0), (10, 4), (0, 4)])


def test_min_area_rect_round_trip_rotated():
    original = RotatedBox((50.0, 40.0), 30.0, 10.0, -30.0)
    corners = original.points()
    box = min_area_rect(corners)
    assert math.isclose(box.width * box.height, original.width * original.height, rel_tol=1e-9)
    assert _close_sets(box.points(), corners)
    assert -90.0 <= box.angle < 0.0


def test_min_area_rect_encloses_points():
    rng = np.random.default_rng(3)
    pts = [tuple(p) for p in rng.integers(0, 50, size=(30, 2)).tolist()]
    box = min_area_rect(pts)
    corners = box.points()
    assert contour_area(corners) <= contour_area(convex_hull(pts)) * 2 + 1e-6
    hull_area = contour_area(convex_hull(pts))
    assert contour_area(corners) >= hull_area - 1e-6


def test_min_area_rect_single_point_and_empty():
    box = min_area_rect([(3, 7)])
    assert (box.center, box.width, box.height) == ((3.0, 7.0), 0.0, 0.0)
    with pytest.raises(ValueError):
        min_area_rect([])