import math

import numpy as np
import pytest
from PIL import Image, ImageDraw

from platerec.geometry import RotatedBox
from platerec.locate import (
    PLATE_WIDTH,
    PlateCandidate,
    crop_plate,
    draw_box,
    find_plate,
    straighten,
)

PLATE_RGB = (60, 60, 160)


def _scene(rows=200, cols=300, top=80, left=90, height=40, width=120):
    image = np.zeros((rows, cols, 3), dtype=np.uint8)
    image[top : top + height, left : left + width] = PLATE_RGB
    return image


def _rotated_scene(angle_deg, length=120, thickness=40):
    canvas = Image.new("RGB", (300, 300), (0, 0, 0))
    cx, cy = 150.0, 150.0
    rad = math.radians(angle_deg)
    corners = []
    for dx, dy in ((-1, -1), (1, -1), (1, 1), (-1, 1)):
        px, py = dx * length / 2, dy * thickness / 2
        corners.append(
            (cx + px * math.cos(rad) - py * math.sin(rad), cy + px * math.sin(rad) + py * math.cos(rad))
        )
    ImageDraw.Draw(canvas).polygon(corners, fill=PLATE_RGB)
    return np.asarray(canvas).copy()


def _candidate(center, long_axis, short_axis, angle=0.0):
    box = RotatedBox(center, short_axis, long_axis, angle - 90.0)
    return PlateCandidate(box, angle, long_axis, short_axis, long_axis * short_axis)


def test_find_plate_on_level_plate():
    image = _scene()
    found = find_plate(image)
    assert found is not None
    assert found.long_axis > found.short_axis
    assert 2.2 < found.aspect < 3.8
    cx, cy = found.center
    assert 90 <= cx <= 210
    assert 80 <= cy <= 120


def test_find_plate_ignores_empty_image():
    assert find_plate(np.zeros((100, 100, 3), dtype=np.uint8)) is None


def test_find_plate_rejects_square_region():
    image = _scene(height=80, width=80)
    assert find_plate(image) is None


def test_find_plate_rejects_wrong_colour():
    image = np.zeros((200, 300, 3), dtype=np.uint8)
    image[80:120, 90:210] = (160, 60, 60)
    assert find_plate(image) is None


def test_find_plate_on_tilted_plate():
    image = _rotated_scene(15)
    found = find_plate(image)
    assert found is not None
    assert abs(found.long_axis - 120) < 6
    assert 2.2 < found.aspect < 3.8


def test_straightened_tilted_plate_crops_mostly_blue():
    image = _rotated_scene(15)
    found = find_plate(image)
    level = straighten(image, found)
    plate = crop_plate(level, found).astype(np.int32)
    assert plate.shape[1] == PLATE_WIDTH
    assert plate[..., 2].mean() > 2 * plate[..., 0].mean()


def test_draw_box_marks_corners_and_keeps_input():
    image = np.zeros((100, 100, 3), dtype=np.uint8)
    box = RotatedBox((50.0, 50.0), 20.0, 10.0, 0.0)
    marked = draw_box(image, box)
    for x, y in box.points():
        assert tuple(marked[round(y), round(x)]) == (255, 0, 0)
    assert tuple(marked[5, 5]) == (0, 0, 0)
    assert not image.any()


def test_draw_box_requires_colour_image():
    with pytest.raises(ValueError):
        draw_box(np.zeros((10, 10), dtype=np.uint8), RotatedBox((5.0, 5.0), 2.0, 2.0, 0.0))


def test_straighten_with_zero_angle_is_identity():
    rng = np.random.default_rng(1)
    image = rng.integers(0, 256, size=(40, 60, 3), dtype=np.uint8)
    out = straighten(image, _candidate((30.0, 20.0), 30.0, 10.0, angle=0.0))
    assert np.array_equal(out, image)


def test_straighten_half_turn_flips_image():
    rng = np.random.default_rng(2)
    image = rng.integers(0, 256, size=(41, 61), dtype=np.uint8)
    center = ((61 - 1) / 2, (41 - 1) / 2)
    out = straighten(image, _candidate(center, 30.0, 10.0, angle=180.0))
    assert np.abs(out.astype(int) - image[::-1, ::-1].astype(int)).max() <= 1


def test_crop_plate_size_and_colour():
    image = np.zeros((200, 300, 3), dtype=np.uint8)
    image[...] = (10, 20, 30)
    candidate = _candidate((150.0, 100.0), 100.0, 30.0)
    plate = crop_plate(image, candidate)
    assert plate.shape == (int(PLATE_WIDTH * 30.0 / 100.0), PLATE_WIDTH, 3)
    assert (plate == (10, 20, 30)).all()


def test_crop_plate_clamps_to_image():
    image = np.full((50, 80, 3), 7, dtype=np.uint8)
    plate = crop_plate(image, _candidate((-40.0, -10.0), 60.0, 20.0))
    assert plate.shape[1] == PLATE_WIDTH
    assert (plate == 7).all()


def test_crop_plate_rejects_flat_plate():
    image = np.zeros((50, 80, 3), dtype=np.uint8)
    with pytest.raises(ValueError):
        crop_plate(image, _candidate((40.0, 25.0), 1000.0, 1.0))