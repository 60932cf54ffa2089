"""Finding, marking, straightening and cropping a blue number plate."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
from PIL import Image, ImageDraw
from scipy import ndimage

from platerec.binarize import ColorThreshold, blue_mask, dilate, erode
from platerec.geometry import RotatedBox, find_external_contours, min_area_rect

MIN_CONTOUR_AREA = 1000.0
MAX_CONTOUR_AREA = 50000.0
MIN_ASPECT = 2.2
MAX_ASPECT = 3.8
MIN_RECTANGULARITY = 0.63
MAX_RECTANGULARITY = 1.37
MIN_BOX_AREA = 2000.0
MAX_BOX_AREA = 50000.0
MORPH_PASSES = 5
PLATE_WIDTH = 500
BOX_COLOUR = (255, 0, 0)


@dataclass(frozen=True)
class PlateCandidate:
    """A plate-shaped region: its box, tilt and axis lengths."""

    box: RotatedBox
    angle: float
    long_axis: float
    short_axis: float
    area: float

    @property
    def center(self) -> tuple[float, float]:
        return self.box.center

    @property
    def aspect(self) -> float:
        return self.long_axis / self.short_axis


def _plate_mask(image, threshold) -> np.ndarray:
    mask = blue_mask(image, threshold)
    mask = dilate(mask, (3, 3), MORPH_PASSES)
    return erode(mask, (3, 3), MORPH_PASSES)


def _candidate(contour) -> PlateCandidate | None:
    area = contour.area()
    if not MIN_CONTOUR_AREA < area < MAX_CONTOUR_AREA:
        return None
    box = min_area_rect(contour.points)
    p0, p1, p2, _ = box.points()
    long_axis = math.dist(p1, p0)
    short_axis = math.dist(p2, p1)
    angle = box.angle
    if short_axis > long_axis:
        long_axis, short_axis = short_axis, long_axis
    else:
        angle += 90.0
    box_area = long_axis * short_axis
    if box_area == 0:
        return None
    rectangularity = area / box_area
    aspect = long_axis / short_axis
    if (
        MIN_ASPECT < aspect < MAX_ASPECT
        and MIN_RECTANGULARITY < rectangularity < MAX_RECTANGULARITY
        and MIN_BOX_AREA < box_area < MAX_BOX_AREA
    ):
        return PlateCandidate(box, angle, long_axis, short_axis, area)
    return None


def find_plate(image, threshold=None) -> PlateCandidate | None:
    """Locate a blue plate in an RGB image; the last match in contour order wins."""
    threshold = threshold or ColorThreshold()
    found = None
    for contour in find_external_contours(_plate_mask(image, threshold)):
        candidate = _candidate(contour)
        if candidate is not None:
            found = candidate
    return found


def draw_box(image, box) -> np.ndarray:
    """Return a copy of an RGB image with the box outlined in red."""
    arr = np.asarray(image)
    if arr.ndim != 3 or arr.shape[2] != 3:
        raise ValueError("expected an RGB image of shape (height, width, 3)")
    canvas = Image.fromarray(arr.astype(np.uint8))
    pen = ImageDraw.Draw(canvas)
    corners = [(round(x), round(y)) for x, y in box.points()]
    for start, end in zip(corners, corners[1:] + corners[:1]):
        pen.line([start, end], fill=BOX_COLOUR, width=1)
    return np.asarray(canvas).copy()


def _rotation(center, angle: float) -> tuple[np.ndarray, np.ndarray]:
    cx, cy = center
    rad = math.radians(angle)
    a, b = math.cos(rad), math.sin(rad)
    forward = np.array(
        [
            [a, b, (1 - a) * cx - b * cy],
            [-b, a, b * cx + (1 - a) * cy],
            [0.0, 0.0, 1.0],
        ]
    )
    inverse = np.linalg.inv(forward)
    matrix = np.array([[inverse[1, 1], inverse[1, 0]], [inverse[0, 1], inverse[0, 0]]])
    offset = np.array([inverse[1, 2], inverse[0, 2]])
    return matrix, offset


def straighten(image, candidate) -> np.ndarray:
    """Rotate the image about the plate centre so the plate lies level."""
    arr = np.asarray(image)
    if arr.ndim not in (2, 3):
        raise ValueError("expected a grey or colour image")
    matrix, offset = _rotation(candidate.center, candidate.angle)

    def warp(channel: np.ndarray) -> np.ndarray:
        return ndimage.affine_transform(
            channel.astype(np.float64), matrix, offset, order=1, mode="constant", cval=0.0
        )

    if arr.ndim == 2:
        out = warp(arr)
    else:
        out = np.stack([warp(arr[..., k]) for k in range(arr.shape[2])], axis=-1)
    return np.clip(np.rint(out), 0, 255).astype(np.uint8)


def crop_plate(image, candidate) -> np.ndarray:
    """Cut the level plate out of a straightened image and scale it to 500 wide."""
    arr = np.asarray(image)
    rows, cols = arr.shape[:2]
    cx, cy = candidate.center
    x = int(cx - candidate.long_axis / 2)
    y = int(cy - candidate.short_axis / 2)
    width = int(candidate.long_axis)
    height = int(candidate.short_axis)
    x = min(max(x, 0), cols - 1)
    y = min(max(y, 0), rows - 1)
    right = min(x + width, cols)
    bottom = min(y + height, rows)
    if right <= x or bottom <= y:
        raise ValueError("plate region is empty")
    target_height = int(PLATE_WIDTH * candidate.short_axis / candidate.long_axis)
    if target_height < 1:
        raise ValueError("plate is too flat to scale")
    region = np.ascontiguousarray(arr[y:bottom, x:right].astype(np.uint8))
    resized = Image.fromarray(region).resize(
        (PLATE_WIDTH, target_height), Image.Resampling.BOX
    )
    return np.asarray(resized).copy()