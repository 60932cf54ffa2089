"""Binarising a plate and cutting it into character images."""

from __future__ import annotations

import numpy as np

from platerec.binarize import dilate, erode, otsu_threshold, to_gray
from platerec.geometry import Rect, find_external_contours
from platerec.templates import PLATE_LENGTH

BORDER_ROWS = 20
BORDER_COLUMNS = 10
SEPARATOR_COLUMNS = (145, 175)
MIN_CHAR_SIZE = 8
MAX_CHAR_WIDTH = 100
MAX_CHAR_HEIGHT = 150
CHAR_WIDTH = 60


def _grey(image) -> np.ndarray:
    arr = np.asarray(image)
    if arr.dtype == bool:
        arr = arr.astype(np.uint8) * 255
    if arr.ndim != 2:
        raise ValueError("expected a single-channel image")
    return arr.astype(np.uint8)


def binarize_plate(plate) -> np.ndarray:
    """Grey-scale the plate and split it with Otsu's threshold."""
    return otsu_threshold(to_gray(plate))


def clear_border(binary) -> np.ndarray:
    """Blank the frame and the gap after the province character."""
    arr = _grey(binary).copy()
    rows, cols = arr.shape
    r = np.arange(rows)[:, None]
    c = np.arange(cols)[None, :]
    low, high = SEPARATOR_COLUMNS
    border = (
        (r < BORDER_ROWS)
        | (r > rows - BORDER_ROWS)
        | (c < BORDER_COLUMNS)
        | (c > cols - BORDER_COLUMNS)
        | ((c > low) & (c < high))
    )
    arr[border] = 0
    return arr


def isolate_characters(binary) -> np.ndarray:
    """Copy character-sized blobs, dark on white, onto a blank canvas."""
    arr = _grey(binary)
    blobs = dilate(erode(arr, (5, 6)), (10, 3))
    inverted = np.where(blobs < 100, 255, 0).astype(np.uint8)
    canvas = np.full_like(arr, 255)
    for contour in find_external_contours(blobs):
        rect = contour.bounding_rect()
        if (
            MIN_CHAR_SIZE <= rect.width <= MAX_CHAR_WIDTH
            and MIN_CHAR_SIZE <= rect.height <= MAX_CHAR_HEIGHT
        ):
            canvas[rect.y : rect.bottom, rect.x : rect.right] = inverted[
                rect.y : rect.bottom, rect.x : rect.right
            ]
    return canvas


def character_boxes(characters) -> list[Rect]:
    """Bounding boxes of the dark characters, ordered left to right."""
    arr = _grey(characters)
    grown = erode(arr, (4, 6))
    boxes = [c.bounding_rect() for c in find_external_contours(grown < 100)]
    return sorted(boxes, key=lambda rect: rect.x)


def arrange_boxes(boxes, width, height) -> list[Rect]:
    """Pick the plate's seven boxes from left-to-right ones and fit them to the plate.

    Narrow boxes are widened about their centre; extra boxes on the left are
    merged into the first character, which takes the height of the fourth box.
    """
    if len(boxes) < PLATE_LENGTH:
        raise ValueError(f"found {len(boxes)} characters, need {PLATE_LENGTH}")
    rects = [[b.x, b.y, b.width, b.height] for b in boxes]
    count = len(rects)
    first = count - PLATE_LENGTH
    for p in range(count - 1, first - 1, -1):
        rect = rects[p]
        if p > first:
            if rect[2] < CHAR_WIDTH:
                rect[0] -= (CHAR_WIDTH - rect[2]) // 2
                rect[2] = CHAR_WIDTH
        elif count > PLATE_LENGTH:
            rect[2] = rect[0] - rects[0][0] + rect[2]
            rect[0] = rects[0][0]
            rect[1] = rects[3][1]
            rect[3] = rects[3][3]
        if rect[0] + rect[2] > width:
            rect[2] = width - rect[0] - 1
        if rect[1] + rect[3] > height:
            rect[3] = height - rect[1] - 1
        if rect[0] < 0:
            rect[2] += rect[0]
            rect[0] = 0
    return [Rect(*rect) for rect in rects[first:]]


def cut_characters(binary, boxes) -> list[np.ndarray]:
    """Inverted crops of the binary plate, one per box."""
    arr = _grey(binary)
    rows, cols = arr.shape
    crops = []
    for box in boxes:
        if (
            box.x < 0
            or box.y < 0
            or box.width <= 0
            or box.height <= 0
            or box.right > cols
            or box.bottom > rows
        ):
            raise ValueError(f"character box outside the plate: {box}")
        crops.append(255 - arr[box.y : box.bottom, box.x : box.right])
    return crops