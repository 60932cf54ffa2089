"""Whole-image plate recognition: locate, segment and classify characters."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError

from platerec.binarize import ColorThreshold
from platerec.geometry import Rect
from platerec.locate import PlateCandidate, crop_plate, draw_box, find_plate, straighten
from platerec.segment import (
    arrange_boxes,
    binarize_plate,
    character_boxes,
    clear_border,
    cut_characters,
    isolate_characters,
)
from platerec.templates import TemplateSet


class PlateRecognitionError(ValueError):
    """Raised when no plate or not enough characters can be found."""


@dataclass
class RecognitionResult:
    """The recognised text together with the images of every stage."""

    text: str
    candidate: PlateCandidate
    marked: np.ndarray
    plate: np.ndarray
    binary: np.ndarray
    characters: np.ndarray
    boxes: list[Rect]
    crops: list[np.ndarray]


def load_image(path) -> np.ndarray:
    """Read an image file as an RGB array of shape (height, width, 3)."""
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"image not found: {path}")
    try:
        with Image.open(path) as image:
            return np.asarray(image.convert("RGB")).copy()
    except (UnidentifiedImageError, OSError) as exc:
        raise PlateRecognitionError(f"cannot read image {path}: {exc}") from exc


def recognize(image, templates: TemplateSet, threshold=None) -> RecognitionResult:
    """Find the blue plate in an RGB image and read its seven characters."""
    rgb = np.asarray(image)
    if rgb.ndim != 3 or rgb.shape[2] != 3:
        raise ValueError("expected an RGB image of shape (height, width, 3)")
    rgb = rgb.astype(np.uint8)
    threshold = threshold or ColorThreshold()

    candidate = find_plate(rgb, threshold)
    if candidate is None:
        raise PlateRecognitionError("no plate region found")
    marked = draw_box(rgb, candidate.box)

    try:
        plate = crop_plate(straighten(rgb, candidate), candidate)
    except ValueError as exc:
        raise PlateRecognitionError(str(exc)) from exc

    binary = clear_border(binarize_plate(plate))
    characters = isolate_characters(binary)
    height, width = binary.shape
    try:
        boxes = arrange_boxes(character_boxes(characters), width, height)
        crops = cut_characters(binary, boxes)
    except ValueError as exc:
        raise PlateRecognitionError(f"character extraction failed: {exc}") from exc

    text = "".join(
        templates.recognize(crop, position) for position, crop in enumerate(crops)
    )
    return RecognitionResult(
        text=text,
        candidate=candidate,
        marked=marked,
        plate=plate,
        binary=binary,
        characters=characters,
        boxes=boxes,
        crops=crops,
    )


def _save(array: np.ndarray, path: Path) -> Path:
    Image.fromarray(np.asarray(array).astype(np.uint8)).save(path)
    return path


def save_stages(result: RecognitionResult, directory) -> list[Path]:
    """Write the stage images of a result as PNG files; return their paths."""
    root = Path(directory)
    crops_dir = root / "result"
    crops_dir.mkdir(parents=True, exist_ok=True)
    written = [
        _save(result.marked, root / "located.png"),
        _save(result.plate, root / "plate.png"),
        _save(result.binary, root / "binary.png"),
        _save(result.characters, root / "characters.png"),
    ]
    written.extend(
        _save(crop, crops_dir / f"{index}.png") for index, crop in enumerate(result.crops)
    )
    return written