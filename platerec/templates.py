"""Character templates and template-matching classification."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

import numpy as np
from PIL import Image

from platerec.binarize import to_gray

# Digits, letters (with "7" standing in for "T") and province abbreviations.
WORDS: tuple[str, ...] = (
    "0", "1", "2", "3", "4", "5", "6", "7", "8", "9",
    "A", "B", "C", "D", "E", "F", "G", "H", "J", "K", "L", "M", "N", "P", "Q",
    "R", "S", "7", "U", "V", "W", "X", "Y", "Z",
    "藏", "川", "鄂", "甘", "赣", "贵", "桂", "黑", "沪", "吉", "冀", "津", "晋",
    "京", "辽", "鲁", "蒙", "闽", "宁", "青", "琼", "陕", "苏", "皖", "湘", "京",
    "渝", "豫", "粤", "云", "浙",
)
VARIANTS = 3
PLATE_LENGTH = 7
TEMPLATE_SIZE = (60, 100)

_PROVINCE_RANGE = (36, len(WORDS) - 1)
_LETTER_RANGE = (10, 33)
_ALNUM_RANGE = (0, 33)


def template_path(root, index, variant) -> Path:
    """Location of one template image below ``root``."""
    if not 0 <= index < len(WORDS):
        raise ValueError(f"template index out of range: {index}")
    if not 0 <= variant < VARIANTS:
        raise ValueError(f"template variant out of range: {variant}")
    word = WORDS[index]
    return Path(root) / word / f"{word}-{WORDS[variant]}.jpg"


def _prepare(image) -> np.ndarray:
    arr = np.asarray(image)
    if arr.dtype == bool:
        arr = arr.astype(np.uint8) * 255
    if arr.ndim == 3:
        arr = to_gray(arr)
    if arr.ndim != 2 or arr.size == 0:
        raise ValueError("expected a non-empty image")
    resized = Image.fromarray(arr.astype(np.uint8)).resize(
        TEMPLATE_SIZE, Image.Resampling.BOX
    )
    return np.asarray(resized, dtype=np.float64)


def _error(a: np.ndarray, b: np.ndarray) -> float:
    return float(np.abs(a - b).sum() / (a.size * 255.0))


def match_error(character, template) -> float:
    """Mean absolute difference in [0, 1] after scaling both to template size."""
    return _error(_prepare(character), _prepare(template))


def _range_for(position: int) -> tuple[int, int]:
    if not 0 <= position < PLATE_LENGTH:
        raise ValueError(f"plate position out of range: {position}")
    if position == 0:
        return _PROVINCE_RANGE
    if position == 1:
        return _LETTER_RANGE
    return _ALNUM_RANGE


def classify(errors, position) -> str:
    """Pick the best template for the character at ``position`` from the left.

    Ties go to the later template.
    """
    if len(errors) != len(WORDS):
        raise ValueError(f"expected {len(WORDS)} errors, got {len(errors)}")
    start, end = _range_for(position)
    best = min(reversed(range(start, end + 1)), key=lambda i: errors[i])
    return WORDS[best]


@dataclass
class TemplateSet:
    """All templates, one sequence of variants per entry of ``WORDS``."""

    templates: Sequence[Sequence[np.ndarray]]
    _prepared: list[list[np.ndarray]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if len(self.templates) != len(WORDS):
            raise ValueError(f"expected {len(WORDS)} templates, got {len(self.templates)}")
        prepared = []
        for index, variants in enumerate(self.templates):
            if not variants:
                raise ValueError(f"no variants for template {WORDS[index]}")
            prepared.append([_prepare(image) for image in variants])
        self._prepared = prepared

    @classmethod
    def load(cls, root) -> "TemplateSet":
        """Read every template image from the directory tree under ``root``."""
        templates = []
        for index in range(len(WORDS)):
            variants = []
            for variant in range(VARIANTS):
                path = template_path(root, index, variant)
                if not path.is_file():
                    raise FileNotFoundError(f"template image missing: {path}")
                with Image.open(path) as image:
                    variants.append(np.asarray(image.convert("L")))
            templates.append(variants)
        return cls(templates)

    def errors(self, character) -> list[float]:
        """Best match error against each template."""
        prepared = _prepare(character)
        return [min(_error(prepared, t) for t in variants) for variants in self._prepared]

    def recognize(self, character, position) -> str:
        """Classify one character image at the given plate position."""
        return classify(self.errors(character), position)