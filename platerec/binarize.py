"""Colour segmentation, grey conversion, morphology and Otsu thresholding."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import numpy as np
from scipy import ndimage


@dataclass(frozen=True)
class ColorThreshold:
    """Reference colour and tolerances that pick out blue plate backgrounds."""

    blue: int = 160
    green: int = 60
    red: int = 60
    max_diff: int = 60
    blue_diff: int = 95
    dominance: float = 1.1


def _as_rgb(image) -> np.ndarray:
    arr = np.asarray(image)
    if arr.ndim != 3 or arr.shape[2] != 3:
        raise ValueError("expected an RGB image of shape (height, width, 3)")
    return arr


def blue_mask(image, threshold=None) -> np.ndarray:
    """Return a boolean mask of the pixels whose colour matches a blue plate."""
    threshold = threshold or ColorThreshold()
    rgb = _as_rgb(image).astype(np.int32)
    red, green, blue = rgb[..., 0], rgb[..., 1], rgb[..., 2]
    close = (
        (np.abs(blue - threshold.blue) < threshold.blue_diff)
        & (np.abs(green - threshold.green) < threshold.max_diff)
        & (np.abs(red - threshold.red) < threshold.max_diff)
    )
    with np.errstate(divide="ignore", invalid="ignore"):
        blue_f = blue.astype(np.float64)
        dominant = (blue_f / green > threshold.dominance) & (
            blue_f / red > threshold.dominance
        )
    return close & dominant


def to_gray(image) -> np.ndarray:
    """Convert an RGB image to 8-bit grey with the usual luma weights."""
    arr = np.asarray(image)
    if arr.ndim == 2:
        return arr.astype(np.uint8, copy=True)
    rgb = _as_rgb(arr).astype(np.int32)
    gray = (rgb[..., 0] * 4899 + rgb[..., 1] * 9617 + rgb[..., 2] * 1868 + 8192) >> 14
    return gray.astype(np.uint8)


def _morph(mask, size, iterations: int, op: Callable) -> np.ndarray:
    width, height = size
    if width < 1 or height < 1:
        raise ValueError("kernel size must be positive")
    if iterations < 0:
        raise ValueError("iterations must not be negative")
    arr = np.asarray(mask)
    is_bool = arr.dtype == bool
    work = arr.astype(np.uint8) if is_bool else arr.copy()
    footprint = (height, width) + (1,) * (work.ndim - 2)
    for _ in range(iterations):
        work = op(work, size=footprint, mode="nearest")
    return work.astype(bool) if is_bool else work


def dilate(mask, size=(3, 3), iterations=1) -> np.ndarray:
    """Grow bright regions with a rectangular kernel of (width, height)."""
    return _morph(mask, size, iterations, ndimage.maximum_filter)


def erode(mask, size=(3, 3), iterations=1) -> np.ndarray:
    """Shrink bright regions with a rectangular kernel of (width, height)."""
    return _morph(mask, size, iterations, ndimage.minimum_filter)


def _otsu_level(gray: np.ndarray) -> int:
    hist = np.bincount(gray.ravel(), minlength=256).astype(np.float64)
    total = hist.sum()
    if total == 0:
        return 0
    prob = hist / total
    q1 = np.cumsum(prob)
    q2 = 1.0 - q1
    cum_mu = np.cumsum(np.arange(256) * prob)
    mu = cum_mu[-1]
    eps = float(np.finfo(np.float32).eps)
    valid = (np.minimum(q1, q2) >= eps) & (np.maximum(q1, q2) <= 1.0 - eps)
    if not valid.any():
        return 0
    with np.errstate(divide="ignore", invalid="ignore"):
        mu1 = cum_mu / q1
        mu2 = (mu - cum_mu) / q2
        sigma = np.where(valid, q1 * q2 * (mu1 - mu2) ** 2, -1.0)
    if sigma.max() <= 0:
        return 0
    return int(np.argmax(sigma))


def otsu_threshold(gray) -> np.ndarray:
    """Binarise a grey image at the level chosen by Otsu's method (0 or 255)."""
    arr = np.asarray(gray)
    if arr.ndim != 2:
        raise ValueError("expected a single-channel image")
    arr = arr.astype(np.uint8)
    level = _otsu_level(arr)
    return np.where(arr > level, 255, 0).astype(np.uint8)