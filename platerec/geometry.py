"""Contours, rectangles and minimum-area boxes on binary images."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
from scipy import ndimage

Point = tuple[int, int]

# Neighbour steps as (row, column), counter-clockwise on screen starting east.
_STEPS = ((0, 1), (-1, 1), (-1, 0), (-1, -1), (0, -1), (1, -1), (1, 0), (1, 1))
_STEP_INDEX = {step: index for index, step in enumerate(_STEPS)}
_WEST = 4


@dataclass(frozen=True)
class Rect:
    """Upright rectangle with integer corner and size."""

    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def area(self) -> int:
        return self.width * self.height


@dataclass(frozen=True)
class RotatedBox:
    """Rectangle of given size rotated by ``angle`` degrees about its centre."""

    center: tuple[float, float]
    width: float
    height: float
    angle: float

    def points(self) -> list[tuple[float, float]]:
        """Four corners; the first edge spans the height, the second the width."""
        rad = math.radians(self.angle)
        b = math.cos(rad) * 0.5
        a = math.sin(rad) * 0.5
        cx, cy = self.center
        p0 = (cx - a * self.height - b * self.width, cy + b * self.height - a * self.width)
        p1 = (cx + a * self.height - b * self.width, cy - b * self.height - a * self.width)
        p2 = (2 * cx - p0[0], 2 * cy - p0[1])
        p3 = (2 * cx - p1[0], 2 * cy - p1[1])
        return [p0, p1, p2, p3]


@dataclass(frozen=True)
class Contour:
    """Closed outline given by its (x, y) vertices."""

    points: tuple[Point, ...]

    def area(self) -> float:
        return contour_area(self.points)

    def bounding_rect(self) -> Rect:
        xs = [p[0] for p in self.points]
        ys = [p[1] for p in self.points]
        left, top = min(xs), min(ys)
        return Rect(left, top, max(xs) - left + 1, max(ys) - top + 1)


def _neighbour(point: Point, direction: int) -> Point:
    dr, dc = _STEPS[direction % 8]
    return (point[0] + dr, point[1] + dc)


def _direction(src: Point, dst: Point) -> int:
    return _STEP_INDEX[(dst[0] - src[0], dst[1] - src[1])]


def _trace(fg: np.ndarray, start: Point) -> list[Point]:
    first = None
    for k in range(8):
        candidate = _neighbour(start, _WEST - k)
        if fg[candidate]:
            first = candidate
            break
    if first is None:
        return [start]
    points = [start]
    previous, current = first, start
    while True:
        base = _direction(current, previous)
        following = next(
            q for q in (_neighbour(current, base + k) for k in range(1, 9)) if fg[q]
        )
        if following == start and current == first:
            return points
        previous, current = current, following
        points.append(current)


def _compress(points: list[Point]) -> list[Point]:
    if len(points) < 3:
        return points
    count = len(points)
    kept = [
        point
        for i, point in enumerate(points)
        if _direction(points[i - 1], point) != _direction(point, points[(i + 1) % count])
    ]
    return kept or points[:1]


def find_external_contours(mask) -> list[Contour]:
    """Outer borders of the 8-connected blobs not enclosed by another blob.

    Contours come in reverse scan order of their top-left starting pixel.
    """
    fg = np.asarray(mask) != 0
    if fg.ndim != 2:
        raise ValueError("expected a two-dimensional mask")
    padded = np.pad(fg, 1)
    components, count = ndimage.label(padded, structure=np.ones((3, 3), dtype=bool))
    if count == 0:
        return []
    background, _ = ndimage.label(~padded)
    outside = background == background[0, 0]
    touching = ndimage.binary_dilation(outside) & padded
    external = set(np.unique(components[touching]).tolist()) - {0}
    labels, starts = np.unique(components.ravel(), return_index=True)
    width = padded.shape[1]
    contours = []
    for label, start in zip(labels.tolist(), starts.tolist()):
        if label not in external:
            continue
        row, col = divmod(start, width)
        outline = _compress(_trace(padded, (row, col)))
        contours.append(Contour(tuple((c - 1, r - 1) for r, c in outline)))
    contours.reverse()
    return contours


def contour_area(points) -> float:
    """Unsigned area enclosed by a polygon."""
    pts = [(float(x), float(y)) for x, y in points]
    if len(pts) < 3:
        return 0.0
    doubled = sum(x0 * y1 - x1 * y0 for (x0, y0), (x1, y1) in zip(pts, pts[1:] + pts[:1]))
    return abs(doubled) / 2.0


def _cross(o, a, b) -> float:
    return (a[0] - o[0]) * (b[1] - o[1]) - (a[1] - o[1]) * (b[0] - o[0])


def convex_hull(points) -> list[tuple[float, float]]:
    """Convex hull vertices without collinear points."""
    pts = sorted({(p[0], p[1]) for p in points})
    if len(pts) <= 2:
        return pts

    def half(sequence):
        chain = []
        for p in sequence:
            while len(chain) >= 2 and _cross(chain[-2], chain[-1], p) <= 0:
                chain.pop()
            chain.append(p)
        return chain

    lower = half(pts)
    upper = half(reversed(pts))
    return lower[:-1] + upper[:-1]


def _snap(angle: float) -> float:
    nearest = round(angle)
    return float(nearest) if abs(angle - nearest) < 1e-9 else angle


def min_area_rect(points) -> RotatedBox:
    """Smallest rotated rectangle enclosing the points, angle in [-90, 0)."""
    hull = convex_hull(points)
    if not hull:
        raise ValueError("no points given")
    if len(hull) == 1:
        x, y = hull[0]
        return RotatedBox((float(x), float(y)), 0.0, 0.0, 0.0)
    best = None
    for a, b in zip(hull, hull[1:] + hull[:1]):
        ex, ey = b[0] - a[0], b[1] - a[1]
        length = math.hypot(ex, ey)
        if length == 0:
            continue
        ux, uy = ex / length, ey / length
        us = [p[0] * ux + p[1] * uy for p in hull]
        vs = [-p[0] * uy + p[1] * ux for p in hull]
        extent_u = max(us) - min(us)
        extent_v = max(vs) - min(vs)
        area = extent_u * extent_v
        if best is None or area < best[0]:
            mid_u = (max(us) + min(us)) / 2
            mid_v = (max(vs) + min(vs)) / 2
            best = (area, ux, uy, extent_u, extent_v, mid_u, mid_v)
    _, ux, uy, width, height, mid_u, mid_v = best
    center = (ux * mid_u - uy * mid_v, uy * mid_u + ux * mid_v)
    angle = _snap((math.degrees(math.atan2(uy, ux)) + 90.0) % 180.0 - 90.0)
    if angle >= 0:
        angle -= 90.0
        width, height = height, width
    return RotatedBox(center, width, height, angle)