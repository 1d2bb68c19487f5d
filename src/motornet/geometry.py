"""
3D geometry primitives for tube networks.

Point3 and Segment3 are immutable value types. Bulk queries over a whole
network work on numpy arrays (see network.TubeNetwork.segment_array);
the helpers here are the scalar forms.

Distance Convention:
- Point-to-segment distance is measured to the INFINITE LINE through the
  segment: |(p - a) x (p - b)| / |b - a|. A point beyond a segment's end
  can therefore be "near" it.
- Zero-length segments have no defined line; distance is NaN.

Units:
- All coordinates in nm
"""

import math
import numpy as np
from dataclasses import dataclass
from typing import Tuple, Union


@dataclass(frozen=True)
class Point3:
    """Point (or displacement) in 3D space."""
    x: float
    y: float
    z: float

    @classmethod
    def from_array(cls, arr) -> "Point3":
        return cls(float(arr[0]), float(arr[1]), float(arr[2]))

    @classmethod
    def origin(cls) -> "Point3":
        return cls(0.0, 0.0, 0.0)

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def __add__(self, other: "Point3") -> "Point3":
        return Point3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Point3") -> "Point3":
        return Point3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float) -> "Point3":
        return Point3(self.x * scalar, self.y * scalar, self.z * scalar)

    __rmul__ = __mul__

    def norm(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def distance_to(self, other: "Point3") -> float:
        return (self - other).norm()

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y) and math.isfinite(self.z)


@dataclass(frozen=True)
class BoundingBox:
    """Closed axis-aligned box [lower, upper]."""
    lower: Point3
    upper: Point3

    def contains(self, point: Point3, tol: float = 0.0) -> bool:
        return (
            self.lower.x - tol <= point.x <= self.upper.x + tol
            and self.lower.y - tol <= point.y <= self.upper.y + tol
            and self.lower.z - tol <= point.z <= self.upper.z + tol
        )

    def reflect(self, point: Point3) -> Point3:
        """
        Mirror each out-of-range coordinate back across the violated face.

        Overshoot larger than the box width is clamped to the opposite face.
        """
        lo = self.lower.as_array()
        hi = self.upper.as_array()
        p = point.as_array()
        p = np.where(p < lo, 2.0 * lo - p, p)
        p = np.where(p > hi, 2.0 * hi - p, p)
        return Point3.from_array(np.clip(p, lo, hi))


@dataclass(frozen=True)
class Segment3:
    """Directed straight segment from start to end."""
    start: Point3
    end: Point3

    @property
    def direction(self) -> Point3:
        return self.end - self.start

    @property
    def length(self) -> float:
        return self.direction.norm()

    def point_at(self, t: float) -> Point3:
        """Point start + t * (end - start)."""
        return self.start + self.direction * t

    def bounding_box(self) -> BoundingBox:
        a = self.start.as_array()
        b = self.end.as_array()
        return BoundingBox(Point3.from_array(np.minimum(a, b)), Point3.from_array(np.maximum(a, b)))

    def as_array(self) -> np.ndarray:
        """Endpoints as a length-6 array (x1, y1, z1, x2, y2, z2)."""
        return np.array(
            [self.start.x, self.start.y, self.start.z, self.end.x, self.end.y, self.end.z],
            dtype=np.float64,
        )


def cross_product(a: Point3, b: Point3) -> Point3:
    return Point3(
        a.y * b.z - a.z * b.y,
        a.z * b.x - a.x * b.z,
        a.x * b.y - a.y * b.x,
    )


def distance(point: Point3, target: Union[Point3, Segment3]) -> float:
    """
    Distance from point to another point or to a segment's infinite line.

    Returns NaN for a zero-length segment.
    """
    if isinstance(target, Point3):
        return point.distance_to(target)
    seg_len = target.length
    if seg_len == 0.0:
        return math.nan
    return cross_product(point - target.start, point - target.end).norm() / seg_len


def line_distances(point: np.ndarray, starts: np.ndarray, ends: np.ndarray) -> np.ndarray:
    """
    Vectorized infinite-line distance from one point to many segments.

    Args:
        point: Shape (3,)
        starts: Shape (n, 3)
        ends: Shape (n, 3)

    Returns:
        Shape (n,) distances; NaN where a segment has zero length.
    """
    cross = np.cross(point - starts, point - ends)
    lengths = np.linalg.norm(ends - starts, axis=1)
    with np.errstate(divide="ignore", invalid="ignore"):
        d = np.linalg.norm(cross, axis=1) / lengths
    return np.where(lengths > 0.0, d, np.nan)


def is_point_on_line(point: Point3, segment: Segment3, tol: float = 1e-9) -> bool:
    """
    Test whether point lies on the infinite line through segment.

    Compares the per-axis ratios (p - a) / (b - a). Axes along which the
    segment does not move instead require p to match a on that axis.
    """
    a = segment.start.as_array()
    d = segment.direction.as_array()
    p = point.as_array()
    offset = p - a
    if not np.any(np.abs(d) > tol):
        return bool(np.all(np.abs(offset) <= tol))

    moving = np.abs(d) > tol
    if np.any(np.abs(offset[~moving]) > tol):
        return False
    ratios = offset[moving] / d[moving]
    return bool(np.all(np.abs(ratios - ratios[0]) <= tol * max(1.0, abs(ratios[0]))))


__all__ = [
    "Point3",
    "Segment3",
    "BoundingBox",
    "cross_product",
    "distance",
    "line_distances",
    "is_point_on_line",
]
