"""
Spherical volume surfaces.

A surface is a sphere (center, radius) with one of two behaviours:
- REFLECTIVE_BARRIER: a motor step that crosses the sphere is mirrored
  back to the side it came from.
- FLUX_METER: crossings are counted; motion is not altered.

Reflection:
    I = first crossing point on last -> current
    d = |current - I|        (overshoot along the trajectory)
    n = (I - center) / r     (outward normal)
    new = I - d n            (when leaving the sphere, d clamped to 2r)
    new = I + d n            (when entering from outside)

so |new - center| = |r - d| <= r for a motor that started inside.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Tuple

import numpy as np

from .exceptions import InvalidParameterError
from .geometry import Point3, Segment3
from .network import TubeNetwork


SURFACE_TOLERANCE_NM = 1e-9


class SurfaceKind(Enum):
    REFLECTIVE_BARRIER = "reflective_barrier"
    FLUX_METER = "flux_meter"


def _segment_sphere_params(starts: np.ndarray, ends: np.ndarray, center: np.ndarray, radius: float):
    """
    Solve |p0 + t (p1 - p0) - c|^2 = r^2 for many segments.

    Returns:
        (t_minus, t_plus, valid) where valid marks real roots of
        non-degenerate segments.
    """
    d = ends - starts
    f = starts - center
    a = np.einsum("ij,ij->i", d, d)
    b = 2.0 * np.einsum("ij,ij->i", f, d)
    c = np.einsum("ij,ij->i", f, f) - radius * radius
    disc = b * b - 4.0 * a * c
    valid = (a > 0.0) & (disc >= 0.0)
    with np.errstate(divide="ignore", invalid="ignore"):
        root = np.sqrt(np.where(valid, disc, 0.0))
        t_minus = np.where(valid, (-b - root) / (2.0 * a), np.nan)
        t_plus = np.where(valid, (-b + root) / (2.0 * a), np.nan)
    return t_minus, t_plus, valid


@dataclass
class VolumeSurface:
    """
    Sphere acting as a reflective barrier or a flux meter.

    Attributes:
        center: Sphere center (nm)
        radius: Sphere radius (nm), positive
        kind: Surface behaviour
        crossings: Motor crossings observed (flux meters only)
    """
    center: Point3
    radius: float
    kind: SurfaceKind = SurfaceKind.REFLECTIVE_BARRIER
    crossings: int = field(default=0, compare=False)

    def __post_init__(self):
        if not self.radius > 0:
            raise InvalidParameterError(f"Sphere radius must be positive, got {self.radius}")
        if isinstance(self.kind, str):
            self.kind = SurfaceKind(self.kind)

    def contains(self, point: Point3, tol: float = 0.0) -> bool:
        """True if point is inside or on the sphere."""
        return point.distance_to(self.center) <= self.radius + tol

    def sphere_intersections(self, segment: Segment3) -> List[Point3]:
        """
        Points where the segment meets the sphere.

        Returns:
            0, 1 or 2 points ordered along the segment; a tangent segment
            gives one point. Zero-length segments give none.
        """
        t_minus, t_plus, valid = _segment_sphere_params(
            segment.start.as_array()[None, :],
            segment.end.as_array()[None, :],
            self.center.as_array(),
            self.radius,
        )
        if not valid[0]:
            return []
        ts = [t_minus[0]] if t_minus[0] == t_plus[0] else [t_minus[0], t_plus[0]]
        return [segment.point_at(float(t)) for t in ts if 0.0 <= t <= 1.0]

    def reflect(self, last: Point3, current: Point3) -> Point3:
        """
        Position after reflecting the step last -> current off the sphere.

        Returns current unchanged when the step does not cross the surface.
        """
        # A reflected point can sit a rounding error outside the surface.
        was_inside = self.contains(last, SURFACE_TOLERANCE_NM)
        if was_inside and self.contains(current):
            return current
        hits = self.sphere_intersections(Segment3(last, current))
        if not was_inside and not self.contains(current) and len(hits) < 2:
            return current
        if was_inside:
            # Exit point; falls back to the radial projection if rounding drops the root.
            if hits:
                hit = hits[-1]
            else:
                hit = self.center + (current - self.center) * (self.radius / current.distance_to(self.center))
        elif hits:
            hit = hits[0]
        else:
            return last
        overshoot = current.distance_to(hit)
        normal = (hit - self.center) * (1.0 / self.radius)
        if was_inside:
            overshoot = min(overshoot, 2.0 * self.radius)
            return hit - normal * overshoot
        return hit + normal * overshoot

    def apply(self, last: Point3, current: Point3) -> Point3:
        """
        Apply this surface to one motor step.

        Reflective barriers return the reflected position; flux meters
        count a crossing and return current.
        """
        if self.kind is SurfaceKind.REFLECTIVE_BARRIER:
            return self.reflect(last, current)
        self.crossings += self._count_crossings(last, current)
        return current

    def _count_crossings(self, last: Point3, current: Point3) -> int:
        last_in = self.contains(last)
        current_in = self.contains(current)
        if last_in != current_in:
            return 1
        if last_in:
            return 0
        # Both outside: a chord through the sphere crosses twice.
        return 2 if len(self.sphere_intersections(Segment3(last, current))) == 2 else 0

    def _network_params(self, network: TubeNetwork):
        return _segment_sphere_params(
            network.starts, network.ends, self.center.as_array(), self.radius
        )

    def flux_meter(self, network: TubeNetwork) -> float:
        """
        Number of points where network segments cross the sphere surface.

        Tangent contacts count once.
        """
        if len(network) == 0:
            return 0.0
        t_minus, t_plus, valid = self._network_params(network)
        in_minus = valid & (t_minus >= 0.0) & (t_minus <= 1.0)
        in_plus = valid & (t_plus >= 0.0) & (t_plus <= 1.0) & (t_plus != t_minus)
        return float(np.count_nonzero(in_minus) + np.count_nonzero(in_plus))

    def directional_flux(self, network: TubeNetwork) -> Tuple[int, int]:
        """
        Segments crossing the surface, split by direction.

        Returns:
            (inward, outward): segments starting outside and ending inside,
            and segments starting inside and ending outside.
        """
        if len(network) == 0:
            return 0, 0
        c = self.center.as_array()
        start_in = np.linalg.norm(network.starts - c, axis=1) <= self.radius
        end_in = np.linalg.norm(network.ends - c, axis=1) <= self.radius
        inward = int(np.count_nonzero(~start_in & end_in))
        outward = int(np.count_nonzero(start_in & ~end_in))
        return inward, outward

    def net_flux(self, network: TubeNetwork) -> int:
        """Outward minus inward crossing segments."""
        inward, outward = self.directional_flux(network)
        return outward - inward

    def surface_area(self) -> float:
        return 4.0 * math.pi * self.radius ** 2


__all__ = ["SurfaceKind", "VolumeSurface"]
