"""
Vector field derived from a tube network.

One sample per segment: origin = segment start, direction = end - start
(not normalized). A field remembers which network and network version it
came from; regenerating the network makes the field stale.

Grid resampling:
- Each axis spans [min, max) of the sample origins in `divisions` equal
  steps; an axis with zero extent contributes a single coordinate.
- Each grid point takes the direction of its nearest sample, or the null
  vector when that sample is farther than 2 x-steps away.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from .exceptions import EmptyNetworkError
from .geometry import Point3
from .network import TubeNetwork


@dataclass(eq=False)
class VectorField:
    """
    Attributes:
        origins: Sample positions, shape (n, 3)
        directions: Sample vectors, shape (n, 3)
        network_id: id() of the source network
        network_version: Source network version at derivation time
    """
    origins: np.ndarray
    directions: np.ndarray
    network_id: Optional[int] = None
    network_version: Optional[int] = None

    def __len__(self) -> int:
        return self.origins.shape[0]

    def is_stale(self, network: TubeNetwork) -> bool:
        return self.network_id != id(network) or self.network_version != network.version


@dataclass(frozen=True)
class GridSample:
    """Resampled field value at one grid point."""
    point: Point3
    direction: Point3

    @property
    def is_null(self) -> bool:
        return self.direction.x == 0.0 and self.direction.y == 0.0 and self.direction.z == 0.0


def derive_field(network: TubeNetwork) -> VectorField:
    """One sample per segment, in segment order."""
    return VectorField(
        origins=network.starts.copy(),
        directions=network.ends - network.starts,
        network_id=id(network),
        network_version=network.version,
    )


def _nearest_indices(points: np.ndarray, origins: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Nearest sample index and distance per query point.

    Scanning in order, the running best is replaced by a strictly closer
    sample, or by any sample while the best distance is NaN. So the first
    minimum over non-NaN distances wins, and a row of all-NaN distances
    falls through to the last sample.
    """
    diff = points[:, None, :] - origins[None, :, :]
    d = np.linalg.norm(diff, axis=2)
    nan = np.isnan(d)
    idx = np.argmin(np.where(nan, np.inf, d), axis=1)
    rows = np.arange(points.shape[0])
    # all non-NaN distances infinite: argmin may have landed on a NaN column
    landed_on_nan = nan[rows, idx]
    idx = np.where(landed_on_nan, np.argmax(~nan, axis=1), idx)
    idx = np.where(nan.all(axis=1), origins.shape[0] - 1, idx)
    return idx, d[rows, idx]


def nearest_sample(point: Point3, field: VectorField) -> Tuple[Point3, Point3]:
    """
    Closest sample to point by Euclidean distance.

    Returns:
        (origin, direction) of the first sample attaining the minimum;
        the last sample when every distance is NaN.

    Raises:
        EmptyNetworkError: If the field has no samples.
    """
    if len(field) == 0:
        raise EmptyNetworkError("Vector field has no samples.")
    idx, _ = _nearest_indices(point.as_array()[None, :], field.origins)
    i = int(idx[0])
    return Point3.from_array(field.origins[i]), Point3.from_array(field.directions[i])


def _axis_coords(lo: float, hi: float, divisions: int) -> np.ndarray:
    step = (hi - lo) / divisions
    if step == 0.0:
        return np.array([lo])
    return lo + step * np.arange(divisions)


def resample_on_grid(field: VectorField, divisions: int = 10, sink=None) -> List[GridSample]:
    """
    Resample the field on a regular grid over the origins' bounding box.

    Args:
        field: Field to resample
        divisions: Steps per axis
        sink: Optional export sink; receives the grid via emit_vector_field

    Returns:
        Grid samples in x-major order.

    Raises:
        EmptyNetworkError: If the field has no samples.
    """
    if len(field) == 0:
        raise EmptyNetworkError("Cannot resample an empty vector field.")
    lo = field.origins.min(axis=0)
    hi = field.origins.max(axis=0)
    steps = (hi - lo) / divisions
    nonzero = steps[steps > 0]
    if steps[0] > 0:
        threshold = 2.0 * steps[0]
    elif nonzero.size:
        threshold = 2.0 * nonzero.max()
    else:
        threshold = 0.0

    axes = [_axis_coords(lo[k], hi[k], divisions) for k in range(3)]
    gx, gy, gz = np.meshgrid(*axes, indexing="ij")
    grid = np.column_stack((gx.ravel(), gy.ravel(), gz.ravel()))

    idx, dist = _nearest_indices(grid, field.origins)
    vectors = np.where((dist <= threshold)[:, None], field.directions[idx], 0.0)

    if sink is not None:
        sink.emit_vector_field("vector_field_grid", grid, vectors)

    return [
        GridSample(Point3.from_array(p), Point3.from_array(v))
        for p, v in zip(grid, vectors)
    ]


__all__ = [
    "VectorField",
    "GridSample",
    "derive_field",
    "nearest_sample",
    "resample_on_grid",
]
