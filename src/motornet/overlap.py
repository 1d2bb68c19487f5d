"""
Proximity and intersection queries against a tube network.

Nearest tube:
- Linear scan of infinite-line distances (geometry.line_distances).
- Returns the FIRST index attaining the minimum, only if within radius.
- Zero-length segments (NaN distance) never match.

Segment overlap:
- For query a->b and candidate c->d, solve in the least-squares sense

      [b - a, -(d - c)] [t, s]^T = c - a

  with an SVD pseudo-inverse, batched over every candidate at once.
- The solution is accepted when t and s are finite and both points
  a + t(b - a) and c + s(d - c) lie inside the closed bounding boxes of
  both segments. Parallel segments fall out via the zeroed singular value.
"""

from typing import Iterator, List, Optional, Tuple

import numpy as np

from .geometry import Point3, Segment3, line_distances
from .network import TubeNetwork

BOX_TOLERANCE_NM = 1e-9


def find_nearest_tube(point: Point3, network: TubeNetwork, radius: float) -> Optional[int]:
    """
    Index of the nearest segment within radius, or None.

    Args:
        point: Query position
        network: Network to search
        radius: Capture radius (nm); distance must be <= radius

    Returns:
        Segment index, ties resolved to the lowest index; None if nothing
        is within radius or the network is empty.
    """
    if len(network) == 0:
        return None
    d = line_distances(point.as_array(), network.starts, network.ends)
    d = np.where(np.isnan(d), np.inf, d)
    idx = int(np.argmin(d))
    if d[idx] <= radius:
        return idx
    return None


def _within(points: np.ndarray, lo: np.ndarray, hi: np.ndarray) -> np.ndarray:
    return np.all((points >= lo - BOX_TOLERANCE_NM) & (points <= hi + BOX_TOLERANCE_NM), axis=-1)


def _solve_overlaps(query: Segment3, starts: np.ndarray, ends: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Batched SVD solve of the query against n candidates.

    Returns:
        (accepted mask shape (n,), intersection points shape (n, 3))
    """
    n = starts.shape[0]
    a = query.start.as_array()
    b = query.end.as_array()
    u_dir = b - a
    v_dir = ends - starts

    A = np.empty((n, 3, 2), dtype=np.float64)
    A[:, :, 0] = u_dir
    A[:, :, 1] = -v_dir
    rhs = starts - a

    U, S, Vt = np.linalg.svd(A, full_matrices=False)
    cutoff = S.max(axis=1, keepdims=True) * 3 * np.finfo(np.float64).eps
    with np.errstate(divide="ignore", invalid="ignore"):
        inv_s = np.where(S > cutoff, 1.0 / S, 0.0)
    y = inv_s * np.einsum("nij,ni->nj", U, rhs)
    x = np.einsum("nji,nj->ni", Vt, y)
    t = x[:, 0]
    s = x[:, 1]

    p = a + t[:, None] * u_dir
    q = starts + s[:, None] * v_dir

    lo1, hi1 = np.minimum(a, b), np.maximum(a, b)
    lo2, hi2 = np.minimum(starts, ends), np.maximum(starts, ends)

    nondegenerate = (np.linalg.norm(u_dir) > 0.0) & (np.linalg.norm(v_dir, axis=1) > 0.0)
    finite = np.isfinite(t) & np.isfinite(s)
    accepted = (
        nondegenerate
        & finite
        & _within(p, lo1, hi1) & _within(p, lo2, hi2)
        & _within(q, lo1, hi1) & _within(q, lo2, hi2)
    )
    return accepted, p


def segment_overlap_3d(query: Segment3, network: TubeNetwork) -> List[Tuple[Point3, int]]:
    """
    Intersections of query with every network segment.

    Returns:
        (intersection point, segment index) pairs in index order; empty
        when nothing intersects or the network is empty.
    """
    if len(network) == 0:
        return []
    accepted, points = _solve_overlaps(query, network.starts, network.ends)
    return [(Point3.from_array(points[i]), int(i)) for i in np.flatnonzero(accepted)]


def iter_overlaps(network: TubeNetwork, include_self: bool = False) -> Iterator[Tuple[int, int, Point3]]:
    """
    Yield (query index, candidate index, point) for every segment pair.

    Each unordered pair appears twice, once per query direction.
    """
    for i, seg in enumerate(network.segments):
        for point, j in segment_overlap_3d(seg, network):
            if j == i and not include_self:
                continue
            yield i, j, point


def all_overlaps(network: TubeNetwork, include_self: bool = False) -> List[Point3]:
    """
    Intersection points of every segment against the whole network.

    Args:
        network: Network to analyse
        include_self: Also report each segment against itself

    Returns:
        Points in query order.
    """
    return [point for _, _, point in iter_overlaps(network, include_self)]


__all__ = [
    "find_nearest_tube",
    "segment_overlap_3d",
    "iter_overlaps",
    "all_overlaps",
]
