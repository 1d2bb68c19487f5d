"""
Single tube generation under a persistence-length constraint.

A tube is a chain of equal-length segments. Each segment's direction is
given by two angles drawn independently from a zero-mean normal:

    theta, psi ~ N(0, sigma),   sigma = sqrt(2 * l_seg / Lp)

    end = start + l_seg * (sin(theta) cos(psi), sin(theta) sin(psi), cos(theta))

Large Lp gives small angles (stiff, straight tubes); small Lp gives broad
angle spread (floppy tubes).

Structural Entropy:
- Shannon entropy (nats) of a histogram of the sampled angles,
  H = -sum p ln p, computed separately for theta and psi and summed.
- "angle" range mode bins wrapped angles over the fixed interval [-pi, pi],
  so entropy reflects absolute angular spread and falls as Lp grows.
- "observed" range mode bins over [min, max] of the sample.

Units:
- Lengths in nm, angles in rad, entropy in nats
"""

import math
import numpy as np
from dataclasses import dataclass
from typing import Literal
from scipy.stats import entropy as shannon_entropy

from .config import TubeNetworkConfig
from .context import SimulationContext
from .exceptions import InvalidParameterError
from .geometry import Point3, Segment3


@dataclass(frozen=True, eq=False)
class Tube:
    """
    Generated tube.

    Attributes:
        segments: Chained segments, segments[i].end == segments[i+1].start
        theta_rad: Sampled polar angles, one per segment
        psi_rad: Sampled azimuthal angles, one per segment
        entropy: H(theta) + H(psi) in nats
    """
    segments: tuple
    theta_rad: np.ndarray
    psi_rad: np.ndarray
    entropy: float

    @property
    def start(self) -> Point3:
        return self.segments[0].start

    @property
    def end(self) -> Point3:
        return self.segments[-1].end


def persistence_angles(
    n: int,
    segment_length_nm: float,
    persistence_length_nm: float,
    rng: np.random.Generator,
) -> np.ndarray:
    """
    Draw n bend angles from N(0, sqrt(2 * l_seg / Lp)).

    Raises:
        InvalidParameterError: If persistence length is not positive.
    """
    if not persistence_length_nm > 0:
        raise InvalidParameterError(
            f"persistence_length_nm must be positive, got {persistence_length_nm}"
        )
    sigma = math.sqrt(2.0 * segment_length_nm / persistence_length_nm)
    return rng.normal(0.0, sigma, size=n)


def structural_entropy(
    angles: np.ndarray,
    bins: int = 100,
    range_mode: Literal["angle", "observed"] = "angle",
) -> float:
    """
    Shannon entropy (nats) of a histogram of angle samples.

    Args:
        angles: 1D sample of angles (rad)
        bins: Number of equal-width bins
        range_mode: "angle" bins wrapped angles over [-pi, pi];
            "observed" bins over the sample's own min..max

    Returns:
        -sum p ln p over non-empty bins; 0.0 for an empty sample.
    """
    angles = np.asarray(angles, dtype=np.float64)
    if angles.size == 0:
        return 0.0
    if range_mode == "angle":
        wrapped = np.angle(np.exp(1j * angles))
        counts, _ = np.histogram(wrapped, bins=bins, range=(-math.pi, math.pi))
    elif range_mode == "observed":
        counts, _ = np.histogram(angles, bins=bins)
    else:
        raise InvalidParameterError(f"Unknown entropy range mode: {range_mode}")
    return float(shannon_entropy(counts))


def generate_tube(
    config: TubeNetworkConfig,
    start_point: Point3,
    context: SimulationContext,
) -> Tube:
    """
    Generate one chained tube of config.segments_per_tube segments.

    All theta angles are drawn before all psi angles.

    Raises:
        InvalidParameterError: If persistence length is not positive.
    """
    n = config.segments_per_tube
    seg_len = config.segment_length_nm
    theta = persistence_angles(n, seg_len, config.persistence_length_nm, context.rng)
    psi = persistence_angles(n, seg_len, config.persistence_length_nm, context.rng)

    steps = seg_len * np.column_stack((
        np.sin(theta) * np.cos(psi),
        np.sin(theta) * np.sin(psi),
        np.cos(theta),
    ))
    # Cumulative sum keeps the chain exactly continuous: each start is the previous end.
    vertices = start_point.as_array() + np.vstack((np.zeros(3), np.cumsum(steps, axis=0)))
    points = [Point3.from_array(v) for v in vertices]
    segments = tuple(Segment3(points[i], points[i + 1]) for i in range(n))

    tube_entropy = (
        structural_entropy(theta, config.entropy_bins, config.entropy_range)
        + structural_entropy(psi, config.entropy_bins, config.entropy_range)
    )
    return Tube(segments=segments, theta_rad=theta, psi_rad=psi, entropy=tube_entropy)


__all__ = [
    "Tube",
    "persistence_angles",
    "structural_entropy",
    "generate_tube",
]
