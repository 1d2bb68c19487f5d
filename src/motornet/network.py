"""
Random tube network: many persistence-length constrained tubes.

Tube start points are drawn per axis from N(0, volume^(1/3)). Segments of
all tubes are stored in one flat list in tube order, so segment i belongs
to tube i // segments_per_tube.

A network is only ever rebuilt as a whole (regenerate). Each rebuild bumps
`version`, which vector fields use to detect that they are stale.
"""

from dataclasses import dataclass, replace
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .config import TubeNetworkConfig
from .context import SimulationContext
from .exceptions import InvalidParameterError
from .geometry import BoundingBox, Point3, Segment3
from .tubes import generate_tube
from .utils.logger.logger import Logger

SWEEP_XLABEL = "persistence length (nm)"
SWEEP_YLABEL = "structural entropy (nats)"


@dataclass
class TubeNetworkStats:
    """Measured characteristics of a generated network."""
    num_tubes: int = 0
    num_segments: int = 0
    entropy: float = 0.0

    def describe(self) -> str:
        return (
            f"tubes={self.num_tubes} segments={self.num_segments} "
            f"entropy={self.entropy:.6f}"
        )


class TubeNetwork:
    """
    Flat, ordered collection of tube segments.

    Attributes:
        config: Parameters the network was generated from
        segments: All segments, tube by tube
        tube_entropies: Per-tube structural entropy (nats)
        stats: Measured counts and total entropy
        version: Incremented on every regeneration
    """

    def __init__(
        self,
        config: TubeNetworkConfig,
        segments: Sequence[Segment3] = (),
        tube_entropies: Sequence[float] = (),
    ):
        self.config = config
        self.version = 0
        self._set_content(list(segments), list(tube_entropies))

    @classmethod
    def from_segments(
        cls,
        segments: Sequence[Segment3],
        segments_per_tube: Optional[int] = None,
        config: Optional[TubeNetworkConfig] = None,
    ) -> "TubeNetwork":
        """
        Build a network from explicit geometry.

        Args:
            segments: Segments in tube order
            segments_per_tube: Tube size; defaults to all segments in one tube
            config: Base parameters (defaults used if None)
        """
        segments = list(segments)
        if segments_per_tube is None:
            segments_per_tube = max(len(segments), 1)
        base = config if config is not None else TubeNetworkConfig()
        base = replace(base, segments_per_tube=segments_per_tube)
        num_tubes = -(-len(segments) // segments_per_tube)
        return cls(base, segments, [0.0] * num_tubes)

    def _set_content(self, segments: List[Segment3], tube_entropies: List[float]) -> None:
        self.segments = segments
        self.tube_entropies = tube_entropies
        if segments:
            self._array = np.array([s.as_array() for s in segments], dtype=np.float64)
        else:
            self._array = np.zeros((0, 6), dtype=np.float64)
        self.stats = TubeNetworkStats(
            num_tubes=len(tube_entropies),
            num_segments=len(segments),
            entropy=float(sum(tube_entropies)),
        )

    def __len__(self) -> int:
        return len(self.segments)

    @property
    def entropy(self) -> float:
        return self.stats.entropy

    @property
    def segment_array(self) -> np.ndarray:
        """Shape (n, 6): x1, y1, z1, x2, y2, z2 per segment."""
        return self._array

    @property
    def starts(self) -> np.ndarray:
        return self._array[:, :3]

    @property
    def ends(self) -> np.ndarray:
        return self._array[:, 3:]

    def tube_of(self, segment_index: int) -> int:
        return segment_index // self.config.segments_per_tube

    def tube_segments(self, tube_index: int) -> List[Segment3]:
        spt = self.config.segments_per_tube
        return self.segments[tube_index * spt:(tube_index + 1) * spt]

    def tube_end_index(self, segment_index: int) -> int:
        """Index one past the last segment of the tube holding segment_index."""
        spt = self.config.segments_per_tube
        return min(segment_index + (spt - segment_index % spt), len(self.segments))

    def bounding_box(self) -> Optional[BoundingBox]:
        if not self.segments:
            return None
        pts = np.vstack((self.starts, self.ends))
        return BoundingBox(Point3.from_array(pts.min(axis=0)), Point3.from_array(pts.max(axis=0)))

    def regenerate(
        self,
        context: SimulationContext,
        config: Optional[TubeNetworkConfig] = None,
    ) -> "TubeNetwork":
        """
        Replace the whole network in place with a fresh random draw.

        Raises:
            InvalidParameterError: If the parameters are invalid; the
                network is left unchanged.
        """
        config = config if config is not None else self.config
        segments, entropies = _build_tubes(config, context)
        self.config = config
        self._set_content(segments, entropies)
        self.version += 1
        Logger.log(f"TubeNetwork regenerated (version {self.version}): {self.stats.describe()}")
        return self


def _build_tubes(
    config: TubeNetworkConfig,
    context: SimulationContext,
) -> Tuple[List[Segment3], List[float]]:
    is_valid, error = config.validate()
    if not is_valid:
        Logger.log(f"InvalidParameterError: {error}", Logger.LogPriority.ERROR)
        raise InvalidParameterError(error)

    segments: List[Segment3] = []
    entropies: List[float] = []
    sigma = config.start_sigma_nm
    for _ in range(config.num_tubes):
        start = Point3.from_array(context.rng.normal(0.0, sigma, size=3))
        tube = generate_tube(config, start, context)
        segments.extend(tube.segments)
        entropies.append(tube.entropy)
    return segments, entropies


def generate_network(config: TubeNetworkConfig, context: SimulationContext) -> TubeNetwork:
    """
    Generate a random tube network.

    Args:
        config: Network parameters
        context: Random stream to draw from

    Returns:
        New network with floor(density * volume / segments_per_tube) tubes.

    Raises:
        InvalidParameterError: If parameters fail validation (no partial network).
    """
    Logger.log(f"start generate_network(seed={context.seed})")
    segments, entropies = _build_tubes(config, context)
    network = TubeNetwork(config, segments, entropies)
    Logger.log(
        f"Tube characteristics: volume={config.volume_nm3} nm^3 "
        f"mean_length={config.mean_tube_length_nm} nm "
        f"Lp={config.persistence_length_nm} nm "
        f"segments_per_tube={config.segments_per_tube} {network.stats.describe()}",
        Logger.LogPriority.INFO,
    )
    Logger.log("end generate_network")
    return network


def persistence_versus_entropy(
    config: TubeNetworkConfig,
    persistence_lengths: Sequence[float],
    context: SimulationContext,
    network: Optional[TubeNetwork] = None,
    sink=None,
) -> List[Tuple[float, float]]:
    """
    Regenerate a network once per persistence length and record its entropy.

    Args:
        config: Base parameters; only the persistence length varies
        persistence_lengths: Values to sweep (nm)
        context: Random stream
        network: Network to regenerate in place (a new one if None)
        sink: Optional export sink; receives each regenerated network as the
            vector field "sweep_tubes_<i>" and the labelled series
            "persistence_vs_entropy"

    Returns:
        List of (persistence_length_nm, entropy) pairs in sweep order.
    """
    if network is None:
        network = TubeNetwork(config)
    series = []
    for i, lp in enumerate(persistence_lengths):
        network.regenerate(context, config.with_persistence_length(float(lp)))
        series.append((float(lp), network.entropy))
        if sink is not None:
            sink.emit_vector_field(f"sweep_tubes_{i}", network.starts, network.ends - network.starts)
    if sink is not None:
        sink.emit_xy_series("persistence_vs_entropy", series, SWEEP_XLABEL, SWEEP_YLABEL)
    return series


__all__ = [
    "TubeNetwork",
    "TubeNetworkStats",
    "generate_network",
    "persistence_versus_entropy",
]
