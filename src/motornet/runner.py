"""
Main simulation runner.

Orchestrates network generation, overlap analysis, vector field
derivation, motor transport and the optional persistence-length sweep,
then hands every dataset to the export sinks.

Random streams:
    The run seed spawns three independent streams (network, motor, sweep),
    so changing motor settings never changes the generated network.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from .config import SimulationConfig
from .context import SimulationContext
from .export.memory_sink import MemoryExportSink
from .geometry import BoundingBox, Point3
from .motion import MotionEngine
from .motor import Motor, MoveResult
from .network import (
    SWEEP_XLABEL, SWEEP_YLABEL, TubeNetwork, TubeNetworkStats, generate_network,
    persistence_versus_entropy,
)
from .overlap import all_overlaps
from .utils.logger.logger import Logger
from .vector_field import GridSample, VectorField, derive_field, resample_on_grid
from .volume_surface import SurfaceKind, VolumeSurface


@dataclass
class SimulationResult:
    """
    Complete simulation results.

    Attributes:
        config: Configuration used.
        network: Generated tube network.
        overlaps: Segment intersection points.
        vector_field: Vector field derived from the network.
        grid: Field resampled on a regular grid.
        move: Motor transport outcome.
        history: Motor position history.
        surfaces: Volume surfaces used during the run.
        flux: flux_meter() value for each flux-meter surface.
        sweep: (persistence length, entropy) pairs, empty if not requested.
        sweep_networks: "sweep_tubes_<i>" -> (origins, directions) of each
            network regenerated during the sweep.
    """
    config: SimulationConfig
    network: TubeNetwork
    overlaps: List[Point3]
    vector_field: VectorField
    grid: List[GridSample]
    move: MoveResult
    history: List[Point3]
    surfaces: List[VolumeSurface] = field(default_factory=list)
    flux: List[float] = field(default_factory=list)
    sweep: List[Tuple[float, float]] = field(default_factory=list)
    sweep_networks: Dict[str, Tuple[np.ndarray, np.ndarray]] = field(default_factory=dict)

    @property
    def stats(self) -> TubeNetworkStats:
        return self.network.stats

    def summary(self) -> dict:
        return {
            "num_tubes": self.stats.num_tubes,
            "num_segments": self.stats.num_segments,
            "entropy": self.stats.entropy,
            "num_overlaps": len(self.overlaps),
            "arrived": self.move.arrived,
            "outcome": self.move.outcome,
            "elapsed_time_s": self.move.elapsed_time,
            "iterations": self.move.iterations,
            "captures": self.move.captures,
            "history_length": len(self.history),
            "flux": list(self.flux),
            "motor_crossings": [s.crossings for s in self.surfaces if s.kind is SurfaceKind.FLUX_METER],
        }


class SimulationRunner:
    """
    End-to-end motor transport simulation.
    """

    def __init__(self, config: SimulationConfig):
        """
        Initialize runner with configuration.

        Args:
            config: Complete simulation configuration.
        """
        is_valid, error = config.validate()
        if not is_valid:
            raise ValueError(f"Invalid configuration: {error}")
        self.config = config
        self.context = SimulationContext(config.simulation.seed)
        self.network_context, self.motor_context, self.sweep_context = self.context.spawn(3)
        self.motion = MotionEngine(config.motion)

    def _build_surfaces(self) -> List[VolumeSurface]:
        return [
            VolumeSurface(Point3(*map(float, s.center_nm)), float(s.radius_nm), SurfaceKind(s.kind))
            for s in self.config.surfaces
        ]

    def _build_motor(self, surfaces: List[VolumeSurface]) -> Motor:
        cfg = self.config.motor
        destination = None
        if cfg.destination_lower_nm is not None:
            destination = BoundingBox(
                Point3(*map(float, cfg.destination_lower_nm)),
                Point3(*map(float, cfg.destination_upper_nm)),
            )
        return Motor(
            Point3(*map(float, cfg.start_nm)),
            motion=self.motion,
            context=self.motor_context,
            destination=destination,
            surfaces=surfaces,
            max_iterations=cfg.max_iterations,
        )

    def run(self, sinks: Sequence = ()) -> SimulationResult:
        """
        Run the full simulation.

        Args:
            sinks: Export sinks that receive every dataset.

        Returns:
            SimulationResult.
        """
        Logger.log(f"start SimulationRunner.run(seed={self.config.simulation.seed})")
        network = generate_network(self.config.network, self.network_context)

        overlaps = all_overlaps(network) if self.config.simulation.overlap_analysis else []
        Logger.log(f"overlap analysis: {len(overlaps)} intersections")

        vector_field = derive_field(network)
        grid = resample_on_grid(vector_field, self.config.simulation.grid_divisions) if len(vector_field) else []

        surfaces = self._build_surfaces()
        motor = self._build_motor(surfaces)
        move = motor.move_to_destination(network)

        flux = [s.flux_meter(network) for s in surfaces if s.kind is SurfaceKind.FLUX_METER]

        sweep = []
        sweep_sink = MemoryExportSink()
        if self.config.simulation.persistence_sweep_nm:
            sweep = persistence_versus_entropy(
                self.config.network,
                self.config.simulation.persistence_sweep_nm,
                self.sweep_context,
                sink=sweep_sink,
            )

        result = SimulationResult(
            config=self.config,
            network=network,
            overlaps=overlaps,
            vector_field=vector_field,
            grid=grid,
            move=move,
            history=list(motor.position_history),
            surfaces=surfaces,
            flux=flux,
            sweep=sweep,
            sweep_networks=sweep_sink.vector_fields,
        )
        for sink in sinks:
            emit_result(result, sink)
        Logger.log(f"end SimulationRunner.run: outcome={move.outcome}")
        return result


def emit_result(result: SimulationResult, sink) -> None:
    """Send every dataset of a result to one export sink."""
    network = result.network
    sink.emit_vector_field("network", network.starts, network.ends - network.starts)
    if result.overlaps:
        sink.emit_points("overlaps", result.overlaps)
    if result.grid:
        sink.emit_vector_field(
            "vector_field_grid",
            [g.point for g in result.grid],
            [g.direction for g in result.grid],
        )
    sink.emit_connected_path("motor_path", result.history)
    if result.sweep:
        sink.emit_xy_series("persistence_vs_entropy", result.sweep, SWEEP_XLABEL, SWEEP_YLABEL)
    for name, (origins, directions) in result.sweep_networks.items():
        sink.emit_vector_field(name, origins, directions)


def run_simulation(config: SimulationConfig, sinks: Optional[Sequence] = None) -> SimulationResult:
    """
    Convenience function to run simulation.

    Args:
        config: Complete configuration.
        sinks: Optional export sinks.

    Returns:
        SimulationResult.
    """
    runner = SimulationRunner(config)
    return runner.run(sinks or ())
