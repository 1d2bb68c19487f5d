"""
Configuration loading and validation for motor transport simulation.

Loads YAML config and validates all parameters against physical constraints.
Network and motion parameters are immutable once built; measured results
live elsewhere (network.TubeNetworkStats).
"""

import math
import yaml
from dataclasses import dataclass, field, replace
from typing import Literal, Optional
from pathlib import Path

from .geometry import BoundingBox, Point3


@dataclass(frozen=True)
class TubeNetworkConfig:
    """
    Parameters of a persistence-length constrained tube network.

    Derived quantities:
        segment_length_nm = mean_tube_length_nm / 5
        total_segments = int(segment_density_per_nm3 * volume_nm3)
        num_tubes = total_segments // segments_per_tube
    """
    volume_nm3: float = 25.0
    mean_tube_length_nm: float = 100.0
    mean_intra_tube_angle_deg: float = 30.0
    mean_inter_tube_angle_deg: float = 10.0
    segment_density_per_nm3: float = 10.0
    persistence_length_nm: float = 50.0
    segments_per_tube: int = 10
    entropy_bins: int = 100
    entropy_range: Literal["angle", "observed"] = "angle"

    def validate(self) -> tuple[bool, Optional[str]]:
        if self.segments_per_tube <= 0:
            return False, "segments_per_tube must be positive"
        if not self.persistence_length_nm > 0:
            return False, "persistence_length_nm must be positive"
        if self.volume_nm3 < 0:
            return False, "volume_nm3 must be non-negative"
        if self.mean_tube_length_nm < 0:
            return False, "mean_tube_length_nm must be non-negative"
        if self.segment_density_per_nm3 < 0:
            return False, "segment_density_per_nm3 must be non-negative"
        if self.mean_intra_tube_angle_deg < 0 or self.mean_inter_tube_angle_deg < 0:
            return False, "tube angles must be non-negative"
        if self.entropy_bins < 1:
            return False, "entropy_bins must be >= 1"
        if self.entropy_range not in ("angle", "observed"):
            return False, f"Unknown entropy_range: {self.entropy_range}"
        return True, None

    @property
    def segment_length_nm(self) -> float:
        return self.mean_tube_length_nm / 5.0

    @property
    def total_segments(self) -> int:
        return int(self.segment_density_per_nm3 * self.volume_nm3)

    @property
    def num_tubes(self) -> int:
        return self.total_segments // self.segments_per_tube

    @property
    def start_sigma_nm(self) -> float:
        """Std. dev. of tube start coordinates: cube root of the volume."""
        return self.volume_nm3 ** (1.0 / 3.0)

    @property
    def angle_sigma_rad(self) -> float:
        """Std. dev. of per-segment bend angles: sqrt(2 * l_seg / Lp)."""
        return math.sqrt(2.0 * self.segment_length_nm / self.persistence_length_nm)

    def with_persistence_length(self, persistence_length_nm: float) -> "TubeNetworkConfig":
        return replace(self, persistence_length_nm=persistence_length_nm)


@dataclass(frozen=True)
class MotionConfig:
    """Motor motion model parameters."""
    time_step_s: float = 0.1
    diffusion_nm2_per_s: float = 1.0
    capture_radius_nm: float = 15.0
    binding_probability: float = 1.0
    movement_rate_nm_per_s: float = 1000.0
    float_timeout_steps: int = 100
    bounding_box_lower_nm: Optional[tuple] = None
    bounding_box_upper_nm: Optional[tuple] = None

    def validate(self) -> tuple[bool, Optional[str]]:
        if self.time_step_s <= 0:
            return False, "time_step_s must be positive"
        if self.diffusion_nm2_per_s < 0:
            return False, "diffusion_nm2_per_s must be non-negative"
        if self.capture_radius_nm < 0:
            return False, "capture_radius_nm must be non-negative"
        if not 0.0 <= self.binding_probability <= 1.0:
            return False, "binding_probability must be in [0, 1]"
        if self.movement_rate_nm_per_s <= 0:
            return False, "movement_rate_nm_per_s must be positive"
        if self.float_timeout_steps < 1:
            return False, "float_timeout_steps must be >= 1"
        if (self.bounding_box_lower_nm is None) != (self.bounding_box_upper_nm is None):
            return False, "bounding box needs both lower and upper corners"
        if self.bounding_box_lower_nm is not None:
            if len(self.bounding_box_lower_nm) != 3 or len(self.bounding_box_upper_nm) != 3:
                return False, "bounding box corners must have 3 components"
            if any(lo > hi for lo, hi in zip(self.bounding_box_lower_nm, self.bounding_box_upper_nm)):
                return False, "bounding box lower corner must not exceed upper corner"
        return True, None

    @property
    def brownian_sigma_nm(self) -> float:
        """Per-axis displacement std. dev. for one step: sqrt(2 D dt)."""
        return math.sqrt(2.0 * self.diffusion_nm2_per_s * self.time_step_s)

    @property
    def bounding_box(self) -> Optional[BoundingBox]:
        if self.bounding_box_lower_nm is None:
            return None
        return BoundingBox(
            Point3(*map(float, self.bounding_box_lower_nm)),
            Point3(*map(float, self.bounding_box_upper_nm)),
        )


@dataclass
class MotorConfig:
    """Motor start point and destination box."""
    start_nm: list[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])
    destination_lower_nm: Optional[list[float]] = None
    destination_upper_nm: Optional[list[float]] = None
    max_iterations: int = 100

    def validate(self) -> tuple[bool, Optional[str]]:
        if len(self.start_nm) != 3:
            return False, "start_nm must have 3 components"
        if (self.destination_lower_nm is None) != (self.destination_upper_nm is None):
            return False, "destination needs both lower_nm and upper_nm"
        if self.destination_lower_nm is not None:
            if len(self.destination_lower_nm) != 3 or len(self.destination_upper_nm) != 3:
                return False, "destination corners must have 3 components"
            if any(lo > hi for lo, hi in zip(self.destination_lower_nm, self.destination_upper_nm)):
                return False, "destination lower_nm must not exceed upper_nm"
        if self.max_iterations < 1:
            return False, "max_iterations must be >= 1"
        return True, None


@dataclass
class SurfaceConfig:
    """Spherical volume surface."""
    center_nm: list[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])
    radius_nm: float = 100.0
    kind: Literal["reflective_barrier", "flux_meter"] = "reflective_barrier"

    def validate(self) -> tuple[bool, Optional[str]]:
        if len(self.center_nm) != 3:
            return False, "center_nm must have 3 components"
        if self.radius_nm <= 0:
            return False, "radius_nm must be positive"
        if self.kind not in ("reflective_barrier", "flux_meter"):
            return False, f"Unknown surface kind: {self.kind}"
        return True, None


@dataclass
class RunConfig:
    """Run-level settings."""
    seed: int = 42
    overlap_analysis: bool = True
    grid_divisions: int = 10
    persistence_sweep_nm: list[float] = field(default_factory=list)

    def validate(self) -> tuple[bool, Optional[str]]:
        if self.grid_divisions < 1:
            return False, "grid_divisions must be >= 1"
        if any(lp <= 0 for lp in self.persistence_sweep_nm):
            return False, "persistence_sweep_nm values must be positive"
        return True, None


@dataclass
class OutputConfig:
    """Output configuration."""
    out_dir: str = "output"
    run_name: str = "motornet_run"
    sinks: list[str] = field(default_factory=lambda: ["csv"])

    def validate(self) -> tuple[bool, Optional[str]]:
        known = ("csv", "excel", "png", "plot")
        for sink in self.sinks:
            if sink not in known:
                return False, f"Unknown sink: {sink}"
        return True, None


@dataclass
class SimulationConfig:
    """Complete simulation configuration."""
    network: TubeNetworkConfig = field(default_factory=TubeNetworkConfig)
    motion: MotionConfig = field(default_factory=MotionConfig)
    motor: MotorConfig = field(default_factory=MotorConfig)
    surfaces: list[SurfaceConfig] = field(default_factory=list)
    simulation: RunConfig = field(default_factory=RunConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    def validate(self) -> tuple[bool, Optional[str]]:
        for section_name in ["network", "motion", "motor", "simulation", "output"]:
            section = getattr(self, section_name)
            is_valid, error = section.validate()
            if not is_valid:
                return False, f"{section_name}: {error}"
        for i, surface in enumerate(self.surfaces):
            is_valid, error = surface.validate()
            if not is_valid:
                return False, f"surfaces[{i}]: {error}"
        return True, None


def _optional_corner(value) -> Optional[tuple]:
    return tuple(value) if value is not None else None


def load_config(path: Path) -> SimulationConfig:
    """
    Load and validate configuration from YAML file.

    Args:
        path: Path to YAML config file.

    Returns:
        Validated SimulationConfig.

    Raises:
        ValueError: If config is invalid.
        FileNotFoundError: If file doesn't exist.
    """
    with open(path, 'r') as f:
        raw = yaml.safe_load(f) or {}

    net_raw = raw.get("network", {})
    defaults = TubeNetworkConfig()
    network = TubeNetworkConfig(
        volume_nm3=net_raw.get("volume_nm3", defaults.volume_nm3),
        mean_tube_length_nm=net_raw.get("mean_tube_length_nm", defaults.mean_tube_length_nm),
        mean_intra_tube_angle_deg=net_raw.get("mean_intra_tube_angle_deg", defaults.mean_intra_tube_angle_deg),
        mean_inter_tube_angle_deg=net_raw.get("mean_inter_tube_angle_deg", defaults.mean_inter_tube_angle_deg),
        segment_density_per_nm3=net_raw.get("segment_density_per_nm3", defaults.segment_density_per_nm3),
        persistence_length_nm=net_raw.get("persistence_length_nm", defaults.persistence_length_nm),
        segments_per_tube=net_raw.get("segments_per_tube", defaults.segments_per_tube),
        entropy_bins=net_raw.get("entropy_bins", defaults.entropy_bins),
        entropy_range=net_raw.get("entropy_range", defaults.entropy_range),
    )

    mot_raw = raw.get("motion", {})
    box_raw = mot_raw.get("bounding_box") or {}
    motion = MotionConfig(
        time_step_s=mot_raw.get("time_step_s", 0.1),
        diffusion_nm2_per_s=mot_raw.get("diffusion_nm2_per_s", 1.0),
        capture_radius_nm=mot_raw.get("capture_radius_nm", 15.0),
        binding_probability=mot_raw.get("binding_probability", 1.0),
        movement_rate_nm_per_s=mot_raw.get("movement_rate_nm_per_s", 1000.0),
        float_timeout_steps=mot_raw.get("float_timeout_steps", 100),
        bounding_box_lower_nm=_optional_corner(box_raw.get("lower_nm")),
        bounding_box_upper_nm=_optional_corner(box_raw.get("upper_nm")),
    )

    motor_raw = raw.get("motor", {})
    dest_raw = motor_raw.get("destination") or {}
    motor = MotorConfig(
        start_nm=motor_raw.get("start_nm", [0.0, 0.0, 0.0]),
        destination_lower_nm=dest_raw.get("lower_nm"),
        destination_upper_nm=dest_raw.get("upper_nm"),
        max_iterations=motor_raw.get("max_iterations", 100),
    )

    surfaces = [
        SurfaceConfig(
            center_nm=s.get("center_nm", [0.0, 0.0, 0.0]),
            radius_nm=s.get("radius_nm", 100.0),
            kind=s.get("kind", "reflective_barrier"),
        )
        for s in raw.get("surfaces", []) or []
    ]

    sim_raw = raw.get("simulation", {})
    simulation = RunConfig(
        seed=sim_raw.get("seed", 42),
        overlap_analysis=sim_raw.get("overlap_analysis", True),
        grid_divisions=sim_raw.get("grid_divisions", 10),
        persistence_sweep_nm=sim_raw.get("persistence_sweep_nm", []) or [],
    )

    out_raw = raw.get("output", {})
    output = OutputConfig(
        out_dir=out_raw.get("out_dir", "output"),
        run_name=out_raw.get("run_name", "motornet_run"),
        sinks=out_raw.get("sinks", ["csv"]),
    )

    config = SimulationConfig(
        network=network,
        motion=motion,
        motor=motor,
        surfaces=surfaces,
        simulation=simulation,
        output=output,
    )

    is_valid, error = config.validate()
    if not is_valid:
        raise ValueError(f"Invalid configuration: {error}")

    return config


def config_to_dict(config: SimulationConfig) -> dict:
    """Convert config to serializable dict."""
    net = config.network
    mot = config.motion
    return {
        "network": {
            "volume_nm3": net.volume_nm3,
            "mean_tube_length_nm": net.mean_tube_length_nm,
            "mean_intra_tube_angle_deg": net.mean_intra_tube_angle_deg,
            "mean_inter_tube_angle_deg": net.mean_inter_tube_angle_deg,
            "segment_density_per_nm3": net.segment_density_per_nm3,
            "persistence_length_nm": net.persistence_length_nm,
            "segments_per_tube": net.segments_per_tube,
            "entropy_bins": net.entropy_bins,
            "entropy_range": net.entropy_range,
        },
        "motion": {
            "time_step_s": mot.time_step_s,
            "diffusion_nm2_per_s": mot.diffusion_nm2_per_s,
            "capture_radius_nm": mot.capture_radius_nm,
            "binding_probability": mot.binding_probability,
            "movement_rate_nm_per_s": mot.movement_rate_nm_per_s,
            "float_timeout_steps": mot.float_timeout_steps,
            "bounding_box": {
                "lower_nm": list(mot.bounding_box_lower_nm),
                "upper_nm": list(mot.bounding_box_upper_nm),
            } if mot.bounding_box_lower_nm is not None else None,
        },
        "motor": {
            "start_nm": list(config.motor.start_nm),
            "destination": {
                "lower_nm": list(config.motor.destination_lower_nm),
                "upper_nm": list(config.motor.destination_upper_nm),
            } if config.motor.destination_lower_nm is not None else None,
            "max_iterations": config.motor.max_iterations,
        },
        "surfaces": [
            {"center_nm": list(s.center_nm), "radius_nm": s.radius_nm, "kind": s.kind}
            for s in config.surfaces
        ],
        "simulation": {
            "seed": config.simulation.seed,
            "overlap_analysis": config.simulation.overlap_analysis,
            "grid_divisions": config.simulation.grid_divisions,
            "persistence_sweep_nm": list(config.simulation.persistence_sweep_nm),
        },
        "output": {
            "out_dir": config.output.out_dir,
            "run_name": config.output.run_name,
            "sinks": list(config.output.sinks),
        },
    }
