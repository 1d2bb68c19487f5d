"""
MotorNet: molecular motor transport over random microtubule networks.

Generates persistence-length constrained 3D tube networks, analyses their
intersections, vector field and structural entropy, and simulates a
molecular motor that diffuses, binds to tubes and walks along them toward
a destination volume.

Units:
- Length: nm
- Volume: nm^3
- Time: s (simulated)
- Angles: rad (config fields ending in _deg are degrees)
- Entropy: nats
"""

__version__ = "1.0.0"

# Configuration
from .config import (
    TubeNetworkConfig,
    MotionConfig,
    MotorConfig,
    SurfaceConfig,
    RunConfig,
    OutputConfig,
    SimulationConfig,
    load_config,
)

# Core types
from .context import SimulationContext
from .geometry import Point3, Segment3, BoundingBox, distance, is_point_on_line
from .exceptions import InvalidParameterError, EmptyNetworkError, UnsupportedExportError

# Network
from .tubes import Tube, generate_tube, structural_entropy
from .network import TubeNetwork, TubeNetworkStats, generate_network, persistence_versus_entropy
from .overlap import find_nearest_tube, segment_overlap_3d, all_overlaps
from .vector_field import VectorField, GridSample, derive_field, nearest_sample, resample_on_grid

# Motion
from .motion import MotionEngine, MotorState, FloatResult, WalkResult
from .volume_surface import VolumeSurface, SurfaceKind
from .motor import Motor, MoveResult
from .communication import MotorChannel, PropagationResult

# Simulation
from .runner import SimulationRunner, SimulationResult, run_simulation

__all__ = [
    "__version__",
    "TubeNetworkConfig", "MotionConfig", "MotorConfig", "SurfaceConfig",
    "RunConfig", "OutputConfig", "SimulationConfig", "load_config",
    "SimulationContext",
    "Point3", "Segment3", "BoundingBox", "distance", "is_point_on_line",
    "InvalidParameterError", "EmptyNetworkError", "UnsupportedExportError",
    "Tube", "generate_tube", "structural_entropy",
    "TubeNetwork", "TubeNetworkStats", "generate_network", "persistence_versus_entropy",
    "find_nearest_tube", "segment_overlap_3d", "all_overlaps",
    "VectorField", "GridSample", "derive_field", "nearest_sample", "resample_on_grid",
    "MotionEngine", "MotorState", "FloatResult", "WalkResult",
    "VolumeSurface", "SurfaceKind",
    "Motor", "MoveResult",
    "MotorChannel", "PropagationResult",
    "SimulationRunner", "SimulationResult", "run_simulation",
]
