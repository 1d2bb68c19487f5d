"""
Stochastic motion of a molecular motor.

State machine:
    UNBOUND --(tube within capture radius, bind draw succeeds)--> BOUND
    BOUND   --(walked to the end of the tube)--> UNBOUND
    any     --(inside destination, checked before each step)--> ARRIVED

Brownian step:
    dx, dy, dz ~ N(0, sqrt(2 D dt)),   elapsed += dt

Directed walk:
    for each remaining segment of the captured tube:
        elapsed += |segment| / movement_rate
        position = segment end

Every new position is appended to the caller's history list. Timeouts are
normal results, never exceptions.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence

from .config import MotionConfig
from .context import SimulationContext
from .exceptions import InvalidParameterError
from .geometry import Point3
from .network import TubeNetwork
from .overlap import find_nearest_tube
from .utils.logger.logger import Logger

ArrivalCheck = Optional[Callable[[Point3], bool]]


class MotorState(Enum):
    UNBOUND = "unbound"
    BOUND = "bound"
    ARRIVED = "arrived"


@dataclass(frozen=True)
class FloatResult:
    """
    Outcome of floating toward a tube.

    Attributes:
        position: Final position
        segment_index: Captured segment, None if not captured
        steps: Brownian steps taken
        state: BOUND on capture, ARRIVED on arrival, UNBOUND on timeout
    """
    position: Point3
    segment_index: Optional[int]
    steps: int
    state: MotorState

    @property
    def captured(self) -> bool:
        return self.state is MotorState.BOUND


@dataclass(frozen=True)
class WalkResult:
    """Outcome of a directed walk along one tube."""
    position: Point3
    segments_walked: int
    state: MotorState


class MotionEngine:
    """
    Applies the motion model using an explicit SimulationContext.

    The engine holds only parameters; random draws and elapsed time come
    from the context passed to each call.
    """

    def __init__(self, config: Optional[MotionConfig] = None):
        config = config if config is not None else MotionConfig()
        is_valid, error = config.validate()
        if not is_valid:
            raise InvalidParameterError(error)
        self.config = config
        self._sigma = config.brownian_sigma_nm
        self._bounding_box = config.bounding_box

    def brownian_step(self, position: Point3, context: SimulationContext) -> Point3:
        """Displace position by one Gaussian step; time is not advanced."""
        return Point3.from_array(position.as_array() + context.rng.normal(0.0, self._sigma, size=3))

    def diffuse(
        self,
        position: Point3,
        context: SimulationContext,
        history: List[Point3],
        surfaces: Sequence = (),
    ) -> Point3:
        """
        One full diffusion step: draw, confine, advance time, record.

        Confinement applies the bounding box first, then each surface in order.
        """
        new = self.brownian_step(position, context)
        if self._bounding_box is not None:
            new = self._bounding_box.reflect(new)
        for surface in surfaces:
            new = surface.apply(position, new)
        context.advance(self.config.time_step_s)
        history.append(new)
        return new

    def free_float(
        self,
        start: Point3,
        steps: int,
        context: SimulationContext,
        history: List[Point3],
        surfaces: Sequence = (),
    ) -> Point3:
        """Diffuse for a fixed number of steps with no tube interaction."""
        position = start
        for _ in range(steps):
            position = self.diffuse(position, context, history, surfaces)
        return position

    def _binds(self, context: SimulationContext) -> bool:
        p = self.config.binding_probability
        if p >= 1.0:
            return True
        if p <= 0.0:
            return False
        return context.rng.random() < p

    def float_to_tube(
        self,
        start: Point3,
        network: TubeNetwork,
        context: SimulationContext,
        history: List[Point3],
        arrived: ArrivalCheck = None,
        surfaces: Sequence = (),
    ) -> FloatResult:
        """
        Diffuse until captured by a tube, arrived, or timed out.

        Args:
            start: Starting position
            network: Tubes available for capture
            context: Random stream and clock
            history: Position history, appended in place
            arrived: Destination test, checked before each step
            surfaces: Volume surfaces applied to each step

        Returns:
            FloatResult; state UNBOUND means the step limit ran out.
        """
        position = start
        radius = self.config.capture_radius_nm
        for step in range(self.config.float_timeout_steps):
            if arrived is not None and arrived(position):
                return FloatResult(position, None, step, MotorState.ARRIVED)
            position = self.diffuse(position, context, history, surfaces)
            idx = find_nearest_tube(position, network, radius)
            if idx is not None and self._binds(context):
                Logger.log(f"motor bound to segment {idx} at t={context.elapsed_time:.6f} s")
                return FloatResult(position, idx, step + 1, MotorState.BOUND)

        steps = self.config.float_timeout_steps
        if arrived is not None and arrived(position):
            return FloatResult(position, None, steps, MotorState.ARRIVED)
        Logger.log(f"float_to_tube timed out after {steps} steps")
        return FloatResult(position, None, steps, MotorState.UNBOUND)

    def motor_walk(
        self,
        start: Point3,
        segment_index: int,
        network: TubeNetwork,
        context: SimulationContext,
        history: List[Point3],
        arrived: ArrivalCheck = None,
    ) -> WalkResult:
        """
        Walk from segment_index to the end of its tube.

        Each segment advances time by its length over the movement rate and
        moves the motor to the segment end. The motor is released (UNBOUND)
        at the tube end unless it arrives first.
        """
        position = start
        walked = 0
        rate = self.config.movement_rate_nm_per_s
        for i in range(segment_index, network.tube_end_index(segment_index)):
            if arrived is not None and arrived(position):
                return WalkResult(position, walked, MotorState.ARRIVED)
            segment = network.segments[i]
            context.advance(segment.length / rate)
            position = segment.end
            history.append(position)
            walked += 1

        if arrived is not None and arrived(position):
            return WalkResult(position, walked, MotorState.ARRIVED)
        Logger.log(f"motor released after {walked} segments at t={context.elapsed_time:.6f} s")
        return WalkResult(position, walked, MotorState.UNBOUND)


__all__ = [
    "MotorState",
    "FloatResult",
    "WalkResult",
    "MotionEngine",
]
