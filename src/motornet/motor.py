"""
Molecular motor carrying a message toward a destination volume.

A Motor owns its position history and its SimulationContext (random stream
and clock), so several motors can run side by side without sharing state.

Transport loop (move_to_destination):
    repeat up to max_iterations:
        float until captured by a tube, arrived, or the float step limit runs out
        if captured: walk to the end of the tube
    stop as soon as the motor is inside the destination box

Outcomes:
- "arrived": inside the destination box
- "timeout": iteration limit reached after at least one capture
- "no_network_interaction": iteration limit reached without any capture
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

from .context import SimulationContext
from .geometry import BoundingBox, Point3
from .motion import MotionEngine, MotorState
from .network import TubeNetwork
from .utils.logger.logger import Logger
from .volume_surface import VolumeSurface

OUTCOME_ARRIVED = "arrived"
OUTCOME_TIMEOUT = "timeout"
OUTCOME_NO_NETWORK_INTERACTION = "no_network_interaction"


@dataclass(frozen=True)
class MoveResult:
    """
    Result of a transport attempt.

    Attributes:
        arrived: Whether the motor ended inside its destination
        elapsed_time: Motor clock at the end of the attempt (s)
        iterations: Float/walk cycles (or Brownian steps for pure floating)
        captures: Number of tube captures
        outcome: "arrived", "timeout" or "no_network_interaction"
    """
    arrived: bool
    elapsed_time: float
    iterations: int
    captures: int
    outcome: str


class Motor:
    """
    Stochastic motor moving by diffusion and tube-directed walks.
    """

    def __init__(
        self,
        start: Point3,
        motion: Optional[MotionEngine] = None,
        context: Optional[SimulationContext] = None,
        destination: Optional[BoundingBox] = None,
        surfaces: Sequence[VolumeSurface] = (),
        max_iterations: int = 100,
    ):
        self.motion = motion if motion is not None else MotionEngine()
        self.context = context if context is not None else SimulationContext()
        self.destination = destination
        self.surfaces: List[VolumeSurface] = list(surfaces)
        self.max_iterations = max_iterations
        self.current_location = start
        self.position_history: List[Point3] = [start]
        self.state = MotorState.UNBOUND

    @property
    def elapsed_time(self) -> float:
        return self.context.elapsed_time

    def set_starting_point(self, start: Point3) -> None:
        """Place the motor at start and restart its history and clock."""
        self.reset(start)

    def reset(self, start: Optional[Point3] = None) -> None:
        """Clear history and clock; keep the current location unless start is given."""
        if start is not None:
            self.current_location = start
        self.position_history = [self.current_location]
        self.context.reset_time()
        self.state = MotorState.UNBOUND

    def set_destination(self, lower: Point3, upper: Point3) -> None:
        self.destination = BoundingBox(lower, upper)

    def add_volume_surface(self, surface: VolumeSurface) -> None:
        self.surfaces.append(surface)

    def _inside(self, point: Point3) -> bool:
        return self.destination is not None and self.destination.contains(point)

    def in_destination(self) -> bool:
        """True when the current location is inside the destination box (all axes inclusive)."""
        return self._inside(self.current_location)

    def _result(self, iterations: int, captures: int, outcome: str) -> MoveResult:
        arrived = outcome == OUTCOME_ARRIVED
        if arrived:
            self.state = MotorState.ARRIVED
        return MoveResult(arrived, self.elapsed_time, iterations, captures, outcome)

    def move_to_destination(
        self,
        network: TubeNetwork,
        max_iterations: Optional[int] = None,
    ) -> MoveResult:
        """
        Alternate floating and tube walks until arrival or the iteration cap.

        Args:
            network: Tubes available to the motor
            max_iterations: Float/walk cycle cap (defaults to self.max_iterations)

        Returns:
            MoveResult; a motor already inside its destination returns at
            once with no steps taken.
        """
        max_iterations = max_iterations if max_iterations is not None else self.max_iterations
        Logger.log(f"start move_to_destination(max_iterations={max_iterations})")
        if self.in_destination():
            Logger.log("motor already inside destination")
            return self._result(0, 0, OUTCOME_ARRIVED)

        captures = 0
        for iteration in range(1, max_iterations + 1):
            self.state = MotorState.UNBOUND
            floated = self.motion.float_to_tube(
                self.current_location, network, self.context,
                self.position_history, self._inside, self.surfaces,
            )
            self.current_location = floated.position
            if floated.state is MotorState.ARRIVED:
                Logger.log(f"motor arrived after {iteration} iterations, t={self.elapsed_time:.6f} s")
                return self._result(iteration, captures, OUTCOME_ARRIVED)
            if not floated.captured:
                continue

            captures += 1
            self.state = MotorState.BOUND
            walked = self.motion.motor_walk(
                self.current_location, floated.segment_index, network,
                self.context, self.position_history, self._inside,
            )
            self.current_location = walked.position
            self.state = walked.state
            if walked.state is MotorState.ARRIVED:
                Logger.log(f"motor arrived after {iteration} iterations, t={self.elapsed_time:.6f} s")
                return self._result(iteration, captures, OUTCOME_ARRIVED)

        outcome = OUTCOME_TIMEOUT if captures else OUTCOME_NO_NETWORK_INTERACTION
        Logger.log(
            f"move_to_destination ended without arrival: outcome={outcome} captures={captures}",
            Logger.LogPriority.WARNING,
        )
        return self._result(max_iterations, captures, outcome)

    def float_to_destination(self, max_steps: Optional[int] = None) -> MoveResult:
        """
        Pure Brownian motion until arrival or max_steps.

        Args:
            max_steps: Step cap (defaults to float_timeout_steps * max_iterations)
        """
        if max_steps is None:
            max_steps = self.motion.config.float_timeout_steps * self.max_iterations
        Logger.log(f"start float_to_destination(max_steps={max_steps})")
        for step in range(max_steps):
            if self.in_destination():
                return self._result(step, 0, OUTCOME_ARRIVED)
            self.current_location = self.motion.diffuse(
                self.current_location, self.context, self.position_history, self.surfaces
            )
        if self.in_destination():
            return self._result(max_steps, 0, OUTCOME_ARRIVED)
        Logger.log(f"float_to_destination timed out after {max_steps} steps", Logger.LogPriority.WARNING)
        return self._result(max_steps, 0, OUTCOME_TIMEOUT)


__all__ = [
    "Motor",
    "MoveResult",
    "OUTCOME_ARRIVED",
    "OUTCOME_TIMEOUT",
    "OUTCOME_NO_NETWORK_INTERACTION",
]
