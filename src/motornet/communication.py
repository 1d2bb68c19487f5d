"""
Motor-based communication channel.

Boundary between the motion model and a host simulator: the host hands
over an opaque message and gets back the propagation delay (simulated
seconds for a motor to carry it from the transmitter to the receiver box)
and, after that delay, the message itself. Messages are never inspected.

Each message travels on its own motor with an independent random stream
spawned from the channel's context, so delays are reproducible per seed.
"""

import math
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from .context import SimulationContext
from .geometry import BoundingBox, Point3
from .motion import MotionEngine
from .motor import Motor, MoveResult
from .network import TubeNetwork
from .utils.logger.logger import Logger
from .volume_surface import VolumeSurface


@dataclass(frozen=True)
class PropagationResult:
    """
    Attributes:
        message: The carried message, unchanged
        delay_s: Transport time; inf when the motor never arrived
        move: Underlying motor result
        path: Motor position history for this message
    """
    message: Any
    delay_s: float
    move: MoveResult
    path: tuple

    @property
    def delivered(self) -> bool:
        return self.move.arrived


class MotorChannel:
    """
    Carries messages between a transmitter point and a receiver box.

    Args:
        transmitter: Motor release point
        receiver: Destination box
        network: Tube network; None means pure diffusion
        motion: Motion parameters
        context: Parent random stream
        surfaces: Volume surfaces applied to every motor
        max_iterations: Transport cycle cap per message
    """

    def __init__(
        self,
        transmitter: Point3,
        receiver: BoundingBox,
        network: Optional[TubeNetwork] = None,
        motion: Optional[MotionEngine] = None,
        context: Optional[SimulationContext] = None,
        surfaces: Sequence[VolumeSurface] = (),
        max_iterations: int = 100,
    ):
        self.transmitter = transmitter
        self.receiver = receiver
        self.network = network
        self.motion = motion if motion is not None else MotionEngine()
        self.context = context if context is not None else SimulationContext()
        self.surfaces = list(surfaces)
        self.max_iterations = max_iterations
        self.delivered: List[Any] = []

    def _new_motor(self) -> Motor:
        child = self.context.spawn(1)[0]
        return Motor(
            self.transmitter,
            motion=self.motion,
            context=child,
            destination=self.receiver,
            surfaces=self.surfaces,
            max_iterations=self.max_iterations,
        )

    def compute_propagation_delay(self, message: Any) -> PropagationResult:
        """
        Send one motor carrying message and time its trip.

        Returns:
            PropagationResult with delay_s = motor elapsed time on arrival,
            or math.inf when the motor timed out.
        """
        motor = self._new_motor()
        if self.network is not None:
            move = motor.move_to_destination(self.network)
        else:
            move = motor.float_to_destination()
        delay = move.elapsed_time if move.arrived else math.inf
        Logger.log(f"compute_propagation_delay: outcome={move.outcome} delay={delay}")
        return PropagationResult(message, delay, move, tuple(motor.position_history))

    def received_message_after_propagation(self, message: Any) -> Any:
        """Hand the message to the receiver side unchanged and record it."""
        self.delivered.append(message)
        Logger.log("received_message_after_propagation: message delivered")
        return message

    def transmit(self, message: Any) -> PropagationResult:
        """Compute the delay and deliver the message if the motor arrived."""
        result = self.compute_propagation_delay(message)
        if result.delivered:
            self.received_message_after_propagation(message)
        return result


__all__ = ["MotorChannel", "PropagationResult"]
