"""
Tests for the Motor entity.

These tests verify:
- Destination box checks on all three axes
- Immediate arrival when starting inside the destination
- Transport along a tube to the destination
- Timeout outcomes with and without tube captures
- History and clock bookkeeping
"""

import pytest

from motornet.config import MotionConfig
from motornet.context import SimulationContext
from motornet.geometry import BoundingBox, Point3, Segment3
from motornet.motion import MotionEngine, MotorState
from motornet.motor import (
    Motor,
    OUTCOME_ARRIVED,
    OUTCOME_NO_NETWORK_INTERACTION,
    OUTCOME_TIMEOUT,
)
from motornet.network import TubeNetwork


def _x_tube(n=10, length=10.0):
    points = [Point3(i * length, 0, 0) for i in range(n + 1)]
    return TubeNetwork.from_segments(
        [Segment3(points[i], points[i + 1]) for i in range(n)], segments_per_tube=n
    )


class TestInDestination:
    """Tests for destination checks."""

    def test_no_destination(self):
        assert not Motor(Point3.origin()).in_destination()

    def test_inside_box(self):
        motor = Motor(Point3(1, 1, 1), destination=BoundingBox(Point3(0, 0, 0), Point3(2, 2, 2)))
        assert motor.in_destination()

    def test_outside_on_one_axis(self):
        motor = Motor(Point3(1, 1, 5), destination=BoundingBox(Point3(0, 0, 0), Point3(2, 2, 2)))
        assert not motor.in_destination()

    def test_set_destination(self):
        motor = Motor(Point3(1, 1, 1))
        motor.set_destination(Point3(0, 0, 0), Point3(2, 2, 2))
        assert motor.in_destination()


class TestMoveToDestination:
    """Tests for the transport loop."""

    def test_start_inside_returns_immediately(self):
        motor = Motor(Point3(1, 1, 1), destination=BoundingBox(Point3(0, 0, 0), Point3(2, 2, 2)))
        result = motor.move_to_destination(_x_tube())
        assert result.arrived
        assert result.outcome == OUTCOME_ARRIVED
        assert result.elapsed_time == 0.0
        assert result.iterations == 0
        assert motor.position_history == [Point3(1, 1, 1)]

    def test_walks_along_tube_to_destination(self):
        motor = Motor(
            Point3(0, 0, 0),
            motion=MotionEngine(MotionConfig(capture_radius_nm=15.0)),
            context=SimulationContext(31),
            destination=BoundingBox(Point3(85, -20, -20), Point3(120, 20, 20)),
        )
        result = motor.move_to_destination(_x_tube())
        assert result.arrived
        assert result.captures == 1
        assert result.iterations == 1
        assert motor.state is MotorState.ARRIVED
        assert motor.in_destination()
        # arrival happens at a segment end on the tube axis
        assert motor.current_location.y == 0.0 and motor.current_location.z == 0.0
        assert motor.position_history[-1] == motor.current_location
        # one float step plus at least one walked segment
        assert result.elapsed_time > 0.1

    def test_no_network_interaction(self):
        motion = MotionEngine(MotionConfig(float_timeout_steps=5, time_step_s=0.1))
        motor = Motor(
            Point3.origin(),
            motion=motion,
            context=SimulationContext(32),
            destination=BoundingBox(Point3(1e6, 1e6, 1e6), Point3(2e6, 2e6, 2e6)),
        )
        result = motor.move_to_destination(TubeNetwork.from_segments([]), max_iterations=3)
        assert not result.arrived
        assert result.outcome == OUTCOME_NO_NETWORK_INTERACTION
        assert result.iterations == 3
        assert len(motor.position_history) == 16
        assert result.elapsed_time == pytest.approx(1.5)

    def test_timeout_after_captures(self):
        motor = Motor(
            Point3(0, 0, 0),
            context=SimulationContext(33),
            destination=BoundingBox(Point3(1e6, 1e6, 1e6), Point3(2e6, 2e6, 2e6)),
        )
        result = motor.move_to_destination(_x_tube(), max_iterations=4)
        assert not result.arrived
        assert result.outcome == OUTCOME_TIMEOUT
        assert result.captures >= 1

    def test_history_only_grows(self):
        motor = Motor(Point3.origin(), context=SimulationContext(34), max_iterations=2)
        lengths = [len(motor.position_history)]
        motor.move_to_destination(_x_tube())
        lengths.append(len(motor.position_history))
        motor.move_to_destination(_x_tube())
        lengths.append(len(motor.position_history))
        assert lengths == sorted(lengths)
        assert lengths[-1] > lengths[0]


class TestMotorBookkeeping:
    """Tests for reset and pure floating."""

    def test_reset_clears_history_and_clock(self):
        motor = Motor(Point3.origin(), context=SimulationContext(35), max_iterations=1)
        motor.move_to_destination(_x_tube())
        motor.reset(Point3(5, 5, 5))
        assert motor.position_history == [Point3(5, 5, 5)]
        assert motor.elapsed_time == 0.0
        assert motor.state is MotorState.UNBOUND

    def test_float_to_destination_timeout(self):
        motor = Motor(
            Point3.origin(),
            context=SimulationContext(36),
            destination=BoundingBox(Point3(1e6, 1e6, 1e6), Point3(2e6, 2e6, 2e6)),
        )
        result = motor.float_to_destination(max_steps=50)
        assert result.outcome == OUTCOME_TIMEOUT
        assert len(motor.position_history) == 51

    def test_float_to_destination_arrives(self):
        motion = MotionEngine(MotionConfig(diffusion_nm2_per_s=100.0))
        motor = Motor(
            Point3.origin(),
            motion=motion,
            context=SimulationContext(37),
            destination=BoundingBox(Point3(-1e6, -1e6, -1e6), Point3(1e6, 1e6, -0.5)),
        )
        result = motor.float_to_destination(max_steps=10_000)
        assert result.arrived
        assert motor.current_location.z <= -0.5

    def test_independent_motors_reproducible(self):
        """Motors on spawned streams repeat exactly for the same parent seed."""
        def run(seed):
            contexts = SimulationContext(seed).spawn(2)
            motors = [Motor(Point3.origin(), context=c, max_iterations=2) for c in contexts]
            for m in motors:
                m.move_to_destination(_x_tube())
            return [tuple(m.position_history) for m in motors]

        first = run(40)
        assert first == run(40)
        assert first[0] != first[1]
