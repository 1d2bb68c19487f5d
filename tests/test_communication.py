"""
Tests for the motor communication channel.
"""

import math

from motornet.context import SimulationContext
from motornet.geometry import BoundingBox, Point3, Segment3
from motornet.communication import MotorChannel
from motornet.network import TubeNetwork


def _channel(seed=50, receiver_x=85.0):
    points = [Point3(i * 10.0, 0, 0) for i in range(11)]
    network = TubeNetwork.from_segments(
        [Segment3(points[i], points[i + 1]) for i in range(10)], segments_per_tube=10
    )
    return MotorChannel(
        transmitter=Point3.origin(),
        receiver=BoundingBox(Point3(receiver_x, -20, -20), Point3(receiver_x + 40, 20, 20)),
        network=network,
        context=SimulationContext(seed),
        max_iterations=5,
    )


class TestMotorChannel:
    """Tests for propagation delay and delivery."""

    def test_delay_and_delivery(self):
        channel = _channel()
        message = {"payload": b"\x01\x02"}
        result = channel.transmit(message)
        assert result.delivered
        assert math.isfinite(result.delay_s)
        assert result.delay_s > 0.0
        assert result.message is message
        assert channel.delivered == [message]

    def test_unreachable_receiver(self):
        channel = _channel(receiver_x=1e6)
        result = channel.transmit("msg")
        assert not result.delivered
        assert result.delay_s == math.inf
        assert channel.delivered == []

    def test_received_message_unchanged(self):
        channel = _channel()
        message = object()
        assert channel.received_message_after_propagation(message) is message

    def test_same_seed_same_delays(self):
        c1, c2 = _channel(seed=7), _channel(seed=7)
        d1 = [c1.compute_propagation_delay(i).delay_s for i in range(3)]
        d2 = [c2.compute_propagation_delay(i).delay_s for i in range(3)]
        assert d1 == d2

    def test_pure_diffusion_channel(self):
        channel = MotorChannel(
            transmitter=Point3.origin(),
            receiver=BoundingBox(Point3(1e6, 1e6, 1e6), Point3(2e6, 2e6, 2e6)),
            network=None,
            max_iterations=1,
        )
        result = channel.compute_propagation_delay("msg")
        assert result.delay_s == math.inf
        assert result.move.outcome == "timeout"
