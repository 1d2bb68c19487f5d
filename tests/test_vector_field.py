"""
Tests for vector field derivation and grid resampling.

These tests verify:
- One sample per segment with origin = start, direction = end - start
- Nearest sample selection, exact-origin round trip and NaN fallback
- Staleness after network regeneration
- Regular grid resampling with null vectors far from samples
"""

import numpy as np
import pytest

from motornet.config import TubeNetworkConfig
from motornet.context import SimulationContext
from motornet.exceptions import EmptyNetworkError
from motornet.export.memory_sink import MemoryExportSink
from motornet.geometry import Point3, Segment3
from motornet.network import TubeNetwork, generate_network
from motornet.vector_field import VectorField, derive_field, nearest_sample, resample_on_grid


def _two_sample_network():
    return TubeNetwork.from_segments(
        [
            Segment3(Point3(0, 0, 0), Point3(1, 0, 0)),
            Segment3(Point3(10, 10, 10), Point3(10, 11, 10)),
        ],
        segments_per_tube=1,
    )


class TestDeriveField:
    """Tests for field derivation."""

    def test_one_sample_per_segment(self):
        network = generate_network(TubeNetworkConfig(), SimulationContext(1))
        field = derive_field(network)
        assert len(field) == len(network)
        np.testing.assert_array_almost_equal(field.origins, network.starts)
        np.testing.assert_array_almost_equal(field.origins + field.directions, network.ends)

    def test_stale_after_regenerate(self):
        context = SimulationContext(1)
        network = generate_network(TubeNetworkConfig(), context)
        field = derive_field(network)
        assert not field.is_stale(network)
        network.regenerate(context)
        assert field.is_stale(network)
        assert not derive_field(network).is_stale(network)


class TestNearestSample:
    """Tests for nearest sample lookup."""

    def test_nearest(self):
        field = derive_field(_two_sample_network())
        origin, direction = nearest_sample(Point3(9, 9, 9), field)
        assert origin == Point3(10, 10, 10)
        assert direction == Point3(0, 1, 0)

    def test_tie_returns_first(self):
        field = derive_field(_two_sample_network())
        origin, _ = nearest_sample(Point3(5, 5, 5), field)
        assert origin == Point3(0, 0, 0)

    def test_exact_origin_returns_that_sample(self):
        network = generate_network(TubeNetworkConfig(), SimulationContext(4))
        field = derive_field(network)
        for i in (0, 7, len(field) - 1):
            segment = network.segments[i]
            origin, direction = nearest_sample(segment.start, field)
            assert origin == segment.start
            assert direction == Point3.from_array(field.directions[i])

    def test_all_nan_distances_fall_back_to_last(self):
        points = [Point3(0, 0, 0), Point3(10, 0, 0), Point3(20, 0, 0), Point3(30, 0, 0)]
        network = TubeNetwork.from_segments(
            [Segment3(points[i], points[i + 1]) for i in range(3)], segments_per_tube=3
        )
        origin, direction = nearest_sample(Point3(float("nan"), 0, 0), derive_field(network))
        assert origin == Point3(20, 0, 0)
        assert direction == Point3(10, 0, 0)

    def test_nan_origins_skipped(self):
        nan = float("nan")
        field = VectorField(
            origins=np.array([[nan, 0, 0], [5, 0, 0], [nan, 0, 0], [3, 0, 0], [3, 0, 0]], dtype=float),
            directions=np.arange(15, dtype=float).reshape(5, 3),
            network_id=0,
            network_version=0,
        )
        origin, direction = nearest_sample(Point3.origin(), field)
        assert origin == Point3(3, 0, 0)
        assert direction == Point3(9, 10, 11)

    def test_empty_field(self):
        field = derive_field(TubeNetwork.from_segments([]))
        with pytest.raises(EmptyNetworkError):
            nearest_sample(Point3(0, 0, 0), field)


class TestResampleOnGrid:
    """Tests for regular grid resampling."""

    def test_grid_size_and_values(self):
        field = derive_field(_two_sample_network())
        grid = resample_on_grid(field, divisions=10)
        assert len(grid) == 1000

        # x-major order: index = ix * 100 + iy * 10 + iz, step 1 nm
        assert grid[0].point == Point3(0, 0, 0)
        assert grid[0].direction == Point3(1, 0, 0)
        assert grid[999].point == Point3(9, 9, 9)
        assert grid[999].direction == Point3(0, 1, 0)

    def test_null_vector_far_from_samples(self):
        field = derive_field(_two_sample_network())
        grid = resample_on_grid(field, divisions=10)
        middle = grid[5 * 100 + 5 * 10 + 5]
        assert middle.point == Point3(5, 5, 5)
        assert middle.is_null

    def test_zero_extent_axis(self):
        network = TubeNetwork.from_segments(
            [
                Segment3(Point3(0, 0, 0), Point3(0, 1, 0)),
                Segment3(Point3(10, 0, 0), Point3(10, 1, 0)),
            ],
            segments_per_tube=1,
        )
        grid = resample_on_grid(derive_field(network), divisions=10)
        assert len(grid) == 10
        assert all(g.point.y == 0.0 and g.point.z == 0.0 for g in grid)

    def test_emits_to_sink(self):
        sink = MemoryExportSink()
        field = derive_field(_two_sample_network())
        resample_on_grid(field, divisions=4, sink=sink)
        points, vectors = sink.vector_fields["vector_field_grid"]
        assert points.shape == (64, 3)
        assert vectors.shape == (64, 3)

    def test_empty_field_rejected(self):
        with pytest.raises(EmptyNetworkError):
            resample_on_grid(derive_field(TubeNetwork.from_segments([])))
