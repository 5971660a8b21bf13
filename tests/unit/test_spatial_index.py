"""Tests for the snapshot spatial index."""

import pytest
import torch

from synaptogen.core.agents import Agent
from synaptogen.core.spatial import SpatialIndex


def _agents(positions):
    return [Agent(position=p, uid=i) for i, p in enumerate(positions)]


class TestSpatialIndex:

    def test_empty_index(self):
        index = SpatialIndex()
        index.rebuild([])
        assert len(index) == 0
        assert index.neighbors_of_point(torch.zeros(3), 25.0) == []

    def test_radius_is_strict(self):
        """Test agents exactly on the radius are excluded."""
        agents = _agents([(0, 0, 0), (5, 0, 0), (4.9, 0, 0)])
        index = SpatialIndex()
        index.rebuild(agents)

        found = index.for_each_neighbor(agents[0], 25.0)
        assert [a.uid for a, _ in found] == [2]

    def test_excludes_query_agent(self):
        agents = _agents([(0, 0, 0), (0.5, 0, 0)])
        index = SpatialIndex()
        index.rebuild(agents)

        found = index.for_each_neighbor(agents[0], 25.0)
        assert [a.uid for a, _ in found] == [1]
        assert found[0][1] == pytest.approx(0.25)

    def test_ascending_uid_order(self):
        """Test neighbours come back in uid order regardless of insertion order."""
        agents = _agents([(0, 0, 0), (3, 0, 0), (1, 0, 0), (2, 0, 0)])
        index = SpatialIndex()
        index.rebuild(reversed(agents))

        found = index.for_each_neighbor(agents[0], 25.0)
        assert [a.uid for a, _ in found] == [1, 2, 3]

    def test_snapshot_ignores_later_moves(self):
        """Test the index answers from positions at rebuild time."""
        agents = _agents([(0, 0, 0), (1, 0, 0)])
        index = SpatialIndex()
        index.rebuild(agents)
        agents[1].position = (10.0, 0.0, 0.0)

        assert [a.uid for a, _ in index.neighbors_of_point(torch.zeros(3), 4.0)] == [0, 1]

    def test_skips_none_and_unregistered(self):
        index = SpatialIndex()
        index.rebuild([None, Agent(position=(1, 0, 0)), Agent(position=(2, 0, 0), uid=5)])
        assert len(index) == 1

    def test_squared_distances_vectorized(self):
        agents = _agents([(1, 0, 0), (0, 2, 0), (0, 0, 3)])
        index = SpatialIndex(dtype=torch.float64)
        index.rebuild(agents)

        sq = index.squared_distances(torch.zeros(3))
        torch.testing.assert_close(sq, torch.tensor([1.0, 4.0, 9.0], dtype=torch.float64))
