"""Shared test fixtures and configuration."""

import pytest
import torch
import numpy as np

from synaptogen.config import SimulationConfig
from synaptogen.core.agents import Cell, TreeSegment
from synaptogen.core.simulation import SimulationContext


@pytest.fixture(autouse=True)
def set_random_seed():
    """Ensure reproducible tests by setting all random seeds.

    This fixture runs automatically for every test to ensure deterministic behavior.
    """
    torch.manual_seed(42)
    np.random.seed(42)


@pytest.fixture
def config():
    """Default simulation configuration."""
    return SimulationConfig()


@pytest.fixture
def ctx(config):
    """Empty simulation context."""
    return SimulationContext(config)


@pytest.fixture
def add_cell(ctx):
    """Factory registering a cell at a position."""
    def _add(position=(0.0, 0.0, 0.0), cell_type=0):
        return ctx.add_agent(Cell(position=position, cell_type=cell_type))
    return _add


@pytest.fixture
def add_segment(ctx):
    """Factory registering a tree segment under a mother."""
    def _add(position, mother=None):
        return ctx.add_agent(TreeSegment(position=position, mother=mother))
    return _add


@pytest.fixture
def build_chain(ctx):
    """Factory building a linear arbor of ``depth`` segments.

    The chain starts at ``root`` (a Cell, or None for a detached chain) and
    steps along x. Returns the list of segments, tip last.
    """
    def _build(root, depth, start=(0.0, 0.0, 0.0), step=0.5, register=True):
        segments = []
        mother = root
        x0, y0, z0 = start
        for i in range(depth):
            segment = TreeSegment(position=(x0 + step * (i + 1), y0, z0), mother=mother)
            if register:
                ctx.add_agent(segment)
            segments.append(segment)
            mother = segment
        return segments
    return _build
