"""
Core data model of the simulation host.

The host itself (ResourceManager, Scheduler, SimulationContext) lives in
``synaptogen.core.simulation`` and is imported from there.
"""

from synaptogen.core.agents import Agent, Cell, CellState, NodeKind, TreeSegment
from synaptogen.core.ancestry import AncestorResolver, find_owner_cell
from synaptogen.core.behavior import Behavior, StandaloneOperation
from synaptogen.core.spatial import SpatialIndex
from synaptogen.core.synapse import Synapse

__all__ = [
    "Agent",
    "Cell",
    "CellState",
    "NodeKind",
    "TreeSegment",
    "AncestorResolver",
    "find_owner_cell",
    "Behavior",
    "StandaloneOperation",
    "SpatialIndex",
    "Synapse",
]
