"""
Proximity-based synapse detection for tree segments.

For a query segment E owned by cell S, the detector:

1. queries every agent within the squared search radius of E (default 25,
   i.e. radius 5; a superset of what can be accepted)
2. keeps only tree segments
3. resolves each candidate's owner cell, dropping unresolved candidates and
   candidates owned by S itself (no self-synapses)
4. keeps a running minimum over the true distance d, accepting a candidate
   only if d is below the current best AND strictly below the acceptance
   distance (default 1.0)

The comparison is strict, so the first candidate met at the minimum
distance wins. The spatial index yields neighbours in ascending uid order,
making the lowest-uid candidate the winner of an exact tie.

The detector also accumulates the summed offset from E to every cross-cell
candidate. It is exposed for diagnostics only and drives nothing.

``SynapseFormation`` is the behavior attached to a segment: each step it
runs the detector and asks the registry to connect the two owning cells.

Author: Synaptogen Project
Date: March 2026
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

import torch

from synaptogen.config import SynapseFormationConfig
from synaptogen.core.agents import Agent, Cell, NodeKind, TreeSegment
from synaptogen.core.behavior import Behavior

if TYPE_CHECKING:
    from synaptogen.core.simulation import SimulationContext

logger = logging.getLogger(__name__)


@dataclass
class DetectionResult:
    """Outcome of one detection pass.

    Attributes:
        candidate: Accepted partner segment, or None
        candidate_owner: Cell owning ``candidate``
        distance: Distance to ``candidate`` (inf when none accepted)
        neighbours_direction: Summed offset to all cross-cell candidates
        n_candidates: Number of cross-cell tree-segment candidates examined
    """
    candidate: Optional[TreeSegment] = None
    candidate_owner: Optional[Cell] = None
    distance: float = math.inf
    neighbours_direction: torch.Tensor = field(default_factory=lambda: torch.zeros(3))
    n_candidates: int = 0

    @property
    def found(self) -> bool:
        return self.candidate is not None

    @property
    def candidate_uid(self) -> Optional[int]:
        return self.candidate.uid if self.candidate is not None else None


class SynapseDetector:
    """Closest cross-cell neighbour search for a tree segment.

    Args:
        config: Detection parameters (radius, acceptance cutoff)
    """

    def __init__(self, config: Optional[SynapseFormationConfig] = None):
        self.config = config or SynapseFormationConfig()

    def find_closest(
        self,
        segment: TreeSegment,
        owner: Optional[Cell],
        ctx: "SimulationContext",
    ) -> DetectionResult:
        """Find the closest eligible partner of ``segment``.

        Args:
            segment: Query segment
            owner: Resolved owner of ``segment``. None means the owner is
                unknown; no candidate is then rejected as a self-synapse.
            ctx: Simulation context (spatial index and resolver)

        Returns:
            DetectionResult; ``found`` is False when no candidate qualifies
        """
        result = DetectionResult()
        direction = torch.zeros(3, dtype=segment.position.dtype)
        cutoff = self.config.acceptance_distance
        owner_uid = owner.uid if owner is not None else None

        neighbours = ctx.spatial_index.for_each_neighbor(segment, self.config.search_radius_sq)
        for candidate, squared_distance in neighbours:
            if candidate is None or candidate.kind is not NodeKind.TREE_SEGMENT:
                continue

            candidate_owner = ctx.resolver.resolve(candidate)
            if candidate_owner is None or candidate_owner.uid == owner_uid:
                continue

            result.n_candidates += 1
            direction += candidate.position - segment.position

            distance = math.sqrt(squared_distance)
            if distance < result.distance and distance < cutoff:
                result.candidate = candidate
                result.candidate_owner = candidate_owner
                result.distance = distance

        result.neighbours_direction = direction
        return result


class SynapseFormation(Behavior):
    """Per-segment behavior forming a synapse with the closest foreign segment.

    Runs every step while attached. In the default repeat mode the one-shot
    flag on the segment is never set, so detection repeats until the run
    ends; the registry turns repeats for an existing pair into no-ops. With
    ``repeat_detection=False`` the flag is set after the first accepted
    partner and the behavior goes quiet.

    Args:
        config: Detection parameters
    """

    def __init__(self, config: Optional[SynapseFormationConfig] = None):
        self.config = config or SynapseFormationConfig()
        self.detector = SynapseDetector(self.config)

    def run(self, agent: Agent, ctx: "SimulationContext") -> None:
        if agent is None or agent.kind is not NodeKind.TREE_SEGMENT:
            return
        segment: TreeSegment = agent
        if segment.detection_done:
            return

        owner = ctx.resolver.resolve(segment)
        if owner is None:
            logger.debug("Segment %s has no owning cell; no synapse possible", segment.uid)
            return

        result = self.detector.find_closest(segment, owner, ctx)
        if not result.found:
            return

        ctx.registry.add_synapse(
            owner,
            result.candidate_owner,
            result.distance,
            strength=self.config.initial_strength,
            step=ctx.current_step,
        )
        if not self.config.repeat_detection:
            segment.detection_done = True


__all__ = [
    "DetectionResult",
    "SynapseDetector",
    "SynapseFormation",
]
