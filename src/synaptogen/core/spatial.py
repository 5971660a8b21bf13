"""
Spatial neighbour queries over agent positions.

The index is a snapshot: positions are stacked into a single tensor at a
step boundary and stay fixed while the step's behaviors run, which is what
makes concurrent read-only queries safe. Queries compute squared distances
to every indexed agent in one vectorized pass.

Neighbours are returned in ascending uid order. Detection breaks ties
between equidistant candidates by first-encountered, so this order makes
tie-breaking deterministic (lowest uid wins).

Author: Synaptogen Project
Date: March 2026
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

import torch

from synaptogen.core.agents import Agent


class SpatialIndex:
    """Snapshot index answering fixed-radius neighbour queries.

    Args:
        device: Device holding the position tensor
        dtype: Dtype used for distance computations

    Example:
        >>> index = SpatialIndex()
        >>> index.rebuild(resource_manager.agents())
        >>> for agent, sq_dist in index.for_each_neighbor(segment, 25.0):
        ...     ...
    """

    def __init__(self, device: str = "cpu", dtype: torch.dtype = torch.float32):
        self.device = torch.device(device)
        self.dtype = dtype
        self._agents: List[Agent] = []
        self._uids = torch.empty(0, dtype=torch.long)
        self._positions = torch.empty(0, 3, dtype=dtype, device=self.device)

    def __len__(self) -> int:
        return len(self._agents)

    def rebuild(self, agents: Iterable[Agent]) -> None:
        """Rebuild the snapshot from ``agents`` (skipping None entries)."""
        snapshot = sorted(
            (a for a in agents if a is not None and a.uid is not None),
            key=lambda a: a.uid,
        )
        self._agents = snapshot
        self._uids = torch.tensor([a.uid for a in snapshot], dtype=torch.long)
        if snapshot:
            self._positions = torch.stack([a.position for a in snapshot]).to(
                device=self.device, dtype=self.dtype
            )
        else:
            self._positions = torch.empty(0, 3, dtype=self.dtype, device=self.device)

    def squared_distances(self, origin: torch.Tensor) -> torch.Tensor:
        """Squared distance from ``origin`` to every indexed agent."""
        origin = origin.to(device=self.device, dtype=self.dtype)
        diff = self._positions - origin.unsqueeze(0)
        return (diff * diff).sum(dim=1)

    def neighbors_of_point(
        self,
        origin: torch.Tensor,
        radius_sq: float,
        exclude_uid: Optional[int] = None,
    ) -> List[Tuple[Agent, float]]:
        """Agents with squared distance strictly below ``radius_sq`` of ``origin``.

        Args:
            origin: Query position, shape (3,)
            radius_sq: Squared search radius
            exclude_uid: Uid to leave out (usually the querying agent)

        Returns:
            List of (agent, squared_distance) in ascending uid order
        """
        if not self._agents:
            return []
        sq = self.squared_distances(origin)
        mask = sq < radius_sq
        if exclude_uid is not None:
            mask &= self._uids.to(self.device) != exclude_uid
        indices = torch.nonzero(mask, as_tuple=False).flatten().tolist()
        sq_list = sq.cpu().tolist()
        return [(self._agents[i], float(sq_list[i])) for i in indices]

    def for_each_neighbor(self, query: Agent, radius_sq: float) -> List[Tuple[Agent, float]]:
        """Neighbours of ``query`` within ``radius_sq``, excluding ``query`` itself."""
        return self.neighbors_of_point(query.position, radius_sq, exclude_uid=query.uid)


__all__ = [
    "SpatialIndex",
]
