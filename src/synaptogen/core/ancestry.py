"""
Ancestor resolution: map a tree segment to the cell that owns it.

The walk climbs ``mother`` links from a segment, checking the node-kind tag
at every hop, and stops at the first ``Cell``. A chain that ends at a
detached root (or at a node that is not part of an arbor) resolves to
``None``. That is not an error for callers: it means no synapse is possible
for this branch in the current step.

``AncestorResolver`` adds the owner cache: segments record their owning
cell when they attach to a tree, so the walk only runs when that cache is
missing or no longer points at a registered cell.

Author: Synaptogen Project
Date: March 2026
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from synaptogen.core.agents import Cell, NodeKind, TreeSegment

if TYPE_CHECKING:
    from synaptogen.core.simulation import ResourceManager

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 10_000


def find_owner_cell(
    segment: Optional[TreeSegment],
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> Optional[Cell]:
    """Climb the ownership chain of ``segment`` to its cell.

    Args:
        segment: Segment to resolve. None resolves to None.
        max_depth: Maximum number of hops before giving up

    Returns:
        The owning cell, or None if the chain ends without one
    """
    node = segment
    for _ in range(max_depth):
        if node is None or node.kind is not NodeKind.TREE_SEGMENT:
            return None
        mother = node.mother
        if mother is None:
            return None
        if mother.kind is NodeKind.CELL:
            return mother
        node = mother

    logger.debug("Ownership chain of %r exceeds %d hops; treating as detached", segment, max_depth)
    return None


class AncestorResolver:
    """Resolve owning cells, preferring the per-segment owner cache.

    Args:
        resource_manager: Agent store used to check the cached cell is live.
            Without one the cache is trusted as-is.
        use_cache: Read the owner cached on segments before walking
        max_depth: Bound on ownership-chain hops
    """

    def __init__(
        self,
        resource_manager: Optional["ResourceManager"] = None,
        use_cache: bool = True,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ):
        self.resource_manager = resource_manager
        self.use_cache = use_cache
        self.max_depth = max_depth

    def resolve(self, segment: Optional[TreeSegment]) -> Optional[Cell]:
        """Return the cell owning ``segment``, or None if there is none."""
        if segment is None or segment.kind is not NodeKind.TREE_SEGMENT:
            return None

        if self.use_cache:
            cached = segment.owner_cell
            if cached is not None and self._is_registered(cached):
                return cached

        owner = find_owner_cell(segment, self.max_depth)
        if owner is None:
            logger.debug("No owning cell for segment %s", segment.uid)
        elif self.resource_manager is not None and not self._is_registered(owner):
            logger.debug("Owner %s of segment %s is no longer registered", owner.uid, segment.uid)
            return None
        elif self.use_cache:
            segment.cache_owner(owner)
        return owner

    def _is_registered(self, cell: Cell) -> bool:
        if self.resource_manager is None:
            return True
        return self.resource_manager.get_agent(cell.uid) is cell


__all__ = [
    "find_owner_cell",
    "AncestorResolver",
    "DEFAULT_MAX_DEPTH",
]
