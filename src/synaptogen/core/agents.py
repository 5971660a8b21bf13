"""
Agents of the growing neural tissue.

The ownership tree mixes two node kinds under one relation: a ``Cell``
(the soma, aggregate root and unit of synapse identity) and the
``TreeSegment`` pieces of its dendritic/axonal arbor. Each segment points
to its mother, which is either another segment or, at the root of the
arbor, the cell itself. A segment whose chain ends without a cell belongs
to a detached subtree.

Node kinds are an explicit tag (``NodeKind``) rather than class checks, and
each segment caches its owning cell when it attaches to a tree so that
per-step detection does not need to climb the arbor.

Example:
    >>> soma = Cell(position=[0.0, 0.0, 0.0], cell_type=1)
    >>> seg1 = TreeSegment(position=[1.0, 0.0, 0.0], mother=soma)
    >>> seg2 = TreeSegment(position=[2.0, 0.0, 0.0], mother=seg1)
    >>> seg2.owner_cell is soma
    True

Author: Synaptogen Project
Date: March 2026
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, List, Optional, Type

import torch

from synaptogen.errors import validate_position

if TYPE_CHECKING:
    from synaptogen.core.behavior import Behavior
    from synaptogen.core.synapse import Synapse


class NodeKind(Enum):
    """Tag identifying what an agent is within the ownership tree."""
    CELL = "cell"
    TREE_SEGMENT = "tree_segment"
    OTHER = "other"  # Any agent that takes no part in arbors


class CellState(Enum):
    """Life-state of a cell."""
    ALIVE = 0
    DEAD = 1


class Agent:
    """Base class for everything the simulation host stores.

    Args:
        position: 3D position (sequence, numpy array or tensor)
        uid: Unique identifier. Assigned by the ResourceManager when None.
    """

    kind: NodeKind = NodeKind.OTHER

    def __init__(self, position: Any = (0.0, 0.0, 0.0), uid: Optional[int] = None):
        self.uid = uid
        self._position = validate_position(position)
        self.behaviors: List["Behavior"] = []

    @property
    def position(self) -> torch.Tensor:
        """Current position, shape (3,)."""
        return self._position

    @position.setter
    def position(self, value: Any) -> None:
        self._position = validate_position(value)

    def add_behavior(self, behavior: "Behavior") -> None:
        """Attach a behavior that runs for this agent every step."""
        self.behaviors.append(behavior)

    def remove_behavior(self, behavior: "Behavior") -> None:
        """Detach a previously attached behavior."""
        self.behaviors.remove(behavior)

    def has_behavior(self, behavior_type: Type["Behavior"]) -> bool:
        """Whether a behavior of ``behavior_type`` is attached."""
        return any(isinstance(b, behavior_type) for b in self.behaviors)

    def count_behaviors(self, behavior_type: Type["Behavior"]) -> int:
        """Number of attached behaviors of ``behavior_type``."""
        return sum(1 for b in self.behaviors if isinstance(b, behavior_type))

    def __repr__(self) -> str:
        pos = ", ".join(f"{x:.2f}" for x in self._position.tolist())
        return f"{type(self).__name__}(uid={self.uid}, pos=({pos}))"


class Cell(Agent):
    """Cell body owning one arbor of tree segments.

    Args:
        position: 3D soma position
        cell_type: Integer type/category tag written to the export
        state: Initial life-state
        uid: Optional explicit uid
    """

    kind = NodeKind.CELL

    def __init__(
        self,
        position: Any = (0.0, 0.0, 0.0),
        cell_type: int = 0,
        state: CellState = CellState.ALIVE,
        uid: Optional[int] = None,
    ):
        super().__init__(position, uid)
        self.cell_type = cell_type
        self.state = state
        self.cell_colour = 0
        self.synapses: List["Synapse"] = []
        self.neurites: List["TreeSegment"] = []

    @property
    def is_dead(self) -> bool:
        return self.state is CellState.DEAD

    def inherit_from(self, mother: "Cell") -> None:
        """Initialize a daughter cell from its mother after division.

        Colour and type are inherited. Synapses are not: they belong to
        the mother's identity.
        """
        self.cell_colour = mother.cell_colour
        self.cell_type = mother.cell_type


class TreeSegment(Agent):
    """One piece of a growing branching structure.

    Args:
        position: 3D position of the segment
        mother: Parent segment, owning cell, or None for a detached root
        uid: Optional explicit uid

    Attributes:
        detection_done: One-shot flag for synapse detection. Only set when
            detection runs in one-shot mode.
    """

    kind = NodeKind.TREE_SEGMENT

    def __init__(
        self,
        position: Any = (0.0, 0.0, 0.0),
        mother: Optional[Agent] = None,
        uid: Optional[int] = None,
    ):
        super().__init__(position, uid)
        self.mother: Optional[Agent] = None
        self.daughters: List["TreeSegment"] = []
        self.detection_done = False
        self._owner_cell: Optional[Cell] = None
        if mother is not None:
            self.attach_to(mother)

    @property
    def owner_cell(self) -> Optional[Cell]:
        """Owning cell cached at attachment time (None for detached subtrees)."""
        return self._owner_cell

    @property
    def owner_cell_uid(self) -> Optional[int]:
        return self._owner_cell.uid if self._owner_cell is not None else None

    def attach_to(self, mother: Optional[Agent]) -> None:
        """Re-parent this segment and refresh the owner cache of its subtree."""
        previous = self.mother
        if previous is not None:
            siblings = _child_list(previous)
            if siblings is not None and self in siblings:
                siblings.remove(self)

        self.mother = mother
        if mother is not None:
            children = _child_list(mother)
            if children is not None:
                children.append(self)

        if mother is None:
            owner = None
        elif mother.kind is NodeKind.CELL:
            owner = mother
        elif mother.kind is NodeKind.TREE_SEGMENT:
            owner = mother.owner_cell
        else:
            owner = None

        # Propagate to descendants (iterative, arbors can be deep)
        stack = [self]
        seen = set()
        while stack:
            segment = stack.pop()
            if id(segment) in seen:
                continue
            seen.add(id(segment))
            segment._owner_cell = owner
            stack.extend(segment.daughters)

    def cache_owner(self, cell: Optional[Cell]) -> None:
        """Overwrite this segment's cached owner (no subtree propagation)."""
        self._owner_cell = cell

    def detach(self) -> None:
        """Cut this segment (and its subtree) loose from its tree."""
        self.attach_to(None)


def _child_list(node: Agent) -> Optional[List[TreeSegment]]:
    if node.kind is NodeKind.CELL:
        return node.neurites
    if node.kind is NodeKind.TREE_SEGMENT:
        return node.daughters
    return None


__all__ = [
    "NodeKind",
    "CellState",
    "Agent",
    "Cell",
    "TreeSegment",
]
