"""
Synapse records between cells.

A synapse is a directed, neuron-level edge owned by its source cell. Records
are append-only: once formed they persist until export or process end, and
the only supported mutation is strengthening.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict


@dataclass
class Synapse:
    """Directed connection record from one cell to another.

    Attributes:
        source_uid: Uid of the owning (presynaptic) cell
        target_uid: Uid of the partner cell
        distance: Segment-to-segment distance at formation time
        strength: Integer synapse strength (starts at 1)
        formation_step: Simulation step in which the synapse formed
    """
    source_uid: int
    target_uid: int
    distance: float = 0.0
    strength: int = 1
    formation_step: int = 0

    def __post_init__(self):
        if self.source_uid == self.target_uid:
            raise ValueError(f"Synapse cannot connect cell {self.source_uid} to itself")

    def increase_strength(self, amount: int = 1) -> None:
        """Strengthen an existing synapse."""
        self.strength += amount

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Synapse":
        """Reconstruct from dict."""
        return cls(**data)

    def __repr__(self) -> str:
        return (
            f"Synapse({self.source_uid}->{self.target_uid}, "
            f"d={self.distance:.3f}, w={self.strength}, t={self.formation_step})"
        )
