"""
Synapse registry: deduplicated bookkeeping of directed cell-to-cell edges.

Each cell owns the ordered list of its outgoing synapses. The registry is
the only writer to those lists and enforces two invariants:

- no self-synapses: a cell never connects to itself
- at most one edge per cell pair, in either direction: ``has_edge(a, b)``
  is symmetric and ``add_synapse`` is a no-op whenever it holds

Edge lookup scans both endpoints' outgoing lists, so cost is linear in a
cell's degree. Cells in a growing arbor network have low degree, so no
secondary index is kept.

Concurrency:
============
Segments belonging to the same cell can form synapses concurrently within a
step. ``add_synapse`` holds the locks of both endpoint cells, taken in a
fixed uid order, across the symmetric check and the append. This keeps a
racing A→B / B→A pair from producing two edges and cannot deadlock.
Only the source cell's list is ever mutated.

Author: Synaptogen Project
Date: March 2026
"""

from __future__ import annotations

import logging
import threading
import weakref
from typing import Any, Dict, Iterable, List, Optional, Tuple, TYPE_CHECKING

from synaptogen.core.agents import Cell, NodeKind
from synaptogen.core.synapse import Synapse

if TYPE_CHECKING:
    from synaptogen.core.simulation import ResourceManager

logger = logging.getLogger(__name__)


class SynapseRegistry:
    """Creates, deduplicates and strengthens synapses between cells.

    Usage:
        registry = SynapseRegistry()
        registry.add_synapse(cell_a, cell_b, distance=0.4, step=498)
        assert registry.has_edge(cell_b, cell_a)
    """

    def __init__(self):
        self._cell_locks: "weakref.WeakKeyDictionary[Cell, threading.Lock]" = (
            weakref.WeakKeyDictionary()
        )
        self._guard = threading.Lock()
        self.n_formed = 0
        self.n_duplicates = 0
        self.n_self_rejected = 0

    # =========================================================================
    # Queries
    # =========================================================================

    @staticmethod
    def has_edge(a: Cell, b: Cell) -> bool:
        """Whether a synapse exists between ``a`` and ``b`` in either direction."""
        for synapse in a.synapses:
            if synapse.target_uid == b.uid:
                return True
        for synapse in b.synapses:
            if synapse.target_uid == a.uid:
                return True
        return False

    @staticmethod
    def synapses_of(cell: Cell) -> List[Synapse]:
        """Outgoing synapses of ``cell`` (copy)."""
        return list(cell.synapses)

    @staticmethod
    def find(source: Cell, target: Cell) -> Optional[Synapse]:
        """The synapse ``source → target``, if any."""
        for synapse in source.synapses:
            if synapse.target_uid == target.uid:
                return synapse
        return None

    # =========================================================================
    # Mutation
    # =========================================================================

    def add_synapse(
        self,
        source: Cell,
        target: Cell,
        distance: float,
        strength: int = 1,
        step: int = 0,
    ) -> Optional[Synapse]:
        """Record a synapse ``source → target`` unless one already exists.

        Args:
            source: Owning cell; the record is appended to its list
            target: Partner cell
            distance: Segment distance at formation
            strength: Initial strength
            step: Formation step

        Returns:
            The new record, or None when the call was a no-op
        """
        if source is target or source.uid == target.uid:
            with self._guard:
                self.n_self_rejected += 1
            logger.debug("Rejected self-synapse on cell %s", source.uid)
            return None

        first, second = self._ordered_locks(source, target)
        with first, second:
            if self.has_edge(source, target):
                with self._guard:
                    self.n_duplicates += 1
                return None
            synapse = Synapse(
                source_uid=source.uid,
                target_uid=target.uid,
                distance=float(distance),
                strength=strength,
                formation_step=step,
            )
            source.synapses.append(synapse)

        with self._guard:
            self.n_formed += 1
        logger.debug("Formed %r", synapse)
        return synapse

    def increase_strength(self, source: Cell, target: Cell, amount: int = 1) -> bool:
        """Strengthen the existing synapse ``source → target``.

        Returns:
            True if a synapse was found and strengthened
        """
        with self._lock_for(source):
            synapse = self.find(source, target)
            if synapse is None:
                return False
            synapse.increase_strength(amount)
        return True

    def _lock_for(self, cell: Cell) -> threading.Lock:
        with self._guard:
            lock = self._cell_locks.get(cell)
            if lock is None:
                lock = threading.Lock()
                self._cell_locks[cell] = lock
            return lock

    def _ordered_locks(self, a: Cell, b: Cell) -> Tuple[threading.Lock, threading.Lock]:
        key_a = (a.uid if a.uid is not None else -1, id(a))
        key_b = (b.uid if b.uid is not None else -1, id(b))
        if key_a <= key_b:
            return self._lock_for(a), self._lock_for(b)
        return self._lock_for(b), self._lock_for(a)

    # =========================================================================
    # Diagnostics & state
    # =========================================================================

    def get_diagnostics(self) -> Dict[str, int]:
        """Counters describing registry activity so far."""
        with self._guard:
            return {
                "synapses_formed": self.n_formed,
                "duplicates_rejected": self.n_duplicates,
                "self_synapses_rejected": self.n_self_rejected,
            }

    @staticmethod
    def count(cells: Iterable[Cell]) -> int:
        """Total number of synapse records held by ``cells``."""
        return sum(len(c.synapses) for c in cells)

    def get_state(self, cells: Iterable[Cell]) -> Dict[str, Any]:
        """Snapshot all synapses held by ``cells`` for checkpointing.

        Returns:
            State dict with synapse records and registry counters
        """
        synapses = [s.to_dict() for cell in cells for s in cell.synapses]
        return {
            "synapses": synapses,
            "diagnostics": self.get_diagnostics(),
        }

    def load_state(self, state: Dict[str, Any], resource_manager: "ResourceManager") -> int:
        """Restore synapse records onto the cells of ``resource_manager``.

        Existing records on those cells are replaced. Records whose source
        cell is not registered are skipped with a warning.

        Returns:
            Number of records restored
        """
        cells = [a for a in resource_manager.agents() if a.kind is NodeKind.CELL]
        for cell in cells:
            cell.synapses.clear()

        restored = 0
        for data in state.get("synapses", []):
            synapse = Synapse.from_dict(data)
            source = resource_manager.get_agent(synapse.source_uid)
            if source is None or source.kind is not NodeKind.CELL:
                logger.warning("Skipping synapse %r: source cell not registered", synapse)
                continue
            source.synapses.append(synapse)
            restored += 1

        counters = state.get("diagnostics", {})
        with self._guard:
            self.n_formed = counters.get("synapses_formed", restored)
            self.n_duplicates = counters.get("duplicates_rejected", 0)
            self.n_self_rejected = counters.get("self_synapses_rejected", 0)
        return restored


__all__ = [
    "SynapseRegistry",
]
