"""
Connectivity export: neuron-level connection list as CSV.

The exporter scans all live agents, keeps the cells that are not dead, and
counts synapse records per (source, target) pair. The CSV has the header

    Source_UID,Target_UID,Cell_Type,Synapse_Count

with one row per connected pair (typed by the source cell) followed by one
row per isolated cell, i.e. a retained cell that takes part in no counted
pair, with a count of 0. Isolated rows carry the sentinel target ``none`` by
default so they cannot be confused with a self-loop; the legacy
``IsolatedMarker.SELF`` layout repeats the cell uid instead.

The file is written to a temporary sibling and renamed into place, so a
failed export never leaves partial output. I/O failures are logged and
reported by returning None, never raised.

Example:
    exporter = ConnectivityExporter(ExportConfig(output_dir="results"))
    path = exporter.export(ctx.resource_manager)

Author: Synaptogen Project
Date: March 2026
"""

from __future__ import annotations

import csv
import logging
import os
import tempfile
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import torch

from synaptogen.config import ExportConfig, IsolatedMarker
from synaptogen.core.agents import NodeKind
from synaptogen.errors import ExportError

logger = logging.getLogger(__name__)

HEADER = ("Source_UID", "Target_UID", "Cell_Type", "Synapse_Count")
NONE_TARGET = "none"


@dataclass
class ConnectivityTable:
    """Aggregated connectivity of the retained (non-dead) cells.

    Attributes:
        counts: (source_uid, target_uid) -> number of synapse records
        cell_types: uid -> cell type of every retained cell
        isolated: Retained cells that appear in no counted pair
    """
    counts: Dict[Tuple[int, int], int] = field(default_factory=dict)
    cell_types: Dict[int, int] = field(default_factory=dict)
    isolated: List[int] = field(default_factory=list)

    def rows(self, marker: IsolatedMarker = IsolatedMarker.NONE) -> List[Tuple]:
        """CSV rows (without header): connected pairs first, then isolated cells."""
        rows: List[Tuple] = []
        for (source, target), count in sorted(self.counts.items()):
            rows.append((source, target, self.cell_types[source], count))
        for uid in self.isolated:
            target = uid if marker is IsolatedMarker.SELF else NONE_TARGET
            rows.append((uid, target, self.cell_types[uid], 0))
        return rows


class ConnectivityExporter:
    """Builds and writes the connection list of a run.

    Args:
        config: Output location and isolated-row layout
    """

    def __init__(self, config: Optional[ExportConfig] = None):
        self.config = config or ExportConfig()

    def collect(self, resource_manager) -> ConnectivityTable:
        """Aggregate synapse counts over all live, non-dead cells."""
        table = ConnectivityTable()
        counts: Counter = Counter()

        for agent in resource_manager.agents():
            if agent is None or agent.kind is not NodeKind.CELL or agent.is_dead:
                continue
            table.cell_types[agent.uid] = agent.cell_type
            for synapse in agent.synapses:
                counts[(agent.uid, synapse.target_uid)] += 1

        table.counts = dict(counts)
        connected = {uid for pair in table.counts for uid in pair}
        table.isolated = sorted(uid for uid in table.cell_types if uid not in connected)
        return table

    def export(
        self,
        resource_manager,
        path: Optional[Union[str, Path]] = None,
    ) -> Optional[Path]:
        """Write the connection list.

        Args:
            resource_manager: Agent store of the finished run
            path: Override for the configured output path

        Returns:
            Path written, or None if the file could not be written
        """
        target = Path(path) if path is not None else self.config.output_path
        table = self.collect(resource_manager)
        rows = table.rows(self.config.isolated_marker)

        tmp_name = None
        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{target.name}.", suffix=".tmp", dir=target.parent
            )
            with os.fdopen(fd, "w", newline="") as f:
                writer = csv.writer(f, lineterminator="\n")
                writer.writerow(HEADER)
                writer.writerows(rows)
            os.replace(tmp_name, target)
        except OSError as e:
            logger.error("Failed to write connection list to %s: %s", target, e)
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            return None

        logger.info(
            "Exported %d connections and %d isolated cells to %s",
            len(table.counts), len(table.isolated), target,
        )
        return target

    def adjacency_matrix(
        self,
        resource_manager,
        dtype: torch.dtype = torch.int64,
    ) -> Tuple[List[int], torch.Tensor]:
        """Dense synapse-count matrix over retained cells.

        Returns:
            (uids, matrix) where ``matrix[i, j]`` counts synapses
            ``uids[i] → uids[j]``. Edges to cells that are not retained
            (dead or removed) are left out.
        """
        table = self.collect(resource_manager)
        uids = sorted(table.cell_types)
        index = {uid: i for i, uid in enumerate(uids)}
        matrix = torch.zeros(len(uids), len(uids), dtype=dtype)
        for (source, target), count in table.counts.items():
            if target in index:
                matrix[index[source], index[target]] = count
        return uids, matrix


def load_connection_list(path: Union[str, Path]) -> List[Dict[str, Union[int, str]]]:
    """Read a connection list written by ConnectivityExporter.

    ``Target_UID`` is returned as int, or as the string ``"none"`` for
    isolated cells.

    Raises:
        ExportError: If the header does not match
    """
    with open(path, newline="") as f:
        reader = csv.reader(f)
        header = next(reader, None)
        if header is None or tuple(header) != HEADER:
            raise ExportError(f"{path}: unexpected header {header}")
        rows = []
        for source, target, cell_type, count in reader:
            rows.append({
                "Source_UID": int(source),
                "Target_UID": target if target == NONE_TARGET else int(target),
                "Cell_Type": int(cell_type),
                "Synapse_Count": int(count),
            })
    return rows


__all__ = [
    "HEADER",
    "NONE_TARGET",
    "ConnectivityTable",
    "ConnectivityExporter",
    "load_connection_list",
]
