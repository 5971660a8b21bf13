"""
Synapse Formation Configuration.

Parameters for proximity-based synapse detection, the step-count activation
window, and connectivity export. Defaults reproduce the reference
deployment: a 500-step run whose final steps attach detectors that search
a squared radius of 25 and accept partners closer than 1.0.

Author: Synaptogen Project
Date: March 2026
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Union

from synaptogen.config.base import BaseConfig
from synaptogen.errors import ConfigurationError


class IsolatedMarker(Enum):
    """Target column written for cells without any connection."""
    NONE = "none"  # Sentinel target value: "<uid>,none,<type>,0"
    SELF = "self"  # Legacy shape, indistinguishable from a self-loop: "<uid>,<uid>,<type>,0"


CONNECTION_LIST_FILENAME = "connection_list.csv"
ADJACENCY_ALL_FILENAME = "adjacency_matrix_all.csv"


@dataclass
class SynapseFormationConfig(BaseConfig):
    """Configuration for the per-segment synapse detector.

    Example:
        config = SynapseFormationConfig(
            acceptance_distance=0.5,  # Tighter contact requirement
            repeat_detection=False,   # Stop after the first synapse
        )
    """

    search_radius_sq: float = 25.0
    """Squared radius of the neighbour query (radius 5). Deliberately looser
    than ``acceptance_distance``."""

    acceptance_distance: float = 1.0
    """Hard cutoff: candidates must be strictly closer than this."""

    initial_strength: int = 1
    """Strength assigned to newly formed synapses."""

    repeat_detection: bool = True
    """Keep searching every step after a synapse formed.

    True reproduces the observed behaviour where the one-shot flag is never
    set and every attached segment searches until the run ends. False sets
    the segment's ``detection_done`` flag after its first accepted partner.
    """

    use_owner_cache: bool = True
    """Use the owner uid cached on each segment before walking the tree."""

    max_ancestor_depth: int = 10_000
    """Upper bound on ownership-chain hops (guards malformed cyclic chains)."""

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate()

    def _validate(self) -> None:
        if self.search_radius_sq <= 0:
            raise ConfigurationError(
                f"search_radius_sq must be positive, got {self.search_radius_sq}"
            )
        if self.acceptance_distance <= 0:
            raise ConfigurationError(
                f"acceptance_distance must be positive, got {self.acceptance_distance}"
            )
        if self.acceptance_distance ** 2 > self.search_radius_sq:
            raise ConfigurationError(
                f"acceptance_distance ({self.acceptance_distance}) lies outside the "
                f"search radius (sqrt({self.search_radius_sq}))"
            )
        if self.initial_strength < 1:
            raise ConfigurationError(
                f"initial_strength must be >= 1, got {self.initial_strength}"
            )
        if self.max_ancestor_depth < 1:
            raise ConfigurationError(
                f"max_ancestor_depth must be >= 1, got {self.max_ancestor_depth}"
            )


@dataclass
class ActivationConfig(BaseConfig):
    """Configuration for the step-count activation window.

    Detection is attached once ``step > total_steps - activation_window``.
    """

    total_steps: int = 500
    """Total number of steps the run is configured for."""

    activation_window: int = 3
    """Offset from the end of the run at which detection switches on."""

    idempotent_attachment: bool = True
    """Attach at most one detector per segment.

    False reproduces the observed unconditional re-attachment on every
    active step, which accumulates duplicate detectors on each segment.
    """

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.total_steps <= 0:
            raise ConfigurationError(f"total_steps must be positive, got {self.total_steps}")
        if self.activation_window < 0:
            raise ConfigurationError(
                f"activation_window must be non-negative, got {self.activation_window}"
            )

    @property
    def first_active_step(self) -> int:
        """First step index at which the gate is active."""
        return max(self.total_steps - self.activation_window + 1, 0)


@dataclass
class ExportConfig(BaseConfig):
    """Configuration for connectivity export."""

    output_dir: Union[str, Path] = "."
    """Directory the connection list is written to."""

    filename: str = CONNECTION_LIST_FILENAME
    """Fixed output file name for this deployment variant."""

    isolated_marker: IsolatedMarker = IsolatedMarker.NONE
    """How rows for unconnected cells are written."""

    def __post_init__(self):
        """Normalize path and enum fields."""
        self.output_dir = Path(self.output_dir)
        if isinstance(self.isolated_marker, str):
            try:
                self.isolated_marker = IsolatedMarker(self.isolated_marker)
            except ValueError as e:
                raise ConfigurationError(
                    f"Unknown isolated_marker '{self.isolated_marker}'. "
                    f"Choose from: {[m.value for m in IsolatedMarker]}"
                ) from e
        if not self.filename:
            raise ConfigurationError("filename must not be empty")

    @property
    def output_path(self) -> Path:
        """Full path of the exported file."""
        return Path(self.output_dir) / self.filename

    @classmethod
    def all_neurons(cls, output_dir: Union[str, Path] = ".") -> "ExportConfig":
        """Preset for the "all neurons" adjacency variant."""
        return cls(output_dir=output_dir, filename=ADJACENCY_ALL_FILENAME)

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["output_dir"] = str(self.output_dir)
        return d


@dataclass
class SimulationConfig(BaseConfig):
    """Top-level configuration for a synapse-formation run.

    Example:
        config = SimulationConfig(
            activation=ActivationConfig(total_steps=200),
            export=ExportConfig(output_dir="results"),
            n_workers=4,
        )
    """

    formation: SynapseFormationConfig = field(default_factory=SynapseFormationConfig)
    activation: ActivationConfig = field(default_factory=ActivationConfig)
    export: ExportConfig = field(default_factory=ExportConfig)

    n_workers: int = 1
    """Threads used to evaluate agent behaviours within a step. 1 = sequential."""

    def __post_init__(self):
        if self.n_workers < 1:
            raise ConfigurationError(f"n_workers must be >= 1, got {self.n_workers}")

    def summary(self) -> str:
        """Return a formatted summary of the configuration."""
        lines = [
            "=== Synapse Formation Configuration ===",
            f"  Device: {self.device}",
            f"  Workers: {self.n_workers}",
            "",
            "  Detection:",
            f"    Search radius^2:     {self.formation.search_radius_sq}",
            f"    Acceptance distance: {self.formation.acceptance_distance}",
            f"    Repeat detection:    {self.formation.repeat_detection}",
            "",
            "  Activation:",
            f"    Total steps:         {self.activation.total_steps}",
            f"    First active step:   {self.activation.first_active_step}",
            f"    Idempotent attach:   {self.activation.idempotent_attachment}",
            "",
            "  Export:",
            f"    Output:              {self.export.output_path}",
            f"    Isolated marker:     {self.export.isolated_marker.value}",
        ]
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "device": self.device,
            "dtype": self.dtype,
            "seed": self.seed,
            "n_workers": self.n_workers,
            "formation": self.formation.to_dict(),
            "activation": self.activation.to_dict(),
            "export": self.export.to_dict(),
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SimulationConfig":
        """Create from dictionary."""
        d = dict(d)
        formation = SynapseFormationConfig(**d.pop("formation", {}))
        activation = ActivationConfig(**d.pop("activation", {}))
        export = ExportConfig(**d.pop("export", {}))
        return cls(formation=formation, activation=activation, export=export, **d)


__all__ = [
    "IsolatedMarker",
    "CONNECTION_LIST_FILENAME",
    "ADJACENCY_ALL_FILENAME",
    "SynapseFormationConfig",
    "ActivationConfig",
    "ExportConfig",
    "SimulationConfig",
]
