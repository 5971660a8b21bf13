"""
SYNAPTOGEN - Proximity-driven synapse formation between growing neurons.

Detects when the dendritic trees of different simulated neurons come within
contact distance, records directed neuron-level synapses, and exports the
resulting connectivity graph.

Quick Start:
============

    from synaptogen import (
        SimulationConfig, SimulationContext, Cell, TreeSegment,
        install_synapse_formation, ConnectivityExporter,
    )

    ctx = SimulationContext(SimulationConfig())
    soma = ctx.add_agent(Cell(position=[0, 0, 0], cell_type=1))
    ctx.add_agent(TreeSegment(position=[1, 0, 0], mother=soma))

    install_synapse_formation(ctx)
    ctx.scheduler.add_post_step_hook(my_growth_rule)  # external growth
    ctx.scheduler.simulate(ctx.config.activation.total_steps)

    ConnectivityExporter(ctx.config.export).export(ctx.resource_manager)

Internal code should use explicit submodule imports:

    from synaptogen.synapses.registry import SynapseRegistry
    from synaptogen.core.ancestry import AncestorResolver
"""

__version__ = "0.1.0"

# Configuration
from synaptogen.config import (
    ActivationConfig,
    ExportConfig,
    IsolatedMarker,
    SimulationConfig,
    SynapseFormationConfig,
)

# Data model and host
from synaptogen.core.agents import Agent, Cell, CellState, NodeKind, TreeSegment
from synaptogen.core.ancestry import AncestorResolver, find_owner_cell
from synaptogen.core.synapse import Synapse
from synaptogen.core.simulation import ResourceManager, Scheduler, SimulationContext

# Synapse formation
from synaptogen.synapses import (
    SynapseDetector,
    SynapseFormation,
    SynapseRegistry,
    TimingGate,
    install_synapse_formation,
)

# Export
from synaptogen.io import ConnectivityExporter, load_connection_list

from synaptogen.errors import SynaptogenError, ConfigurationError

__all__ = [
    "__version__",
    # Configuration
    "SimulationConfig",
    "SynapseFormationConfig",
    "ActivationConfig",
    "ExportConfig",
    "IsolatedMarker",
    # Data model
    "Agent",
    "Cell",
    "CellState",
    "NodeKind",
    "TreeSegment",
    "Synapse",
    "AncestorResolver",
    "find_owner_cell",
    # Host
    "ResourceManager",
    "Scheduler",
    "SimulationContext",
    # Synapse formation
    "SynapseRegistry",
    "SynapseDetector",
    "SynapseFormation",
    "TimingGate",
    "install_synapse_formation",
    # Export
    "ConnectivityExporter",
    "load_connection_list",
    # Errors
    "SynaptogenError",
    "ConfigurationError",
]
