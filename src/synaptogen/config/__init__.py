"""
Synaptogen Configuration.

Usage:
======

    from synaptogen.config import SimulationConfig, ActivationConfig

    config = SimulationConfig(activation=ActivationConfig(total_steps=200))
    print(config.summary())

Author: Synaptogen Project
Date: March 2026
"""

from synaptogen.config.base import BaseConfig
from synaptogen.config.synapse_config import (
    ADJACENCY_ALL_FILENAME,
    CONNECTION_LIST_FILENAME,
    ActivationConfig,
    ExportConfig,
    IsolatedMarker,
    SimulationConfig,
    SynapseFormationConfig,
)

__all__ = [
    "BaseConfig",
    "SimulationConfig",
    "SynapseFormationConfig",
    "ActivationConfig",
    "ExportConfig",
    "IsolatedMarker",
    "CONNECTION_LIST_FILENAME",
    "ADJACENCY_ALL_FILENAME",
]
