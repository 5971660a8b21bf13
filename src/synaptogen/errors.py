"""
Custom exception classes and validation utilities for Synaptogen.

This module provides:
1. Hierarchical exception classes for different error categories
2. Validation utilities for agent geometry

Exception Hierarchy:
====================
SynaptogenError (base)
├── ComponentError - Errors in simulation components (registry, detector, gate)
├── ConfigurationError - Invalid configuration parameters
└── ExportError - Errors while writing connectivity output

Detection itself never raises: a missing owner cell or an empty
neighbourhood is a normal outcome of a simulation step, not an error.

Author: Synaptogen Project
Date: March 2026
"""

from __future__ import annotations

from typing import Any

import torch


# =============================================================================
# Exception Hierarchy
# =============================================================================

class SynaptogenError(Exception):
    """Base exception for all Synaptogen-specific errors.

    All custom exceptions in Synaptogen inherit from this class, enabling
    code to catch Synaptogen errors specifically:

        try:
            scheduler.simulate(500)
        except SynaptogenError as e:
            logger.error(f"Synaptogen error: {e}")
    """


class ComponentError(SynaptogenError):
    """Error in a simulation component.

    Args:
        component_name: Name of the component (e.g., "SynapseRegistry")
        message: Description of the error

    Example:
        raise ComponentError("ResourceManager", "uid 12 already registered")
    """

    def __init__(self, component_name: str, message: str):
        super().__init__(f"[{component_name}] {message}")
        self.component_name = component_name


class ConfigurationError(SynaptogenError):
    """Invalid configuration parameters.

    Raised when configuration values are out of valid range or incompatible
    with each other.

    Example:
        raise ConfigurationError("acceptance_distance must be positive, got -1.0")
    """


class ExportError(SynaptogenError):
    """Error while producing connectivity output.

    The exporter itself logs and swallows I/O failures; this is raised only
    when reading back a malformed connection list.
    """


# =============================================================================
# Validation Utilities
# =============================================================================

def validate_position(position: Any, name: str = "position") -> torch.Tensor:
    """Convert ``position`` to a float tensor of shape (3,).

    Args:
        position: Sequence, numpy array or tensor with three coordinates
        name: Name for error messages

    Returns:
        Position as a 1D float32 tensor

    Raises:
        ConfigurationError: If the position is not three finite coordinates
    """
    tensor = torch.as_tensor(position, dtype=torch.float32).detach().clone()
    if tensor.shape != (3,):
        raise ConfigurationError(
            f"{name} must have shape (3,), got {tuple(tensor.shape)}"
        )
    if not torch.isfinite(tensor).all():
        raise ConfigurationError(f"{name} must be finite, got {tensor.tolist()}")
    return tensor
