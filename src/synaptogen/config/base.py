"""
Base Configuration Classes.

This module provides the base configuration class with fields shared by
every Synaptogen config. All specific configs inherit from it.

Author: Synaptogen Project
Date: March 2026
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

import torch

from synaptogen.errors import ConfigurationError


@dataclass
class BaseConfig:
    """Base configuration with common fields for all components.

    This provides standard fields that appear in almost every config:
    - device: Hardware device for position tensors (cpu/cuda)
    - dtype: Tensor data type for positions and distances
    - seed: Random seed for reproducibility
    """

    device: str = "cpu"
    """Device to run on: 'cpu', 'cuda', 'cuda:0', etc."""

    dtype: str = "float32"
    """Data type for tensors: 'float32', 'float64'"""

    seed: Optional[int] = None
    """Random seed for reproducibility. None = no seeding."""

    def get_torch_device(self) -> torch.device:
        """Get PyTorch device object."""
        return torch.device(self.device)

    def get_torch_dtype(self) -> torch.dtype:
        """Get PyTorch dtype object."""
        dtype_map = {
            "float32": torch.float32,
            "float64": torch.float64,
        }
        if self.dtype not in dtype_map:
            raise ConfigurationError(
                f"Unknown dtype '{self.dtype}'. "
                f"Choose from: {list(dtype_map.keys())}"
            )
        return dtype_map[self.dtype]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        result: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            result[f.name] = value.value if hasattr(value, "value") else value
        return result

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "BaseConfig":
        """Create from dictionary."""
        return cls(**d)


__all__ = [
    "BaseConfig",
]
