"""
Behavior and operation protocols for the simulation host.

Two extension points drive a run:

- ``Behavior``: attached to a single agent and executed for that agent once
  per step. Behaviors of different agents may run concurrently within a
  step, so they must only read other agents' state.
- ``StandaloneOperation``: executed once per step by the scheduler,
  independent of any agent (e.g. the activation gate).

Author: Synaptogen Project
Date: March 2026
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from synaptogen.core.agents import Agent
    from synaptogen.core.simulation import SimulationContext


class Behavior(ABC):
    """Per-agent behavior executed every step while attached."""

    @abstractmethod
    def run(self, agent: "Agent", ctx: "SimulationContext") -> None:
        """Execute the behavior for ``agent`` in the current step."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class StandaloneOperation(ABC):
    """Operation invoked once per step by the scheduler."""

    name: str = "operation"

    @abstractmethod
    def __call__(self, ctx: "SimulationContext") -> None:
        """Execute the operation for the current step."""


__all__ = [
    "Behavior",
    "StandaloneOperation",
]
