"""
Step-count gate that switches synapse detection on near the end of a run.

Arbors grow for most of the run; synapses are only detected in the final
few steps, once ``step > total_steps - activation_window``. With the
defaults (500 steps, window 3) the gate is inactive at step 497 and active
from step 498.

While active, the gate attaches a ``SynapseFormation`` behavior to every
live tree segment. By default attachment is idempotent (one detector per
segment). ``idempotent_attachment=False`` reproduces unconditional
re-attachment on every active step, where detectors pile up on segments
that already have one.

Author: Synaptogen Project
Date: March 2026
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from synaptogen.config import ActivationConfig, SynapseFormationConfig
from synaptogen.core.agents import NodeKind
from synaptogen.core.behavior import StandaloneOperation
from synaptogen.synapses.detector import SynapseFormation

if TYPE_CHECKING:
    from synaptogen.core.simulation import SimulationContext

logger = logging.getLogger(__name__)


class TimingGate(StandaloneOperation):
    """Scheduled operation attaching synapse detection inside the activation window.

    Args:
        activation: Window parameters (total steps, offset, attachment mode)
        formation: Parameters handed to each attached SynapseFormation
    """

    name = "synapse_timing_gate"

    def __init__(
        self,
        activation: Optional[ActivationConfig] = None,
        formation: Optional[SynapseFormationConfig] = None,
    ):
        self.activation = activation or ActivationConfig()
        self.formation = formation or SynapseFormationConfig()
        self.n_attached = 0

    def is_active(self, step: int) -> bool:
        """Whether ``step`` lies inside the activation window."""
        return step > self.activation.total_steps - self.activation.activation_window

    def __call__(self, ctx: "SimulationContext") -> None:
        step = ctx.current_step
        if not self.is_active(step):
            return

        attached = 0
        for agent in ctx.resource_manager.agents():
            if agent is None or agent.kind is not NodeKind.TREE_SEGMENT:
                continue
            if self.activation.idempotent_attachment and agent.has_behavior(SynapseFormation):
                continue
            agent.add_behavior(SynapseFormation(self.formation))
            attached += 1

        self.n_attached += attached
        if attached:
            logger.info("Step %d: attached synapse detection to %d segments", step, attached)


def install_synapse_formation(ctx: "SimulationContext") -> TimingGate:
    """Register a TimingGate built from ``ctx.config`` with the scheduler."""
    gate = TimingGate(ctx.config.activation, ctx.config.formation)
    ctx.scheduler.add_operation(gate)
    return gate


__all__ = [
    "TimingGate",
    "install_synapse_formation",
]
