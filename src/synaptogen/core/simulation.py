"""
Minimal simulation host: agent store, step scheduler and context object.

This is the interface boundary synapse formation relies on and nothing
more. It provides:
- a spatial neighbour query (via SpatialIndex)
- a step counter and a per-step invocation hook for standalone operations
- per-agent position and ownership accessors (on the agents themselves)
- attaching behaviors to agents
- enumerating all live agents

Growth mechanics, forces and rendering are external: they plug in as
post-step hooks, which run after all behaviors of a step have finished.

Step Structure:
===============
    1. standalone operations (e.g. the activation gate)
    2. spatial index rebuilt from the positions fixed for this step
    3. every agent's behaviors (optionally across worker threads)
    4. post-step hooks (external growth, division, removal)
    5. step counter advances

Within step 3 positions and ownership links are immutable, so behaviors may
run concurrently. The only shared mutable state they touch is a cell's
synapse list, which SynapseRegistry guards per cell.

There is no process-wide "active simulation": every component receives the
SimulationContext explicitly.

Author: Synaptogen Project
Date: March 2026
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, Iterator, List, Optional

import numpy as np
import torch

from synaptogen.config import SimulationConfig
from synaptogen.core.agents import Agent, Cell, NodeKind, TreeSegment
from synaptogen.core.ancestry import AncestorResolver
from synaptogen.core.behavior import StandaloneOperation
from synaptogen.core.spatial import SpatialIndex
from synaptogen.errors import ComponentError
from synaptogen.synapses.registry import SynapseRegistry

logger = logging.getLogger(__name__)

StepHook = Callable[["SimulationContext"], None]


class ResourceManager:
    """Store of all live agents, keyed by uid.

    Agents are added and removed between steps. ``get_agent`` returns None
    for uids that were never registered or have been removed.
    """

    def __init__(self):
        self._agents: Dict[int, Agent] = {}
        self._next_uid = 0
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._agents)

    def __contains__(self, agent: Agent) -> bool:
        return agent is not None and self._agents.get(agent.uid) is agent

    def add_agent(self, agent: Agent) -> Agent:
        """Register ``agent``, assigning a uid if it has none.

        Raises:
            ComponentError: If the uid is already taken by another agent
        """
        with self._lock:
            if agent.uid is None:
                agent.uid = self._next_uid
            elif agent.uid in self._agents and self._agents[agent.uid] is not agent:
                raise ComponentError("ResourceManager", f"uid {agent.uid} already registered")
            self._next_uid = max(self._next_uid, agent.uid + 1)
            self._agents[agent.uid] = agent
        return agent

    def remove_agent(self, uid: int) -> Optional[Agent]:
        """Remove and return the agent with ``uid`` (None if absent)."""
        with self._lock:
            return self._agents.pop(uid, None)

    def get_agent(self, uid: Optional[int]) -> Optional[Agent]:
        if uid is None:
            return None
        return self._agents.get(uid)

    def agents(self) -> List[Agent]:
        """Snapshot of all live agents in ascending uid order."""
        return [self._agents[uid] for uid in sorted(self._agents)]

    def for_each_agent(self, fn: Callable[[Agent], None]) -> None:
        """Call ``fn`` on every live agent, skipping agents removed meanwhile."""
        for agent in self.agents():
            if self._agents.get(agent.uid) is agent:
                fn(agent)

    def cells(self) -> Iterator[Cell]:
        return (a for a in self.agents() if a.kind is NodeKind.CELL)

    def tree_segments(self) -> Iterator[TreeSegment]:
        return (a for a in self.agents() if a.kind is NodeKind.TREE_SEGMENT)


class Scheduler:
    """Advances the simulation one step at a time.

    Args:
        ctx: Context the scheduler drives
        n_workers: Threads used for agent behaviors. 1 = sequential.
    """

    def __init__(self, ctx: "SimulationContext", n_workers: int = 1):
        self.ctx = ctx
        self.n_workers = n_workers
        self.operations: List[StandaloneOperation] = []
        self.post_step_hooks: List[StepHook] = []
        self._simulated_steps = 0

    @property
    def current_step(self) -> int:
        """Index of the step being (or about to be) simulated."""
        return self._simulated_steps

    def add_operation(self, operation: StandaloneOperation) -> None:
        """Register an operation invoked once at the start of every step."""
        self.operations.append(operation)

    def add_post_step_hook(self, hook: StepHook) -> None:
        """Register a callable run after all behaviors of a step."""
        self.post_step_hooks.append(hook)

    def simulate(self, n_steps: int) -> None:
        """Run ``n_steps`` steps."""
        if n_steps < 0:
            raise ValueError(f"n_steps must be non-negative, got {n_steps}")
        if self.n_workers > 1:
            with ThreadPoolExecutor(max_workers=self.n_workers) as executor:
                for _ in range(n_steps):
                    self._step(executor)
        else:
            for _ in range(n_steps):
                self._step(None)

    def _step(self, executor: Optional[ThreadPoolExecutor]) -> None:
        ctx = self.ctx
        for operation in self.operations:
            operation(ctx)

        agents = ctx.resource_manager.agents()
        ctx.spatial_index.rebuild(agents)

        if executor is None:
            for agent in agents:
                self._run_behaviors(agent)
        else:
            # Consume the iterator so worker exceptions propagate
            list(executor.map(self._run_behaviors, agents))

        for hook in self.post_step_hooks:
            hook(ctx)

        self._simulated_steps += 1

    def _run_behaviors(self, agent: Agent) -> None:
        if agent not in self.ctx.resource_manager:
            return
        for behavior in list(agent.behaviors):
            behavior.run(agent, self.ctx)


class SimulationContext:
    """Explicit context threaded through every synapse-formation component.

    Args:
        config: Run configuration (defaults to SimulationConfig())

    Example:
        >>> ctx = SimulationContext(SimulationConfig(seed=7))
        >>> soma = ctx.add_agent(Cell(position=[0, 0, 0]))
        >>> ctx.add_agent(TreeSegment(position=[1, 0, 0], mother=soma))
        >>> ctx.scheduler.simulate(10)
    """

    def __init__(self, config: Optional[SimulationConfig] = None):
        self.config = config or SimulationConfig()
        if self.config.seed is not None:
            torch.manual_seed(self.config.seed)
            np.random.seed(self.config.seed)

        self.resource_manager = ResourceManager()
        self.spatial_index = SpatialIndex(
            device=self.config.device,
            dtype=self.config.get_torch_dtype(),
        )
        self.resolver = AncestorResolver(
            self.resource_manager,
            use_cache=self.config.formation.use_owner_cache,
            max_depth=self.config.formation.max_ancestor_depth,
        )
        self.registry = SynapseRegistry()
        self.scheduler = Scheduler(self, n_workers=self.config.n_workers)

    @property
    def current_step(self) -> int:
        return self.scheduler.current_step

    def add_agent(self, agent: Agent) -> Agent:
        """Register ``agent`` with the resource manager and return it."""
        return self.resource_manager.add_agent(agent)

    def remove_agent(self, agent: Agent) -> None:
        self.resource_manager.remove_agent(agent.uid)

    def get_agent(self, uid: Optional[int]) -> Optional[Agent]:
        return self.resource_manager.get_agent(uid)


__all__ = [
    "ResourceManager",
    "Scheduler",
    "SimulationContext",
]
