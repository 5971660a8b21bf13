#!/usr/bin/env python3
"""
Example: Synapse Formation Between Growing Arbors

Grows random-walk dendrites from a handful of somata, switches synapse
detection on for the final steps of the run, and exports the connection
list. The growth rule here is a toy stand-in for a real growth model.
"""

import argparse

import numpy as np

from synaptogen import (
    ActivationConfig,
    Cell,
    ConnectivityExporter,
    ExportConfig,
    SimulationConfig,
    SimulationContext,
    TreeSegment,
    install_synapse_formation,
)
from synaptogen.diagnostics import LogLevel, log_run_summary, setup_logging


def make_random_walk_growth(step_length: float = 0.5, branch_prob: float = 0.05):
    """Extend every arbor tip by one segment per step, occasionally branching."""

    def grow(ctx):
        tips = [s for s in ctx.resource_manager.tree_segments() if not s.daughters]
        for tip in tips:
            n_children = 2 if np.random.rand() < branch_prob else 1
            for _ in range(n_children):
                offset = np.random.randn(3)
                offset *= step_length / np.linalg.norm(offset)
                position = tip.position.numpy() + offset
                ctx.add_agent(TreeSegment(position=position, mother=tip))

    return grow


def main():
    parser = argparse.ArgumentParser(description="Synapse formation demo")
    parser.add_argument("--cells", type=int, default=8)
    parser.add_argument("--steps", type=int, default=60)
    parser.add_argument("--spread", type=float, default=6.0)
    parser.add_argument("--workers", type=int, default=1)
    parser.add_argument("--output-dir", default=".")
    parser.add_argument("--seed", type=int, default=42)
    args = parser.parse_args()

    setup_logging(LogLevel.INFO)

    config = SimulationConfig(
        seed=args.seed,
        n_workers=args.workers,
        activation=ActivationConfig(total_steps=args.steps),
        export=ExportConfig(output_dir=args.output_dir),
    )
    print(config.summary())

    ctx = SimulationContext(config)
    for i in range(args.cells):
        soma = ctx.add_agent(Cell(
            position=np.random.uniform(-args.spread, args.spread, size=3),
            cell_type=i % 2,
        ))
        for _ in range(3):
            direction = np.random.randn(3)
            direction /= np.linalg.norm(direction)
            ctx.add_agent(TreeSegment(position=soma.position.numpy() + direction, mother=soma))

    install_synapse_formation(ctx)
    ctx.scheduler.add_post_step_hook(make_random_walk_growth())
    ctx.scheduler.simulate(config.activation.total_steps)

    log_run_summary(ctx)
    path = ConnectivityExporter(config.export).export(ctx.resource_manager)
    if path is None:
        print("\nExport failed (see log)")
    else:
        print(f"\nConnection list written to {path}")


if __name__ == "__main__":
    main()
