"""
End-to-end tests: grow arbors, switch detection on, export the connection list.

These run the scheduler with the real gate, detector, registry and exporter
wired through one SimulationContext.
"""

import numpy as np
import pytest

from synaptogen.config import ActivationConfig, ExportConfig, SimulationConfig
from synaptogen.core.agents import Cell, TreeSegment
from synaptogen.core.simulation import SimulationContext
from synaptogen.diagnostics import collect_run_summary
from synaptogen.io.connectivity import ConnectivityExporter, load_connection_list
from synaptogen.synapses.detector import SynapseFormation
from synaptogen.synapses.timing import install_synapse_formation


def _make_context(tmp_path, total_steps=10, n_workers=1):
    config = SimulationConfig(
        seed=0,
        n_workers=n_workers,
        activation=ActivationConfig(total_steps=total_steps),
        export=ExportConfig(output_dir=tmp_path),
    )
    return SimulationContext(config)


def _two_reaching_cells(ctx):
    """Two somata whose arbors grow toward each other along x.

    Tips start 4.4 apart and each grows 0.5 per step, so they come within
    contact distance only after several steps.
    """
    a = ctx.add_agent(Cell(position=(-10.0, 0.0, 0.0), cell_type=1))
    b = ctx.add_agent(Cell(position=(10.0, 0.0, 0.0), cell_type=2))
    ctx.add_agent(TreeSegment(position=(-2.2, 0.0, 0.0), mother=a))
    ctx.add_agent(TreeSegment(position=(2.2, 0.0, 0.0), mother=b))
    return a, b


def _grow_toward_origin(ctx):
    for tip in [s for s in ctx.resource_manager.tree_segments() if not s.daughters]:
        x = tip.position[0].item()
        if abs(x) <= 0.5:
            continue
        step = -0.5 if x > 0 else 0.5
        ctx.add_agent(TreeSegment(position=(x + step, 0.0, 0.0), mother=tip))


class TestFormationPipeline:

    def test_no_synapses_before_window(self, tmp_path):
        """Test arbors in contact early form nothing until the gate opens."""
        ctx = _make_context(tmp_path, total_steps=10)
        a, b = _two_reaching_cells(ctx)
        ctx.add_agent(TreeSegment(position=(0.0, 0.0, 0.0), mother=a))
        ctx.add_agent(TreeSegment(position=(0.3, 0.0, 0.0), mother=b))
        install_synapse_formation(ctx)

        ctx.scheduler.simulate(7)
        assert a.synapses == [] and b.synapses == []

        ctx.scheduler.simulate(3)
        assert ctx.registry.count([a, b]) == 1

    def test_grown_arbors_connect_and_export(self, tmp_path):
        ctx = _make_context(tmp_path, total_steps=12)
        a, b = _two_reaching_cells(ctx)
        isolated = ctx.add_agent(Cell(position=(0.0, 50.0, 0.0), cell_type=3))
        install_synapse_formation(ctx)
        ctx.scheduler.add_post_step_hook(_grow_toward_origin)

        ctx.scheduler.simulate(12)

        assert ctx.registry.count([a, b, isolated]) == 1
        synapse = (a.synapses + b.synapses)[0]
        assert synapse.distance < 1.0
        assert synapse.formation_step >= ctx.config.activation.first_active_step

        path = ConnectivityExporter(ctx.config.export).export(ctx.resource_manager)
        rows = load_connection_list(path)
        assert len(rows) == 2
        assert {rows[0]["Source_UID"], rows[0]["Target_UID"]} == {a.uid, b.uid}
        assert rows[0]["Synapse_Count"] == 1
        assert rows[1] == {
            "Source_UID": isolated.uid,
            "Target_UID": "none",
            "Cell_Type": 3,
            "Synapse_Count": 0,
        }

    def test_each_segment_has_single_detector(self, tmp_path):
        ctx = _make_context(tmp_path, total_steps=6)
        _two_reaching_cells(ctx)
        install_synapse_formation(ctx)
        ctx.scheduler.add_post_step_hook(_grow_toward_origin)

        ctx.scheduler.simulate(6)

        counts = [s.count_behaviors(SynapseFormation) for s in ctx.resource_manager.tree_segments()]
        assert all(c <= 1 for c in counts)
        assert any(c == 1 for c in counts)

    def test_run_summary(self, tmp_path):
        ctx = _make_context(tmp_path, total_steps=12)
        _two_reaching_cells(ctx)
        install_synapse_formation(ctx)
        ctx.scheduler.add_post_step_hook(_grow_toward_origin)
        ctx.scheduler.simulate(12)

        summary = collect_run_summary(ctx)
        assert summary["step"] == 12
        assert summary["n_cells"] == 2
        assert summary["n_synapses"] == 1
        assert summary["synapses_formed"] == 1


def _random_network(tmp_path, n_workers):
    ctx = _make_context(tmp_path, total_steps=8, n_workers=n_workers)
    rng = np.random.RandomState(3)
    cells = []
    for i in range(12):
        soma = ctx.add_agent(Cell(position=rng.uniform(-4, 4, size=3), cell_type=i % 3))
        for _ in range(4):
            ctx.add_agent(TreeSegment(position=soma.position.numpy() + rng.normal(0, 1.5, size=3), mother=soma))
        cells.append(soma)
    install_synapse_formation(ctx)
    ctx.scheduler.simulate(8)
    return ctx, cells


@pytest.mark.parametrize("n_workers", [2, 4])
def test_threaded_matches_sequential(tmp_path, n_workers):
    """Test worker threads find the same undirected cell pairs as a sequential run.

    Edge direction depends on which partner's segment detects first, so only
    the unordered pairs are compared.
    """
    seq_ctx, seq_cells = _random_network(tmp_path / "seq", 1)
    par_ctx, par_cells = _random_network(tmp_path / "par", n_workers)

    def pairs(cells):
        return {frozenset((s.source_uid, s.target_uid)) for c in cells for s in c.synapses}

    assert pairs(par_cells) == pairs(seq_cells)
    assert par_ctx.registry.count(par_cells) == len(pairs(par_cells))
    for cell in par_cells:
        assert all(s.target_uid != cell.uid for s in cell.synapses)
