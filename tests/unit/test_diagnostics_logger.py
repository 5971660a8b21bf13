"""Tests for logging setup and run summaries."""

import logging

import pytest

from synaptogen.diagnostics import LogLevel, collect_run_summary, log_run_summary, setup_logging


@pytest.fixture
def restore_package_logger():
    logger = logging.getLogger("synaptogen")
    handlers, level = list(logger.handlers), logger.level
    yield
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        logger.addHandler(handler)
    logger.setLevel(level)


def test_setup_logging_writes_file(tmp_path, restore_package_logger):
    logger = setup_logging(LogLevel.DEBUG, log_dir=tmp_path, console_output=False)
    logging.getLogger("synaptogen.synapses.registry").debug("hello from registry")
    for handler in logger.handlers:
        handler.flush()

    text = (tmp_path / "synaptogen.log").read_text()
    assert "synaptogen.synapses.registry - DEBUG - hello from registry" in text


def test_repeated_setup_does_not_duplicate_handlers(restore_package_logger):
    setup_logging(LogLevel.INFO)
    logger = setup_logging(LogLevel.WARNING)
    assert len(logger.handlers) == 1
    assert logger.level == logging.WARNING


def test_run_summary(ctx, add_cell, add_segment, caplog):
    a = add_cell()
    b = add_cell()
    add_segment((1, 0, 0), mother=a)
    ctx.registry.add_synapse(a, b, distance=0.5)
    ctx.registry.add_synapse(b, a, distance=0.5)

    summary = collect_run_summary(ctx)
    assert summary["n_cells"] == 2
    assert summary["n_segments"] == 1
    assert summary["n_synapses"] == 1
    assert summary["duplicates_rejected"] == 1

    with caplog.at_level(logging.INFO, logger="synaptogen"):
        log_run_summary(ctx)
    assert "2 cells (0 dead), 1 segments, 1 synapses" in caplog.text
