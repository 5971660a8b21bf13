"""Logging setup and run summaries for synapse-formation runs.

Library modules log through ``logging.getLogger(__name__)`` and never
configure handlers themselves. Entry points call ``setup_logging`` once to
route the ``synaptogen`` logger hierarchy to the console and, optionally,
a log file.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Optional, Union

if TYPE_CHECKING:
    from synaptogen.core.simulation import SimulationContext

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class LogLevel(Enum):
    """Logging levels for synapse-formation runs."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


def setup_logging(
    log_level: LogLevel = LogLevel.INFO,
    log_dir: Optional[Union[str, Path]] = None,
    console_output: bool = True,
) -> logging.Logger:
    """Configure the ``synaptogen`` logger.

    **Args**:
        log_level: Minimum logging level
        log_dir: Directory for ``synaptogen.log``. None disables file output.
        console_output: Whether to log to stderr

    **Returns**:
        The configured package logger
    """
    logger = logging.getLogger("synaptogen")
    level = getattr(logging, log_level.value)
    logger.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT)

    # Drop handlers from an earlier call so repeated setup does not duplicate output
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if console_output:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_dir / "synaptogen.log")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def collect_run_summary(ctx: "SimulationContext") -> Dict[str, Any]:
    """Summary statistics of a run, for logging or checkpoint metadata."""
    cells = list(ctx.resource_manager.cells())
    segments = list(ctx.resource_manager.tree_segments())
    summary: Dict[str, Any] = {
        "step": ctx.current_step,
        "n_cells": len(cells),
        "n_dead_cells": sum(1 for c in cells if c.is_dead),
        "n_segments": len(segments),
        "n_synapses": ctx.registry.count(cells),
    }
    summary.update(ctx.registry.get_diagnostics())
    return summary


def log_run_summary(ctx: "SimulationContext", logger: Optional[logging.Logger] = None) -> Dict[str, Any]:
    """Log ``collect_run_summary`` at INFO level and return it."""
    logger = logger or logging.getLogger("synaptogen")
    summary = collect_run_summary(ctx)
    logger.info(
        "Step %d: %d cells (%d dead), %d segments, %d synapses "
        "(%d duplicates rejected)",
        summary["step"], summary["n_cells"], summary["n_dead_cells"],
        summary["n_segments"], summary["n_synapses"], summary["duplicates_rejected"],
    )
    return summary
