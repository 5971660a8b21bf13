"""Diagnostics: logging setup and run summaries."""

from synaptogen.diagnostics.logger import (
    LOG_FORMAT,
    LogLevel,
    collect_run_summary,
    log_run_summary,
    setup_logging,
)

__all__ = [
    "LOG_FORMAT",
    "LogLevel",
    "collect_run_summary",
    "log_run_summary",
    "setup_logging",
]
