"""
Synaptogen I/O - connectivity export.

Example:
    from synaptogen.io import ConnectivityExporter

    path = ConnectivityExporter(config.export).export(ctx.resource_manager)
"""

from synaptogen.io.connectivity import (
    HEADER,
    NONE_TARGET,
    ConnectivityExporter,
    ConnectivityTable,
    load_connection_list,
)

__all__ = [
    "HEADER",
    "NONE_TARGET",
    "ConnectivityExporter",
    "ConnectivityTable",
    "load_connection_list",
]
