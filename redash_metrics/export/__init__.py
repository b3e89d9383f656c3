"""Export integrations for redash-metrics.

Provides the ``MetricsExporter`` protocol and concrete exporters.
Built-in exporters:
- ``MackerelExporter`` for the Mackerel agent plugin text protocol
"""

from __future__ import annotations

from typing import Mapping, Protocol, runtime_checkable

from ..graphs import Graph


@runtime_checkable
class MetricsExporter(Protocol):
    """Protocol that all metric exporters must satisfy.

    Exporters receive the graph definitions once and the metric values
    once per poll cycle.
    """

    def export_definitions(self, graphs: Mapping[str, Graph]) -> None:
        """Emit the graph definitions."""
        ...

    def export_values(self, graphs: Mapping[str, Graph], metrics: Mapping[str, int]) -> None:
        """Emit the metric values of one poll cycle."""
        ...


# Re-export concrete implementations
from .mackerel import MackerelExporter  # noqa: E402

__all__ = [
    "MackerelExporter",
    "MetricsExporter",
]
