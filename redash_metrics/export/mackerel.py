"""Mackerel exporter for Redash metrics.

Writes the Mackerel agent plugin text protocol to a stream:

- **values**: ``{graph_key}.{metric}\\t{value}\\t{epoch}`` per metric
- **meta**: ``# mackerel-agent-plugin`` followed by a JSON line with
  the graph definitions, printed when the agent sets
  ``MACKEREL_AGENT_PLUGIN_META=1``
"""

from __future__ import annotations

import json
import logging
import sys
import time
from typing import Any, Callable, Mapping, Optional, TextIO

from ..graphs import Graph

logger = logging.getLogger(__name__)

META_ENV = "MACKEREL_AGENT_PLUGIN_META"
META_HEADER = "# mackerel-agent-plugin"


def format_definitions(graphs: Mapping[str, Graph]) -> str:
    """Render graph definitions as the JSON document Mackerel expects."""
    payload: dict[str, Any] = {
        "graphs": {
            key: {
                "label": graph.label,
                "unit": graph.unit,
                "metrics": [
                    {"name": metric.name, "label": metric.label, "stacked": metric.stacked}
                    for metric in graph.metrics
                ],
            }
            for key, graph in graphs.items()
        }
    }
    return json.dumps(payload)


def format_value_lines(
    graphs: Mapping[str, Graph],
    metrics: Mapping[str, int],
    *,
    timestamp: int,
) -> list[str]:
    """Render one tab-separated line per metric, in graph order.

    Metrics declared by a graph but absent from ``metrics`` are skipped.
    """
    lines: list[str] = []
    for key, graph in graphs.items():
        for metric in graph.metrics:
            if metric.name not in metrics:
                logger.debug("No value for %s.%s; skipping", key, metric.name)
                continue
            lines.append(f"{key}.{metric.name}\t{metrics[metric.name]}\t{timestamp}")
    return lines


class MackerelExporter:
    """Write metrics in the Mackerel agent plugin format.

    Args:
        stream: Output stream. Defaults to ``sys.stdout`` at write time.
        clock: Returns the current time in seconds; used for line timestamps.

    Example::

        exporter = MackerelExporter()
        exporter.export_values(plugin.graph_definition(), plugin.fetch_metrics())
    """

    def __init__(
        self,
        *,
        stream: Optional[TextIO] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._stream = stream
        self._clock = clock

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def export_definitions(self, graphs: Mapping[str, Graph]) -> None:
        self.stream.write(f"{META_HEADER}\n{format_definitions(graphs)}\n")
        self.stream.flush()

    def export_values(self, graphs: Mapping[str, Graph], metrics: Mapping[str, int]) -> None:
        lines = format_value_lines(graphs, metrics, timestamp=int(self._clock()))
        if lines:
            self.stream.write("\n".join(lines) + "\n")
        self.stream.flush()


__all__ = [
    "META_ENV",
    "META_HEADER",
    "MackerelExporter",
    "format_definitions",
    "format_value_lines",
]
