"""Static graph definitions for the Redash metrics.

The definitions are keyed by ``{prefix}.{group}`` and list every metric
name returned by ``RedashPlugin.fetch_metrics``. All metrics are absolute
counts, so none of them is a diff metric.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Tuple

MetricType = Literal["uint64"]

GRAPH_UNIT = "integer"


@dataclass(frozen=True, slots=True)
class GraphMetric:
    """Display metadata for a single metric line."""

    name: str
    label: str
    diff: bool = False
    type: MetricType = "uint64"
    stacked: bool = False


@dataclass(frozen=True, slots=True)
class Graph:
    """A named group of metrics drawn on one graph."""

    label: str
    unit: str
    metrics: Tuple[GraphMetric, ...]

    @property
    def metric_names(self) -> list[str]:
        return [metric.name for metric in self.metrics]


# (group suffix, graph label, ((metric name, metric label), ...))
_GRAPH_LAYOUT: Tuple[Tuple[str, str, Tuple[Tuple[str, str], ...]], ...] = (
    (
        "general",
        "re:dash General",
        (
            ("dashboards_count", "Dashboards Count"),
            ("queries_count", "Queries Count"),
            ("widgets_count", "Widgets Count"),
        ),
    ),
    (
        "query_results",
        "re:dash Query Results",
        (
            ("query_results_count", "Query Results Count"),
            ("unused_query_results_count", "Unused Query Results Count"),
        ),
    ),
    (
        "queues",
        "re:dash Queues",
        (
            ("queries_size", "Queries"),
            ("scheduled_queries_size", "Scheduled Queries"),
        ),
    ),
    (
        "tasks",
        "re:dash Tasks",
        (
            ("done", "Done"),
            ("in_progress", "In Progress"),
            ("waiting", "Waiting"),
        ),
    ),
)

METRIC_NAMES: Tuple[str, ...] = tuple(
    name for _, _, metrics in _GRAPH_LAYOUT for name, _ in metrics
)


def graph_definition(prefix: str) -> dict[str, Graph]:
    """Return the graph definitions for the given metric-key prefix.

    Args:
        prefix: Metric key prefix, e.g. ``"redash"``.

    Returns:
        Mapping of ``{prefix}.{group}`` to its Graph, in display order.
    """
    return {
        f"{prefix}.{group}": Graph(
            label=label,
            unit=GRAPH_UNIT,
            metrics=tuple(GraphMetric(name=name, label=metric_label) for name, metric_label in metrics),
        )
        for group, label, metrics in _GRAPH_LAYOUT
    }


__all__ = ["GRAPH_UNIT", "Graph", "GraphMetric", "METRIC_NAMES", "graph_definition"]
