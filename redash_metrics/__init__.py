"""redash-metrics — Mackerel plugin for Redash.

Poll a Redash server's status and task-queue endpoints and report the
counters as Mackerel metrics.

Usage::

    from redash_metrics import PluginConfig, RedashPlugin

    plugin = RedashPlugin(PluginConfig(api_key="secret"))
    metrics = plugin.fetch_metrics()
    graphs = plugin.graph_definition()
"""

from .client import fetch_status, fetch_tasks
from .config import PluginConfig, get_plugin_config
from .exceptions import (
    ConfigurationError,
    FetchError,
    RedashMetricsError,
    TransportError,
    UnexpectedStatusError,
)
from .export import MackerelExporter, MetricsExporter
from .graphs import Graph, GraphMetric, graph_definition
from .plugin import RedashPlugin, flatten_metrics
from .schema import (
    QueueManager,
    QueuePair,
    QueueSnapshot,
    ServiceStatus,
    TaskCollection,
    TaskRecord,
)

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "FetchError",
    "Graph",
    "GraphMetric",
    "MackerelExporter",
    "MetricsExporter",
    "PluginConfig",
    "QueueManager",
    "QueuePair",
    "QueueSnapshot",
    "RedashMetricsError",
    "RedashPlugin",
    "ServiceStatus",
    "TaskCollection",
    "TaskRecord",
    "TransportError",
    "UnexpectedStatusError",
    "fetch_status",
    "fetch_tasks",
    "flatten_metrics",
    "get_plugin_config",
    "graph_definition",
]
