"""RedashPlugin — primary public API for collecting Redash metrics.

One ``fetch_metrics`` call is one poll cycle: the status document is
fetched first, then the task queues, and the two are flattened into a
``name -> count`` mapping. A failed fetch aborts the cycle; no partial
metrics are returned.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from .client import fetch_status, fetch_tasks
from .config import PluginConfig, get_plugin_config
from .exceptions import FetchError, RedashMetricsError
from .graphs import Graph, graph_definition
from .schema import ServiceStatus, TaskCollection

logger = logging.getLogger(__name__)


class RedashPlugin:
    """Collects Redash counters for a metrics agent.

    Usage::

        plugin = RedashPlugin(PluginConfig(api_key="secret"))
        metrics = plugin.fetch_metrics()
        graphs = plugin.graph_definition()
    """

    def __init__(
        self,
        config: Optional[PluginConfig] = None,
        *,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._config = config or get_plugin_config()
        self._client = client

    @property
    def config(self) -> PluginConfig:
        return self._config

    @property
    def prefix(self) -> str:
        return self._config.prefix

    def graph_definition(self) -> dict[str, Graph]:
        """Return the static graph definitions under this plugin's prefix."""
        return graph_definition(self._config.prefix)

    def fetch_metrics(self) -> dict[str, int]:
        """Run one poll cycle and return the flattened metrics.

        Raises:
            FetchError: Either fetch failed; the original error is chained.
        """
        try:
            status = fetch_status(self._config, client=self._client)
        except RedashMetricsError as exc:
            raise FetchError("status", exc) from exc

        try:
            tasks = fetch_tasks(self._config, client=self._client)
        except RedashMetricsError as exc:
            raise FetchError("tasks", exc) from exc

        metrics = flatten_metrics(status, tasks)
        logger.debug("Collected %d metrics from %s", len(metrics), self._config.base_url)
        return metrics


def flatten_metrics(status: ServiceStatus, tasks: TaskCollection) -> dict[str, int]:
    """Combine a status document and a task collection into metric values."""
    queues = status.manager.queues
    return {
        "dashboards_count": status.dashboards_count,
        "queries_count": status.queries_count,
        "query_results_count": status.query_results_count,
        "unused_query_results_count": status.unused_query_results_count,
        "widgets_count": status.widgets_count,
        "queries_size": queues.queries.size,
        "scheduled_queries_size": queues.scheduled_queries.size,
        "done": len(tasks.done),
        "in_progress": len(tasks.in_progress),
        "waiting": len(tasks.waiting),
    }


__all__ = ["RedashPlugin", "flatten_metrics"]
