"""Command-line entry point: ``mackerel-plugin-redash``.

Runs one poll cycle against Redash and prints the metrics in the Mackerel
agent plugin format. With ``MACKEREL_AGENT_PLUGIN_META=1`` set it prints
the graph definitions instead.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Optional, Sequence, TextIO

import httpx

from .config import DEFAULT_PREFIX, DEFAULT_TIMEOUT, DEFAULT_URL, PluginConfig
from .exceptions import ConfigurationError, RedashMetricsError
from .export import MackerelExporter
from .export.mackerel import META_ENV
from .plugin import RedashPlugin

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mackerel-plugin-redash",
        description="Report Redash status and task-queue counters to Mackerel",
    )
    parser.add_argument("--url", default=None, help=f"Base URL (default: {DEFAULT_URL})")
    parser.add_argument("--api-key", dest="api_key", default=None, help="API Key")
    parser.add_argument(
        "--metric-key-prefix",
        dest="prefix",
        default=None,
        help=f"Metric key prefix (default: {DEFAULT_PREFIX})",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help=f"Request timeout in seconds (default: {DEFAULT_TIMEOUT:g})",
    )
    parser.add_argument(
        "--tempfile",
        default=None,
        help="Temp file name (default: /tmp/mackerel-plugin-<prefix>)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML file with url/api_key/prefix/timeout/tempfile",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr")
    return parser


def resolve_config(args: argparse.Namespace) -> PluginConfig:
    """Merge command-line flags over the YAML file or environment."""
    if args.config is not None:
        base = PluginConfig.from_yaml(args.config)
    else:
        base = PluginConfig.from_env()
    return base.merged(
        url=args.url,
        api_key=args.api_key,
        prefix=args.prefix,
        timeout=args.timeout,
        tempfile=args.tempfile,
    )


def main(
    argv: Optional[Sequence[str]] = None,
    *,
    client: Optional[httpx.Client] = None,
    stream: Optional[TextIO] = None,
) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = resolve_config(args).validate()
    except ConfigurationError as exc:
        print(exc, file=sys.stderr)
        return 1

    logger.debug("Tempfile resolved to %s (unused: no diff metrics)", config.tempfile_path)

    plugin = RedashPlugin(config, client=client)
    exporter = MackerelExporter(stream=stream)

    if os.getenv(META_ENV, "") != "":
        exporter.export_definitions(plugin.graph_definition())
        return 0

    try:
        metrics = plugin.fetch_metrics()
    except RedashMetricsError as exc:
        logger.error("%s", exc)
        return 1

    exporter.export_values(plugin.graph_definition(), metrics)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
