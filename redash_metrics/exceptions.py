"""Error hierarchy for redash-metrics.

All plugin exceptions inherit from RedashMetricsError so callers can
catch the base class for broad error handling.
"""

from __future__ import annotations

from typing import Optional

UNEXPECTED_STATUS_MESSAGE = "HTTP response code is not 200"


class RedashMetricsError(Exception):
    """Base exception for all redash-metrics errors."""


class ConfigurationError(RedashMetricsError):
    """Missing or invalid plugin configuration (e.g. no API key)."""


class TransportError(RedashMetricsError):
    """The Redash endpoint could not be reached.

    Covers DNS failures, refused connections and timeouts. The underlying
    httpx exception is available as ``__cause__``.
    """


class UnexpectedStatusError(RedashMetricsError):
    """The Redash endpoint answered with a status other than 200."""

    def __init__(self, status_code: Optional[int] = None) -> None:
        super().__init__(UNEXPECTED_STATUS_MESSAGE)
        self.status_code = status_code


class FetchError(RedashMetricsError):
    """A poll cycle aborted because one of its fetches failed.

    ``target`` names the failing fetch ("status" or "tasks"); the original
    error is chained as ``__cause__``.
    """

    def __init__(self, target: str, cause: BaseException) -> None:
        super().__init__(f"failed to fetch {target}: {cause}")
        self.target = target


__all__ = [
    "ConfigurationError",
    "FetchError",
    "RedashMetricsError",
    "TransportError",
    "UNEXPECTED_STATUS_MESSAGE",
    "UnexpectedStatusError",
]
