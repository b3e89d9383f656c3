"""HTTP access to the Redash status and task-queue endpoints.

Both endpoints are fetched through ``_fetch_document``: one GET with the
API key as a query parameter, the configured timeout applied to the whole
request, and no retries.
"""

from __future__ import annotations

import logging
import time
from typing import Optional, TypeVar

import httpx

from .config import PluginConfig
from .exceptions import TransportError, UnexpectedStatusError
from .schema import ServiceStatus, TaskCollection, _LenientModel

logger = logging.getLogger(__name__)

STATUS_PATH = "/status.json"
TASKS_PATH = "/api/admin/queries/tasks"

_ModelT = TypeVar("_ModelT", bound=_LenientModel)


def _read_body(
    client: httpx.Client,
    url: str,
    params: dict[str, str],
    timeout: httpx.Timeout,
    deadline: float,
) -> bytes:
    # httpx timeouts are per phase; the deadline bounds the whole exchange.
    with client.stream("GET", url, params=params, timeout=timeout) as response:
        if response.status_code != httpx.codes.OK:
            logger.debug("GET %s returned HTTP %s", url, response.status_code)
            raise UnexpectedStatusError(response.status_code)

        chunks: list[bytes] = []
        for chunk in response.iter_bytes():
            _check_deadline(url, deadline)
            chunks.append(chunk)
        _check_deadline(url, deadline)
    return b"".join(chunks)


def _check_deadline(url: str, deadline: float) -> None:
    if time.monotonic() > deadline:
        raise TransportError(f"GET {url} did not complete within the configured timeout")


def _fetch_document(
    config: PluginConfig,
    path: str,
    model: type[_ModelT],
    *,
    client: Optional[httpx.Client] = None,
) -> _ModelT:
    url = f"{config.base_url}{path}"
    timeout = httpx.Timeout(config.timeout)
    params = {"api_key": config.api_key}
    deadline = time.monotonic() + config.timeout

    logger.debug("GET %s (timeout=%ss)", url, config.timeout)
    try:
        if client is None:
            with httpx.Client(timeout=timeout) as owned:
                body = _read_body(owned, url, params, timeout, deadline)
        else:
            body = _read_body(client, url, params, timeout, deadline)
    except (httpx.RequestError, httpx.InvalidURL) as exc:
        raise TransportError(f"GET {url} failed: {exc}") from exc

    return model.decode(body)


def fetch_status(config: PluginConfig, *, client: Optional[httpx.Client] = None) -> ServiceStatus:
    """Fetch and decode ``{url}/status.json``.

    Raises:
        TransportError: The endpoint could not be reached in time.
        UnexpectedStatusError: The endpoint did not answer 200.
    """
    return _fetch_document(config, STATUS_PATH, ServiceStatus, client=client)


def fetch_tasks(config: PluginConfig, *, client: Optional[httpx.Client] = None) -> TaskCollection:
    """Fetch and decode ``{url}/api/admin/queries/tasks``.

    Raises:
        TransportError: The endpoint could not be reached in time.
        UnexpectedStatusError: The endpoint did not answer 200.
    """
    return _fetch_document(config, TASKS_PATH, TaskCollection, client=client)


__all__ = ["STATUS_PATH", "TASKS_PATH", "fetch_status", "fetch_tasks"]
