"""Pydantic schemas for the Redash status and task-queue documents.

The models mirror ``/status.json`` and ``/api/admin/queries/tasks``.
Decoding is best-effort: missing, ``null`` or mistyped fields read as
their zero value instead of failing the whole document, and unknown keys
(``workers`` and friends) are ignored.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, List, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

_ModelT = TypeVar("_ModelT", bound="_LenientModel")


def _coerce_count(value: Any, *, default: int = 0) -> int:
    # Only non-negative JSON integers; floats and numeric strings are rejected.
    if isinstance(value, bool) or not isinstance(value, int):
        return default
    return value if value >= 0 else default


def _coerce_float(value: Any, *, default: float = 0.0) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    return float(value)


def _coerce_str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _coerce_bool(value: Any) -> bool:
    return value if isinstance(value, bool) else False


def _coerce_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _coerce_records(value: Any) -> list[Mapping[str, Any]]:
    # A null entry still counts as a task, so it becomes an empty record.
    if not isinstance(value, list):
        return []
    return [_coerce_mapping(item) for item in value]


class _LenientModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    @classmethod
    def decode(cls: type[_ModelT], body: Union[str, bytes]) -> _ModelT:
        """Decode a raw response body into this model.

        A body that is not valid JSON, or whose top level is not an object,
        yields the zero-valued model. The condition is logged, not raised.
        """
        try:
            data = json.loads(body)
        except (TypeError, ValueError) as exc:
            logger.warning("Could not decode %s document: %s", cls.__name__, exc)
            return cls()
        if not isinstance(data, Mapping):
            logger.warning(
                "Expected a JSON object for %s, got %s; using zero values",
                cls.__name__,
                type(data).__name__,
            )
            return cls()
        return cls.model_validate(data)


class QueueSnapshot(_LenientModel):
    """Pending work for one queue and the data sources it serves."""

    data_sources: str = ""
    size: int = Field(default=0, ge=0)

    @field_validator("data_sources", mode="before")
    @classmethod
    def _validate_str(cls, value: Any) -> str:
        return _coerce_str(value)

    @field_validator("size", mode="before")
    @classmethod
    def _validate_size(cls, value: Any) -> int:
        return _coerce_count(value)


class QueuePair(_LenientModel):
    queries: QueueSnapshot = Field(default_factory=QueueSnapshot)
    scheduled_queries: QueueSnapshot = Field(default_factory=QueueSnapshot)

    @field_validator("queries", "scheduled_queries", mode="before")
    @classmethod
    def _validate_queue(cls, value: Any) -> Any:
        if isinstance(value, QueueSnapshot):
            return value
        return _coerce_mapping(value)


class QueueManager(_LenientModel):
    """Refresh-manager block of the status document."""

    last_refresh_at: str = ""
    outdated_queries_count: int = Field(default=0, ge=0)
    query_ids: str = ""
    queues: QueuePair = Field(default_factory=QueuePair)

    @field_validator("last_refresh_at", "query_ids", mode="before")
    @classmethod
    def _validate_str(cls, value: Any) -> str:
        return _coerce_str(value)

    @field_validator("outdated_queries_count", mode="before")
    @classmethod
    def _validate_count(cls, value: Any) -> int:
        return _coerce_count(value)

    @field_validator("queues", mode="before")
    @classmethod
    def _validate_queues(cls, value: Any) -> Any:
        if isinstance(value, QueuePair):
            return value
        return _coerce_mapping(value)


class ServiceStatus(_LenientModel):
    """Decoded ``/status.json`` document."""

    dashboards_count: int = Field(default=0, ge=0)
    queries_count: int = Field(default=0, ge=0)
    widgets_count: int = Field(default=0, ge=0)
    query_results_count: int = Field(default=0, ge=0)
    unused_query_results_count: int = Field(default=0, ge=0)
    version: str = ""
    redis_used_memory: str = ""
    manager: QueueManager = Field(default_factory=QueueManager)

    @field_validator(
        "dashboards_count",
        "queries_count",
        "widgets_count",
        "query_results_count",
        "unused_query_results_count",
        mode="before",
    )
    @classmethod
    def _validate_count(cls, value: Any) -> int:
        return _coerce_count(value)

    @field_validator("version", "redis_used_memory", mode="before")
    @classmethod
    def _validate_str(cls, value: Any) -> str:
        return _coerce_str(value)

    @field_validator("manager", mode="before")
    @classmethod
    def _validate_manager(cls, value: Any) -> Any:
        if isinstance(value, QueueManager):
            return value
        return _coerce_mapping(value)


class TaskRecord(_LenientModel):
    """One query-execution task as reported by the admin API.

    Timestamps and ``run_time`` are ``null`` until the task has started;
    they read as ``0.0`` in that case.
    """

    username: str = ""
    task_id: str = ""
    state: str = ""
    error: str = ""
    query_hash: str = ""
    retries: int = Field(default=0, ge=0)
    scheduled_retries: int = Field(default=0, ge=0)
    query_id: int = Field(default=0, ge=0)
    data_source_id: int = Field(default=0, ge=0)
    created_at: float = 0.0
    updated_at: float = 0.0
    started_at: float = 0.0
    run_time: float = 0.0
    scheduled: bool = False

    @field_validator("username", "task_id", "state", "error", "query_hash", mode="before")
    @classmethod
    def _validate_str(cls, value: Any) -> str:
        return _coerce_str(value)

    @field_validator("retries", "scheduled_retries", "query_id", "data_source_id", mode="before")
    @classmethod
    def _validate_count(cls, value: Any) -> int:
        return _coerce_count(value)

    @field_validator("created_at", "updated_at", "started_at", "run_time", mode="before")
    @classmethod
    def _validate_float(cls, value: Any) -> float:
        return _coerce_float(value)

    @field_validator("scheduled", mode="before")
    @classmethod
    def _validate_bool(cls, value: Any) -> bool:
        return _coerce_bool(value)


class TaskCollection(_LenientModel):
    """Decoded ``/api/admin/queries/tasks`` document."""

    done: List[TaskRecord] = Field(default_factory=list)
    waiting: List[TaskRecord] = Field(default_factory=list)
    in_progress: List[TaskRecord] = Field(default_factory=list)

    @field_validator("done", "waiting", "in_progress", mode="before")
    @classmethod
    def _validate_records(cls, value: Any) -> Any:
        if isinstance(value, list) and all(isinstance(item, TaskRecord) for item in value):
            return value
        return _coerce_records(value)


__all__ = [
    "QueueManager",
    "QueuePair",
    "QueueSnapshot",
    "ServiceStatus",
    "TaskCollection",
    "TaskRecord",
]
