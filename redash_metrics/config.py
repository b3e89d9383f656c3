"""Configuration helpers for the Redash plugin.

Configuration can come from:
1. Command-line flags (highest priority, applied by the CLI)
2. YAML file (file-based)
3. Environment variables (deployment)
4. Built-in defaults (lowest priority)
"""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

REDASH_URL_ENV = "REDASH_URL"
REDASH_API_KEY_ENV = "REDASH_API_KEY"
REDASH_METRIC_KEY_PREFIX_ENV = "REDASH_METRIC_KEY_PREFIX"
REDASH_TIMEOUT_ENV = "REDASH_TIMEOUT"
REDASH_TEMPFILE_ENV = "REDASH_TEMPFILE"

DEFAULT_URL = "http://localhost:5000"
DEFAULT_PREFIX = "redash"
DEFAULT_TIMEOUT = 5.0
DEFAULT_TEMPFILE_TEMPLATE = "/tmp/mackerel-plugin-{prefix}"


@dataclass(frozen=True, slots=True)
class PluginConfig:
    """Connection and reporting settings for one plugin run."""

    url: str = DEFAULT_URL
    api_key: str = ""
    prefix: str = DEFAULT_PREFIX
    timeout: float = DEFAULT_TIMEOUT
    tempfile: Optional[str] = None

    @property
    def base_url(self) -> str:
        """Return the base URL without a trailing slash."""
        return self.url.rstrip("/")

    @property
    def tempfile_path(self) -> Path:
        """Return the tempfile path, falling back to the per-prefix default."""
        if self.tempfile:
            return Path(self.tempfile)
        return Path(DEFAULT_TEMPFILE_TEMPLATE.format(prefix=self.prefix))

    def validate(self) -> "PluginConfig":
        """Raise ConfigurationError unless this config can be used to poll.

        Returns:
            The same config, for chaining.
        """
        if not self.api_key.strip():
            raise ConfigurationError("API Key is required")
        if not self.url.strip():
            raise ConfigurationError("Base URL must not be empty")
        if not self.prefix.strip():
            raise ConfigurationError("Metric key prefix must not be empty")
        if not math.isfinite(self.timeout) or self.timeout <= 0:
            raise ConfigurationError(f"Timeout must be a positive number, got {self.timeout!r}")
        return self

    def merged(self, **overrides: Any) -> "PluginConfig":
        """Return a copy with every non-None override applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes) if changes else self

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PluginConfig":
        """Build a PluginConfig from a plain dictionary.

        Unknown keys are silently ignored. Values that cannot be coerced
        fall back to the defaults.
        """

        kwargs: dict[str, Any] = {}

        for key in ("url", "api_key", "prefix", "tempfile"):
            if key in data and data[key] is not None:
                text = str(data[key]).strip()
                if text:
                    kwargs[key] = text

        if "timeout" in data:
            try:
                value = float(data["timeout"])
                if math.isfinite(value) and value > 0:
                    kwargs["timeout"] = value
            except (TypeError, ValueError):
                pass

        return cls(**kwargs)

    @classmethod
    def from_yaml(
        cls,
        yaml_path: Path,
        *,
        allow_env_override: bool = True,
    ) -> "PluginConfig":
        """Build a PluginConfig from a YAML file.

        Args:
            yaml_path: Path to a YAML mapping with any of ``url``,
                ``api_key``, ``prefix``, ``timeout`` and ``tempfile``.
            allow_env_override: When True, environment variables
                take precedence over YAML values.

        Returns:
            PluginConfig with merged YAML + env configuration.
        """

        data: Mapping[str, Any] = {}
        if yaml_path.exists():
            try:
                raw = yaml.safe_load(yaml_path.read_text(encoding="utf-8"))
            except yaml.YAMLError as exc:
                raise ConfigurationError(f"Invalid config YAML at {yaml_path}: {exc}") from exc
            if isinstance(raw, Mapping):
                data = raw
            elif raw is not None:
                logger.warning("Config YAML at %s is not a mapping; using defaults", yaml_path)
        else:
            raise ConfigurationError(f"Config file not found: {yaml_path}")

        config = cls.from_dict(data)
        if not allow_env_override:
            return config

        env_instance = cls.from_env()
        overrides: dict[str, Any] = {}
        for field_name, env_var in (
            ("url", REDASH_URL_ENV),
            ("api_key", REDASH_API_KEY_ENV),
            ("prefix", REDASH_METRIC_KEY_PREFIX_ENV),
            ("timeout", REDASH_TIMEOUT_ENV),
            ("tempfile", REDASH_TEMPFILE_ENV),
        ):
            if _normalize(os.getenv(env_var)) is not None:
                overrides[field_name] = getattr(env_instance, field_name)
        return config.merged(**overrides)

    @classmethod
    def from_env(cls) -> "PluginConfig":
        """Build a PluginConfig instance from environment variables."""

        return cls(
            url=_normalize(os.getenv(REDASH_URL_ENV)) or DEFAULT_URL,
            api_key=_normalize(os.getenv(REDASH_API_KEY_ENV)) or "",
            prefix=_normalize(os.getenv(REDASH_METRIC_KEY_PREFIX_ENV)) or DEFAULT_PREFIX,
            timeout=_parse_timeout(REDASH_TIMEOUT_ENV, default=DEFAULT_TIMEOUT),
            tempfile=_normalize(os.getenv(REDASH_TEMPFILE_ENV)),
        )


def get_plugin_config() -> PluginConfig:
    """Return a PluginConfig instance built from the current environment."""

    return PluginConfig.from_env()


def _normalize(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    candidate = value.strip()
    return candidate or None


def _parse_timeout(env_name: str, *, default: float) -> float:
    raw = _normalize(os.getenv(env_name))
    if raw is None:
        return float(default)
    try:
        parsed = float(raw)
    except (TypeError, ValueError):
        logger.warning("Invalid %s=%r; using default=%s", env_name, raw, default)
        return float(default)

    if not math.isfinite(parsed) or parsed <= 0:
        logger.warning("Out-of-range %s=%r; using default=%s", env_name, raw, default)
        return float(default)
    return parsed


__all__ = [
    "DEFAULT_PREFIX",
    "DEFAULT_TIMEOUT",
    "DEFAULT_URL",
    "PluginConfig",
    "get_plugin_config",
]
