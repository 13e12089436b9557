"""Client configuration for pyinventory."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pyinventory._constants import (
    DEFAULT_AUTO_REFRESH_INTERVAL,
    DEFAULT_HEALTHY_THRESHOLD_MS,
    DEFAULT_HYBRID_MAX_ATTEMPTS,
    DEFAULT_HYBRID_RETRY_DELAY,
    DEFAULT_MONITOR_INTERVAL,
    DEFAULT_RETRIES,
    DEFAULT_RETRY_DELAY,
    DEFAULT_TIMEOUT,
    DEFAULT_TOKEN_REFRESH_INTERVAL,
    HEALTH_ENDPOINT,
)
from pyinventory.exceptions import InventoryConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_number(env_key: str, value: str, cast: type[int] | type[float]) -> int | float:
    try:
        return cast(value)
    except ValueError as exc:
        raise InventoryConfigError(f"{env_key} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class InventoryConfig:
    """Client configuration.

    Parameters
    ----------
    base_url : str or None
        Remote API base URL (e.g. ``"http://localhost:3001"``). ``None``
        means no remote is configured and everything runs on the local
        mirror.
    api_enabled : bool
        Master switch for remote use. When ``False`` the remote is treated
        as not configured even if ``base_url`` is set.
    timeout : float
        Per-request timeout in seconds.
    retries : int
        Automatic retries for HTTP 429 and network failures.
    retry_delay : float
        Base delay in seconds for transport retries; attempt *n* waits
        ``retry_delay * 2 ** (n - 1)``.
    health_endpoint : str
        Lightweight endpoint probed by the connectivity monitor.
    monitor_interval : float
        Seconds between connectivity probes.
    healthy_threshold_ms : float
        Probe latency (milliseconds) at or above which the remote is
        considered unhealthy.
    token_refresh_interval : float
        Seconds between silent token refreshes while authenticated.
    hybrid_max_attempts : int
        Retry attempts a hybrid data source makes before falling back.
    hybrid_retry_delay : float
        Base delay for hybrid retries; attempt *n* waits
        ``2 ** n * hybrid_retry_delay``.
    auto_refresh : bool
        Whether entity and analytics sources poll while serving remote data.
    auto_refresh_interval : float
        Seconds between auto-refresh polls.
    store_path : str or None
        JSON file backing the local mirror. ``None`` keeps it in memory.
    """

    base_url: str | None = None
    api_enabled: bool = True
    timeout: float = DEFAULT_TIMEOUT
    retries: int = DEFAULT_RETRIES
    retry_delay: float = DEFAULT_RETRY_DELAY
    health_endpoint: str = HEALTH_ENDPOINT
    monitor_interval: float = DEFAULT_MONITOR_INTERVAL
    healthy_threshold_ms: float = DEFAULT_HEALTHY_THRESHOLD_MS
    token_refresh_interval: float = DEFAULT_TOKEN_REFRESH_INTERVAL
    hybrid_max_attempts: int = DEFAULT_HYBRID_MAX_ATTEMPTS
    hybrid_retry_delay: float = DEFAULT_HYBRID_RETRY_DELAY
    auto_refresh: bool = True
    auto_refresh_interval: float = DEFAULT_AUTO_REFRESH_INTERVAL
    store_path: str | None = None

    def __post_init__(self) -> None:
        if self.retries < 0:
            raise InventoryConfigError(f"retries must be >= 0, got {self.retries}")
        if self.timeout <= 0:
            raise InventoryConfigError(f"timeout must be positive, got {self.timeout}")
        if self.hybrid_max_attempts < 0:
            raise InventoryConfigError(f"hybrid_max_attempts must be >= 0, got {self.hybrid_max_attempts}")

    @property
    def remote_configured(self) -> bool:
        """Whether a remote API should be used at all."""
        return self.api_enabled and bool(self.base_url)

    @property
    def api_base(self) -> str:
        """Base URL without a trailing slash."""
        return (self.base_url or "").rstrip("/")

    @classmethod
    def from_env(cls, **overrides: Any) -> InventoryConfig:
        """Create configuration from environment variables.

        Reads ``INVENTORY_API_BASE_URL`` and optional ``INVENTORY_*``
        variables. Explicit keyword arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        InventoryConfig
            Populated configuration.

        Raises
        ------
        InventoryConfigError
            If a numeric variable cannot be parsed.
        """
        env = os.environ

        _ENV_STR_MAP = {
            "INVENTORY_API_BASE_URL": "base_url",
            "INVENTORY_HEALTH_ENDPOINT": "health_endpoint",
            "INVENTORY_STORE_PATH": "store_path",
        }
        _ENV_FLOAT_MAP = {
            "INVENTORY_TIMEOUT": "timeout",
            "INVENTORY_RETRY_DELAY": "retry_delay",
            "INVENTORY_MONITOR_INTERVAL": "monitor_interval",
            "INVENTORY_HEALTHY_THRESHOLD_MS": "healthy_threshold_ms",
            "INVENTORY_TOKEN_REFRESH_INTERVAL": "token_refresh_interval",
            "INVENTORY_HYBRID_RETRY_DELAY": "hybrid_retry_delay",
            "INVENTORY_AUTO_REFRESH_INTERVAL": "auto_refresh_interval",
        }
        _ENV_INT_MAP = {
            "INVENTORY_RETRIES": "retries",
            "INVENTORY_HYBRID_MAX_ATTEMPTS": "hybrid_max_attempts",
        }

        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = val.strip() or None

        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_number(env_key, val, float)

        for env_key, field_name in _ENV_INT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_number(env_key, val, int)

        if "api_enabled" not in overrides:
            config_kwargs["api_enabled"] = _env_bool(env.get("INVENTORY_API_ENABLED"), True)

        if "auto_refresh" not in overrides:
            config_kwargs["auto_refresh"] = _env_bool(env.get("INVENTORY_AUTO_REFRESH"), True)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
