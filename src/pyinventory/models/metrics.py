"""Connectivity metrics published by the connectivity monitor."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class ConnectionMetrics(BaseModel):
    """Snapshot of remote health after the most recent probe.

    Parameters
    ----------
    latency_ms : float or None
        Round-trip time of the last probe; ``None`` when it failed.
    last_success_at : datetime or None
        When the remote was last classified healthy.
    consecutive_failures : int
        Unhealthy probes since the last healthy one.
    healthy : bool
        Probe succeeded within the latency threshold.
    """

    model_config = ConfigDict(frozen=True)

    latency_ms: float | None = None
    last_success_at: datetime | None = None
    consecutive_failures: int = 0
    healthy: bool = False
