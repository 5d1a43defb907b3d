"""Statsig telemetry for diagnosed request attempts (no-op without a secret)."""
from __future__ import annotations

import logging
from typing import Any

from statsig import StatsigEvent, StatsigOptions, StatsigServer, StatsigUser

from corsprobe.config import get_settings

logger = logging.getLogger(__name__)

DIAGNOSIS_EVENT = "request_diagnosed"


class DiagnosisTelemetry:
    """
    Thin wrapper around a private StatsigServer instance.

    Only categories and counts are reported; URLs, headers, bodies and
    signal text never leave the process.
    """

    def __init__(self, secret_key: str | None, environment: str, *, user_id: str = "cors-probe"):
        self._server: StatsigServer | None = None
        self._user = StatsigUser(user_id)
        if not secret_key:
            return

        server = StatsigServer()
        try:
            server.initialize(secret_key, StatsigOptions(tier=environment))
        except Exception as exc:  # noqa: BLE001
            logger.warning("Statsig initialization failed: %s", exc)
            return
        self._server = server

    @property
    def enabled(self) -> bool:
        return self._server is not None

    def log_event(
        self,
        event_name: str,
        *,
        value: str | float | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        if not self._server:
            return

        event = StatsigEvent(self._user, event_name, value=value, metadata=metadata)
        try:
            self._server.log_event(event)
        except Exception as exc:  # noqa: BLE001
            logger.debug("Statsig event %s failed: %s", event_name, exc)

    def shutdown(self) -> None:
        if not self._server:
            return

        try:
            self._server.shutdown()
        except Exception as exc:  # noqa: BLE001
            logger.debug("Statsig shutdown failed: %s", exc)
        self._server = None


_telemetry: DiagnosisTelemetry | None = None


def get_telemetry() -> DiagnosisTelemetry:
    global _telemetry
    if _telemetry is None:
        settings = get_settings()
        _telemetry = DiagnosisTelemetry(settings.statsig_server_secret, settings.environment)
    return _telemetry


def log_diagnosis_event(
    *,
    category: str,
    severity: str,
    outcome_kind: str,
    signal_count: int,
    captured: bool,
) -> None:
    """Report one diagnosed attempt."""
    get_telemetry().log_event(
        DIAGNOSIS_EVENT,
        value=category,
        metadata={
            "severity": severity,
            "outcome": outcome_kind,
            "signals": str(signal_count),
            "captured": str(captured).lower(),
        },
    )


def shutdown_statsig() -> None:
    if _telemetry is not None:
        _telemetry.shutdown()
