from __future__ import annotations

"""backend/corsprobe/services/probe/runner.py

Core probe orchestration.

Responsibilities:
- Reset the signal log before each attempt (when capture is enabled)
- Drive the request through a RequestExecutor
- Take exactly one snapshot of the captured signals once the outcome
  is known
- Classify the outcome + snapshot into a DiagnosisRecord
- Report a telemetry event for the diagnosis

The runner does not arm or disarm capture; that is the caller's switch
("debug mode"). Only one capture window exists per process, so attempts
made while capture is enabled are serialized on a process-wide lock.
Without capture, attempts run concurrently and see no signals.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime

from corsprobe.services.diagnostics import (
    DiagnosisRecord,
    RequestOutcome,
    Signal,
    SignalInterceptor,
    Success,
    classify,
    get_signal_interceptor,
)
from corsprobe.services.executor import RequestExecutor, RequestSpec
from corsprobe.services.statsig_client import log_diagnosis_event

logger = logging.getLogger(__name__)

_capture_lock = threading.Lock()


@dataclass
class ProbeResult:
    """Everything the display layer needs for one attempt."""

    spec: RequestSpec
    outcome: RequestOutcome
    signals: tuple[Signal, ...] = field(default_factory=tuple)
    diagnosis: DiagnosisRecord | None = None
    captured: bool = False
    started_at: datetime | None = None
    finished_at: datetime | None = None
    duration_seconds: float | None = None


def _needs_diagnosis(outcome: RequestOutcome, signals: tuple[Signal, ...]) -> bool:
    return not isinstance(outcome, Success) or bool(signals)


def _execute(
    spec: RequestSpec,
    executor: RequestExecutor,
    interceptor: SignalInterceptor,
) -> tuple[RequestOutcome, tuple[Signal, ...], bool]:
    if not interceptor.enabled:
        return executor.execute(spec), (), False

    with _capture_lock:
        interceptor.clear()
        outcome = executor.execute(spec)
        # Signals recorded after this point belong to no attempt.
        signals = interceptor.snapshot()
    return outcome, signals, True


def run_probe(
    spec: RequestSpec,
    *,
    executor: RequestExecutor | None = None,
    interceptor: SignalInterceptor | None = None,
) -> ProbeResult:
    """Run one diagnosed request attempt synchronously."""
    executor = executor or RequestExecutor()
    interceptor = interceptor or get_signal_interceptor()

    started_at = datetime.utcnow()
    outcome, signals, captured = _execute(spec, executor, interceptor)
    finished_at = datetime.utcnow()

    diagnosis = classify(outcome, signals) if _needs_diagnosis(outcome, signals) else None
    if diagnosis is not None:
        logger.info(
            "%s %s diagnosed as %s (%d signal(s))",
            spec.method,
            spec.url,
            diagnosis.category.value,
            len(signals),
        )
        log_diagnosis_event(
            category=diagnosis.category.value,
            severity=diagnosis.severity.value,
            outcome_kind=outcome.kind,
            signal_count=len(signals),
            captured=captured,
        )

    return ProbeResult(
        spec=spec,
        outcome=outcome,
        signals=signals,
        diagnosis=diagnosis,
        captured=captured,
        started_at=started_at,
        finished_at=finished_at,
        duration_seconds=(finished_at - started_at).total_seconds(),
    )
