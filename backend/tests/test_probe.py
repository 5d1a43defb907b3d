"""End-to-end tests for run_probe: capture window, snapshot and diagnosis."""

from __future__ import annotations

import logging

import httpx

from corsprobe.services.diagnostics import (
    Category,
    Severity,
    SignalType,
    Success,
    TransportFailure,
)
from corsprobe.services.executor import RequestExecutor, RequestSpec
from corsprobe.services.probe import run_probe

log = logging.getLogger("corsprobe.tests.probe")


def executor_for(handler) -> RequestExecutor:
    return RequestExecutor(transport=httpx.MockTransport(handler), default_timeout=5)


def _refuse(request):
    raise httpx.ConnectError("connection refused", request=request)


def test_blocked_response_diagnosed_as_cors(interceptor):
    interceptor.enable()

    result = run_probe(
        RequestSpec(url="https://api.example.com/blocked"),
        executor=executor_for(lambda request: httpx.Response(0)),
        interceptor=interceptor,
    )

    assert result.captured
    assert isinstance(result.outcome, TransportFailure)
    assert result.diagnosis.category is Category.CORS
    assert result.diagnosis.severity is Severity.WARNING
    assert [s.message for s in result.diagnosis.evidence] == [
        "CORS error when accessing: https://api.example.com/blocked"
    ]
    assert result.diagnosis.summary.startswith("CORS Error: ")


def test_unreachable_host_diagnosed_as_network(interceptor):
    interceptor.enable()

    result = run_probe(
        RequestSpec(url="https://down.example.com/"),
        executor=executor_for(_refuse),
        interceptor=interceptor,
    )

    assert result.diagnosis.category is Category.NETWORK
    assert [s.type for s in result.signals] == [SignalType.XHR_ERROR, SignalType.CONSOLE_ERROR]
    assert result.signals[1].message == "Error details: Network Error"


def test_without_capture_no_signals_are_collected(interceptor):
    result = run_probe(
        RequestSpec(url="https://api.example.com/blocked"),
        executor=executor_for(lambda request: httpx.Response(0)),
        interceptor=interceptor,
    )

    assert not result.captured
    assert result.signals == ()
    assert result.diagnosis.category is Category.NETWORK


def test_success_has_no_diagnosis(interceptor):
    interceptor.enable()

    result = run_probe(
        RequestSpec(url="https://api.example.com/ok"),
        executor=executor_for(lambda request: httpx.Response(200, json={"ok": True})),
        interceptor=interceptor,
    )

    assert isinstance(result.outcome, Success)
    assert result.diagnosis is None
    assert result.duration_seconds >= 0


def test_signals_from_earlier_attempts_are_discarded(interceptor):
    interceptor.enable()
    log.error("Access to fetch has been blocked by CORS policy")

    result = run_probe(
        RequestSpec(url="https://api.example.com/missing"),
        executor=executor_for(lambda request: httpx.Response(404)),
        interceptor=interceptor,
    )

    assert result.diagnosis.category is Category.NOTFOUND
    assert all("CORS policy" not in s.message for s in result.signals)


def test_signals_after_snapshot_are_not_attached(interceptor):
    interceptor.enable()

    result = run_probe(
        RequestSpec(url="https://api.example.com/missing"),
        executor=executor_for(lambda request: httpx.Response(404)),
        interceptor=interceptor,
    )
    log.error("late CORS complaint")

    assert result.diagnosis.category is Category.NOTFOUND
    assert len(interceptor.snapshot()) == len(result.signals) + 1
