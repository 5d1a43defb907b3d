# backend/corsprobe/api/requests.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from corsprobe import schemas
from corsprobe.db.session import get_db
from corsprobe.services import history
from corsprobe.services.diagnostics import (
    SignalInterceptor,
    Success,
    get_signal_interceptor,
)
from corsprobe.services.executor import RequestExecutor, RequestSpec, get_request_executor
from corsprobe.services.probe import run_probe

router = APIRouter(prefix="/requests", tags=["requests"])


@router.post("/send", response_model=schemas.ProbeResponse)
def send_request(
    payload: schemas.RequestPayload,
    db: Session = Depends(get_db),
    executor: RequestExecutor = Depends(get_request_executor),
    interceptor: SignalInterceptor = Depends(get_signal_interceptor),
) -> schemas.ProbeResponse:
    """
    Send one request and return its outcome with a diagnosis.

    HTTP error statuses, transport failures and malformed input are all
    answered with 200 and described in `outcome` / `diagnosis`; only an
    invalid payload shape yields 422.
    """
    spec = RequestSpec(
        url=payload.url,
        method=payload.method,
        headers=payload.headers,
        body=payload.body,
        timeout=payload.timeout_seconds,
    )
    result = run_probe(spec, executor=executor, interceptor=interceptor)

    history_id = None
    if isinstance(result.outcome, Success):
        entry = history.record_history(
            db,
            url=payload.url,
            method=payload.method,
            headers=payload.headers,
            body=payload.body,
            status=result.outcome.status_code,
        )
        history_id = entry.id

    return schemas.ProbeResponse(
        outcome=schemas.OutcomeRead.from_outcome(result.outcome),
        signals=[schemas.SignalRead.model_validate(s) for s in result.signals],
        diagnosis=(
            schemas.DiagnosisRead.model_validate(result.diagnosis)
            if result.diagnosis is not None
            else None
        ),
        captured=result.captured,
        duration_seconds=result.duration_seconds,
        history_id=history_id,
    )
