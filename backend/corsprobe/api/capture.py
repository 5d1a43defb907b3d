# backend/corsprobe/api/capture.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse

from corsprobe import schemas
from corsprobe.services.diagnostics import (
    CaptureConflictError,
    SignalInterceptor,
    format_signal_text,
    get_signal_interceptor,
)

router = APIRouter(prefix="/capture", tags=["capture"])


def _state(interceptor: SignalInterceptor) -> schemas.CaptureState:
    return schemas.CaptureState(
        enabled=interceptor.enabled,
        channels=list(interceptor.available_channels),
        signal_count=len(interceptor.snapshot()),
    )


@router.get("", response_model=schemas.CaptureState)
def get_capture_state(
    interceptor: SignalInterceptor = Depends(get_signal_interceptor),
) -> schemas.CaptureState:
    return _state(interceptor)


@router.put("", response_model=schemas.CaptureState)
async def set_capture_state(
    payload: schemas.CaptureToggle,
    interceptor: SignalInterceptor = Depends(get_signal_interceptor),
) -> schemas.CaptureState:
    """
    Turn capture ("debug mode") on or off.

    Async so that it runs on the event loop thread: enabling binds the
    asyncio channel to the server's loop. Turning capture off also
    empties the log.
    """
    if payload.enabled:
        try:
            interceptor.enable()
        except CaptureConflictError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
    else:
        interceptor.disable()
        interceptor.clear()
    return _state(interceptor)


@router.get("/signals", response_model=list[schemas.SignalRead])
def list_signals(
    interceptor: SignalInterceptor = Depends(get_signal_interceptor),
) -> list[schemas.SignalRead]:
    return [schemas.SignalRead.model_validate(s) for s in interceptor.snapshot()]


@router.delete("/signals", response_model=schemas.CaptureState)
def clear_signals(
    interceptor: SignalInterceptor = Depends(get_signal_interceptor),
) -> schemas.CaptureState:
    interceptor.clear()
    return _state(interceptor)


@router.get("/signals/{index}/text", response_class=PlainTextResponse)
def get_signal_text(
    index: int,
    interceptor: SignalInterceptor = Depends(get_signal_interceptor),
) -> str:
    """Plain-text rendering of one signal for copy/export."""
    signals = interceptor.snapshot()
    if index < 0 or index >= len(signals):
        raise HTTPException(status_code=404, detail="Signal not found")
    return format_signal_text(signals[index])
