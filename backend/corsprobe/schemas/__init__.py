# backend/corsprobe/schemas/__init__.py
from __future__ import annotations

"""
Pydantic schemas for request/response models.

This module is the API contract layer and depends on:
- corsprobe.services.diagnostics for signals, outcomes and diagnoses
- corsprobe.services.executor for the supported HTTP methods

It is used by:
- API routes
"""

from dataclasses import asdict
from datetime import datetime
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from corsprobe.services.diagnostics import (
    Category,
    ConfigurationFailure,
    HttpFailure,
    RequestOutcome,
    Severity,
    Signal,
    SignalType,
    Success,
    TransportFailure,
)
from corsprobe.services.executor.client import SUPPORTED_METHODS


# ---------- Request Schemas ----------


class RequestPayload(BaseModel):
    """
    One request as edited in the form.

    headers and body are usually the raw JSON text from the editors; an
    already-parsed object is accepted as well. Parsing happens in the
    executor so that bad JSON is reported as a diagnosis, not a 422.
    """

    url: str = Field(min_length=1)
    method: str = "GET"
    headers: str | dict[str, Any] | None = None
    body: Any = None
    timeout_seconds: float | None = Field(default=None, gt=0)

    @field_validator("url")
    @classmethod
    def strip_url(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Enter a URL")
        return value

    @field_validator("method")
    @classmethod
    def normalize_method(cls, value: str) -> str:
        method = value.strip().upper()
        if method not in SUPPORTED_METHODS:
            raise ValueError(f"method must be one of {', '.join(SUPPORTED_METHODS)}")
        return method


# ---------- Signal Schemas ----------


class SignalRead(BaseModel):
    type: SignalType
    message: str
    timestamp: datetime
    stack: Optional[str] = None
    source: Optional[str] = None
    line: Optional[int] = None
    column: Optional[int] = None

    class Config:
        from_attributes = True


class SignalInput(BaseModel):
    """Synthetic signal for offline classification."""

    type: SignalType
    message: str
    timestamp: Optional[datetime] = None
    stack: Optional[str] = None

    def to_signal(self) -> Signal:
        return Signal(
            type=self.type,
            message=self.message,
            timestamp=self.timestamp or datetime.now(),
            stack=self.stack,
        )


# ---------- Outcome Schemas ----------


OutcomeKind = Literal["success", "http_failure", "transport_failure", "configuration_failure"]


class OutcomeRead(BaseModel):
    kind: OutcomeKind
    status_code: Optional[int] = None
    status_text: Optional[str] = None
    headers: Optional[dict[str, str]] = None
    body: Any = None
    echoed_request: Optional[dict[str, Any]] = None
    raw_message: Optional[str] = None

    @classmethod
    def from_outcome(cls, outcome: RequestOutcome) -> "OutcomeRead":
        return cls(kind=outcome.kind, **asdict(outcome))


class OutcomeInput(BaseModel):
    """Synthetic outcome for offline classification."""

    kind: OutcomeKind
    status_code: Optional[int] = None
    status_text: str = ""
    body: Any = None
    raw_message: Optional[str] = None

    @model_validator(mode="after")
    def check_fields(self) -> "OutcomeInput":
        if self.kind in ("success", "http_failure") and self.status_code is None:
            raise ValueError(f"status_code is required for {self.kind}")
        if self.kind in ("transport_failure", "configuration_failure") and self.raw_message is None:
            raise ValueError(f"raw_message is required for {self.kind}")
        return self

    def to_outcome(self) -> RequestOutcome:
        if self.kind == "success":
            return Success(status_code=self.status_code, status_text=self.status_text, body=self.body)
        if self.kind == "http_failure":
            return HttpFailure(status_code=self.status_code, status_text=self.status_text, body=self.body)
        if self.kind == "transport_failure":
            return TransportFailure(raw_message=self.raw_message)
        return ConfigurationFailure(raw_message=self.raw_message)


# ---------- Diagnosis Schemas ----------


class CodeExampleRead(BaseModel):
    language: str
    code: str

    class Config:
        from_attributes = True


class ReferenceRead(BaseModel):
    title: str
    url: str

    class Config:
        from_attributes = True


class CatalogEntryRead(BaseModel):
    category: Category
    severity: Severity
    title: str
    description: str
    checklist: List[str]
    solutions: List[str]
    code_examples: List[CodeExampleRead] = Field(default_factory=list)
    references: List[ReferenceRead] = Field(default_factory=list)

    class Config:
        from_attributes = True


class DiagnosisRead(CatalogEntryRead):
    summary: str = ""
    evidence: List[SignalRead] = Field(default_factory=list)


class ClassifyRequest(BaseModel):
    outcome: OutcomeInput
    signals: List[SignalInput] = Field(default_factory=list)


# ---------- Probe Schemas ----------


class ProbeResponse(BaseModel):
    outcome: OutcomeRead
    signals: List[SignalRead] = Field(default_factory=list)
    diagnosis: Optional[DiagnosisRead] = None
    captured: bool
    duration_seconds: Optional[float] = None
    history_id: Optional[str] = None


class CaptureState(BaseModel):
    enabled: bool
    channels: List[str] = Field(default_factory=list)
    signal_count: int = 0


class CaptureToggle(BaseModel):
    enabled: bool


# ---------- History Schemas ----------


class SavedRequestBase(BaseModel):
    url: str
    method: str
    headers: Optional[str] = None
    body: Optional[str] = None


class HistoryRead(SavedRequestBase):
    id: str
    status: Optional[int]
    created_at: datetime

    class Config:
        from_attributes = True


class FavoriteCreate(SavedRequestBase):
    pass


class FavoriteRead(SavedRequestBase):
    id: str
    created_at: datetime

    class Config:
        from_attributes = True
