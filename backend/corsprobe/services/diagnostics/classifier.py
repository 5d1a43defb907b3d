from __future__ import annotations

"""backend/corsprobe/services/diagnostics/classifier.py

Failure classification for outbound requests.

This module looks at a RequestOutcome together with the signals captured
while the request ran, and assigns one of ten stable categories:

- cors, network, forbidden, unauthorized, notfound, server,
  ratelimit, http, request, unknown

The classification is:
- deterministic and side-effect free
- rule-based: an ordered table of (predicate, category) pairs,
  first match wins
- evidence-first: a cross-origin signal outranks any status code, because
  a blocked request often also looks like a network failure or even an
  HTTP error when the preflight was answered

Guidance text comes verbatim from the catalog.
"""

from dataclasses import dataclass, field
from typing import Callable, NamedTuple, Optional, Sequence

from corsprobe.services.diagnostics.catalog import (
    Category,
    CodeExample,
    Reference,
    Severity,
    get_catalog_entry,
    severity_for,
)
from corsprobe.services.diagnostics.outcomes import (
    NETWORK_ERROR_PHRASE,
    ConfigurationFailure,
    HttpFailure,
    RequestOutcome,
    TransportFailure,
)
from corsprobe.services.diagnostics.signals import Signal, is_cors_signal

Predicate = Callable[[RequestOutcome, Sequence[Signal]], bool]


class ClassificationRule(NamedTuple):
    name: str
    predicate: Predicate
    category: Category


@dataclass(frozen=True)
class DiagnosisRecord:
    """Structured, display-ready diagnosis for one request attempt."""

    category: Category
    title: str
    description: str
    checklist: tuple[str, ...]
    solutions: tuple[str, ...]
    code_examples: tuple[CodeExample, ...] = field(default_factory=tuple)
    evidence: tuple[Signal, ...] = field(default_factory=tuple)
    references: tuple[Reference, ...] = field(default_factory=tuple)
    summary: str = ""

    @property
    def severity(self) -> Severity:
        return severity_for(self.category)


def _first_cors_signal(signals: Sequence[Signal]) -> Optional[Signal]:
    return next((s for s in signals if is_cors_signal(s)), None)


# ---- Predicates ----


def _has_cors_evidence(outcome: RequestOutcome, signals: Sequence[Signal]) -> bool:
    return _first_cors_signal(signals) is not None


def _is_generic_network_failure(outcome: RequestOutcome, signals: Sequence[Signal]) -> bool:
    return isinstance(outcome, TransportFailure) and outcome.raw_message == NETWORK_ERROR_PHRASE


def _http_status(status_code: int) -> Predicate:
    def predicate(outcome: RequestOutcome, signals: Sequence[Signal]) -> bool:
        return isinstance(outcome, HttpFailure) and outcome.status_code == status_code

    return predicate


def _is_http_failure(outcome: RequestOutcome, signals: Sequence[Signal]) -> bool:
    return isinstance(outcome, HttpFailure)


def _is_transport_failure(outcome: RequestOutcome, signals: Sequence[Signal]) -> bool:
    return isinstance(outcome, TransportFailure)


# Evaluated top to bottom; anything left over is "unknown".
CLASSIFICATION_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule("cors-signal", _has_cors_evidence, Category.CORS),
    ClassificationRule("generic-network-failure", _is_generic_network_failure, Category.NETWORK),
    ClassificationRule("http-403", _http_status(403), Category.FORBIDDEN),
    ClassificationRule("http-401", _http_status(401), Category.UNAUTHORIZED),
    ClassificationRule("http-404", _http_status(404), Category.NOTFOUND),
    ClassificationRule("http-500", _http_status(500), Category.SERVER),
    ClassificationRule("http-429", _http_status(429), Category.RATELIMIT),
    ClassificationRule("http-other", _is_http_failure, Category.HTTP),
    ClassificationRule("transport-failure", _is_transport_failure, Category.REQUEST),
)


def resolve_category(
    outcome: RequestOutcome,
    signals: Sequence[Signal],
    rules: Sequence[ClassificationRule] = CLASSIFICATION_RULES,
) -> Category:
    """Return the category of the first matching rule, or UNKNOWN."""
    for rule in rules:
        if rule.predicate(outcome, signals):
            return rule.category
    return Category.UNKNOWN


def summarize_outcome(outcome: RequestOutcome, signals: Sequence[Signal]) -> str:
    """One-line headline for a failed attempt, as shown above the diagnosis."""
    if isinstance(outcome, HttpFailure):
        return f"HTTP Error: {outcome.status_code} {outcome.status_text}".rstrip()
    if isinstance(outcome, TransportFailure):
        if outcome.raw_message != NETWORK_ERROR_PHRASE:
            return outcome.raw_message
        cors_signal = _first_cors_signal(signals)
        if cors_signal is not None:
            return f"CORS Error: {cors_signal.message}"
        return "Network Error: unable to reach the server or the request was interrupted"
    if isinstance(outcome, ConfigurationFailure):
        return f"Request Error: {outcome.raw_message}"
    return ""


def classify(outcome: RequestOutcome, signals: Sequence[Signal]) -> DiagnosisRecord:
    """Classify a request attempt into a DiagnosisRecord.

    ``signals`` is a snapshot taken once the outcome was known; signals
    recorded afterwards are not considered. This function never raises
    for a well-formed outcome and always returns a record, falling back
    to the ``unknown`` category.
    """
    category = resolve_category(outcome, signals)
    entry = get_catalog_entry(category)

    title = entry.title
    if category is Category.HTTP and isinstance(outcome, HttpFailure):
        title = title.format(status_code=outcome.status_code)

    evidence: tuple[Signal, ...] = ()
    if category is Category.CORS:
        cors_signal = _first_cors_signal(signals)
        evidence = (cors_signal,) if cors_signal is not None else ()

    return DiagnosisRecord(
        category=category,
        title=title,
        description=entry.description,
        checklist=entry.checklist,
        solutions=entry.solutions,
        code_examples=entry.code_examples,
        evidence=evidence,
        references=entry.references,
        summary=summarize_outcome(outcome, signals),
    )
