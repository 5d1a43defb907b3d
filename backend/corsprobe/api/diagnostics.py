# backend/corsprobe/api/diagnostics.py
from __future__ import annotations

from fastapi import APIRouter

from corsprobe import schemas
from corsprobe.services.diagnostics import DIAGNOSIS_CATALOG, classify, severity_for

router = APIRouter(prefix="/diagnostics", tags=["diagnostics"])


@router.get("/catalog", response_model=list[schemas.CatalogEntryRead])
def list_catalog() -> list[schemas.CatalogEntryRead]:
    """Return the guidance for every diagnosis category."""
    return [
        schemas.CatalogEntryRead(
            category=category,
            severity=severity_for(category),
            title=entry.title,
            description=entry.description,
            checklist=list(entry.checklist),
            solutions=list(entry.solutions),
            code_examples=[
                schemas.CodeExampleRead.model_validate(example)
                for example in entry.code_examples
            ],
            references=[
                schemas.ReferenceRead.model_validate(reference)
                for reference in entry.references
            ],
        )
        for category, entry in DIAGNOSIS_CATALOG.items()
    ]


@router.post("/classify", response_model=schemas.DiagnosisRead)
def classify_outcome(payload: schemas.ClassifyRequest) -> schemas.DiagnosisRead:
    """
    Classify a synthetic outcome and signal list.

    Nothing is sent and no capture state is touched; useful for checking
    how a given combination of evidence would be diagnosed.
    """
    record = classify(
        payload.outcome.to_outcome(),
        [signal.to_signal() for signal in payload.signals],
    )
    return schemas.DiagnosisRead.model_validate(record)
