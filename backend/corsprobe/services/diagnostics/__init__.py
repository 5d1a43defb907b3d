from __future__ import annotations

"""
Diagnostic signal capture and failure classification.

This package provides:
- signals: the Signal value type, the append-only SignalLog and the
  plain-text export layout
- interceptor: SignalInterceptor, which wraps process-global failure
  hooks for the duration of a capture window
- outcomes: the four RequestOutcome variants
- catalog: static guidance per diagnosis category
- classifier: the ordered rule table and classify()

The classifier and catalog are pure and can be used with synthetic
signals and outcomes; only the interceptor touches global state.
"""

from .catalog import (  # noqa: F401
    DIAGNOSIS_CATALOG,
    CatalogEntry,
    Category,
    CodeExample,
    Reference,
    Severity,
    get_catalog_entry,
    severity_for,
)
from .classifier import (  # noqa: F401
    CLASSIFICATION_RULES,
    DiagnosisRecord,
    classify,
    resolve_category,
    summarize_outcome,
)
from .interceptor import (  # noqa: F401
    CaptureConflictError,
    SignalInterceptor,
    get_signal_interceptor,
)
from .outcomes import (  # noqa: F401
    NETWORK_ERROR_PHRASE,
    ConfigurationFailure,
    HttpFailure,
    RequestOutcome,
    Success,
    TransportFailure,
)
from .signals import (  # noqa: F401
    CORS_MARKERS,
    Signal,
    SignalLog,
    SignalType,
    format_signal_text,
)
