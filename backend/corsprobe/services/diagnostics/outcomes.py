from __future__ import annotations

"""backend/corsprobe/services/diagnostics/outcomes.py

Outcome of one outbound request, as consumed by the classifier.

Exactly one of four variants:

- Success: the server answered with a non-error status
- HttpFailure: the server answered, the status denotes failure (>= 400)
- TransportFailure: the request left the client but no usable response came back
- ConfigurationFailure: the request could not be constructed or sent
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, Union

# Message used for connection-level failures. The classifier matches it
# literally; other transport messages fall through to the generic
# "request" category.
NETWORK_ERROR_PHRASE = "Network Error"


@dataclass(frozen=True)
class Success:
    status_code: int
    status_text: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Any = None
    echoed_request: Mapping[str, Any] = field(default_factory=dict)

    kind = "success"


@dataclass(frozen=True)
class HttpFailure:
    status_code: int
    status_text: str = ""
    body: Any = None

    kind = "http_failure"


@dataclass(frozen=True)
class TransportFailure:
    raw_message: str

    kind = "transport_failure"


@dataclass(frozen=True)
class ConfigurationFailure:
    raw_message: str

    kind = "configuration_failure"


RequestOutcome = Union[Success, HttpFailure, TransportFailure, ConfigurationFailure]
