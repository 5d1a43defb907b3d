from __future__ import annotations

"""
Outbound request execution.

The executor issues one HTTP request with httpx and reports the result
as a RequestOutcome. It never raises for HTTP error statuses or transport
failures; those are returned as HttpFailure / TransportFailure so that
the classifier can tell "the server answered with an error" apart from
"no answer arrived".
"""

from .client import RequestExecutor, RequestSpec, get_request_executor  # noqa: F401
