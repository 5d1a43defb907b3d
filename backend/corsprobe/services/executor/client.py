from __future__ import annotations

"""backend/corsprobe/services/executor/client.py

RequestExecutor: issue one HTTP request and map the result to a RequestOutcome.

Headers and body arrive the way the request form edits them: as JSON text
(or already-parsed values). Parsing problems and malformed URLs are
reported as ConfigurationFailure; the request is never sent in that case.

Every failure is also logged at ERROR ("Error details: ..."), which makes
it visible to an enabled SignalInterceptor as a CONSOLE_ERROR signal.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Mapping

import httpx

from corsprobe.config import get_settings
from corsprobe.services.diagnostics.outcomes import (
    NETWORK_ERROR_PHRASE,
    ConfigurationFailure,
    HttpFailure,
    RequestOutcome,
    Success,
    TransportFailure,
)

logger = logging.getLogger(__name__)

SUPPORTED_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS", "HEAD")


@dataclass
class RequestSpec:
    """One outbound request as entered by the user."""

    url: str
    method: str = "GET"
    headers: str | Mapping[str, Any] | None = None
    body: Any = None
    timeout: float | None = None


class _InvalidRequest(ValueError):
    pass


def _parse_headers(raw: str | Mapping[str, Any] | None) -> dict[str, str]:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return {}
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise _InvalidRequest(f"Headers are not valid JSON: {exc}") from exc
    if not isinstance(raw, Mapping):
        raise _InvalidRequest("Headers must be a JSON object")
    return {str(key): str(value) for key, value in raw.items()}


def _parse_body(raw: Any) -> Any:
    if not isinstance(raw, str):
        return raw
    if not raw.strip():
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise _InvalidRequest(f"Body is not valid JSON: {exc}") from exc


def _decode_response_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class RequestExecutor:
    """Issue HTTP requests with httpx and report RequestOutcome values.

    ``transport`` is passed straight to httpx.Client, which lets tests
    (and embedding applications) route requests through a MockTransport
    or a custom transport.
    """

    def __init__(
        self,
        *,
        transport: httpx.BaseTransport | None = None,
        default_timeout: float | None = None,
    ) -> None:
        self._transport = transport
        self._default_timeout = (
            default_timeout
            if default_timeout is not None
            else get_settings().request_timeout_seconds
        )

    def execute(self, spec: RequestSpec) -> RequestOutcome:
        method = (spec.method or "GET").upper()
        timeout = spec.timeout or self._default_timeout

        try:
            headers = _parse_headers(spec.headers)
            body = _parse_body(spec.body)
            if method not in SUPPORTED_METHODS:
                raise _InvalidRequest(f"Unsupported method: {method}")
        except _InvalidRequest as exc:
            return self._failed(ConfigurationFailure(str(exc)))

        try:
            with httpx.Client(
                transport=self._transport,
                timeout=timeout,
                follow_redirects=True,
            ) as client:
                response = client.request(method, spec.url, headers=headers, json=body)
        except httpx.TimeoutException:
            return self._failed(
                TransportFailure(f"timeout of {int(timeout * 1000)}ms exceeded")
            )
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as exc:
            return self._failed(ConfigurationFailure(str(exc)))
        except httpx.TransportError:
            return self._failed(TransportFailure(NETWORK_ERROR_PHRASE))
        except httpx.RequestError as exc:
            # Redirect loops, undecodable content, ...
            return self._failed(TransportFailure(str(exc)))
        except (TypeError, ValueError) as exc:
            # Body not JSON-serializable, illegal header values
            return self._failed(ConfigurationFailure(str(exc)))

        if response.status_code == 0:
            # No status assigned: nothing usable came back.
            return self._failed(TransportFailure(NETWORK_ERROR_PHRASE))

        response_body = _decode_response_body(response)
        if response.status_code >= 400:
            return self._failed(
                HttpFailure(
                    status_code=response.status_code,
                    status_text=response.reason_phrase,
                    body=response_body,
                )
            )

        return Success(
            status_code=response.status_code,
            status_text=response.reason_phrase,
            headers=dict(response.headers),
            body=response_body,
            echoed_request={
                "method": method,
                "url": str(response.request.url),
                "headers": dict(response.request.headers),
                "body": body,
            },
        )

    @staticmethod
    def _failed(outcome: RequestOutcome) -> RequestOutcome:
        if isinstance(outcome, HttpFailure):
            detail = f"HTTP Error: {outcome.status_code} {outcome.status_text}".rstrip()
        else:
            detail = outcome.raw_message
        logger.error("Error details: %s", detail)
        return outcome


def get_request_executor() -> RequestExecutor:
    """FastAPI dependency returning a default executor."""
    return RequestExecutor()
