from __future__ import annotations

"""backend/corsprobe/services/diagnostics/interceptor.py

Capture of otherwise invisible failure signals while a request runs.

The interceptor temporarily wraps four process-global hooks:

- logging.Logger.handle        -> CONSOLE_ERROR / CORS_ERROR
- sys.excepthook               -> WINDOW_ERROR
- asyncio loop exception hook  -> UNHANDLED_REJECTION
- httpx.Client.send and
  httpx.AsyncClient.send       -> XHR_ERROR / CORS_ERROR

Each wrapper calls the hook that was installed before it first, so other
observers see exactly what they saw before, and only then records a
Signal. Recording never raises: a failure while building a Signal is
logged at DEBUG and dropped.

Each hook sits behind a small channel object with ``arm``/``disarm`` and
its own save slot. ``disable()`` puts every saved original back.

Only one interceptor may be enabled per process. Requests issued
concurrently while capturing share one log, so callers that need
isolated signals must serialize their requests (see services.probe).
"""

import asyncio
import functools
import logging
import sys
import threading
import traceback
from typing import Any, Callable, Protocol

import httpx

from corsprobe.services.diagnostics.signals import (
    Signal,
    SignalLog,
    SignalType,
    coerce_text,
    mentions_cors,
)

logger = logging.getLogger(__name__)

Observer = Callable[..., None]


class CaptureConflictError(RuntimeError):
    """Raised when a second interceptor is enabled while another is active."""


class CaptureChannel(Protocol):
    """Capability interface for one hookable failure channel."""

    name: str

    def arm(self, observe: Observer) -> bool:
        """Install the wrapping hook. Return False when the host lacks the channel."""
        ...

    def disarm(self) -> None:
        """Restore the saved original hook and clear the save slot."""
        ...


class _HookChannel:
    name = "hook"

    def __init__(self) -> None:
        self._observe: Observer | None = None

    def _guarded(self, capture: Callable[..., None], *args: Any) -> None:
        # Runs inside the host's own error dispatch; must never raise.
        try:
            capture(*args)
        except Exception as exc:  # noqa: BLE001
            logger.debug("Signal capture on %s channel failed: %s", self.name, exc)

    def _emit(self, type: SignalType, message: str, **details: Any) -> None:
        if self._observe is not None:
            self._observe(type, message, **details)


def _format_traceback(exc: BaseException | None) -> str | None:
    if exc is None or exc.__traceback__ is None:
        return None
    return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))


class LoggingChannel(_HookChannel):
    """Logged errors: every record at ERROR or above handled by any logger."""

    name = "logging"

    def __init__(self) -> None:
        super().__init__()
        self._original: Callable[..., None] | None = None

    def arm(self, observe: Observer) -> bool:
        original = logging.Logger.handle
        channel = self

        @functools.wraps(original)
        def handle(logger_: logging.Logger, record: logging.LogRecord) -> None:
            original(logger_, record)
            if record.levelno >= logging.ERROR:
                channel._guarded(channel._capture, record)

        self._original = original
        self._observe = observe
        logging.Logger.handle = handle  # type: ignore[method-assign]
        return True

    def disarm(self) -> None:
        if self._original is not None:
            logging.Logger.handle = self._original  # type: ignore[method-assign]
        self._original = None
        self._observe = None

    @staticmethod
    def _message(record: logging.LogRecord) -> str:
        try:
            return record.getMessage()
        except Exception:  # noqa: BLE001
            # Broken %-args; fall back to joining the raw pieces.
            parts = [record.msg]
            if isinstance(record.args, tuple):
                parts.extend(record.args)
            elif record.args:
                parts.append(record.args)
            return " ".join(coerce_text(part) for part in parts)

    def _capture(self, record: logging.LogRecord) -> None:
        message = self._message(record)
        stack = None
        if record.exc_info and record.exc_info[1] is not None:
            stack = _format_traceback(record.exc_info[1])
        elif record.stack_info:
            stack = record.stack_info
        signal_type = SignalType.CORS_ERROR if mentions_cors(message) else SignalType.CONSOLE_ERROR
        self._emit(
            signal_type,
            message,
            stack=stack,
            source=record.pathname,
            line=record.lineno,
        )


class ExceptHookChannel(_HookChannel):
    """Uncaught exceptions reaching sys.excepthook."""

    name = "excepthook"

    def __init__(self) -> None:
        super().__init__()
        self._original: Callable[..., Any] | None = None

    def arm(self, observe: Observer) -> bool:
        original = sys.excepthook
        channel = self

        @functools.wraps(original)
        def excepthook(exc_type, exc, tb) -> None:
            original(exc_type, exc, tb)
            channel._guarded(channel._capture, exc_type, exc, tb)

        self._original = original
        self._observe = observe
        sys.excepthook = excepthook
        return True

    def disarm(self) -> None:
        if self._original is not None:
            sys.excepthook = self._original
        self._original = None
        self._observe = None

    def _capture(self, exc_type, exc, tb) -> None:
        message = "".join(traceback.format_exception_only(exc_type, exc)).strip()
        source = line = column = None
        if tb is not None:
            frame = traceback.extract_tb(tb)[-1]
            source, line = frame.filename, frame.lineno
            column = getattr(frame, "colno", None)
        stack = "".join(traceback.format_exception(exc_type, exc, tb)) if tb is not None else None
        self._emit(
            SignalType.WINDOW_ERROR,
            message,
            stack=stack,
            source=source,
            line=line,
            column=column,
        )


class AsyncioChannel(_HookChannel):
    """Failures the event loop could not deliver to anyone (e.g. unretrieved task errors)."""

    name = "asyncio"

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        super().__init__()
        self._loop = loop
        self._armed_loop: asyncio.AbstractEventLoop | None = None
        self._original: Callable[..., Any] | None = None

    def _resolve_loop(self) -> asyncio.AbstractEventLoop | None:
        if self._loop is not None:
            return self._loop
        try:
            return asyncio.get_running_loop()
        except RuntimeError:
            return None

    def arm(self, observe: Observer) -> bool:
        loop = self._resolve_loop()
        if loop is None or loop.is_closed():
            return False

        original = loop.get_exception_handler()
        channel = self

        def exception_handler(loop_: asyncio.AbstractEventLoop, context: dict[str, Any]) -> None:
            if original is not None:
                original(loop_, context)
            else:
                loop_.default_exception_handler(context)
            channel._guarded(channel._capture, context)

        self._armed_loop = loop
        self._original = original
        self._observe = observe
        loop.set_exception_handler(exception_handler)
        return True

    def disarm(self) -> None:
        if self._armed_loop is not None and not self._armed_loop.is_closed():
            # None restores the loop's default handler.
            self._armed_loop.set_exception_handler(self._original)
        self._armed_loop = None
        self._original = None
        self._observe = None

    def _capture(self, context: dict[str, Any]) -> None:
        exc = context.get("exception")
        if exc is not None:
            message = coerce_text(exc) or type(exc).__name__
        else:
            message = coerce_text(context.get("message") or "Unhandled asyncio failure")
        self._emit(
            SignalType.UNHANDLED_REJECTION,
            message,
            stack=_format_traceback(exc),
        )


class HttpTransportChannel(_HookChannel):
    """Transport-level events of every httpx client in the process."""

    name = "http"

    def __init__(self) -> None:
        super().__init__()
        self._original_send: Callable[..., Any] | None = None
        self._original_async_send: Callable[..., Any] | None = None

    def arm(self, observe: Observer) -> bool:
        original_send = httpx.Client.send
        original_async_send = httpx.AsyncClient.send
        channel = self

        @functools.wraps(original_send)
        def send(client: httpx.Client, request: httpx.Request, *args: Any, **kwargs: Any) -> httpx.Response:
            try:
                response = original_send(client, request, *args, **kwargs)
            except httpx.TimeoutException:
                raise
            except httpx.TransportError:
                channel._guarded(channel._on_error, request)
                raise
            channel._guarded(channel._on_complete, request, response)
            return response

        @functools.wraps(original_async_send)
        async def async_send(
            client: httpx.AsyncClient, request: httpx.Request, *args: Any, **kwargs: Any
        ) -> httpx.Response:
            try:
                response = await original_async_send(client, request, *args, **kwargs)
            except httpx.TimeoutException:
                raise
            except httpx.TransportError:
                channel._guarded(channel._on_error, request)
                raise
            channel._guarded(channel._on_complete, request, response)
            return response

        self._original_send = original_send
        self._original_async_send = original_async_send
        self._observe = observe
        httpx.Client.send = send  # type: ignore[method-assign]
        httpx.AsyncClient.send = async_send  # type: ignore[method-assign]
        return True

    def disarm(self) -> None:
        if self._original_send is not None:
            httpx.Client.send = self._original_send  # type: ignore[method-assign]
        if self._original_async_send is not None:
            httpx.AsyncClient.send = self._original_async_send  # type: ignore[method-assign]
        self._original_send = None
        self._original_async_send = None
        self._observe = None

    def _on_error(self, request: httpx.Request) -> None:
        self._emit(
            SignalType.XHR_ERROR,
            f"Network error occurred when accessing: {request.url}",
            dedupe=True,
        )

    def _on_complete(self, request: httpx.Request, response: httpx.Response) -> None:
        # Status 0 on a finished exchange: blocked before any status was assigned.
        if response.status_code == 0:
            self._emit(
                SignalType.CORS_ERROR,
                f"CORS error when accessing: {request.url}",
                dedupe=True,
            )


# ---- Interceptor ----

_active_lock = threading.Lock()
_active: SignalInterceptor | None = None


class SignalInterceptor:
    """Owns the signal log and the save slots of every hooked channel."""

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop | None = None,
        *,
        channels: list[CaptureChannel] | None = None,
    ) -> None:
        self._log = SignalLog()
        self._channels: list[CaptureChannel] = (
            channels
            if channels is not None
            else [
                LoggingChannel(),
                ExceptHookChannel(),
                AsyncioChannel(loop),
                HttpTransportChannel(),
            ]
        )
        self._armed: list[CaptureChannel] = []
        self._enabled = False

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def available_channels(self) -> tuple[str, ...]:
        """Names of the channels armed by the current capture window."""
        return tuple(channel.name for channel in self._armed)

    def enable(self) -> None:
        """Install the wrapping hooks. No-op when already enabled."""
        global _active
        with _active_lock:
            if self._enabled:
                return
            if _active is not None and _active is not self:
                raise CaptureConflictError(
                    "Another signal interceptor is already capturing in this process"
                )
            try:
                for channel in self._channels:
                    if channel.arm(self._observe):
                        self._armed.append(channel)
                    else:
                        logger.debug("Capture channel %s unavailable; skipping", channel.name)
            except Exception:
                self._disarm_all()
                raise
            self._enabled = True
            _active = self
        logger.info("Signal capture enabled on: %s", ", ".join(self.available_channels) or "-")

    def disable(self) -> None:
        """Restore every saved hook. No-op when not enabled."""
        global _active
        with _active_lock:
            if not self._enabled:
                return
            self._enabled = False
            self._disarm_all()
            if _active is self:
                _active = None
        logger.info("Signal capture disabled")

    def clear(self) -> None:
        """Empty the log without touching hook installation."""
        self._log.clear()

    def snapshot(self) -> tuple[Signal, ...]:
        return self._log.snapshot()

    def _disarm_all(self) -> None:
        for channel in reversed(self._armed):
            channel.disarm()
        self._armed = []

    def _observe(self, type: SignalType, message: str, **details: Any) -> None:
        if not self._enabled:
            return
        self._log.record(type, message, **details)


_default_interceptor: SignalInterceptor | None = None


def get_signal_interceptor() -> SignalInterceptor:
    """Return the process-wide interceptor used by the API."""
    global _default_interceptor
    if _default_interceptor is None:
        _default_interceptor = SignalInterceptor()
    return _default_interceptor
