from __future__ import annotations

"""backend/corsprobe/services/diagnostics/signals.py

Signal model and the in-memory signal log.

A Signal is one captured diagnostic event (a logged error, an uncaught
exception, an unhandled async failure, or a transport-level event).
Signals are immutable once recorded and live only for the duration of a
single capture window.

The SignalLog is append-only and keeps insertion order, which is also
the order used for display and for classification.
"""

import threading
from dataclasses import dataclass
from datetime import datetime
import enum
from typing import Optional


class SignalType(str, enum.Enum):
    CONSOLE_ERROR = "CONSOLE_ERROR"
    WINDOW_ERROR = "WINDOW_ERROR"
    UNHANDLED_REJECTION = "UNHANDLED_REJECTION"
    XHR_ERROR = "XHR_ERROR"
    CORS_ERROR = "CORS_ERROR"


# Literal markers that identify a cross-origin policy failure in free text.
CORS_MARKERS: tuple[str, ...] = (
    "CORS",
    "cross-origin",
    "Access-Control-Allow-Origin",
)


@dataclass(frozen=True)
class Signal:
    """One captured diagnostic event."""

    type: SignalType
    message: str
    timestamp: datetime
    stack: str | None = None
    source: str | None = None
    line: int | None = None
    column: int | None = None


def coerce_text(value: object) -> str:
    """Best-effort string form of ``value``; never raises."""
    if isinstance(value, str):
        return value
    try:
        return str(value)
    except Exception:  # noqa: BLE001
        pass
    try:
        return repr(value)
    except Exception:  # noqa: BLE001
        return f"<unprintable {type(value).__name__}>"


def mentions_cors(text: Optional[str]) -> bool:
    return bool(text) and any(marker in text for marker in CORS_MARKERS)


def is_cors_signal(signal: Signal) -> bool:
    """True for CORS_ERROR signals and any signal whose text carries a CORS marker."""
    return signal.type is SignalType.CORS_ERROR or mentions_cors(signal.message)


def format_signal_text(signal: Signal) -> str:
    """Render a signal in the fixed plain-text layout used for copy/export."""
    lines = [
        f"Type: {signal.type.value}",
        f"Message: {signal.message}",
    ]
    if signal.stack:
        lines.append(f"Stack: {signal.stack}")
    lines.append(f"Time: {signal.timestamp:%c}")
    return "\n".join(lines)


class SignalLog:
    """Append-only, insertion-ordered collection of signals.

    All operations are O(1) apart from ``snapshot`` and the dedupe scan,
    and none of them raise for well-formed input. A lock guards the list
    because sync API routes run on a threadpool.
    """

    def __init__(self) -> None:
        self._signals: list[Signal] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._signals)

    def record(
        self,
        type: SignalType,
        message: str,
        *,
        stack: str | None = None,
        source: str | None = None,
        line: int | None = None,
        column: int | None = None,
        dedupe: bool = False,
    ) -> Signal | None:
        """Stamp and append a new signal.

        With ``dedupe`` the signal is dropped when a signal with the same
        message is already present (first occurrence wins). Returns the
        stored signal, or None when it was dropped.
        """
        with self._lock:
            if dedupe and any(s.message == message for s in self._signals):
                return None
            now = datetime.now()
            if self._signals and self._signals[-1].timestamp > now:
                # Wall clock stepped back; keep timestamps non-decreasing.
                now = self._signals[-1].timestamp
            signal = Signal(
                type=type,
                message=message,
                timestamp=now,
                stack=stack,
                source=source,
                line=line,
                column=column,
            )
            self._signals.append(signal)
            return signal

    def clear(self) -> None:
        with self._lock:
            self._signals = []

    def snapshot(self) -> tuple[Signal, ...]:
        with self._lock:
            return tuple(self._signals)
