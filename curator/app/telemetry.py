from __future__ import annotations

from collections.abc import Callable, Mapping, Sized
from dataclasses import dataclass
from typing import Any, Literal, Protocol

import structlog

TelemetryValue = bool | int | float | str | None
TelemetrySinkName = Literal["none", "log"]

# Page bodies and converted markdown never leave the process through telemetry.
_REDACTED_ATTRIBUTE_TOKENS: frozenset[str] = frozenset(
    {
        "authorization",
        "body",
        "cookie",
        "html",
        "markdown",
        "payload",
        "secret",
        "token",
    }
)
_REDACTED = "[redacted]"
_MAX_STRING_LENGTH = 160


class TelemetrySink(Protocol):
    def emit(self, *, event_name: str, attributes: Mapping[str, TelemetryValue]) -> None:
        ...


class NoOpTelemetrySink:
    def emit(self, *, event_name: str, attributes: Mapping[str, TelemetryValue]) -> None:
        del event_name, attributes


class StructuredLogTelemetrySink:
    """Writes each event as one `telemetry` record on the `curator.telemetry` logger."""

    def __init__(self) -> None:
        self._logger = structlog.get_logger("curator.telemetry")

    def emit(self, *, event_name: str, attributes: Mapping[str, TelemetryValue]) -> None:
        self._logger.info("telemetry", telemetry_event=event_name, **attributes)


_SINK_FACTORIES: dict[TelemetrySinkName, Callable[[], TelemetrySink]] = {
    "none": NoOpTelemetrySink,
    "log": StructuredLogTelemetrySink,
}


@dataclass(frozen=True)
class TelemetryClient:
    enabled: bool
    sink: TelemetrySink

    @classmethod
    def disabled(cls) -> TelemetryClient:
        return cls(enabled=False, sink=NoOpTelemetrySink())

    def emit(self, event_name: str, **attributes: Any) -> None:
        if self.enabled:
            self.sink.emit(event_name=event_name, attributes=sanitize_attributes(attributes))


def build_telemetry_client(*, enabled: bool, sink: TelemetrySinkName) -> TelemetryClient:
    if not enabled or sink == "none":
        return TelemetryClient.disabled()
    return TelemetryClient(enabled=True, sink=_SINK_FACTORIES[sink]())


def sanitize_attributes(attributes: Mapping[str, Any]) -> dict[str, TelemetryValue]:
    """Lower-case keys, redact sensitive names and flatten values to scalars."""
    sanitized: dict[str, TelemetryValue] = {}
    for raw_key, raw_value in attributes.items():
        key = str(raw_key).strip().lower()
        if not key:
            continue
        redact = any(token in key for token in _REDACTED_ATTRIBUTE_TOKENS)
        sanitized[key] = _REDACTED if redact else _compact_value(raw_value)
    return sanitized


def _compact_value(value: Any) -> TelemetryValue:
    if value is None or isinstance(value, bool | int | float):
        return value
    if isinstance(value, str):
        compact = " ".join(value.split())
        if len(compact) > _MAX_STRING_LENGTH:
            return compact[:_MAX_STRING_LENGTH] + "..."
        return compact
    if isinstance(value, Sized):
        return len(value)
    return type(value).__name__
