"""Shared telemetry: logging setup, OpenTelemetry config, and tracing helpers."""

from typeahead.shared.telemetry.logging import setup_logging
from typeahead.shared.telemetry.telemetry import (
    TelemetryConfig,
    get_telemetry,
    get_tracer,
    set_telemetry,
)
from typeahead.shared.telemetry.tracing import (
    TracedOperation,
    add_span_attributes,
    add_span_event,
)

__all__ = [
    "setup_logging",
    "TelemetryConfig",
    "get_telemetry",
    "set_telemetry",
    "get_tracer",
    "add_span_attributes",
    "add_span_event",
    "TracedOperation",
]
