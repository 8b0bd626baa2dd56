"""Analytics capture backends.

TelemetryAnalyticsCapture records each event as a short OpenTelemetry span
plus an INFO log line. Only primitive property values are recorded.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from opentelemetry import trace

from typeahead.shared.telemetry.telemetry import get_tracer

if TYPE_CHECKING:
    from typeahead.application.interfaces.sources import IAnalyticsCapture
    from typeahead.core.config import Settings

logger = logging.getLogger(__name__)

_PRIMITIVES = (str, int, float, bool)


class TelemetryAnalyticsCapture:
    """Analytics events as OpenTelemetry spans named analytics.<event>."""

    def __init__(self, tracer: trace.Tracer | None = None) -> None:
        self._tracer = tracer or get_tracer(__name__)

    def capture(self, event: str, properties: dict[str, Any]) -> None:
        attributes = {
            f"analytics.{key}": value
            for key, value in properties.items()
            if isinstance(value, _PRIMITIVES)
        }
        with self._tracer.start_as_current_span(f"analytics.{event}", attributes=attributes):
            logger.info("Analytics event %s %s", event, attributes)


class NullAnalyticsCapture:
    """Drops every event."""

    def capture(self, event: str, properties: dict[str, Any]) -> None:
        return None


def create_analytics_capture(settings: "Settings | None" = None) -> "IAnalyticsCapture":
    from typeahead.core.config import get_settings

    s = settings or get_settings()
    if s.analytics_enabled:
        return TelemetryAnalyticsCapture()
    return NullAnalyticsCapture()
