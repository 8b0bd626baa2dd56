"""Analytics capture implementations (injected into search sessions)."""

from typeahead.infrastructure.analytics.capture import (
    NullAnalyticsCapture,
    TelemetryAnalyticsCapture,
    create_analytics_capture,
)

__all__ = ["NullAnalyticsCapture", "TelemetryAnalyticsCapture", "create_analytics_capture"]
