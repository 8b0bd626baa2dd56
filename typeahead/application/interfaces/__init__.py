"""Ports the search engine depends on; implemented in infrastructure."""

from typeahead.application.interfaces.sources import (
    IAnalyticsCapture,
    ISourceQueryAdapter,
    OnSelect,
    OnStateChange,
)

__all__ = ["IAnalyticsCapture", "ISourceQueryAdapter", "OnSelect", "OnStateChange"]
