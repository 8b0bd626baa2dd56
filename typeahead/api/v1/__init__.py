"""API v1: REST search, WebSocket type-ahead, health."""

from typeahead.api.v1.router import api_router

__all__ = ["api_router"]
