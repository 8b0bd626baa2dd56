"""Presentation-layer dependency injection (composition root).

Builds search use cases from the shared infrastructure on app.state (set in
lifespan). Routes depend only on these dependencies. HTTPConnection lets the
same providers serve REST and WebSocket routes.
"""

from __future__ import annotations

from typing import Annotated

import httpx
from fastapi import Depends
from starlette.requests import HTTPConnection

from typeahead.api.websocket.manager import SessionManager
from typeahead.application.interfaces.sources import IAnalyticsCapture, ISourceQueryAdapter
from typeahead.application.services.fencing import RoundFence
from typeahead.application.use_cases.search_session import SearchService, SearchSessionFactory
from typeahead.core.config import get_settings
from typeahead.infrastructure.analytics.capture import NullAnalyticsCapture
from typeahead.infrastructure.external.search_api.factory import build_source_adapters


def _require_state(conn: HTTPConnection, name: str):
    value = getattr(conn.app.state, name, None)
    if value is None:
        raise RuntimeError(f"app.state.{name} is not set; is the lifespan running?")
    return value


def get_search_http_client(conn: HTTPConnection) -> httpx.AsyncClient:
    """Shared outbound client for the collections API."""
    return _require_state(conn, "search_http_client")


def get_source_adapters(
    http_client: Annotated[httpx.AsyncClient, Depends(get_search_http_client)],
) -> list[ISourceQueryAdapter]:
    return build_source_adapters(http_client)


def get_analytics(conn: HTTPConnection) -> IAnalyticsCapture:
    return getattr(conn.app.state, "analytics", None) or NullAnalyticsCapture()


def get_round_fence(conn: HTTPConnection) -> RoundFence:
    """Process-wide fence so REST round ids keep increasing across requests."""
    fence = getattr(conn.app.state, "search_fence", None)
    if fence is None:
        fence = RoundFence()
        conn.app.state.search_fence = fence
    return fence


def get_session_manager(conn: HTTPConnection) -> SessionManager:
    return _require_state(conn, "session_manager")


def get_search_service(
    adapters: Annotated[list[ISourceQueryAdapter], Depends(get_source_adapters)],
    fence: Annotated[RoundFence, Depends(get_round_fence)],
) -> SearchService:
    """One-shot search use case (REST)."""
    return SearchService(adapters, fence=fence, default_locale=get_settings().default_locale)


def get_session_factory(
    adapters: Annotated[list[ISourceQueryAdapter], Depends(get_source_adapters)],
    analytics: Annotated[IAnalyticsCapture, Depends(get_analytics)],
) -> SearchSessionFactory:
    """Interactive session factory (WebSocket)."""
    settings = get_settings()
    return SearchSessionFactory(
        adapters,
        debounce_seconds=settings.search_debounce_seconds,
        default_locale=settings.default_locale,
        analytics=analytics,
    )
