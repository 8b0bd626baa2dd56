"""Application lifespan: startup and shutdown.

Single place for startup/shutdown wiring: logging, the shared outbound HTTP
client, the session manager, analytics capture, and telemetry.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI

from typeahead.api.websocket import SessionManager
from typeahead.application.services.fencing import RoundFence
from typeahead.core.config import get_settings
from typeahead.infrastructure.analytics.capture import create_analytics_capture
from typeahead.shared.telemetry.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Shutdown closes sessions first so no round outlives the HTTP client.
    """
    settings = get_settings()
    setup_logging()

    # ---- Startup ----
    # Shared client for the collections API (connection reuse across rounds).
    app.state.search_http_client = httpx.AsyncClient(
        timeout=settings.search_api_timeout_seconds
    )
    app.state.session_manager = SessionManager()
    app.state.search_fence = RoundFence()
    app.state.analytics = create_analytics_capture(settings)

    if settings.telemetry_enabled:
        from typeahead.shared.telemetry.telemetry import TelemetryConfig, set_telemetry

        telemetry = TelemetryConfig.from_settings(settings)
        telemetry.setup_telemetry(
            exporter_type=settings.telemetry_exporter,
            otlp_endpoint=settings.telemetry_otlp_endpoint,
            sample_rate=settings.telemetry_sample_rate,
        )
        set_telemetry(telemetry)
        telemetry.instrument_fastapi(app)
        telemetry.instrument_logging()
        logger.info("Telemetry initialized")

    yield

    # ---- Shutdown ----
    await app.state.session_manager.close_all()

    await app.state.search_http_client.aclose()
    app.state.search_http_client = None
    logger.info("Search HTTP client closed")

    from typeahead.shared.telemetry.telemetry import get_telemetry, set_telemetry

    telemetry_instance = get_telemetry()
    if telemetry_instance is not None:
        telemetry_instance.shutdown()
        set_telemetry(None)
        logger.info("Telemetry shutdown complete")
