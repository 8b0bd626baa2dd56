"""Builds the source adapter set from settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx

from typeahead.infrastructure.external.search_api.adapters import (
    IndividualSourceAdapter,
    OrganizationSourceAdapter,
    ReportSourceAdapter,
)
from typeahead.infrastructure.external.search_api.client import SearchApiClient

if TYPE_CHECKING:
    from typeahead.application.interfaces.sources import ISourceQueryAdapter
    from typeahead.core.config import Settings


def build_source_adapters(
    http_client: httpx.AsyncClient,
    settings: "Settings | None" = None,
) -> list["ISourceQueryAdapter"]:
    """Create one adapter per source kind, in display priority order.

    Args:
        http_client: Shared AsyncClient (created in lifespan).
        settings: Application settings; if None, uses get_settings().
    """
    from typeahead.core.config import get_settings

    s = settings or get_settings()
    client = SearchApiClient(http_client, s.search_api_base_url)
    limit = s.search_result_limit
    return [
        ReportSourceAdapter(client, limit=limit),
        IndividualSourceAdapter(client, limit=limit),
        OrganizationSourceAdapter(client, limit=limit),
    ]
