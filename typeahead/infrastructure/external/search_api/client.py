"""HTTP client for the collections API.

Thin wrapper over a shared httpx.AsyncClient. Every call is a read-only GET
that returns the decoded JSON envelope ({"success": ..., "data": ...}).
Transport failures, error statuses, and non-object bodies raise
SourceQueryException so the aggregator records a failed branch.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from typeahead.core.constants import SEARCH_RESULT_LIMIT
from typeahead.domain.enums import SourceKind
from typeahead.domain.exceptions import SourceQueryException

logger = logging.getLogger(__name__)


def envelope_error(body: Any) -> tuple[str | None, str | None]:
    """Return (code, message) from an error envelope, if the body is one."""
    if not isinstance(body, dict):
        return None, None
    error = body.get("error")
    if isinstance(error, dict):
        code = error.get("code")
        message = error.get("message")
        return (
            code if isinstance(code, str) else None,
            message if isinstance(message, str) else None,
        )
    if isinstance(error, str):
        return None, error
    return None, None


class SearchApiClient:
    """Collections API client (one instance shared by all sessions)."""

    def __init__(self, http_client: httpx.AsyncClient, base_url: str) -> None:
        """Initialize with a shared HTTP client.

        Args:
            http_client: Pooled AsyncClient; owned (and closed) by the caller.
            base_url: API root, e.g. http://localhost:4000/api.
        """
        self._http = http_client
        self.base_url = base_url.rstrip("/")

    async def query_reports(
        self, term: str, page: int = 1, limit: int = SEARCH_RESULT_LIMIT
    ) -> dict[str, Any]:
        """GET /reports?page=&limit=&search= (paginated envelope)."""
        return await self._get_envelope(
            SourceKind.REPORT,
            "/reports",
            {"page": page, "limit": limit, "search": term},
        )

    async def query_individuals(
        self, term: str, limit: int = SEARCH_RESULT_LIMIT
    ) -> dict[str, Any]:
        """GET /individuals?q=&limit= (list envelope)."""
        return await self._get_envelope(
            SourceKind.INDIVIDUAL, "/individuals", {"q": term, "limit": limit}
        )

    async def query_organizations(
        self, term: str, limit: int = SEARCH_RESULT_LIMIT
    ) -> dict[str, Any]:
        """GET /organizations?q=&limit= (list envelope)."""
        return await self._get_envelope(
            SourceKind.ORGANIZATION, "/organizations", {"q": term, "limit": limit}
        )

    async def _get_envelope(
        self, kind: SourceKind, path: str, params: dict[str, Any]
    ) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = await self._http.get(url, params=params)
        except httpx.TimeoutException as e:
            raise SourceQueryException(kind.value, f"timed out: {e}", "TIMEOUT") from e
        except httpx.HTTPError as e:
            raise SourceQueryException(
                kind.value, str(e) or type(e).__name__, "NETWORK_ERROR"
            ) from e

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.is_error:
            code, message = envelope_error(body)
            raise SourceQueryException(
                kind.value,
                message or f"Request failed with status {response.status_code}",
                code or "HTTP_ERROR",
            )
        if not isinstance(body, dict):
            raise SourceQueryException(
                kind.value, "response body is not a JSON object", "MALFORMED_RESPONSE"
            )
        return body
