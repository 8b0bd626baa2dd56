"""Source query adapters over the collections API.

Each adapter issues one query for its collection and unwraps the envelope
into a list of collection-native items. A failed or non-envelope response
raises SourceQueryException. A successful envelope without an item list
raises for reports and reads as no matches for individuals and organizations.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, ClassVar

from typeahead.core.constants import SEARCH_RESULT_LIMIT
from typeahead.domain.enums import SourceKind
from typeahead.domain.exceptions import SourceQueryException
from typeahead.infrastructure.external.search_api.client import SearchApiClient, envelope_error


def unwrap_envelope(kind: SourceKind, envelope: Mapping[str, Any]) -> Any:
    """Return envelope["data"] for a success envelope.

    Raises:
        SourceQueryException: success is not exactly true.
    """
    if envelope.get("success") is not True:
        code, message = envelope_error(envelope)
        raise SourceQueryException(
            kind.value,
            message or "request was not successful",
            code or "SOURCE_QUERY_FAILED",
        )
    return envelope.get("data")


class _ApiSourceAdapter:
    """Common envelope handling; subclasses pick the endpoint and item keys."""

    kind: ClassVar[SourceKind]
    # Keys that may hold the item list inside a paginated data object.
    collection_keys: ClassVar[tuple[str, ...]] = ("items",)
    # Whether data may itself be the item list.
    accepts_bare_list: ClassVar[bool] = True
    # Whether a success envelope without an item list means no matches.
    empty_when_missing: ClassVar[bool] = True

    def __init__(self, client: SearchApiClient, limit: int = SEARCH_RESULT_LIMIT) -> None:
        self._client = client
        self.limit = limit

    async def query(self, term: str) -> list[Any]:
        envelope = await self._fetch(term)
        return self._extract_items(unwrap_envelope(self.kind, envelope))

    async def _fetch(self, term: str) -> dict[str, Any]:
        raise NotImplementedError

    def _extract_items(self, data: Any) -> list[Any]:
        if self.accepts_bare_list and isinstance(data, list):
            return data
        if isinstance(data, Mapping):
            for key in self.collection_keys:
                items = data.get(key)
                if isinstance(items, list):
                    return items
        if self.empty_when_missing:
            return []
        raise SourceQueryException(
            self.kind.value,
            f"no item list in response data ({type(data).__name__})",
            "MALFORMED_RESPONSE",
        )


class ReportSourceAdapter(_ApiSourceAdapter):
    """Reports: paginated, first page only."""

    kind = SourceKind.REPORT
    collection_keys = ("items", "reports")
    accepts_bare_list = False
    empty_when_missing = False

    async def _fetch(self, term: str) -> dict[str, Any]:
        return await self._client.query_reports(term, page=1, limit=self.limit)


class IndividualSourceAdapter(_ApiSourceAdapter):
    kind = SourceKind.INDIVIDUAL
    collection_keys = ("individuals", "items")

    async def _fetch(self, term: str) -> dict[str, Any]:
        return await self._client.query_individuals(term, limit=self.limit)


class OrganizationSourceAdapter(_ApiSourceAdapter):
    kind = SourceKind.ORGANIZATION
    collection_keys = ("organizations", "items")

    async def _fetch(self, term: str) -> dict[str, Any]:
        return await self._client.query_organizations(term, limit=self.limit)
