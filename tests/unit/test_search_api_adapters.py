"""Tests for the collections API client and source adapters (httpx.MockTransport)."""

import httpx
import pytest

from typeahead.core.config import Settings
from typeahead.domain.enums import SourceKind
from typeahead.domain.exceptions import SourceQueryException
from typeahead.infrastructure.external.search_api.adapters import (
    IndividualSourceAdapter,
    OrganizationSourceAdapter,
    ReportSourceAdapter,
    unwrap_envelope,
)
from typeahead.infrastructure.external.search_api.client import SearchApiClient, envelope_error
from typeahead.infrastructure.external.search_api.factory import build_source_adapters

BASE_URL = "http://collections.test/api"


def _client(handler) -> tuple[httpx.AsyncClient, SearchApiClient]:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return http, SearchApiClient(http, BASE_URL + "/")


async def test_report_adapter_queries_first_page() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={"success": True, "data": {"items": [{"shareableUuid": "r1"}], "total": 1}},
        )

    http, client = _client(handler)
    async with http:
        items = await ReportSourceAdapter(client, limit=5).query("Tehran")

    assert items == [{"shareableUuid": "r1"}]
    assert seen[0].url.path == "/api/reports"
    assert dict(seen[0].url.params) == {"page": "1", "limit": "5", "search": "Tehran"}


@pytest.mark.parametrize(
    ("adapter_cls", "path", "data"),
    [
        (IndividualSourceAdapter, "/api/individuals", [{"shareableUuid": "p1"}]),
        (IndividualSourceAdapter, "/api/individuals", {"individuals": [{"shareableUuid": "p1"}]}),
        (OrganizationSourceAdapter, "/api/organizations", [{"shareableUuid": "p1"}]),
        (OrganizationSourceAdapter, "/api/organizations", {"organizations": [{"shareableUuid": "p1"}]}),
    ],
)
async def test_list_adapters_accept_both_data_shapes(adapter_cls, path: str, data) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"success": True, "data": data})

    http, client = _client(handler)
    async with http:
        items = await adapter_cls(client, limit=3).query("Ali")

    assert items == [{"shareableUuid": "p1"}]
    assert seen[0].url.path == path
    assert dict(seen[0].url.params) == {"q": "Ali", "limit": "3"}


async def test_unsuccessful_envelope_raises_with_api_code() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={"success": False, "error": {"code": "SEARCH_UNAVAILABLE", "message": "index rebuilding"}},
        )

    http, client = _client(handler)
    async with http:
        with pytest.raises(SourceQueryException) as exc_info:
            await IndividualSourceAdapter(client).query("Ali")

    assert exc_info.value.error_code == "SEARCH_UNAVAILABLE"
    assert exc_info.value.reason == "index rebuilding"
    assert exc_info.value.source == "individual"


async def test_http_error_status_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="Service Unavailable")

    http, client = _client(handler)
    async with http:
        with pytest.raises(SourceQueryException) as exc_info:
            await OrganizationSourceAdapter(client).query("x")

    assert exc_info.value.error_code == "HTTP_ERROR"
    assert "503" in exc_info.value.reason


async def test_http_error_with_envelope_uses_its_message() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"success": False, "error": {"code": "DB_ERROR", "message": "db down"}})

    http, client = _client(handler)
    async with http:
        with pytest.raises(SourceQueryException) as exc_info:
            await ReportSourceAdapter(client).query("x")

    assert exc_info.value.error_code == "DB_ERROR"
    assert exc_info.value.reason == "db down"


async def test_timeout_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("read timed out", request=request)

    http, client = _client(handler)
    async with http:
        with pytest.raises(SourceQueryException) as exc_info:
            await ReportSourceAdapter(client).query("x")

    assert exc_info.value.error_code == "TIMEOUT"


async def test_connection_error_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    http, client = _client(handler)
    async with http:
        with pytest.raises(SourceQueryException) as exc_info:
            await IndividualSourceAdapter(client).query("x")

    assert exc_info.value.error_code == "NETWORK_ERROR"


@pytest.mark.parametrize(
    ("adapter_cls", "response"),
    [
        (ReportSourceAdapter, httpx.Response(200, text="<html>")),
        (ReportSourceAdapter, httpx.Response(200, json=[1, 2])),
        (ReportSourceAdapter, httpx.Response(200, json={"success": True, "data": [{"shareableUuid": "r1"}]})),
        (ReportSourceAdapter, httpx.Response(200, json={"success": True, "data": None})),
        (IndividualSourceAdapter, httpx.Response(200, text="<html>")),
        (OrganizationSourceAdapter, httpx.Response(200, json="ok")),
    ],
)
async def test_malformed_responses_raise(adapter_cls, response: httpx.Response) -> None:
    http, client = _client(lambda request: response)
    async with http:
        with pytest.raises(SourceQueryException) as exc_info:
            await adapter_cls(client).query("x")

    assert exc_info.value.error_code == "MALFORMED_RESPONSE"


@pytest.mark.parametrize("adapter_cls", [IndividualSourceAdapter, OrganizationSourceAdapter])
@pytest.mark.parametrize("data", [None, {"total": 0}, "nothing", {"individuals": None}])
async def test_success_without_item_list_is_no_matches(adapter_cls, data) -> None:
    """Individuals and organizations read a successful envelope without items as empty."""
    http, client = _client(lambda request: httpx.Response(200, json={"success": True, "data": data}))
    async with http:
        assert await adapter_cls(client).query("x") == []


def test_unwrap_envelope_requires_literal_true() -> None:
    with pytest.raises(SourceQueryException):
        unwrap_envelope(SourceKind.REPORT, {"success": "true", "data": []})
    assert unwrap_envelope(SourceKind.REPORT, {"success": True, "data": [1]}) == [1]


@pytest.mark.parametrize(
    ("body", "expected"),
    [
        ({"error": {"code": "X", "message": "m"}}, ("X", "m")),
        ({"error": "plain"}, (None, "plain")),
        ({"error": {"code": 5}}, (None, None)),
        ("not a dict", (None, None)),
        (None, (None, None)),
    ],
)
def test_envelope_error(body, expected) -> None:
    assert envelope_error(body) == expected


async def test_build_source_adapters_uses_settings() -> None:
    settings = Settings(search_api_base_url="http://example.test/api", search_result_limit=7)
    async with httpx.AsyncClient() as http:
        adapters = build_source_adapters(http, settings)

    assert [a.kind for a in adapters] == list(SourceKind.in_priority_order())
    assert all(a.limit == 7 for a in adapters)
