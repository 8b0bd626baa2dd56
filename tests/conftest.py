"""Pytest configuration and fixtures for the type-ahead aggregator.

Source adapters are replaced with in-memory fakes, so no collections API is
needed. HTTP tests use typeahead.main:app through httpx's ASGI transport.
"""

from collections.abc import Callable
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

from typeahead.api.v1.dependencies import get_source_adapters
from typeahead.application.dtos.search import SearchUiState
from typeahead.application.services.aggregator import FanOutAggregator
from typeahead.application.services.normalizer import ResultNormalizer
from typeahead.application.use_cases.search_session import SearchSession
from typeahead.domain.enums import SourceKind
from typeahead.domain.value_objects import AggregatedResult
from typeahead.main import app

from tests.fakes import FakeSourceAdapter, make_adapters, person_item, report_item

# Short enough to keep tests fast, long enough to type "within" it.
TEST_DEBOUNCE_SECONDS = 0.03


@pytest.fixture
def adapters() -> dict[SourceKind, FakeSourceAdapter]:
    """Two reports, one individual, no organizations (the "Tehran" round)."""
    return make_adapters(
        reports=[
            report_item("r1", "گزارش ۱", "Protest in Tehran", incidentLocationEn="Tehran"),
            report_item("r2", "گزارش ۲", "Arrests in Tehran", incidentDate="2024-01-05"),
        ],
        individuals=[
            person_item("p1", "علی", "Ali Rezaei", currentRole="Judge"),
        ],
        organizations=[],
    )


class SessionRecorder:
    """Collects what a session publishes: states, selections, submits and analytics events."""

    def __init__(self) -> None:
        self.states: list[SearchUiState] = []
        self.selected: list[AggregatedResult] = []
        self.submitted: list[str] = []
        self.events: list[tuple[str, dict[str, Any]]] = []

    def on_state_change(self, state: SearchUiState) -> None:
        self.states.append(state)

    def on_select(self, result: AggregatedResult) -> None:
        self.selected.append(result)

    def on_submit(self, url: str) -> None:
        self.submitted.append(url)

    def capture(self, event: str, properties: dict[str, Any]) -> None:
        self.events.append((event, properties))


@pytest.fixture
def recorder() -> SessionRecorder:
    return SessionRecorder()


@pytest.fixture
async def make_session(
    adapters: dict[SourceKind, FakeSourceAdapter], recorder: SessionRecorder
) -> Callable[..., SearchSession]:
    """Build a SearchSession over the adapters fixture, wired to the recorder."""
    sessions: list[SearchSession] = []

    def _make(**kwargs: Any) -> SearchSession:
        kwargs.setdefault("debounce_seconds", TEST_DEBOUNCE_SECONDS)
        kwargs.setdefault("on_state_change", recorder.on_state_change)
        kwargs.setdefault("on_select", recorder.on_select)
        kwargs.setdefault("on_submit", recorder.on_submit)
        kwargs.setdefault("analytics", recorder)
        locale = kwargs.pop("locale", "en")
        session = SearchSession(
            FanOutAggregator(list(adapters.values()), ResultNormalizer(locale)),
            **kwargs,
        )
        sessions.append(session)
        return session

    yield _make
    for session in sessions:
        session.close()


@pytest.fixture
async def client(adapters: dict[SourceKind, FakeSourceAdapter]) -> AsyncClient:
    """Async HTTP client against the FastAPI app with fake source adapters."""
    app.dependency_overrides[get_source_adapters] = lambda: list(adapters.values())
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
