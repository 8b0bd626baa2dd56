"""Search API: one-shot REST round and the interactive type-ahead WebSocket."""

import asyncio
import contextlib
import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, Request, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from typeahead.api.v1.dependencies import (
    get_search_service,
    get_session_factory,
    get_session_manager,
)
from typeahead.api.websocket.manager import SessionManager
from typeahead.application.dtos.search import SearchUiState
from typeahead.application.use_cases.search_session import (
    SearchService,
    SearchSession,
    SearchSessionFactory,
)
from typeahead.core.config import get_settings
from typeahead.core.limiter import limit_search
from typeahead.domain.exceptions import ValidationException
from typeahead.domain.value_objects import AggregatedResult
from typeahead.schemas.search import (
    AggregatedResultResponse,
    SearchClientMessage,
    SearchRoundResponse,
    SearchUiStateResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=SearchRoundResponse)
@limit_search
async def search(
    request: Request,
    search_svc: Annotated[SearchService, Depends(get_search_service)],
    q: str = Query(..., min_length=1, max_length=200),
    locale: str | None = Query(None, max_length=16, description="Display locale, e.g. en or fa"),
) -> SearchRoundResponse:
    """Run a single aggregated round across reports, individuals, organizations."""
    result = await search_svc.search(q, locale=locale)
    return SearchRoundResponse.from_round(result)


def _state_message(state: SearchUiState) -> dict[str, Any]:
    return {
        "type": "state",
        "state": SearchUiStateResponse.from_state(state).model_dump(mode="json"),
    }


def _navigate_message(result: AggregatedResult) -> dict[str, Any]:
    return {
        "type": "navigate",
        "url": result.url,
        "result": AggregatedResultResponse.from_result(result).model_dump(mode="json"),
    }


def _submit_message(url: str) -> dict[str, Any]:
    return {"type": "navigate", "url": url, "result": None}


def _error_message(message: str) -> dict[str, Any]:
    return {"type": "error", "message": message}


async def _drain_outbox(websocket: WebSocket, outbox: "asyncio.Queue[dict[str, Any]]") -> None:
    """Send queued messages in order until cancelled."""
    while True:
        message = await outbox.get()
        await websocket.send_json(message)


def _dispatch(
    session: SearchSession,
    raw: str,
    outbox: "asyncio.Queue[dict[str, Any]]",
) -> None:
    """Apply one client message to the session."""
    try:
        message = SearchClientMessage.model_validate_json(raw)
    except ValidationError as e:
        outbox.put_nowait(_error_message(f"Invalid message: {e.error_count()} error(s)"))
        return
    if message.type == "input":
        session.on_term_changed(message.term)
    elif message.type == "key":
        session.on_key(message.key)
    elif message.type == "submit":
        session.submit(message.term or None)
    else:
        try:
            session.select(message.id)
        except ValidationException as e:
            outbox.put_nowait(_error_message(e.message))


@router.websocket("/ws")
async def search_websocket(
    websocket: WebSocket,
    factory: Annotated[SearchSessionFactory, Depends(get_session_factory)],
    manager: Annotated[SessionManager, Depends(get_session_manager)],
) -> None:
    """Interactive type-ahead: one search session per connection.

    Client sends input/key/select/submit messages; the server pushes a state
    message after every change and a navigate message when a result is chosen
    or a term is submitted to the full search page.
    """
    locale = websocket.query_params.get("locale") or get_settings().default_locale
    outbox: asyncio.Queue[dict[str, Any]] = asyncio.Queue()
    session = factory.create(
        locale=locale,
        on_state_change=lambda state: outbox.put_nowait(_state_message(state)),
        on_select=lambda result: outbox.put_nowait(_navigate_message(result)),
        on_submit=lambda url: outbox.put_nowait(_submit_message(url)),
        session_id=websocket.scope.get("state", {}).get("request_id"),
    )
    await manager.connect(websocket, session)
    outbox.put_nowait(_state_message(session.state))
    sender = asyncio.create_task(_drain_outbox(websocket, outbox))
    try:
        while True:
            raw = await websocket.receive_text()
            _dispatch(session, raw, outbox)
    except WebSocketDisconnect:
        pass
    finally:
        sender.cancel()
        with contextlib.suppress(asyncio.CancelledError, Exception):
            await sender
        await manager.disconnect(websocket)
