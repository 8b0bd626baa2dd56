"""WebSocket session manager.

Holds one SearchSession per connected search surface. Use via
app.state.session_manager (set in lifespan). Disconnecting a socket closes
its session so late round completions become no-ops.
"""

from __future__ import annotations

import asyncio
import logging

from fastapi import WebSocket

from typeahead.application.use_cases.search_session import SearchSession

logger = logging.getLogger(__name__)


class SessionManager:
    """Tracks live type-ahead sessions keyed by their WebSocket.

    Registry access is lock-protected; sessions themselves are only driven
    from their own connection handler.
    """

    def __init__(self) -> None:
        self._sessions: dict[WebSocket, SearchSession] = {}
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket, session: SearchSession) -> None:
        """Accept the socket and register its session (mount)."""
        await websocket.accept()
        async with self._lock:
            self._sessions[websocket] = session
        logger.debug("Session %s connected", session.session_id)

    async def disconnect(self, websocket: WebSocket) -> None:
        """Unregister and close the socket's session (unmount)."""
        async with self._lock:
            session = self._sessions.pop(websocket, None)
        if session is not None:
            session.close()
            logger.debug("Session %s disconnected", session.session_id)

    async def close_all(self) -> None:
        """Close every session (shutdown)."""
        async with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for session in sessions:
            session.close()
        if sessions:
            logger.info("Closed %d search sessions", len(sessions))

    async def get_session_count(self) -> int:
        async with self._lock:
            return len(self._sessions)
