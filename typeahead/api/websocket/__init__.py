"""WebSocket session manager.

Used by the type-ahead WebSocket endpoint to track and tear down sessions.
"""

from typeahead.api.websocket.manager import SessionManager

__all__ = ["SessionManager"]
