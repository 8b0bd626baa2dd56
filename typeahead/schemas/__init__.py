"""API schemas (pydantic request/response and WebSocket message models)."""
