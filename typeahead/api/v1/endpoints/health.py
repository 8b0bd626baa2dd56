"""Health check endpoints. Used for liveness and readiness checks."""

from fastapi import APIRouter, Request

from typeahead.schemas.health import HealthResponse, ReadinessResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return simple ok status for liveness."""
    return HealthResponse()


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(request: Request) -> ReadinessResponse:
    """Return ok with the number of open type-ahead sessions."""
    manager = getattr(request.app.state, "session_manager", None)
    count = await manager.get_session_count() if manager is not None else 0
    return ReadinessResponse(active_sessions=count)
