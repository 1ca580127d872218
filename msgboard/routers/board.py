"""
Board HTTP endpoints.

Read-only views for clients that want the message history before (or
without) opening a Socket.IO connection.
"""
from datetime import datetime, timezone

from fastapi import APIRouter, Request

from msgboard.schemas import HealthResponse, MessageListResponse

router = APIRouter(prefix="/api", tags=["Board"])


@router.get(
    "/messages",
    response_model=MessageListResponse,
    summary="Message History",
    description="Public message history, most recent first (at most 10 messages).",
)
async def list_messages(request: Request):
    messages = request.app.state.messages.list()
    return {"messages": messages, "count": len(messages)}


@router.get("/health", response_model=HealthResponse, summary="Health Check")
async def health_check(request: Request):
    """Basic liveness information."""
    namespace = request.app.state.namespace
    return {
        "status": "healthy",
        "messages": len(request.app.state.messages),
        "connections": namespace.connection_count,
        "timestamp": datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
    }
