"""Observability API routes."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel
from fastapi import APIRouter, HTTPException, Query

from ...app import Application
from ...dialogue import render_summary


class TraceEventResponse(BaseModel):
    """Response model for trace event."""

    id: str
    event_type: str
    actor: str
    data: dict[str, Any]
    timestamp: datetime


class SessionResponse(BaseModel):
    """Response model for a session snapshot."""

    session: dict[str, Any]
    summary: str
    pending_deferred: int
    reminder_armed: bool


def create_observability_router(app: Application) -> APIRouter:
    """Create observability router."""
    router = APIRouter(prefix="/api", tags=["observability"])

    @router.get("/trace-events", response_model=list[TraceEventResponse])
    async def get_trace_events(
        after: str | None = Query(None, description="ISO timestamp filter"),
        limit: int = Query(100, ge=1, le=1000),
        event_type: str | None = Query(None, description="Filter by event type"),
        actor: str | None = Query(None, description="Filter by actor"),
    ) -> list[dict]:
        """Get trace events with optional filters."""
        try:
            after_dt = None
            if after:
                try:
                    after_dt = datetime.fromisoformat(after)
                except ValueError:
                    raise HTTPException(
                        status_code=400, detail="Invalid after timestamp format"
                    )

            event_types = [event_type] if event_type else None

            events = await app.storage.get_trace_events(
                after=after_dt,
                event_types=event_types,
                actor=actor,
                limit=limit,
            )

            return [
                {
                    "id": e.id,
                    "event_type": e.event_type,
                    "actor": e.actor,
                    "data": e.data,
                    "timestamp": e.timestamp.isoformat(),
                }
                for e in events
            ]

        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    @router.get("/sessions/{user_id}", response_model=SessionResponse)
    async def get_session(user_id: str) -> dict:
        """Snapshot of one user's session with the rendered progress summary."""
        session = app.sessions.get(user_id)
        if session is None:
            raise HTTPException(status_code=404, detail="Session not found")

        async with app.sessions.lock(user_id):
            return {
                "session": session.snapshot(),
                "summary": render_summary(session, app.clock.now()),
                "pending_deferred": app.scheduler.pending_count(user_id),
                "reminder_armed": app.reminders.is_armed(user_id),
            }

    return router
