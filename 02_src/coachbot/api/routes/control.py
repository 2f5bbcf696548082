"""Control API routes."""

from typing import Any

from pydantic import BaseModel
from fastapi import APIRouter, HTTPException

from ...app import Application


class StatusResponse(BaseModel):
    """Response model for status."""

    status: str


class PollResponse(BaseModel):
    """How many messages one timer pass sent."""

    deferred_delivered: int
    reminders_sent: int


# Global SIM instance (will be set by main app)
_sim_instance: Any = None


def set_sim_instance(sim: Any) -> None:
    """Set the global SIM instance."""
    global _sim_instance
    _sim_instance = sim


def get_sim_instance() -> Any:
    """Get the global SIM instance."""
    return _sim_instance


def create_control_router(app: Application) -> APIRouter:
    """Create control router."""
    router = APIRouter(prefix="/api/control", tags=["control"])

    @router.post("/reset", response_model=StatusResponse)
    async def reset_system() -> dict:
        """Drop all sessions, pending messages and trace data."""
        try:
            await app.reset()
            return {"status": "ok"}
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    @router.post("/timers/poll", response_model=PollResponse)
    async def poll_timers() -> dict:
        """Run one deferred-message pass and one reminder pass now."""
        delivered = await app.scheduler.poll_once()
        reminded = await app.reminders.poll_once()
        return {"deferred_delivered": delivered, "reminders_sent": reminded}

    @router.post("/sim/{action}", response_model=StatusResponse)
    async def control_sim(action: str) -> dict:
        """Start or stop the member simulator."""
        if action not in ("start", "stop"):
            raise HTTPException(status_code=404, detail=f"Unknown SIM action: {action}")
        if not _sim_instance:
            raise HTTPException(status_code=404, detail="SIM not configured")
        try:
            await getattr(_sim_instance, action)()
            return {"status": "ok"}
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    return router
