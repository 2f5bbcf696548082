"""Messaging API routes."""

from pydantic import BaseModel
from fastapi import APIRouter, HTTPException

from ...app import Application
from ...models import MessageKind


class MessageRequest(BaseModel):
    """Request model for sending a message."""

    user_id: str
    text: str
    kind: MessageKind = MessageKind.TEXT


class MessageResponse(BaseModel):
    """Response model for message. ``response`` is None when nothing is sent."""

    response: str | None
    buttons: list[str] = []


def create_messaging_router(app: Application) -> APIRouter:
    """Create messaging router."""
    router = APIRouter(prefix="/api", tags=["messaging"])

    @router.post("/messages", response_model=MessageResponse)
    async def send_message(request: MessageRequest) -> dict:
        """Run one turn for a user and return the reply without sending it."""
        try:
            reply = await app.orchestrator.process_message(
                user_id=request.user_id, raw=request.text, kind=request.kind
            )
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        if reply is None:
            return {"response": None, "buttons": []}
        return {"response": reply.text, "buttons": reply.buttons}

    return router
