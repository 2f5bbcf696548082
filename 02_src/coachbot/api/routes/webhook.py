"""WhatsApp webhook routes."""

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import PlainTextResponse

from ...app import Application
from ...logging_config import get_logger
from ...transport import WebhookFormatError, parse_webhook

logger = get_logger(__name__)


def create_webhook_router(app: Application) -> APIRouter:
    """Create webhook router."""
    router = APIRouter(tags=["webhook"])

    @router.get("/webhook", response_class=PlainTextResponse)
    async def verify_webhook(
        mode: str | None = Query(None, alias="hub.mode"),
        token: str | None = Query(None, alias="hub.verify_token"),
        challenge: str | None = Query(None, alias="hub.challenge"),
    ) -> str:
        """Meta subscription handshake: echo the challenge when the token matches."""
        if mode == "subscribe" and token and token == app.settings.verify_token:
            logger.info("Webhook verified")
            return challenge or ""
        raise HTTPException(status_code=403, detail="Verification failed")

    @router.post("/webhook")
    async def receive_webhook(request: Request) -> dict:
        """Accept a WhatsApp delivery and run the turn before acknowledging."""
        try:
            payload = await request.json()
        except ValueError:
            raise HTTPException(status_code=404, detail="Invalid JSON body")
        if not isinstance(payload, dict):
            raise HTTPException(status_code=404, detail="Invalid webhook body")

        try:
            message = parse_webhook(payload, app.settings.phone_number_id or None)
        except WebhookFormatError as e:
            logger.warning("Rejected webhook: %s", e)
            raise HTTPException(status_code=404, detail=str(e))

        if message is None:
            return {"status": "ignored"}

        try:
            await app.orchestrator.handle_inbound(message)
            return {"status": "ok"}
        except Exception as e:
            logger.error("Webhook processing failed: %s", e, exc_info=True)
            raise HTTPException(status_code=500, detail=str(e))

    return router
