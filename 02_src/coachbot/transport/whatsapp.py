"""WhatsApp Cloud API transport: webhook parsing and message delivery."""

from typing import Any, Protocol

import httpx

from ..errors import DeliveryError
from ..logging_config import get_logger
from ..models import BUTTON_TITLE_LIMIT, MAX_BUTTONS, InboundMessage, MessageKind, Reply

logger = get_logger(__name__)


class WebhookFormatError(ValueError):
    """Webhook body is not a WhatsApp Business payload we understand."""


class ITransport(Protocol):
    """Outbound message delivery."""

    async def send(self, user_id: str, reply: Reply) -> None:
        """Deliver a reply. Raises DeliveryError when the channel rejects it."""
        ...

    async def close(self) -> None:
        """Release network resources."""
        ...


def parse_webhook(payload: dict[str, Any], phone_number_id: str | None = None) -> InboundMessage | None:
    """Convert a webhook body into an InboundMessage.

    Returns None for deliveries the bot should acknowledge and ignore
    (status callbacks, other phone numbers, unsupported message types).
    Raises WebhookFormatError for bodies that are not WhatsApp payloads.
    """
    if payload.get("object") != "whatsapp_business_account":
        raise WebhookFormatError(f"Invalid webhook object: {payload.get('object')!r}")

    try:
        value = payload["entry"][0]["changes"][0]["value"]
    except (KeyError, IndexError, TypeError):
        raise WebhookFormatError("Invalid webhook structure") from None

    metadata = value.get("metadata") or {}
    if phone_number_id and metadata.get("phone_number_id") not in (None, phone_number_id):
        logger.info("Message not for our phone number: %s", metadata.get("phone_number_id"))
        return None

    messages = value.get("messages")
    if not messages:
        if value.get("statuses"):
            return None
        raise WebhookFormatError("Webhook carries neither messages nor statuses")

    message = messages[0]
    sender = message.get("from")
    if not sender:
        raise WebhookFormatError("Message without sender")

    interactive = message.get("interactive") or {}
    if message.get("type") == "interactive" and interactive.get("type") == "button_reply":
        title = (interactive.get("button_reply") or {}).get("title", "")
        return InboundMessage(user_id=sender, body=title, kind=MessageKind.BUTTON_REPLY)

    if message.get("type") == "button":
        # Template quick-reply buttons
        text = (message.get("button") or {}).get("text", "")
        return InboundMessage(user_id=sender, body=text, kind=MessageKind.BUTTON_REPLY)

    text_body = (message.get("text") or {}).get("body")
    if text_body:
        return InboundMessage(user_id=sender, body=text_body, kind=MessageKind.TEXT)

    logger.info("Unsupported message type: %s", message.get("type"))
    return None


def build_message_body(to: str, reply: Reply) -> dict[str, Any]:
    """Build the Cloud API request body for a reply."""
    if reply.buttons:
        return {
            "messaging_product": "whatsapp",
            "recipient_type": "individual",
            "to": to,
            "type": "interactive",
            "interactive": {
                "type": "button",
                "body": {"text": reply.text},
                "action": {
                    "buttons": [
                        {
                            "type": "reply",
                            "reply": {
                                "id": f"btn_{index}",
                                "title": title[:BUTTON_TITLE_LIMIT],
                            },
                        }
                        for index, title in enumerate(reply.buttons[:MAX_BUTTONS])
                    ]
                },
            },
        }

    return {
        "messaging_product": "whatsapp",
        "recipient_type": "individual",
        "to": to,
        "type": "text",
        "text": {"body": reply.text},
    }


class WhatsAppTransport:
    """Sends replies through the WhatsApp Cloud API."""

    def __init__(
        self,
        token: str,
        phone_number_id: str,
        base_url: str = "https://graph.facebook.com/v17.0",
        client: httpx.AsyncClient | None = None,
    ):
        self._phone_number_id = phone_number_id
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            headers={"Authorization": f"Bearer {token}"},
            timeout=10.0,
        )

    async def send(self, user_id: str, reply: Reply) -> None:
        """Deliver a reply. Raises DeliveryError when the API rejects it."""
        body = build_message_body(user_id, reply)
        try:
            response = await self._client.post(f"/{self._phone_number_id}/messages", json=body)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise DeliveryError(
                f"WhatsApp API returned {e.response.status_code}: {e.response.text[:200]}"
            ) from e
        except httpx.HTTPError as e:
            raise DeliveryError(f"WhatsApp API request failed: {e}") from e

        logger.debug("Message sent to %s: %s", user_id, response.text[:100])

    async def close(self) -> None:
        await self._client.aclose()
