"""Messaging channel transport."""

from .whatsapp import (
    ITransport,
    WebhookFormatError,
    WhatsAppTransport,
    build_message_body,
    parse_webhook,
)

__all__ = [
    "ITransport",
    "WebhookFormatError",
    "WhatsAppTransport",
    "build_message_body",
    "parse_webhook",
]
