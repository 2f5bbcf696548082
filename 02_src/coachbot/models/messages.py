"""Inbound and outbound message models."""

from dataclasses import dataclass, field
from enum import Enum

MAX_BUTTONS = 3
BUTTON_TITLE_LIMIT = 20  # WhatsApp reply-button title limit


class MessageKind(str, Enum):
    """How the user produced the message."""

    TEXT = "text"
    BUTTON_REPLY = "button_reply"


@dataclass
class InboundMessage:
    """A transport-normalized message from a user."""

    user_id: str
    body: str
    kind: MessageKind = MessageKind.TEXT


@dataclass
class Reply:
    """A message for a user: text plus up to three quick-reply buttons."""

    text: str
    buttons: list[str] = field(default_factory=list)

    def __post_init__(self):
        if len(self.buttons) > MAX_BUTTONS:
            raise ValueError(f"At most {MAX_BUTTONS} buttons allowed, got {len(self.buttons)}")

    def to_dict(self) -> dict:
        return {"text": self.text, "buttons": list(self.buttons)}

    @classmethod
    def from_dict(cls, data: dict) -> "Reply":
        return cls(text=data.get("text", ""), buttons=list(data.get("buttons") or []))
