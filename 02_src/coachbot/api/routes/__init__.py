"""API routers."""

from . import control, messaging, observability, webhook

__all__ = ["control", "messaging", "observability", "webhook"]
