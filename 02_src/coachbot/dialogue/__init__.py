"""Dialogue module."""

from .fallback import FallbackDelegate, IFallbackDelegate, build_system_prompt
from .orchestrator import IOrchestrator, Orchestrator
from .summary import render_summary

__all__ = [
    "FallbackDelegate",
    "IFallbackDelegate",
    "IOrchestrator",
    "Orchestrator",
    "build_system_prompt",
    "render_summary",
]
