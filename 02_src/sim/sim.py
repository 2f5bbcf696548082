"""SIM implementation - scripted virtual members walking the coaching flow."""

import asyncio
import random
from dataclasses import dataclass
from typing import Protocol

import httpx

from coachbot.logging_config import get_logger
from coachbot.tracker import ITracker

logger = get_logger(__name__)


@dataclass(frozen=True)
class VirtualMember:
    """A simulated member and the answers they give, in order."""

    user_id: str
    script: tuple[str, ...]


DEFAULT_MEMBERS = (
    VirtualMember(
        user_id="972500000001",
        script=("Hi", "Dana Levi", "Yes", "Yes", "Strength progress", "3-4",
                "80kg", "I can answer", "60", "Remind me tomorrow", "120kg",
                "summary"),
    ),
    VirtualMember(
        user_id="972500000002",
        script=("Hello", "Noam Cohen", "yes", "no", "what should I eat before training?"),
    ),
    VirtualMember(
        user_id="972500000003",
        script=("Hey", "Maya", "1", "Yes", "Yes", "Weight loss / health", "Yes",
                "1-2", "coach", "back", "restart"),
    ),
)


class ISim(Protocol):
    """Generate test traffic through the messaging API."""

    async def start(self) -> None:
        """Start the scripted scenario."""
        ...

    async def stop(self) -> None:
        """Stop scenario."""
        ...


class Sim:
    """Runs every member's script concurrently against ``/api/messages``."""

    def __init__(
        self,
        api_url: str = "http://localhost:8000",
        tracker: ITracker | None = None,
        members: tuple[VirtualMember, ...] = DEFAULT_MEMBERS,
        delay_range: tuple[float, float] = (1.0, 3.0),
    ):
        self._api_url = api_url
        self._tracker = tracker
        self._members = members
        self._delay_range = delay_range
        self._running = False
        self._task: asyncio.Task | None = None
        self._client: httpx.AsyncClient | None = None

    def set_tracker(self, tracker: ITracker) -> None:
        """Inject tracker for SIM trace events."""
        self._tracker = tracker

    async def start(self) -> None:
        """Start the scripted scenario."""
        if self._running:
            return

        self._running = True
        self._client = httpx.AsyncClient()
        self._task = asyncio.create_task(self._run_scenario())

    async def stop(self) -> None:
        """Stop scenario."""
        self._running = False

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        if self._client:
            await self._client.aclose()
            self._client = None

    async def _run_scenario(self) -> None:
        summary = {
            "scenario": "scripted_members",
            "member_count": len(self._members),
            "message_count": sum(len(m.script) for m in self._members),
        }
        try:
            if self._tracker:
                await self._tracker.track("sim_started", "sim", summary)
            await asyncio.gather(*(self._run_member(m) for m in self._members))
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.error("SIM scenario error: %s", e)
        finally:
            self._running = False
            if self._tracker:
                await self._tracker.track("sim_completed", "sim", summary)

    async def _run_member(self, member: VirtualMember) -> None:
        for text in member.script:
            if not self._running:
                break
            await self._send_message(member.user_id, text)
            await asyncio.sleep(random.uniform(*self._delay_range))

    async def _send_message(self, user_id: str, text: str) -> dict | None:
        """Send a message via HTTP API."""
        if not self._client:
            return None

        try:
            response = await self._client.post(
                f"{self._api_url}/api/messages",
                json={"user_id": user_id, "text": text},
                timeout=30.0,
            )
        except httpx.HTTPError as e:
            logger.error("SIM: Failed to send message: %s", e)
            return None

        if response.status_code != 200:
            logger.error("SIM: Error sending message: %s", response.status_code)
            return None

        data = response.json()
        logger.info("SIM: %s -> %s", user_id, text)
        logger.info("SIM: Response: %s %s", data.get("response"), data.get("buttons") or "")
        return data
