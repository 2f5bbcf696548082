"""Member directory backed by the Arbox gym management API."""

import asyncio
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from ..errors import DirectoryError
from ..logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Member:
    """A gym member as listed in the directory."""

    first_name: str
    last_name: str
    phone: str
    birthday: str
    external_id: str

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class IMemberDirectory(Protocol):
    """Lookup of active members by name."""

    async def search(self, name_query: str) -> list[Member]:
        """Return members whose name contains the query. Raises DirectoryError."""
        ...


def match_members(members: list[Member], name_query: str) -> list[Member]:
    """Case-insensitive substring match on "first last" and "last first"."""
    query = " ".join(name_query.casefold().split())
    if not query:
        return []
    matches = []
    for member in members:
        forward = f"{member.first_name} {member.last_name}".casefold()
        reverse = f"{member.last_name} {member.first_name}".casefold()
        if query in forward or query in reverse:
            matches.append(member)
    return matches


def _member_from_api(raw: dict[str, Any]) -> Member:
    return Member(
        first_name=str(raw.get("first_name") or "").strip(),
        last_name=str(raw.get("last_name") or "").strip(),
        phone=str(raw.get("phone") or ""),
        birthday=str(raw.get("birthday") or ""),
        external_id=str(raw.get("user_fk") or raw.get("id") or ""),
    )


class ArboxDirectory:
    """Loads the active member list once per process and searches it in memory."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.arboxapp.com/index.php/api/v2",
        client: httpx.AsyncClient | None = None,
    ):
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            headers={"apiKey": api_key},
            timeout=15.0,
        )
        self._members: list[Member] | None = None
        self._load_lock = asyncio.Lock()

    async def search(self, name_query: str) -> list[Member]:
        members = await self._active_members()
        return match_members(members, name_query)

    async def _active_members(self) -> list[Member]:
        if self._members is not None:
            return self._members

        async with self._load_lock:
            if self._members is None:
                self._members = await self._fetch_active_members()
                logger.info("Loaded %s active members from directory", len(self._members))
        return self._members

    async def _fetch_active_members(self) -> list[Member]:
        try:
            response = await self._client.get("/users", params={"staff": "false", "active": 1})
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as e:
            raise DirectoryError(f"Member directory request failed: {e}") from e
        except ValueError as e:
            raise DirectoryError(f"Member directory returned invalid JSON: {e}") from e

        rows = body.get("data", []) if isinstance(body, dict) else body
        if not isinstance(rows, list):
            raise DirectoryError("Member directory returned an unexpected payload")
        return [_member_from_api(row) for row in rows if isinstance(row, dict)]

    async def close(self) -> None:
        await self._client.aclose()
