"""Repository protocol for persisting activity log entries."""

from __future__ import annotations

from typing import Any, Protocol, Sequence

from .models import ActivityEntry


class ActivityRepository(Protocol):
    async def add(
        self,
        *,
        kind: str,
        user_id: str | None,
        admin_id: str | None,
        details: dict[str, Any] | None,
        ip_address: str | None,
        user_agent: str | None,
    ) -> ActivityEntry:
        ...

    async def list_entries(
        self,
        *,
        skip: int,
        limit: int,
        kind: str | None,
        user_id: str | None = None,
    ) -> Sequence[ActivityEntry]:
        ...

    async def count(self, *, kind: str | None = None) -> int:
        ...
