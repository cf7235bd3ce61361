"""Repository protocol for download events."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, Sequence

from .models import DownloadEvent, DownloadRecord


class DownloadRepository(Protocol):
    async def add_event(
        self,
        *,
        user_id: str | None,
        catalogue_id: str | None,
        file_name: str,
        file_size: int | None,
        ip_address: str | None,
        user_agent: str | None,
        timestamp: datetime,
    ) -> DownloadEvent:
        ...

    async def exists_recent(
        self,
        *,
        user_id: str | None,
        ip_address: str | None,
        file_name: str,
        since: datetime,
    ) -> bool:
        ...

    async def count_events(self, *, catalogue_id: str | None = None, user_id: str | None = None) -> int:
        ...

    async def list_records(
        self,
        *,
        skip: int,
        limit: int,
        user_id: str | None = None,
    ) -> Sequence[DownloadRecord]:
        ...
