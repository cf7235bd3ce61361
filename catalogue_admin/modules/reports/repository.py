"""Read-only queries backing the usage statistics."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, Sequence

from .models import StatusCount, TopDownload


class ReportRepository(Protocol):
    async def account_created_since(self, since: datetime) -> Sequence[datetime]:
        ...

    async def account_status_counts(self) -> Sequence[StatusCount]:
        ...

    async def download_timestamps_since(self, since: datetime) -> Sequence[datetime]:
        ...

    async def activity_timestamps_since(self, kind: str, since: datetime) -> Sequence[datetime]:
        ...

    async def top_downloads_since(self, since: datetime, limit: int) -> Sequence[TopDownload]:
        ...
