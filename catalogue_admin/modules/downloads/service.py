"""Download tracking and audit queries."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from catalogue_admin.core.errors import TrackingFailedError
from catalogue_admin.db.models import utcnow
from catalogue_admin.modules.accounts.models import Actor
from catalogue_admin.modules.catalogues.models import CatalogueEntry, Page, Pagination
from catalogue_admin.modules.common import RequestOrigin

from .models import DownloadEvent, DownloadRecord, LegacyDownloadItem, LegacyTrackingResult
from .repository import DownloadRepository

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DownloadTracker:
    """Records download events in a unit of work separate from the request session.

    Every accepted access inserts one event and bumps the catalogue counter
    by one.  The legacy batch endpoint instead suppresses repeats from the
    same user or address inside a trailing window and never touches counters.
    Store errors surface as ``TrackingFailedError`` for the caller to swallow.
    """

    session_factory: async_sessionmaker[AsyncSession]
    dedupe_window: timedelta = timedelta(hours=24)
    clock: Callable[[], datetime] = field(default=utcnow)

    async def record(
        self,
        actor: Optional[Actor],
        entry: CatalogueEntry,
        origin: RequestOrigin,
    ) -> DownloadEvent:
        from catalogue_admin.infrastructure.database.repositories.catalogue_repository import (
            SqlCatalogueRepository,
        )
        from catalogue_admin.infrastructure.database.repositories.download_repository import (
            SqlDownloadRepository,
        )

        try:
            async with self.session_factory() as session:
                async with session.begin():
                    event = await SqlDownloadRepository(session).add_event(
                        user_id=actor.id if actor else None,
                        catalogue_id=entry.id,
                        file_name=entry.original_name,
                        file_size=entry.file_size,
                        ip_address=origin.address,
                        user_agent=origin.client,
                        timestamp=self.clock(),
                    )
                    await SqlCatalogueRepository(session).increment_download_count(entry.id)
        except SQLAlchemyError as exc:
            raise TrackingFailedError(f"could not record download of catalogue {entry.id}") from exc
        return event

    async def record_legacy_batch(
        self,
        actor: Optional[Actor],
        items: Iterable[LegacyDownloadItem],
        origin: RequestOrigin,
        *,
        downloaded_at: Optional[datetime] = None,
    ) -> LegacyTrackingResult:
        from catalogue_admin.infrastructure.database.repositories.catalogue_repository import (
            SqlCatalogueRepository,
        )
        from catalogue_admin.infrastructure.database.repositories.download_repository import (
            SqlDownloadRepository,
        )

        items = list(items)
        now = self.clock()
        if downloaded_at is not None and downloaded_at.tzinfo is not None:
            downloaded_at = downloaded_at.astimezone(timezone.utc)
        window_start = now - self.dedupe_window
        user_id = actor.id if actor else None
        recorded = suppressed = 0
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    downloads = SqlDownloadRepository(session)
                    catalogues = SqlCatalogueRepository(session)
                    for item in items:
                        # 先查后写，并发的重复请求可能同时通过检查
                        if await downloads.exists_recent(
                            user_id=user_id,
                            ip_address=origin.address,
                            file_name=item.title,
                            since=window_start,
                        ):
                            suppressed += 1
                            continue
                        matches = await catalogues.find_active_by_original_names([item.title])
                        entry = matches[0] if matches else None
                        await downloads.add_event(
                            user_id=user_id,
                            catalogue_id=entry.id if entry else None,
                            file_name=item.title,
                            file_size=entry.file_size if entry else None,
                            ip_address=origin.address,
                            user_agent=origin.client,
                            timestamp=downloaded_at or now,
                        )
                        recorded += 1
        except SQLAlchemyError as exc:
            raise TrackingFailedError("could not record legacy download batch") from exc
        return LegacyTrackingResult(submitted=len(items), recorded=recorded, suppressed=suppressed)


@dataclass(slots=True)
class DownloadQueryService:
    repository: DownloadRepository

    @classmethod
    def with_session(cls, session: AsyncSession) -> "DownloadQueryService":
        from catalogue_admin.infrastructure.database.repositories.download_repository import (
            SqlDownloadRepository,
        )

        return cls(SqlDownloadRepository(session))

    async def list_downloads(self, *, page: int = 1, limit: int = 20) -> Page[DownloadRecord]:
        page = max(page, 1)
        limit = max(limit, 1)
        records = await self.repository.list_records(skip=(page - 1) * limit, limit=limit)
        total = await self.repository.count_events()
        return Page(items=records, pagination=Pagination.build(page, limit, total))

    async def recent(self, limit: int = 10, *, user_id: Optional[str] = None) -> Sequence[DownloadRecord]:
        return await self.repository.list_records(skip=0, limit=limit, user_id=user_id)

    async def count(self, *, catalogue_id: Optional[str] = None) -> int:
        return await self.repository.count_events(catalogue_id=catalogue_id)
