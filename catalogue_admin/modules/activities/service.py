"""Domain service for the append-only activity log."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from catalogue_admin.modules.catalogues.models import Page, Pagination
from catalogue_admin.modules.common import RequestOrigin

from .models import ActivityEntry, ActivityKind
from .repository import ActivityRepository

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ActivityService:
    repository: ActivityRepository

    @classmethod
    def with_session(cls, session: AsyncSession) -> "ActivityService":
        from catalogue_admin.infrastructure.database.repositories.activity_repository import (
            SqlActivityRepository,
        )

        return cls(SqlActivityRepository(session))

    async def create(
        self,
        kind: ActivityKind | str,
        *,
        user_id: Optional[str] = None,
        admin_id: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        origin: Optional[RequestOrigin] = None,
    ) -> ActivityEntry:
        origin = origin or RequestOrigin()
        return await self.repository.add(
            kind=ActivityKind(kind).value,
            user_id=user_id,
            admin_id=admin_id,
            details=details,
            ip_address=origin.address,
            user_agent=origin.client,
        )

    async def list_activities(
        self,
        *,
        page: int = 1,
        limit: int = 20,
        kind: Optional[str] = None,
    ) -> Page[ActivityEntry]:
        page = max(page, 1)
        limit = max(limit, 1)
        entries = await self.repository.list_entries(skip=(page - 1) * limit, limit=limit, kind=kind)
        total = await self.repository.count(kind=kind)
        return Page(items=entries, pagination=Pagination.build(page, limit, total))

    async def recent(self, limit: int = 10, *, user_id: Optional[str] = None) -> Sequence[ActivityEntry]:
        return await self.repository.list_entries(skip=0, limit=limit, kind=None, user_id=user_id)

    async def count(self) -> int:
        return await self.repository.count()


async def log_activity(
    session_factory: async_sessionmaker[AsyncSession],
    kind: ActivityKind | str,
    *,
    user_id: Optional[str] = None,
    admin_id: Optional[str] = None,
    details: Optional[dict[str, Any]] = None,
    origin: Optional[RequestOrigin] = None,
) -> Optional[ActivityEntry]:
    """Append an activity entry in its own transaction.

    Never raises: a failed write is logged and ``None`` is returned.
    """
    try:
        async with session_factory() as session:
            async with session.begin():
                return await ActivityService.with_session(session).create(
                    kind,
                    user_id=user_id,
                    admin_id=admin_id,
                    details=details,
                    origin=origin,
                )
    except (SQLAlchemyError, ValueError):
        logger.exception("Activity log failed for %s", kind)
        return None
