"""SQLAlchemy repository for the activity log."""

from __future__ import annotations

import json
from typing import Any, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from catalogue_admin.db.models import Activity as ActivityModel
from catalogue_admin.modules.activities.models import ActivityEntry


class SqlActivityRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

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
        model = ActivityModel(
            type=kind,
            user_id=user_id,
            admin_id=admin_id,
            details=json.dumps(details, ensure_ascii=False, default=str) if details else None,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return ActivityEntry.from_orm(model)

    async def list_entries(
        self,
        *,
        skip: int,
        limit: int,
        kind: str | None,
        user_id: str | None = None,
    ) -> Sequence[ActivityEntry]:
        stmt = select(ActivityModel)
        if kind:
            stmt = stmt.where(ActivityModel.type == kind)
        if user_id is not None:
            stmt = stmt.where(ActivityModel.user_id == user_id)
        stmt = stmt.order_by(ActivityModel.timestamp.desc(), ActivityModel.id.desc()).offset(skip).limit(limit)
        result = await self._session.execute(stmt)
        return [ActivityEntry.from_orm(model) for model in result.scalars().all()]

    async def count(self, *, kind: str | None = None) -> int:
        stmt = select(func.count()).select_from(ActivityModel)
        if kind:
            stmt = stmt.where(ActivityModel.type == kind)
        result = await self._session.execute(stmt)
        return int(result.scalar_one())
