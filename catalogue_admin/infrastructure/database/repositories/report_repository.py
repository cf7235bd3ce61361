"""SQLAlchemy queries for the usage statistics."""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from catalogue_admin.db.models import Account as AccountModel
from catalogue_admin.db.models import Activity as ActivityModel
from catalogue_admin.db.models import Catalogue as CatalogueModel
from catalogue_admin.db.models import Download as DownloadModel
from catalogue_admin.modules.reports.models import StatusCount, TopDownload


class SqlReportRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _timestamps(self, stmt) -> list[datetime]:
        result = await self._session.execute(stmt)
        return [value for value in result.scalars().all() if value is not None]

    async def account_created_since(self, since: datetime) -> Sequence[datetime]:
        return await self._timestamps(
            select(AccountModel.created_at)
            .where(AccountModel.is_deleted.is_(False))
            .where(AccountModel.created_at >= since)
        )

    async def account_status_counts(self) -> Sequence[StatusCount]:
        stmt = (
            select(AccountModel.is_active, func.count())
            .where(AccountModel.is_deleted.is_(False))
            .group_by(AccountModel.is_active)
            .order_by(AccountModel.is_active.desc())
        )
        result = await self._session.execute(stmt)
        return [StatusCount(is_active=bool(active), count=int(count)) for active, count in result.all()]

    async def download_timestamps_since(self, since: datetime) -> Sequence[datetime]:
        return await self._timestamps(select(DownloadModel.timestamp).where(DownloadModel.timestamp >= since))

    async def activity_timestamps_since(self, kind: str, since: datetime) -> Sequence[datetime]:
        return await self._timestamps(
            select(ActivityModel.timestamp)
            .where(ActivityModel.type == kind)
            .where(ActivityModel.timestamp >= since)
        )

    async def top_downloads_since(self, since: datetime, limit: int) -> Sequence[TopDownload]:
        total = func.count(DownloadModel.id).label("total")
        stmt = (
            select(DownloadModel.catalogue_id, CatalogueModel.original_name, total)
            .outerjoin(CatalogueModel, CatalogueModel.id == DownloadModel.catalogue_id)
            .where(DownloadModel.catalogue_id.is_not(None))
            .where(DownloadModel.timestamp >= since)
            .group_by(DownloadModel.catalogue_id, CatalogueModel.original_name)
            .order_by(total.desc(), CatalogueModel.original_name)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [
            TopDownload(catalogue_id=str(catalogue_id), catalogue_name=name, count=int(count))
            for catalogue_id, name, count in result.all()
        ]
