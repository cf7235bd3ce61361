"""SQLAlchemy repository for download events."""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from catalogue_admin.db.models import Account as AccountModel
from catalogue_admin.db.models import Catalogue as CatalogueModel
from catalogue_admin.db.models import Download as DownloadModel
from catalogue_admin.modules.downloads.models import DownloadEvent, DownloadRecord


class SqlDownloadRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

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
        model = DownloadModel(
            user_id=user_id,
            catalogue_id=catalogue_id,
            file_name=file_name,
            file_size=file_size,
            ip_address=ip_address,
            user_agent=user_agent,
            timestamp=timestamp,
        )
        self._session.add(model)
        await self._session.flush()
        return DownloadEvent.from_orm(model)

    async def exists_recent(
        self,
        *,
        user_id: str | None,
        ip_address: str | None,
        file_name: str,
        since: datetime,
    ) -> bool:
        same_origin = []
        if user_id is not None:
            same_origin.append(DownloadModel.user_id == user_id)
        if ip_address:
            same_origin.append(DownloadModel.ip_address == ip_address)
        if not same_origin:
            return False

        stmt = (
            select(DownloadModel.id)
            .where(or_(*same_origin))
            .where(DownloadModel.file_name == file_name)
            .where(DownloadModel.timestamp >= since)
            .limit(1)
        )
        result = await self._session.execute(stmt)
        return result.first() is not None

    async def count_events(self, *, catalogue_id: str | None = None, user_id: str | None = None) -> int:
        stmt = select(func.count()).select_from(DownloadModel)
        if catalogue_id is not None:
            stmt = stmt.where(DownloadModel.catalogue_id == catalogue_id)
        if user_id is not None:
            stmt = stmt.where(DownloadModel.user_id == user_id)
        result = await self._session.execute(stmt)
        return int(result.scalar_one())

    async def list_records(
        self,
        *,
        skip: int,
        limit: int,
        user_id: str | None = None,
    ) -> Sequence[DownloadRecord]:
        stmt = (
            select(
                DownloadModel,
                func.coalesce(AccountModel.name, AccountModel.username),
                AccountModel.email,
                CatalogueModel.original_name,
            )
            .outerjoin(AccountModel, AccountModel.id == DownloadModel.user_id)
            .outerjoin(CatalogueModel, CatalogueModel.id == DownloadModel.catalogue_id)
            .order_by(DownloadModel.timestamp.desc())
            .offset(skip)
            .limit(limit)
        )
        if user_id is not None:
            stmt = stmt.where(DownloadModel.user_id == user_id)
        result = await self._session.execute(stmt)
        return [
            DownloadRecord(
                event=DownloadEvent.from_orm(model),
                user_name=user_name,
                user_email=user_email,
                catalogue_name=catalogue_name,
            )
            for model, user_name, user_email, catalogue_name in result.all()
        ]
