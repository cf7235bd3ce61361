"""SQLAlchemy implementation of the catalogue registry."""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from catalogue_admin.db.models import Catalogue as CatalogueModel
from catalogue_admin.db.models import Download as DownloadModel
from catalogue_admin.modules.catalogues.models import CatalogueEntry, CounterMismatch


class SqlCatalogueRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        file_name: str,
        original_name: str,
        file_path: str,
        file_size: int,
        mime_type: str,
        uploaded_by: str | None,
        description: str | None,
        category: str | None,
    ) -> CatalogueEntry:
        model = CatalogueModel(
            file_name=file_name,
            original_name=original_name,
            file_path=file_path,
            file_size=file_size,
            mime_type=mime_type,
            uploaded_by=uploaded_by,
            description=description,
            category=category,
            is_active=True,
            download_count=0,
        )
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return CatalogueEntry.from_orm(model)

    async def get_by_id(self, catalogue_id: str) -> CatalogueEntry | None:
        stmt = select(CatalogueModel).where(CatalogueModel.id == catalogue_id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return CatalogueEntry.from_orm(model) if model else None

    async def list_active(
        self,
        *,
        skip: int,
        limit: int,
        search: str | None,
        category: str | None,
    ) -> tuple[Sequence[CatalogueEntry], int]:
        conditions = [CatalogueModel.is_active.is_(True)]
        if search:
            conditions.append(
                or_(
                    CatalogueModel.file_name.icontains(search, autoescape=True),
                    CatalogueModel.original_name.icontains(search, autoescape=True),
                    CatalogueModel.description.icontains(search, autoescape=True),
                )
            )
        if category:
            conditions.append(CatalogueModel.category == category)

        stmt = (
            select(CatalogueModel)
            .where(*conditions)
            .order_by(CatalogueModel.uploaded_at.desc())
            .offset(skip)
            .limit(limit)
        )
        count_stmt = select(func.count()).select_from(CatalogueModel).where(*conditions)

        result = await self._session.execute(stmt)
        total = await self._session.execute(count_stmt)
        entries = [CatalogueEntry.from_orm(model) for model in result.scalars().all()]
        return entries, int(total.scalar_one())

    async def find_active_by_original_names(self, names: Sequence[str]) -> Sequence[CatalogueEntry]:
        if not names:
            return []
        stmt = (
            select(CatalogueModel)
            .where(CatalogueModel.is_active.is_(True))
            .where(CatalogueModel.original_name.in_(list(names)))
            .order_by(CatalogueModel.uploaded_at.desc())
        )
        result = await self._session.execute(stmt)
        return [CatalogueEntry.from_orm(model) for model in result.scalars().all()]

    async def update(
        self,
        catalogue_id: str,
        *,
        description: str | None = None,
        category: str | None = None,
        is_active: bool | None = None,
    ) -> CatalogueEntry | None:
        values: dict[str, object] = {}
        if description is not None:
            values["description"] = description
        if category is not None:
            values["category"] = category
        if is_active is not None:
            values["is_active"] = is_active
        if not values:
            return await self.get_by_id(catalogue_id)
        stmt = (
            update(CatalogueModel)
            .where(CatalogueModel.id == catalogue_id)
            .values(**values)
            .execution_options(synchronize_session="fetch")
            .returning(CatalogueModel)
        )
        result = await self._session.execute(stmt)
        model = result.scalars().first()
        return CatalogueEntry.from_orm(model) if model else None

    async def increment_download_count(self, catalogue_id: str, amount: int = 1) -> None:
        # 计数在数据库端原子自增，避免并发下载时丢失更新
        stmt = (
            update(CatalogueModel)
            .where(CatalogueModel.id == catalogue_id)
            .values(download_count=CatalogueModel.download_count + amount)
            .execution_options(synchronize_session=False)
        )
        await self._session.execute(stmt)

    async def count(self, *, active_only: bool = False) -> int:
        stmt = select(func.count()).select_from(CatalogueModel)
        if active_only:
            stmt = stmt.where(CatalogueModel.is_active.is_(True))
        result = await self._session.execute(stmt)
        return int(result.scalar_one())

    async def list_counter_mismatches(self) -> Sequence[CounterMismatch]:
        events = (
            select(DownloadModel.catalogue_id, func.count(DownloadModel.id).label("events"))
            .where(DownloadModel.catalogue_id.is_not(None))
            .group_by(DownloadModel.catalogue_id)
            .subquery()
        )
        recorded = func.coalesce(events.c.events, 0)
        stmt = (
            select(CatalogueModel, recorded)
            .outerjoin(events, events.c.catalogue_id == CatalogueModel.id)
            .where(CatalogueModel.download_count != recorded)
            .order_by(CatalogueModel.original_name)
        )
        result = await self._session.execute(stmt)
        return [
            CounterMismatch(catalogue=CatalogueEntry.from_orm(model), recorded_events=int(count))
            for model, count in result.all()
        ]
