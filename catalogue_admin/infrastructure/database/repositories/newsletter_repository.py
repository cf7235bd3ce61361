"""SQLAlchemy repository for newsletter subscribers."""

from __future__ import annotations

from typing import Any, Sequence

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from catalogue_admin.db.models import NewsletterSubscriber as SubscriberModel
from catalogue_admin.modules.newsletter.models import Subscriber


class SqlSubscriberRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, subscriber_id: str) -> Subscriber | None:
        model = await self._session.get(SubscriberModel, subscriber_id)
        return Subscriber.from_orm(model) if model else None

    async def get_by_email(self, email: str) -> Subscriber | None:
        stmt = select(SubscriberModel).where(func.lower(SubscriberModel.email) == email.lower())
        result = await self._session.execute(stmt)
        model = result.scalars().first()
        return Subscriber.from_orm(model) if model else None

    async def get_by_token(self, token: str) -> Subscriber | None:
        stmt = select(SubscriberModel).where(SubscriberModel.unsubscribe_token == token)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return Subscriber.from_orm(model) if model else None

    async def create(self, **fields: Any) -> Subscriber:
        model = SubscriberModel(**fields)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return Subscriber.from_orm(model)

    async def update(self, subscriber_id: str, changes: dict[str, Any]) -> Subscriber | None:
        model = await self._session.get(SubscriberModel, subscriber_id)
        if model is None:
            return None
        for key, value in changes.items():
            setattr(model, key, value)
        await self._session.flush()
        await self._session.refresh(model)
        return Subscriber.from_orm(model)

    async def list_subscribers(
        self,
        *,
        skip: int | None,
        limit: int | None,
        search: str | None = None,
        is_active: bool | None = None,
    ) -> tuple[Sequence[Subscriber], int]:
        conditions = []
        if search:
            pattern = f"%{search}%"
            conditions.append(
                or_(
                    SubscriberModel.email.ilike(pattern),
                    SubscriberModel.name.ilike(pattern),
                    SubscriberModel.company_name.ilike(pattern),
                )
            )
        if is_active is not None:
            conditions.append(SubscriberModel.is_active.is_(is_active))

        stmt = select(SubscriberModel).where(*conditions).order_by(SubscriberModel.subscribed_at.desc())
        if skip:
            stmt = stmt.offset(skip)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self._session.execute(stmt)
        total = await self._session.execute(
            select(func.count()).select_from(SubscriberModel).where(*conditions)
        )
        return [Subscriber.from_orm(model) for model in result.scalars().all()], int(total.scalar_one())

    async def count(self, *, active_only: bool = False) -> int:
        stmt = select(func.count()).select_from(SubscriberModel)
        if active_only:
            stmt = stmt.where(SubscriberModel.is_active.is_(True))
        result = await self._session.execute(stmt)
        return int(result.scalar_one())
