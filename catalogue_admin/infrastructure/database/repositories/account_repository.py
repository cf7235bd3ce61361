"""SQLAlchemy implementation of the account repository."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Sequence

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from catalogue_admin.db.models import Account as AccountModel
from catalogue_admin.modules.accounts.models import Account


class SqlAccountRepository:
    """Account repository backed by SQLAlchemy models.

    Soft-deleted rows are still returned by the id/username lookups so that
    authentication can reject them; listings and counts skip them.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, account_id: str) -> Account | None:
        stmt = select(AccountModel).where(AccountModel.id == account_id)
        result = await self._session.execute(stmt)
        return self._to_domain(result.scalar_one_or_none())

    async def get_by_username(self, username: str) -> Account | None:
        stmt = select(AccountModel).where(AccountModel.username == username)
        result = await self._session.execute(stmt)
        return self._to_domain(result.scalar_one_or_none())

    async def get_by_email(self, email: str) -> Account | None:
        stmt = select(AccountModel).where(func.lower(AccountModel.email) == email.lower())
        result = await self._session.execute(stmt)
        return self._to_domain(result.scalars().first())

    async def list_accounts(
        self,
        *,
        skip: int,
        limit: int,
        search: str | None = None,
        role: str | None = None,
        is_active: bool | None = None,
    ) -> tuple[Sequence[Account], int]:
        conditions = [AccountModel.is_deleted.is_(False)]
        if search:
            pattern = f"%{search}%"
            conditions.append(
                or_(
                    AccountModel.username.ilike(pattern),
                    AccountModel.name.ilike(pattern),
                    AccountModel.email.ilike(pattern),
                    AccountModel.company_name.ilike(pattern),
                )
            )
        if role:
            conditions.append(AccountModel.role == role)
        if is_active is not None:
            conditions.append(AccountModel.is_active.is_(is_active))

        stmt = (
            select(AccountModel)
            .where(*conditions)
            .order_by(AccountModel.created_at.desc(), AccountModel.username)
            .offset(skip)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        total = await self._session.execute(select(func.count()).select_from(AccountModel).where(*conditions))
        return [self._to_domain(model) for model in result.scalars().all()], int(total.scalar_one())

    async def count_accounts(self, *, active_only: bool = False) -> int:
        stmt = select(func.count()).select_from(AccountModel).where(AccountModel.is_deleted.is_(False))
        if active_only:
            stmt = stmt.where(AccountModel.is_active.is_(True))
        result = await self._session.execute(stmt)
        return int(result.scalar_one())

    async def create_account(
        self,
        *,
        username: str,
        name: str | None,
        password_hash: str,
        role: str,
        email: str | None,
        is_active: bool,
        company_name: str | None = None,
        phone_number: str | None = None,
        city: str | None = None,
    ) -> Account:
        model = AccountModel(
            username=username,
            name=name,
            password_hash=password_hash,
            role=role,
            email=email,
            is_active=is_active,
            company_name=company_name,
            phone_number=phone_number,
            city=city,
        )
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_domain(model)

    async def update_account(self, account_id: str, changes: dict[str, Any]) -> Account | None:
        model = await self._session.get(AccountModel, account_id)
        if model is None:
            return None
        for key, value in changes.items():
            setattr(model, key, value)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_domain(model)

    async def set_last_login(self, account_id: str, timestamp: datetime) -> None:
        stmt = (
            update(AccountModel)
            .where(AccountModel.id == account_id)
            .values(last_login_at=timestamp)
        )
        await self._session.execute(stmt)

    @staticmethod
    def _to_domain(model: AccountModel | None) -> Account | None:
        if model is None:
            return None
        return Account(
            id=str(model.id),
            username=model.username,
            name=model.name,
            role=model.role or "user",
            is_active=bool(model.is_active),
            password_hash=model.password_hash,
            email=model.email,
            company_name=model.company_name,
            phone_number=model.phone_number,
            city=model.city,
            is_deleted=bool(model.is_deleted),
            created_at=model.created_at,
            updated_at=model.updated_at,
            last_login_at=model.last_login_at,
        )
