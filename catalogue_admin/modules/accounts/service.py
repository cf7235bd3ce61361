"""Domain services for account management."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from catalogue_admin.core.crypto import hash_password, verify_password
from catalogue_admin.modules.catalogues.models import Page, Pagination

from .exceptions import AccountAlreadyExistsError, AccountNotFoundError
from .models import Account, AccountCreateInput, AccountUpdateInput
from .repository import AccountRepository


class AccountService:
    """Encapsulates core account use cases."""

    def __init__(self, repository: AccountRepository) -> None:
        self._repository = repository

    @classmethod
    def with_session(cls, session: AsyncSession) -> "AccountService":
        # 延迟导入，避免与仓储实现循环依赖
        from catalogue_admin.infrastructure.database.repositories.account_repository import (
            SqlAccountRepository,
        )

        return cls(SqlAccountRepository(session))

    async def get_by_id(self, account_id: str) -> Account | None:
        return await self._repository.get_by_id(account_id)

    async def get_by_username(self, username: str) -> Account | None:
        return await self._repository.get_by_username(username)

    async def get_account(self, account_id: str) -> Account:
        account = await self._repository.get_by_id(account_id)
        if account is None or account.is_deleted:
            raise AccountNotFoundError(account_id)
        return account

    async def list_accounts(
        self,
        *,
        page: int = 1,
        limit: int = 20,
        search: Optional[str] = None,
        role: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> Page[Account]:
        page = max(page, 1)
        limit = max(limit, 1)
        accounts, total = await self._repository.list_accounts(
            skip=(page - 1) * limit,
            limit=limit,
            search=search or None,
            role=role or None,
            is_active=is_active,
        )
        return Page(items=accounts, pagination=Pagination.build(page, limit, total))

    async def recent_accounts(self, limit: int = 5) -> list[Account]:
        accounts, _ = await self._repository.list_accounts(skip=0, limit=limit)
        return list(accounts)

    async def count_accounts(self, *, active_only: bool = False) -> int:
        return await self._repository.count_accounts(active_only=active_only)

    async def authenticate(self, username: str, password: str) -> Account | None:
        account = await self._repository.get_by_username(username)
        if account is None or not account.is_active or account.is_deleted:
            return None
        if not verify_password(password, account.password_hash):
            return None
        return account

    async def create_account(self, payload: AccountCreateInput) -> Account:
        if await self._repository.get_by_username(payload.username) is not None:
            raise AccountAlreadyExistsError(f"Username already taken: {payload.username}")
        if payload.email and await self._repository.get_by_email(payload.email) is not None:
            raise AccountAlreadyExistsError(f"Email already registered: {payload.email}")

        return await self._repository.create_account(
            username=payload.username,
            name=payload.name,
            password_hash=hash_password(payload.password),
            role=payload.role,
            email=payload.email,
            is_active=payload.is_active,
            company_name=payload.company_name,
            phone_number=payload.phone_number,
            city=payload.city,
        )

    async def update_account(self, account_id: str, payload: AccountUpdateInput) -> Account:
        """Partial profile update; passwords are not changed here."""
        current = await self.get_account(account_id)
        changes = payload.changes()
        email = changes.get("email")
        if email and (current.email or "").lower() != email.lower():
            existing = await self._repository.get_by_email(email)
            if existing is not None and existing.id != account_id:
                raise AccountAlreadyExistsError(f"Email already registered: {email}")
        if not changes:
            return current
        return await self._update(account_id, changes)

    async def set_status(self, account_id: str, is_active: bool) -> Account:
        await self.get_account(account_id)
        return await self._update(account_id, {"is_active": is_active})

    async def delete_account(self, account_id: str) -> Account:
        """Soft delete: the row stays so downloads and activities keep their owner."""
        await self.get_account(account_id)
        return await self._update(account_id, {"is_deleted": True, "is_active": False})

    async def set_last_login(self, account_id: str) -> None:
        await self._repository.set_last_login(account_id, datetime.now(timezone.utc))

    async def _update(self, account_id: str, changes: dict) -> Account:
        account = await self._repository.update_account(account_id, changes)
        if account is None:
            raise AccountNotFoundError(account_id)
        return account
