"""Repository protocol for accounts."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol, Sequence

from .models import Account


class AccountRepository(Protocol):
    async def get_by_id(self, account_id: str) -> Account | None:
        ...

    async def get_by_username(self, username: str) -> Account | None:
        ...

    async def get_by_email(self, email: str) -> Account | None:
        ...

    async def list_accounts(
        self,
        *,
        skip: int,
        limit: int,
        search: str | None = None,
        role: str | None = None,
        is_active: bool | None = None,
    ) -> tuple[Sequence[Account], int]:
        ...

    async def count_accounts(self, *, active_only: bool = False) -> int:
        ...

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
        ...

    async def update_account(self, account_id: str, changes: dict[str, Any]) -> Account | None:
        ...

    async def set_last_login(self, account_id: str, timestamp: datetime) -> None:
        ...
