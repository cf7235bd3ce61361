"""Repository protocol for newsletter subscribers."""

from __future__ import annotations

from typing import Any, Protocol, Sequence

from .models import Subscriber


class SubscriberRepository(Protocol):
    async def get_by_id(self, subscriber_id: str) -> Subscriber | None:
        ...

    async def get_by_email(self, email: str) -> Subscriber | None:
        ...

    async def get_by_token(self, token: str) -> Subscriber | None:
        ...

    async def create(self, **fields: Any) -> Subscriber:
        ...

    async def update(self, subscriber_id: str, changes: dict[str, Any]) -> Subscriber | None:
        ...

    async def list_subscribers(
        self,
        *,
        skip: int | None,
        limit: int | None,
        search: str | None = None,
        is_active: bool | None = None,
    ) -> tuple[Sequence[Subscriber], int]:
        ...

    async def count(self, *, active_only: bool = False) -> int:
        ...
