"""Repository protocol for the catalogue registry."""

from __future__ import annotations

from typing import Protocol, Sequence

from .models import CatalogueEntry, CounterMismatch


class CatalogueRepository(Protocol):
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
        ...

    async def get_by_id(self, catalogue_id: str) -> CatalogueEntry | None:
        ...

    async def list_active(
        self,
        *,
        skip: int,
        limit: int,
        search: str | None,
        category: str | None,
    ) -> tuple[Sequence[CatalogueEntry], int]:
        ...

    async def find_active_by_original_names(self, names: Sequence[str]) -> Sequence[CatalogueEntry]:
        ...

    async def update(
        self,
        catalogue_id: str,
        *,
        description: str | None = None,
        category: str | None = None,
        is_active: bool | None = None,
    ) -> CatalogueEntry | None:
        ...

    async def increment_download_count(self, catalogue_id: str, amount: int = 1) -> None:
        ...

    async def count(self, *, active_only: bool = False) -> int:
        ...

    async def list_counter_mismatches(self) -> Sequence[CounterMismatch]:
        ...
