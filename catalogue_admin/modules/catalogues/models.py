"""Domain models for the catalogue registry."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Generic, Optional, Sequence, TypeVar

from catalogue_admin.db import models as orm

T = TypeVar("T")


@dataclass(slots=True)
class CatalogueEntry:
    id: str
    file_name: str
    original_name: str
    file_path: str
    file_size: int
    mime_type: str
    uploaded_by: Optional[str]
    is_active: bool
    download_count: int
    description: Optional[str] = None
    category: Optional[str] = None
    uploaded_at: Optional[datetime] = None

    @classmethod
    def from_orm(cls, instance: orm.Catalogue) -> "CatalogueEntry":
        return cls(
            id=str(instance.id),
            file_name=instance.file_name,
            original_name=instance.original_name,
            file_path=instance.file_path,
            file_size=int(instance.file_size or 0),
            mime_type=instance.mime_type,
            uploaded_by=instance.uploaded_by,
            is_active=bool(instance.is_active),
            download_count=int(instance.download_count or 0),
            description=instance.description,
            category=instance.category,
            uploaded_at=instance.uploaded_at,
        )


@dataclass(slots=True)
class Pagination:
    current: int
    pages: int
    total: int
    limit: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        pages = math.ceil(total / limit) if limit else 0
        return cls(current=page, pages=pages, total=total, limit=limit)


@dataclass(slots=True)
class Page(Generic[T]):
    items: Sequence[T]
    pagination: Pagination


@dataclass(slots=True)
class CounterMismatch:
    """A catalogue whose denormalised counter disagrees with its download events."""

    catalogue: CatalogueEntry
    recorded_events: int
    difference: int = field(init=False)

    def __post_init__(self) -> None:
        self.difference = self.catalogue.download_count - self.recorded_events
