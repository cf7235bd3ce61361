"""Download event domain models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from catalogue_admin.db import models as orm


@dataclass(frozen=True, slots=True)
class DownloadEvent:
    """Immutable audit record of one catalogue access."""

    id: str
    user_id: Optional[str]
    catalogue_id: Optional[str]
    file_name: str
    file_size: Optional[int]
    ip_address: Optional[str]
    user_agent: Optional[str]
    timestamp: datetime

    @classmethod
    def from_orm(cls, instance: orm.Download) -> "DownloadEvent":
        return cls(
            id=str(instance.id),
            user_id=instance.user_id,
            catalogue_id=instance.catalogue_id,
            file_name=instance.file_name,
            file_size=instance.file_size,
            ip_address=instance.ip_address,
            user_agent=instance.user_agent,
            timestamp=instance.timestamp,
        )


@dataclass(frozen=True, slots=True)
class DownloadRecord:
    """A download event joined with the names an admin wants to see."""

    event: DownloadEvent
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    catalogue_name: Optional[str] = None


@dataclass(frozen=True, slots=True)
class LegacyDownloadItem:
    url: Optional[str]
    title: str
    type: Optional[str] = None


@dataclass(frozen=True, slots=True)
class LegacyTrackingResult:
    submitted: int
    recorded: int
    suppressed: int
