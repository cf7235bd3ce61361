"""Catalogue registry service: uploads, listing, edits and soft deletion."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from catalogue_admin.core.config import Settings, get_settings
from catalogue_admin.core.crypto import random_token
from catalogue_admin.core.errors import NotFoundError, ValidationFailedError

from .models import CatalogueEntry, CounterMismatch, Page, Pagination
from .repository import CatalogueRepository

logger = logging.getLogger(__name__)

UPLOAD_FIELD_NAME = "catalogue"


@dataclass(slots=True)
class CatalogueService:
    repository: CatalogueRepository
    storage_root: Path
    max_upload_bytes: int
    allowed_mime_types: frozenset[str]
    chunk_size: int = 1024 * 1024

    @classmethod
    def with_session(cls, session: AsyncSession, settings: Settings | None = None) -> "CatalogueService":
        # 延迟导入，避免与仓储实现循环依赖
        from catalogue_admin.infrastructure.database.repositories.catalogue_repository import (
            SqlCatalogueRepository,
        )

        settings = settings or get_settings()
        return cls(
            repository=SqlCatalogueRepository(session),
            storage_root=Path(settings.catalogue_storage_dir).resolve(),
            max_upload_bytes=settings.storage.max_upload_bytes,
            allowed_mime_types=frozenset(settings.storage.allowed_mime_types),
            chunk_size=settings.storage.chunk_size,
        )

    async def store_upload(
        self,
        *,
        uploader_id: str | None,
        upload: UploadFile,
        description: Optional[str] = None,
        category: Optional[str] = None,
    ) -> CatalogueEntry:
        original_name = _sanitize_filename(upload.filename)
        if not original_name:
            await upload.close()
            raise ValidationFailedError("no_file", "No file uploaded")
        if upload.content_type not in self.allowed_mime_types:
            await upload.close()
            raise ValidationFailedError("invalid_file", "Only PDF files are allowed")

        self.storage_root.mkdir(parents=True, exist_ok=True)
        stored_name = f"{UPLOAD_FIELD_NAME}-{random_token()}{Path(original_name).suffix.lower()}"
        target_path = self.storage_root / stored_name
        temp_path = target_path.with_suffix(target_path.suffix + ".upload")

        total_size = 0
        try:
            with temp_path.open("wb") as buffer:
                while True:
                    chunk = await upload.read(self.chunk_size)
                    if not chunk:
                        break
                    total_size += len(chunk)
                    if total_size > self.max_upload_bytes:
                        raise ValidationFailedError(
                            "file_too_large",
                            f"File exceeds the {self.max_upload_bytes // (1024 * 1024)}MB limit",
                        )
                    buffer.write(chunk)
        except ValidationFailedError:
            temp_path.unlink(missing_ok=True)
            raise
        except OSError:
            temp_path.unlink(missing_ok=True)
            logger.exception("Failed to store upload %s", original_name)
            raise
        finally:
            await upload.close()

        if total_size == 0:
            temp_path.unlink(missing_ok=True)
            raise ValidationFailedError("no_file", "Uploaded file is empty")

        temp_path.replace(target_path)
        entry = await self.repository.create(
            file_name=stored_name,
            original_name=original_name,
            file_path=str(target_path),
            file_size=total_size,
            mime_type=upload.content_type or "application/octet-stream",
            uploaded_by=uploader_id,
            description=_blank_to_none(description),
            category=_blank_to_none(category),
        )
        logger.info("Catalogue %s stored as %s (%d bytes)", original_name, stored_name, total_size)
        return entry

    async def list_catalogues(
        self,
        *,
        page: int = 1,
        limit: int = 20,
        search: Optional[str] = None,
        category: Optional[str] = None,
    ) -> Page[CatalogueEntry]:
        page = max(page, 1)
        limit = max(limit, 1)
        entries, total = await self.repository.list_active(
            skip=(page - 1) * limit,
            limit=limit,
            search=search or None,
            category=category or None,
        )
        return Page(items=entries, pagination=Pagination.build(page, limit, total))

    async def get_catalogue(self, catalogue_id: str) -> CatalogueEntry:
        entry = await self.repository.get_by_id(catalogue_id)
        if entry is None or not entry.is_active:
            raise NotFoundError("catalogue_not_found", "Catalogue not found")
        return entry

    async def update_catalogue(
        self,
        catalogue_id: str,
        *,
        description: Optional[str] = None,
        category: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> CatalogueEntry:
        updated = await self.repository.update(
            catalogue_id,
            description=description,
            category=category,
            is_active=is_active,
        )
        if updated is None:
            raise NotFoundError("catalogue_not_found", "Catalogue not found")
        return updated

    async def deactivate(self, catalogue_id: str) -> CatalogueEntry:
        """Soft delete: the row and the blob stay, only the active flag flips."""
        return await self.update_catalogue(catalogue_id, is_active=False)

    async def count(self, *, active_only: bool = False) -> int:
        return await self.repository.count(active_only=active_only)

    async def integrity_report(self) -> Sequence[CounterMismatch]:
        return await self.repository.list_counter_mismatches()


def _sanitize_filename(filename: str | None) -> str | None:
    if not filename:
        return None
    name = os.path.basename(filename.replace("\\", "/"))
    return name.replace("\0", "").strip() or None


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None
