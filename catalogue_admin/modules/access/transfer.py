"""Delivery of catalogue blobs: streamed over HTTP or attached to an email."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, Sequence
from urllib.parse import quote

import anyio
from fastapi.responses import StreamingResponse

from catalogue_admin.core.errors import NotFoundError, TransferFailedError
from catalogue_admin.modules.catalogues.models import CatalogueEntry
from catalogue_admin.modules.notifications import Attachment, Mailer, OutboundMessage, SendResult

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True, slots=True)
class EmailDelivery:
    entries: Sequence[CatalogueEntry]
    result: SendResult


async def blob_exists(entry: CatalogueEntry) -> bool:
    return await anyio.Path(entry.file_path).is_file()


async def ensure_blob(entry: CatalogueEntry) -> Path:
    if not await blob_exists(entry):
        logger.error("Catalogue %s blob missing at %s", entry.id, entry.file_path)
        raise NotFoundError("file_not_found", "Catalogue file not found on server")
    return Path(entry.file_path)


def content_disposition(filename: str) -> str:
    safe = filename.replace("\\", "\\\\").replace('"', '\\"')
    try:
        safe.encode("ascii")
    except UnicodeEncodeError:
        fallback = safe.encode("ascii", "replace").decode("ascii").replace("?", "_")
        return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"
    return f'attachment; filename="{safe}"'


async def _iter_file(path: Path, chunk_size: int, entry_id: str) -> AsyncIterator[bytes]:
    try:
        async with await anyio.open_file(path, "rb") as handle:
            while True:
                chunk = await handle.read(chunk_size)
                if not chunk:
                    break
                yield chunk
    except OSError:
        # 响应头已发送，只能记录并中断连接
        logger.exception("Streaming catalogue %s failed mid-transfer", entry_id)
        raise


async def stream(entry: CatalogueEntry, *, chunk_size: int = DEFAULT_CHUNK_SIZE) -> StreamingResponse:
    """Build a chunked attachment response for ``entry``.

    The blob is checked before any header is produced so a missing file still
    maps to a regular 404 envelope.
    """
    path = await ensure_blob(entry)
    headers = {
        "Content-Disposition": content_disposition(entry.original_name),
        "Content-Length": str(entry.file_size),
    }
    return StreamingResponse(
        _iter_file(path, chunk_size, entry.id),
        media_type=entry.mime_type,
        headers=headers,
    )


async def available(entries: Sequence[CatalogueEntry]) -> list[CatalogueEntry]:
    """Entries whose blob is on disk; raises when none is left."""
    present = [entry for entry in entries if await blob_exists(entry)]
    if len(present) < len(entries):
        missing = [entry.original_name for entry in entries if entry not in present]
        logger.warning("Skipping catalogues without blobs: %s", missing)
    if not present:
        raise NotFoundError("no_files_available", "No catalogue files are available")
    return present


async def attach(
    entries: Sequence[CatalogueEntry],
    *,
    destination: str,
    subject: str,
    body_html: str,
    mailer: Mailer,
) -> EmailDelivery:
    present = await available(entries)

    result = await mailer.send(
        OutboundMessage(
            subject=subject,
            body_html=body_html,
            recipients=[destination],
            attachments=[
                Attachment(filename=entry.original_name, path=Path(entry.file_path), mime_type=entry.mime_type)
                for entry in present
            ],
        )
    )
    if not result.success:
        raise TransferFailedError("email_send_failed", "Failed to send catalogue email")
    return EmailDelivery(entries=present, result=result)
