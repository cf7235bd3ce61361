"""Catalogue access flow: resolve, track, notify, deliver."""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterable, Optional, Sequence

from email_validator import EmailNotValidError, validate_email
from fastapi.responses import StreamingResponse

from catalogue_admin.core.errors import TrackingFailedError, ValidationFailedError
from catalogue_admin.modules.accounts.models import Actor
from catalogue_admin.modules.activities import ActivityKind
from catalogue_admin.modules.catalogues.models import CatalogueEntry
from catalogue_admin.modules.common import RequestOrigin
from catalogue_admin.modules.downloads import (
    DownloadTracker,
    LegacyDownloadItem,
    LegacyTrackingResult,
)
from catalogue_admin.modules.notifications import Mailer, SideEffectDispatcher
from catalogue_admin.modules.products import ProductId

from . import transfer
from .resolver import AccessResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DownloadLink:
    catalogue_id: str
    name: str
    size: int
    mime_type: str
    url: str


@dataclass(frozen=True, slots=True)
class ProductBundle:
    product: str
    links: Sequence[DownloadLink]


@dataclass(frozen=True, slots=True)
class EmailRequestResult:
    product: str
    destination: str
    sent: Sequence[str]
    message_id: Optional[str]


class CatalogueAccessService:
    """Runs each access request through Received, Resolved, Tracked, Delivered.

    Resolution and delivery failures end the request with an error envelope.
    Tracking failures are logged and the request carries on; notifications
    run in the background and never affect the response.
    """

    def __init__(
        self,
        resolver: AccessResolver,
        tracker: DownloadTracker,
        dispatcher: SideEffectDispatcher,
        mailer: Mailer,
        *,
        chunk_size: int = transfer.DEFAULT_CHUNK_SIZE,
    ) -> None:
        self._resolver = resolver
        self._tracker = tracker
        self._dispatcher = dispatcher
        self._mailer = mailer
        self._chunk_size = chunk_size

    async def download_catalogue(
        self,
        catalogue_id: str,
        actor: Actor,
        origin: RequestOrigin,
    ) -> StreamingResponse:
        entry = await self._resolver.resolve_catalogue(catalogue_id)
        await transfer.ensure_blob(entry)
        await self._track(actor, [entry], origin)
        self._dispatcher.notify(
            ActivityKind.CATALOGUE_DOWNLOAD,
            {
                "catalogueId": entry.id,
                "fileName": entry.original_name,
                "fileSize": entry.file_size,
                "userName": actor.name,
                "userEmail": actor.email,
            },
            user_id=actor.id,
            origin=origin,
        )
        return await transfer.stream(entry, chunk_size=self._chunk_size)

    async def product_download_links(
        self,
        product_id: ProductId,
        actor: Actor,
        origin: RequestOrigin,
        link_for: Callable[[CatalogueEntry], str],
    ) -> ProductBundle:
        resolved = await self._resolver.resolve_product(product_id)
        await self._track(actor, resolved.entries, origin)
        self._dispatcher.notify(
            ActivityKind.PRODUCT_CATALOGUES_DOWNLOAD,
            {
                "productId": str(product_id),
                "product": resolved.key,
                "files": [entry.original_name for entry in resolved.entries],
                "userName": actor.name,
                "userEmail": actor.email,
            },
            user_id=actor.id,
            origin=origin,
        )
        links = [
            DownloadLink(
                catalogue_id=entry.id,
                name=entry.original_name,
                size=entry.file_size,
                mime_type=entry.mime_type,
                url=link_for(entry),
            )
            for entry in resolved.entries
        ]
        return ProductBundle(product=resolved.key, links=links)

    async def request_email(
        self,
        product_id: ProductId,
        destination: str,
        origin: RequestOrigin,
        *,
        actor: Optional[Actor] = None,
        name: Optional[str] = None,
    ) -> EmailRequestResult:
        try:
            destination = validate_email(destination, check_deliverability=False).normalized
        except EmailNotValidError as exc:
            raise ValidationFailedError("validation_failed", f"Invalid email address: {exc}") from exc

        resolved = await self._resolver.resolve_product(product_id)
        recipient_name = name or (actor.name if actor else None)
        attachable = await transfer.available(resolved.entries)
        delivery = await transfer.attach(
            attachable,
            destination=destination,
            subject=f"Your requested catalogues: {resolved.key}",
            body_html=_render_customer_email(recipient_name, attachable),
            mailer=self._mailer,
        )
        await self._track(actor, delivery.entries, origin)
        self._dispatcher.notify(
            ActivityKind.CATALOGUE_EMAIL_REQUEST,
            {
                "productId": str(product_id),
                "product": resolved.key,
                "email": destination,
                "name": recipient_name,
                "files": [entry.original_name for entry in delivery.entries],
            },
            user_id=actor.id if actor else None,
            origin=origin,
        )
        return EmailRequestResult(
            product=resolved.key,
            destination=destination,
            sent=[entry.original_name for entry in delivery.entries],
            message_id=delivery.result.message_id,
        )

    async def track_legacy(
        self,
        items: Iterable[LegacyDownloadItem],
        origin: RequestOrigin,
        *,
        actor: Optional[Actor] = None,
        downloaded_at: Optional[datetime] = None,
    ) -> LegacyTrackingResult:
        items = list(items)
        try:
            result = await self._tracker.record_legacy_batch(
                actor,
                items,
                origin,
                downloaded_at=downloaded_at,
            )
        except TrackingFailedError:
            logger.exception("Legacy download tracking failed for %d items", len(items))
            result = LegacyTrackingResult(submitted=len(items), recorded=0, suppressed=0)

        self._dispatcher.notify(
            ActivityKind.CATALOGUE_DOWNLOAD_TRACKED,
            {
                "catalogues": [item.title for item in items],
                "recorded": result.recorded,
                "suppressed": result.suppressed,
                "userName": actor.name if actor else None,
            },
            user_id=actor.id if actor else None,
            origin=origin,
        )
        return result

    async def _track(
        self,
        actor: Optional[Actor],
        entries: Sequence[CatalogueEntry],
        origin: RequestOrigin,
    ) -> None:
        for entry in entries:
            try:
                await self._tracker.record(actor, entry, origin)
            except TrackingFailedError:
                logger.exception("Download of catalogue %s was not tracked", entry.id)


def _render_customer_email(name: Optional[str], entries: Sequence[CatalogueEntry]) -> str:
    greeting = f"Dear {html.escape(name)}," if name else "Hello,"
    items = "".join(f"<li>{html.escape(entry.original_name)}</li>" for entry in entries)
    return (
        f"<p>{greeting}</p>"
        "<p>Thank you for your interest. The catalogues you requested are attached:</p>"
        f"<ul>{items}</ul>"
    )
