import asyncio
from datetime import timedelta

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from catalogue_admin.core.errors import TrackingFailedError
from catalogue_admin.db import models as orm
from catalogue_admin.infrastructure.database.repositories.download_repository import SqlDownloadRepository
from catalogue_admin.modules.common import RequestOrigin
from catalogue_admin.modules.downloads import DownloadQueryService, DownloadTracker, LegacyDownloadItem
from tests.helpers import USER

ORIGIN = RequestOrigin(address="203.0.113.7", client="CatalogueApp/2.1 (Android 14)")


async def _download_count(session_factory, catalogue_id: str) -> int:
    async with session_factory() as session:
        result = await session.execute(
            select(orm.Catalogue.download_count).where(orm.Catalogue.id == catalogue_id)
        )
        return int(result.scalar_one())


async def _event_count(session_factory) -> int:
    async with session_factory() as session:
        result = await session.execute(select(func.count()).select_from(orm.Download))
        return int(result.scalar_one())


async def test_record_inserts_event_and_increments_counter(session_factory, add_catalogue):
    entry = await add_catalogue("Extruders.pdf", content=b"x" * 128)
    tracker = DownloadTracker(session_factory)

    event = await tracker.record(USER.as_actor(), entry, ORIGIN)

    assert event.catalogue_id == entry.id
    assert event.user_id == USER.id
    assert event.file_name == "Extruders.pdf"
    assert event.file_size == 128
    assert event.ip_address == ORIGIN.address
    assert event.user_agent == ORIGIN.client
    assert await _download_count(session_factory, entry.id) == 1


async def test_record_is_not_idempotent(session_factory, add_catalogue):
    entry = await add_catalogue("Extruders.pdf")
    tracker = DownloadTracker(session_factory)

    await tracker.record(None, entry, ORIGIN)
    await tracker.record(None, entry, ORIGIN)

    assert await _download_count(session_factory, entry.id) == 2
    assert await _event_count(session_factory) == 2


async def test_concurrent_records_increment_exactly(session_factory, add_catalogue):
    entry = await add_catalogue("Busy.pdf")
    tracker = DownloadTracker(session_factory)

    await asyncio.gather(*(tracker.record(USER.as_actor(), entry, ORIGIN) for _ in range(10)))

    assert await _download_count(session_factory, entry.id) == 10
    async with session_factory() as session:
        assert await DownloadQueryService.with_session(session).count(catalogue_id=entry.id) == 10


async def test_store_failure_raises_tracking_failed(session_factory, add_catalogue, monkeypatch):
    entry = await add_catalogue("Extruders.pdf")

    async def broken_add_event(self, **kwargs):
        raise OperationalError("INSERT INTO downloads", {}, Exception("database is locked"))

    monkeypatch.setattr(SqlDownloadRepository, "add_event", broken_add_event)

    with pytest.raises(TrackingFailedError):
        await DownloadTracker(session_factory).record(None, entry, ORIGIN)

    assert await _download_count(session_factory, entry.id) == 0


async def test_legacy_batch_suppresses_repeats(session_factory, add_catalogue):
    entry = await add_catalogue("Company Profile.pdf", download_count=3)
    tracker = DownloadTracker(session_factory)
    items = [LegacyDownloadItem(url="https://example.com/profile.pdf", title="Company Profile.pdf", type="pdf")]

    first = await tracker.record_legacy_batch(USER.as_actor(), items, ORIGIN)
    second = await tracker.record_legacy_batch(USER.as_actor(), items, ORIGIN)

    assert (first.recorded, first.suppressed) == (1, 0)
    assert (second.recorded, second.suppressed) == (0, 1)
    assert await _event_count(session_factory) == 1
    # 旧接口不修改计数器
    assert await _download_count(session_factory, entry.id) == 3


async def test_legacy_dedupe_matches_address_for_guests(session_factory):
    tracker = DownloadTracker(session_factory)
    items = [LegacyDownloadItem(url=None, title="Brochure.pdf")]

    await tracker.record_legacy_batch(None, items, ORIGIN)
    repeat = await tracker.record_legacy_batch(None, items, ORIGIN)
    other = await tracker.record_legacy_batch(None, items, RequestOrigin(address="198.51.100.1"))

    assert repeat.suppressed == 1
    assert other.recorded == 1
    assert await _event_count(session_factory) == 2


async def test_legacy_dedupe_window_expires(session_factory):
    tracker = DownloadTracker(session_factory, dedupe_window=timedelta(hours=24))
    items = [LegacyDownloadItem(url=None, title="Extruders.pdf")]
    earlier = tracker.clock() - timedelta(hours=25)

    await tracker.record_legacy_batch(USER.as_actor(), items, ORIGIN, downloaded_at=earlier)
    later = await tracker.record_legacy_batch(USER.as_actor(), items, ORIGIN)

    assert later.recorded == 1
    assert await _event_count(session_factory) == 2


async def test_legacy_links_catalogue_by_original_name(session_factory, add_catalogue):
    entry = await add_catalogue("Pipe Extrusion Lines.pdf", content=b"y" * 64)
    tracker = DownloadTracker(session_factory)
    items = [
        LegacyDownloadItem(url=None, title="Pipe Extrusion Lines.pdf"),
        LegacyDownloadItem(url=None, title="Not Uploaded.pdf"),
    ]

    result = await tracker.record_legacy_batch(None, items, ORIGIN)

    assert result.recorded == 2
    async with session_factory() as session:
        rows = (await session.execute(select(orm.Download).order_by(orm.Download.file_name))).scalars().all()
    linked = {row.file_name: (row.catalogue_id, row.file_size) for row in rows}
    assert linked["Pipe Extrusion Lines.pdf"] == (entry.id, 64)
    assert linked["Not Uploaded.pdf"] == (None, None)


async def test_download_listing_joins_names(session_factory, add_catalogue):
    entry = await add_catalogue("Extruders.pdf")
    await DownloadTracker(session_factory).record(None, entry, ORIGIN)

    async with session_factory() as session:
        page = await DownloadQueryService.with_session(session).list_downloads(page=1, limit=10)

    assert page.pagination.total == 1
    assert page.items[0].catalogue_name == "Extruders.pdf"
    assert page.items[0].user_name is None
