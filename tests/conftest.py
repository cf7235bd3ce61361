"""Shared fixtures: temporary SQLite databases, catalogue blobs and API clients."""

import asyncio
from pathlib import Path
from typing import AsyncGenerator, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from catalogue_admin.core.config import get_settings
from catalogue_admin.core.container import get_container
from catalogue_admin.db import models as orm
from catalogue_admin.infrastructure.database import Base, dispose_engine
from catalogue_admin.modules.catalogues import CatalogueEntry
from catalogue_admin.modules.products import ProductCatalogueMap
from tests.helpers import ADMIN, PRODUCT_MAP, USER, FakeMailer


@pytest.fixture
def product_map() -> ProductCatalogueMap:
    return ProductCatalogueMap.from_mapping(PRODUCT_MAP)


@pytest.fixture
def fake_mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
async def session_factory(tmp_path: Path) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'service.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def blob_dir(tmp_path: Path) -> Path:
    path = tmp_path / "blobs"
    path.mkdir()
    return path


@pytest.fixture
def add_catalogue(session_factory, blob_dir):
    """Insert a catalogue row, writing its blob unless ``with_blob`` is false."""

    async def _add(
        original_name: str,
        *,
        content: bytes = b"%PDF-1.4 catalogue",
        is_active: bool = True,
        with_blob: bool = True,
        download_count: int = 0,
    ) -> CatalogueEntry:
        stored = f"catalogue-{orm.generate_uuid()}.pdf"
        path = blob_dir / stored
        if with_blob:
            path.write_bytes(content)
        async with session_factory() as session:
            async with session.begin():
                model = orm.Catalogue(
                    file_name=stored,
                    original_name=original_name,
                    file_path=str(path),
                    file_size=len(content),
                    mime_type="application/pdf",
                    is_active=is_active,
                    download_count=download_count,
                )
                session.add(model)
                await session.flush()
                return CatalogueEntry.from_orm(model)

    return _add


# ---- API ----


@pytest.fixture
def app(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("DATABASE__URL", f"sqlite+aiosqlite:///{tmp_path / 'api.db'}")
    monkeypatch.setenv("STORAGE__CATALOGUE_DIR", str(tmp_path / "storage"))
    monkeypatch.setenv("FRONTEND_DIR", str(tmp_path / "no-frontend"))
    monkeypatch.setenv("MAIL__OPERATOR_RECIPIENTS", '["ops@example.com"]')
    monkeypatch.setenv("ENVIRONMENT", "test")
    get_settings.cache_clear()
    get_container.cache_clear()
    asyncio.run(dispose_engine())

    from catalogue_admin.main import create_app

    application = create_app()
    yield application

    application.dependency_overrides.clear()
    get_settings.cache_clear()
    get_container.cache_clear()


def _override_mailer(application, mailer: FakeMailer) -> None:
    from catalogue_admin.interfaces.http.deps import get_mailer

    application.dependency_overrides[get_mailer] = lambda: mailer


@pytest.fixture
def client(app, fake_mailer) -> Generator[TestClient, None, None]:
    """Client whose caller is the regular user; admin routes see ``ADMIN``."""
    from catalogue_admin.core.security import (
        get_current_account,
        get_current_admin,
        get_optional_account,
        get_super_admin,
    )

    _override_mailer(app, fake_mailer)
    app.dependency_overrides[get_current_account] = lambda: USER
    app.dependency_overrides[get_optional_account] = lambda: USER
    app.dependency_overrides[get_current_admin] = lambda: ADMIN
    app.dependency_overrides[get_super_admin] = lambda: ADMIN
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def anonymous_client(app, fake_mailer) -> Generator[TestClient, None, None]:
    """Client with the real auth dependencies."""
    _override_mailer(app, fake_mailer)
    with TestClient(app) as test_client:
        yield test_client

