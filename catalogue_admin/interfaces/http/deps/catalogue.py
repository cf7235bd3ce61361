"""Catalogue, tracking and delivery dependency providers."""

from datetime import timedelta
from typing import Optional

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from catalogue_admin.core.container import ApplicationContainer, get_container
from catalogue_admin.infrastructure.database.repositories.catalogue_repository import SqlCatalogueRepository
from catalogue_admin.infrastructure.database.session import get_session_factory
from catalogue_admin.modules.access import AccessResolver, CatalogueAccessService
from catalogue_admin.modules.catalogues import CatalogueService
from catalogue_admin.modules.common import RequestOrigin
from catalogue_admin.modules.downloads import DownloadTracker
from catalogue_admin.modules.notifications import Mailer, SideEffectDispatcher

from .database import get_db_session


def get_app_container() -> ApplicationContainer:
    return get_container()


def get_mailer(container: ApplicationContainer = Depends(get_app_container)) -> Mailer:
    return container.mailer


def get_request_origin(
    request: Request,
    x_forwarded_for: Optional[str] = Header(default=None),
    user_agent: Optional[str] = Header(default=None),
    container: ApplicationContainer = Depends(get_app_container),
) -> RequestOrigin:
    return RequestOrigin.from_headers(
        peer=request.client.host if request.client else None,
        forwarded_for=x_forwarded_for,
        user_agent=user_agent,
        trust_proxy=container.settings.server.trust_proxy,
    )


def get_catalogue_service(
    db: AsyncSession = Depends(get_db_session),
    container: ApplicationContainer = Depends(get_app_container),
) -> CatalogueService:
    return CatalogueService.with_session(db, container.settings)


def get_side_effect_dispatcher(
    container: ApplicationContainer = Depends(get_app_container),
    mailer: Mailer = Depends(get_mailer),
) -> SideEffectDispatcher:
    return SideEffectDispatcher(
        get_session_factory(),
        mailer,
        container.settings.mail.operator_recipients,
        container.tasks,
    )


def get_download_tracker(container: ApplicationContainer = Depends(get_app_container)) -> DownloadTracker:
    return DownloadTracker(
        get_session_factory(),
        dedupe_window=timedelta(hours=container.settings.dedupe_window_hours),
    )


def get_access_service(
    db: AsyncSession = Depends(get_db_session),
    container: ApplicationContainer = Depends(get_app_container),
    tracker: DownloadTracker = Depends(get_download_tracker),
    dispatcher: SideEffectDispatcher = Depends(get_side_effect_dispatcher),
    mailer: Mailer = Depends(get_mailer),
) -> CatalogueAccessService:
    resolver = AccessResolver(SqlCatalogueRepository(db), container.product_map)
    return CatalogueAccessService(
        resolver,
        tracker,
        dispatcher,
        mailer,
        chunk_size=container.settings.storage.chunk_size,
    )


__all__ = [
    "get_access_service",
    "get_app_container",
    "get_catalogue_service",
    "get_download_tracker",
    "get_mailer",
    "get_request_origin",
    "get_side_effect_dispatcher",
]
