"""Simple dependency container for wiring core services."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from functools import lru_cache

from catalogue_admin.core.config import Settings, get_settings
from catalogue_admin.infrastructure.database.session import get_engine
from catalogue_admin.modules.notifications import Mailer
from catalogue_admin.modules.products import ProductCatalogueMap

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ApplicationContainer:
    settings: Settings
    product_map: ProductCatalogueMap
    mailer: Mailer
    # 后台副作用任务，关闭时统一等待
    tasks: set[asyncio.Task] = field(default_factory=set)

    def init_infrastructure(self) -> None:
        """Ensure infrastructure singletons (database engine, etc.) are initialised."""
        get_engine()

    async def drain(self) -> None:
        if self.tasks:
            logger.info("Waiting for %d pending side-effect tasks", len(self.tasks))
        while self.tasks:
            await asyncio.gather(*list(self.tasks), return_exceptions=True)


@lru_cache()
def get_container() -> ApplicationContainer:
    settings = get_settings()
    product_map = ProductCatalogueMap.load(settings.catalogue.product_map_path)
    logger.info("Loaded product map with %d products", len(product_map.products))
    container = ApplicationContainer(
        settings=settings,
        product_map=product_map,
        mailer=Mailer(settings.mail),
    )
    container.init_infrastructure()
    return container


__all__ = ["ApplicationContainer", "get_container"]
