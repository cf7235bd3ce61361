"""Turns a catalogue id or product identifier into active catalogue entries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from catalogue_admin.core.errors import NotFoundError
from catalogue_admin.modules.catalogues.models import CatalogueEntry
from catalogue_admin.modules.catalogues.repository import CatalogueRepository
from catalogue_admin.modules.products import ProductCatalogueMap, ProductId


@dataclass(frozen=True, slots=True)
class ResolvedProduct:
    key: str
    entries: Sequence[CatalogueEntry]


class AccessResolver:
    def __init__(self, repository: CatalogueRepository, product_map: ProductCatalogueMap) -> None:
        self._repository = repository
        self._product_map = product_map

    async def resolve_catalogue(self, catalogue_id: str) -> CatalogueEntry:
        entry = await self._repository.get_by_id(catalogue_id)
        if entry is None or not entry.is_active:
            raise NotFoundError("catalogue_not_found", "Catalogue not found")
        return entry

    async def resolve_product(self, product_id: ProductId) -> ResolvedProduct:
        """Resolve the product bundle in the order the product map lists its files.

        Numeric aliases are translated before lookup.  When several active
        entries share an original name only the most recent upload is used.
        """
        key = self._product_map.canonical(product_id)
        if key is None:
            raise NotFoundError("product_not_found", "Product not found")

        names = self._product_map.files_for(key)
        newest: dict[str, CatalogueEntry] = {}
        # 仓储按上传时间倒序返回，保留每个文件名的第一条
        for entry in await self._repository.find_active_by_original_names(names):
            newest.setdefault(entry.original_name, entry)

        entries = [newest[name] for name in names if name in newest]
        if not entries:
            raise NotFoundError("no_catalogues_found", "No catalogues found for this product")
        return ResolvedProduct(key=key, entries=entries)
