"""Catalogue access: resolution, delivery and the request flow tying them together."""

from .resolver import AccessResolver, ResolvedProduct
from .service import CatalogueAccessService, DownloadLink, EmailRequestResult, ProductBundle

__all__ = [
    "AccessResolver",
    "CatalogueAccessService",
    "DownloadLink",
    "EmailRequestResult",
    "ProductBundle",
    "ResolvedProduct",
]
