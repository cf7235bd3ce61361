"""Product to catalogue mapping."""

from .catalogue_map import ProductCatalogueMap, ProductId, ProductMapError

__all__ = ["ProductCatalogueMap", "ProductId", "ProductMapError"]
