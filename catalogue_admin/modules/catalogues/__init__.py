"""Catalogue registry exports."""

from .models import CatalogueEntry, CounterMismatch, Page, Pagination
from .service import CatalogueService

__all__ = [
    "CatalogueEntry",
    "CatalogueService",
    "CounterMismatch",
    "Page",
    "Pagination",
]
