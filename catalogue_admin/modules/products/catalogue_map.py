"""Static product → catalogue file mapping.

The mapping is read once at start-up from a JSON document of the form::

    {
        "products": {"twin-screw-extruders": ["Twin Screw Extruders.pdf", ...]},
        "aliases": {"1": "twin-screw-extruders"}
    }

``products`` maps the canonical product key to the ordered list of original
file names making up the product's catalogue bundle.  ``aliases`` maps the
numeric identifiers used by the mobile client onto canonical keys.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union

ProductId = Union[str, int]

DEFAULT_MAP_RESOURCE = "products.json"


class ProductMapError(RuntimeError):
    """Raised when the product map document is missing or malformed."""


@dataclass(frozen=True)
class ProductCatalogueMap:
    products: Mapping[str, tuple[str, ...]]
    aliases: Mapping[int, str]

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "ProductCatalogueMap":
        raw_products = payload.get("products")
        if not isinstance(raw_products, Mapping):
            raise ProductMapError("product map must contain a 'products' object")

        products: dict[str, tuple[str, ...]] = {}
        for key, files in raw_products.items():
            if not isinstance(files, list) or not all(isinstance(name, str) for name in files):
                raise ProductMapError(f"product '{key}' must list file names as strings")
            # 保留顺序并去重
            products[str(key)] = tuple(dict.fromkeys(files))

        aliases: dict[int, str] = {}
        for alias, key in (payload.get("aliases") or {}).items():
            try:
                numeric = int(alias)
            except (TypeError, ValueError) as exc:
                raise ProductMapError(f"alias '{alias}' is not numeric") from exc
            if key not in products:
                raise ProductMapError(f"alias {numeric} points to unknown product '{key}'")
            aliases[numeric] = str(key)

        return cls(products=MappingProxyType(products), aliases=MappingProxyType(aliases))

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "ProductCatalogueMap":
        """Load from ``path`` or, when not given, from the bundled default document."""
        try:
            if path is None:
                raw = resources.files("catalogue_admin.data").joinpath(DEFAULT_MAP_RESOURCE).read_text("utf-8")
            else:
                raw = Path(path).read_text("utf-8")
        except OSError as exc:
            raise ProductMapError(f"unable to read product map: {exc}") from exc
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ProductMapError(f"product map is not valid JSON: {exc}") from exc
        if not isinstance(payload, dict):
            raise ProductMapError("product map must be a JSON object")
        return cls.from_mapping(payload)

    def canonical(self, product_id: ProductId) -> Optional[str]:
        """Translate a product identifier to its canonical key, or ``None`` if unknown."""
        if isinstance(product_id, bool):
            return None
        if isinstance(product_id, int):
            return self.aliases.get(product_id)
        candidate = product_id.strip()
        if candidate.isdigit():
            return self.aliases.get(int(candidate))
        return candidate if candidate in self.products else None

    def files_for(self, key: str) -> tuple[str, ...]:
        return self.products.get(key, ())

    def __contains__(self, product_id: object) -> bool:
        if not isinstance(product_id, (str, int)):
            return False
        return self.canonical(product_id) is not None
