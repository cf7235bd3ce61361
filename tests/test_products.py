import json

import pytest

from catalogue_admin.modules.products import ProductCatalogueMap, ProductMapError
from tests.helpers import PRODUCT_MAP


def test_bundled_map_loads():
    product_map = ProductCatalogueMap.load()

    assert "twin-screw-extruders" in product_map.products
    assert product_map.canonical(1) == "twin-screw-extruders"
    assert product_map.files_for("company-profile") == ("Company Profile.pdf",)


def test_load_from_file(tmp_path):
    path = tmp_path / "products.json"
    path.write_text(json.dumps(PRODUCT_MAP), encoding="utf-8")

    product_map = ProductCatalogueMap.load(path)

    assert product_map.files_for("twin-screw-extruders") == (
        "Twin Screw Extruders.pdf",
        "Twin Screw Spare Parts.pdf",
    )


@pytest.mark.parametrize("product_id", [1, "1", " 1 ", "twin-screw-extruders"])
def test_canonical_accepts_aliases_and_keys(product_map, product_id):
    assert product_map.canonical(product_id) == "twin-screw-extruders"


@pytest.mark.parametrize("product_id", ["Zzz", 99, "99", True, ""])
def test_canonical_unknown_is_none(product_map, product_id):
    assert product_map.canonical(product_id) is None


def test_membership(product_map):
    assert "company-profile" in product_map
    assert 6 in product_map
    assert "Zzz" not in product_map
    assert None not in product_map


def test_map_is_read_only(product_map):
    with pytest.raises(TypeError):
        product_map.products["new"] = ("x.pdf",)  # type: ignore[index]


def test_duplicate_file_names_collapse():
    product_map = ProductCatalogueMap.from_mapping({"products": {"a": ["x.pdf", "y.pdf", "x.pdf"]}})

    assert product_map.files_for("a") == ("x.pdf", "y.pdf")


def test_alias_to_unknown_product_rejected():
    with pytest.raises(ProductMapError):
        ProductCatalogueMap.from_mapping({"products": {"a": ["x.pdf"]}, "aliases": {"1": "b"}})


def test_non_numeric_alias_rejected():
    with pytest.raises(ProductMapError):
        ProductCatalogueMap.from_mapping({"products": {"a": ["x.pdf"]}, "aliases": {"one": "a"}})


def test_malformed_json_rejected(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ProductMapError):
        ProductCatalogueMap.load(path)


def test_missing_file_rejected(tmp_path):
    with pytest.raises(ProductMapError):
        ProductCatalogueMap.load(tmp_path / "absent.json")
