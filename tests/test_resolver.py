import pytest

from catalogue_admin.core.errors import NotFoundError
from catalogue_admin.infrastructure.database.repositories.catalogue_repository import SqlCatalogueRepository
from catalogue_admin.modules.access import AccessResolver


@pytest.fixture
async def resolver(session_factory, product_map):
    async with session_factory() as session:
        yield AccessResolver(SqlCatalogueRepository(session), product_map)


async def test_resolve_catalogue(resolver, add_catalogue):
    entry = await add_catalogue("Extruders.pdf")

    resolved = await resolver.resolve_catalogue(entry.id)

    assert resolved.id == entry.id
    assert resolved.original_name == "Extruders.pdf"


async def test_inactive_catalogue_not_found(resolver, add_catalogue):
    entry = await add_catalogue("Old.pdf", is_active=False)

    with pytest.raises(NotFoundError) as exc_info:
        await resolver.resolve_catalogue(entry.id)

    assert exc_info.value.error == "catalogue_not_found"


async def test_unknown_catalogue_not_found(resolver):
    with pytest.raises(NotFoundError) as exc_info:
        await resolver.resolve_catalogue("missing")

    assert exc_info.value.error == "catalogue_not_found"


async def test_unknown_product(resolver):
    with pytest.raises(NotFoundError) as exc_info:
        await resolver.resolve_product("Zzz")

    assert exc_info.value.error == "product_not_found"


async def test_known_product_without_active_files(resolver, add_catalogue):
    await add_catalogue("Pipe Extrusion Lines.pdf", is_active=False)

    with pytest.raises(NotFoundError) as exc_info:
        await resolver.resolve_product("pipe-extrusion-lines")

    assert exc_info.value.error == "no_catalogues_found"


async def test_product_entries_follow_map_order(resolver, add_catalogue):
    spare = await add_catalogue("Twin Screw Spare Parts.pdf")
    main = await add_catalogue("Twin Screw Extruders.pdf")
    await add_catalogue("Unrelated.pdf")

    resolved = await resolver.resolve_product("twin-screw-extruders")

    assert resolved.key == "twin-screw-extruders"
    assert [entry.id for entry in resolved.entries] == [main.id, spare.id]


async def test_partial_product_returns_available_files(resolver, add_catalogue):
    spare = await add_catalogue("Twin Screw Spare Parts.pdf")

    resolved = await resolver.resolve_product("twin-screw-extruders")

    assert [entry.id for entry in resolved.entries] == [spare.id]


async def test_newest_upload_wins_for_duplicate_names(resolver, add_catalogue):
    await add_catalogue("Company Profile.pdf", content=b"first")
    newest = await add_catalogue("Company Profile.pdf", content=b"second upload")

    resolved = await resolver.resolve_product("company-profile")

    assert [entry.id for entry in resolved.entries] == [newest.id]


@pytest.mark.parametrize("alias", [1, "1"])
async def test_alias_resolves_like_canonical_key(resolver, add_catalogue, alias):
    await add_catalogue("Twin Screw Extruders.pdf")
    await add_catalogue("Twin Screw Spare Parts.pdf")

    by_alias = await resolver.resolve_product(alias)
    by_key = await resolver.resolve_product("twin-screw-extruders")

    assert by_alias == by_key
