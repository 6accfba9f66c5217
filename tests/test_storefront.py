import asyncio

import pytest

from storefront.bot.handlers import _error_text
from storefront.bot.states import Storefront, StorefrontRegistry
from storefront.constants import INCREMENT, MSG_REGISTERED
from storefront.errors import AlreadyInCart, NetworkOrServerError


@pytest.mark.asyncio
async def test_storefront_components_share_catalog_and_view(fake_api, session):
    sf = Storefront.create(fake_api, session=session, debounce=0)
    await sf.catalog.load()

    fake_api.server_cart["p1"] = 1
    await sf.cart.load()
    await sf.cart.adjust("p1", INCREMENT)

    assert sf.cart.view is sf.view
    assert sf.search.catalog is sf.catalog
    assert sf.view.find("p1").qty == 2
    assert sf.session is session
    assert len(sf.search.products) == 3


@pytest.mark.asyncio
async def test_registry_shares_one_catalog_between_chats(fake_api):
    registry = StorefrontRegistry(limit=10)
    first = await registry.open(1, fake_api, debounce=0)
    second = await registry.open(2, fake_api, debounce=0)

    await first.catalog.load()
    await second.catalog.load()

    assert first.catalog is second.catalog
    assert first.view is not second.view
    assert fake_api.calls == [("list_products",)]


@pytest.mark.asyncio
async def test_registry_evicts_least_recently_used_chat(fake_api):
    registry = StorefrontRegistry(limit=2)
    await registry.open(1, fake_api, debounce=0)
    await registry.open(2, fake_api, debounce=0)
    evicted = registry.get(2)
    evicted.search.submit("lamp")
    assert registry.get(1) is not None
    await registry.open(3, fake_api, debounce=0)

    assert len(registry) == 2
    assert 2 not in registry
    assert 1 in registry and 3 in registry
    assert registry.get(2) is None
    await asyncio.sleep(0.01)
    assert fake_api.searches() == []


@pytest.mark.asyncio
async def test_registry_close_forgets_every_chat(fake_api):
    registry = StorefrontRegistry(limit=5)
    sf = await registry.open(7, fake_api, debounce=0)
    sf.search.submit("mug")

    await registry.close()

    assert len(registry) == 0
    await asyncio.sleep(0.01)
    assert fake_api.searches() == []


def test_error_text_marks_user_correctable_as_warning():
    assert _error_text(AlreadyInCart()).startswith("⚠️")
    assert _error_text(NetworkOrServerError()).startswith("❌")


def test_registration_message():
    assert MSG_REGISTERED == "Registered Successfully"
