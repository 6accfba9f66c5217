from typing import List

import pytest

from fakes import FakeApi, make_product
from storefront.models import Product, Session


@pytest.fixture
def products() -> List[Product]:
    return [make_product("p1", 100.0), make_product("p2", 25.5), make_product("p3", 10.0)]


@pytest.fixture
def fake_api(products) -> FakeApi:
    return FakeApi(products)


@pytest.fixture
def session() -> Session:
    return Session(token="tok-123", username="crio.do", balance=5000)
