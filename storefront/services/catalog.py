from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Optional

from storefront.errors import ApiError, CatalogUnavailable, server_message
from storefront.models import Product

logger = logging.getLogger(__name__)


class CatalogStore:
    """
    Full product list, fetched once and read-only afterwards.

    `version` grows by one on every successful load, so holders of merged
    data can tell that their snapshot is older than the catalog.
    """

    def __init__(self, api) -> None:
        self._api = api
        self._products: List[Product] = []
        self._by_id: Dict[str, Product] = {}
        self._lock = asyncio.Lock()
        self.loaded = False
        self.version = 0

    async def load(self) -> List[Product]:
        if self.loaded:
            return self.snapshot
        async with self._lock:
            # пока ждали lock, каталог мог загрузить другой вызов
            if self.loaded:
                return self.snapshot
            try:
                products = await self._api.list_products()
            except ApiError as e:
                # каталог остаётся пустым, а не None
                raise CatalogUnavailable(server_message(e)) from e
            self._products = list(products)
            self._by_id = {p.id: p for p in self._products}
            self.loaded = True
            self.version += 1
        logger.info("catalog loaded: %d products", len(self._products))
        return self.snapshot

    @property
    def snapshot(self) -> List[Product]:
        return list(self._products)

    def get(self, product_id: str) -> Optional[Product]:
        return self._by_id.get(product_id)

    def __contains__(self, product_id: object) -> bool:
        return product_id in self._by_id

    def __len__(self) -> int:
        return len(self._products)
