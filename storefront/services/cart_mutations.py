from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Optional

from storefront.constants import DIRECTIONS, INCREMENT, MSG_CART_FETCH
from storefront.errors import AlreadyInCart, ApiError, Unauthenticated, classify_cart_error
from storefront.models import MergedCartItem, Session
from storefront.services.cart import CartView
from storefront.services.catalog import CatalogStore

logger = logging.getLogger(__name__)


class CartMutationCoordinator:
    """
    Add/increment/decrement on top of the remote "set quantity" call.

    Mutations on the same product run one at a time: the next one reads the
    current qty only after the previous response has been merged. The
    server's returned cart always replaces the local view.
    """

    def __init__(
        self,
        api,
        catalog: CatalogStore,
        view: Optional[CartView] = None,
        session: Optional[Session] = None,
    ) -> None:
        self._api = api
        self.catalog = catalog
        self.view = view if view is not None else CartView()
        self.session = session
        self._locks: Dict[str, asyncio.Lock] = {}
        self._catalog_version = catalog.version

    def _require_session(self) -> Session:
        if self.session is None or not self.session.token:
            raise Unauthenticated()
        return self.session

    def _lock_for(self, product_id: str) -> asyncio.Lock:
        lock = self._locks.get(product_id)
        if lock is None:
            lock = self._locks[product_id] = asyncio.Lock()
        return lock

    def _apply(self, session: Optional[Session], entries) -> List[MergedCartItem]:
        if self.session is not session:
            # ответ пришёл уже после logout/смены пользователя
            logger.debug("cart: response for a closed session dropped")
            return list(self.view.items)
        self._catalog_version = self.catalog.version
        return self.view.replace(entries, self.catalog.snapshot)

    def refresh(self) -> List[MergedCartItem]:
        """Re-merge the held cart snapshot if the catalog changed since the last merge."""
        if self._catalog_version != self.catalog.version:
            self._catalog_version = self.catalog.version
            self.view.replace(self.view.entries, self.catalog.snapshot)
        return list(self.view.items)

    async def load(self) -> List[MergedCartItem]:
        """Initial fetch of GET /cart. Without a session the cart is just empty."""
        session = self.session
        if session is None or not session.token:
            self.view.clear()
            return []
        try:
            entries = await self._api.get_cart(session.token)
        except ApiError as e:
            raise classify_cart_error(e, MSG_CART_FETCH) from e
        return self._apply(session, entries)

    async def add_new(self, product_id: str) -> List[MergedCartItem]:
        session = self._require_session()
        async with self._lock_for(product_id):
            self.refresh()
            if product_id in self.view:
                raise AlreadyInCart()
            return await self._set_qty(session, product_id, 1)

    async def adjust(self, product_id: str, direction: str) -> List[MergedCartItem]:
        if direction not in DIRECTIONS:
            raise ValueError(f"direction must be one of {DIRECTIONS}, got {direction!r}")
        session = self._require_session()

        lock = self._lock_for(product_id)
        if lock.locked():
            logger.debug("cart: %s %s queued behind in-flight mutation", direction, product_id)
        async with lock:
            self.refresh()
            item = self.view.find(product_id)
            if direction == INCREMENT:
                qty = (item.qty if item else 0) + 1
            else:
                if item is None:
                    # нечего уменьшать
                    return list(self.view.items)
                qty = max(item.qty - 1, 0)
            return await self._set_qty(session, product_id, qty)

    async def _set_qty(self, session: Session, product_id: str, qty: int) -> List[MergedCartItem]:
        try:
            entries = await self._api.set_cart_qty(session.token, product_id, qty)
        except ApiError as e:
            raise classify_cart_error(e) from e
        logger.debug("cart: %s -> qty=%d, %d entries returned", product_id, qty, len(entries))
        return self._apply(session, entries)

    def clear(self) -> None:
        self.session = None
        self.view.clear()
