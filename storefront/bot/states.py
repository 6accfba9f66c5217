from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Optional

from aiogram.fsm.state import State, StatesGroup

from storefront.config import settings
from storefront.models import Session
from storefront.services.cart import CartView
from storefront.services.cart_mutations import CartMutationCoordinator
from storefront.services.catalog import CatalogStore
from storefront.services.search import SearchCoordinator

logger = logging.getLogger(__name__)


class LoginForm(StatesGroup):
    waiting_username = State()
    waiting_password = State()


class RegisterForm(StatesGroup):
    waiting_username = State()
    waiting_password = State()
    waiting_confirm = State()


class SearchMode(StatesGroup):
    typing = State()


@dataclass
class Storefront:
    """Everything one chat sees: catalog, cart and search, wired together."""

    catalog: CatalogStore
    cart: CartMutationCoordinator
    search: SearchCoordinator
    view: CartView = field(default_factory=CartView)

    @classmethod
    def create(
        cls,
        api,
        session: Optional[Session] = None,
        debounce: Optional[float] = None,
        catalog: Optional[CatalogStore] = None,
    ) -> "Storefront":
        catalog = catalog if catalog is not None else CatalogStore(api)
        view = CartView()
        return cls(
            catalog=catalog,
            cart=CartMutationCoordinator(api, catalog, view, session),
            search=SearchCoordinator(api, catalog, debounce=debounce),
            view=view,
        )

    @property
    def session(self) -> Optional[Session]:
        return self.cart.session


class StorefrontRegistry:
    """
    chat_id -> Storefront. All chats read one CatalogStore; past `limit`
    chats the least recently used one is closed and forgotten.
    """

    def __init__(self, limit: int) -> None:
        self.limit = limit
        self.catalog: Optional[CatalogStore] = None
        self._chats: "OrderedDict[int, Storefront]" = OrderedDict()

    def get(self, chat_id: int) -> Optional[Storefront]:
        sf = self._chats.get(chat_id)
        if sf is not None:
            self._chats.move_to_end(chat_id)
        return sf

    async def open(self, chat_id: int, api, debounce: Optional[float] = None) -> Storefront:
        if self.catalog is None:
            self.catalog = CatalogStore(api)
        sf = Storefront.create(api, debounce=debounce, catalog=self.catalog)
        self._chats[chat_id] = sf
        while len(self._chats) > self.limit:
            old_id, old = self._chats.popitem(last=False)
            await old.search.close()
            logger.info("storefront for chat %s evicted", old_id)
        return sf

    async def close(self) -> None:
        for sf in self._chats.values():
            await sf.search.close()
        self._chats.clear()

    def __contains__(self, chat_id: object) -> bool:
        return chat_id in self._chats

    def __len__(self) -> int:
        return len(self._chats)


STOREFRONTS = StorefrontRegistry(settings.max_chats)
