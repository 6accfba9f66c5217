"""
Search-as-you-type.

Every keystroke gets a sequence number. Only the trailing keystroke of a
quiet period fires ``GET /products/search``, and a response is applied only
if its sequence number is still the latest one issued (last-issued-wins).
An empty query never hits the network: the view goes back to the full
catalog right away.

States for the latest sequence number:

    IDLE -> PENDING(seq) -> RESOLVED(seq) | SUPERSEDED(seq) | FAILED(seq)
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Set

from storefront.config import settings
from storefront.errors import ApiError, SearchFailed, classify_search_error
from storefront.models import Product
from storefront.services.catalog import CatalogStore

logger = logging.getLogger(__name__)


class SearchState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    RESOLVED = "resolved"
    SUPERSEDED = "superseded"
    FAILED = "failed"


UpdateCallback = Callable[["SearchCoordinator"], Awaitable[None]]


class SearchCoordinator:
    def __init__(
        self,
        api,
        catalog: CatalogStore,
        debounce: Optional[float] = None,
        on_update: Optional[UpdateCallback] = None,
    ) -> None:
        self._api = api
        self.catalog = catalog
        self.debounce = settings.search_debounce if debounce is None else debounce
        self.on_update = on_update

        self.seq = 0
        self.query = ""
        self.state = SearchState.IDLE
        self.error: Optional[SearchFailed] = None
        self.superseded = 0
        self._results: List[Product] = []
        self._timer: Optional[asyncio.Task] = None
        self._tasks: Set[asyncio.Task] = set()

    @property
    def products(self) -> List[Product]:
        if self.state is SearchState.IDLE:
            return self.catalog.snapshot
        return list(self._results)

    @property
    def failed(self) -> bool:
        return self.state is SearchState.FAILED

    @property
    def not_found(self) -> bool:
        """Zero matches for a query that did succeed."""
        return self.state is SearchState.RESOLVED and not self._results

    def submit(self, text: str) -> Optional[int]:
        """
        Register a keystroke. Returns the sequence number assigned to it, or
        None when the trimmed value equals the current query and nothing
        changes.
        """
        query = (text or "").strip()
        if query and query == self.query:
            return None

        self._cancel_timer()
        self.seq += 1
        self.query = query
        seq = self.seq

        if not query:
            self.state = SearchState.IDLE
            self.error = None
            self._results = []
            self._spawn(self._notify())
            return seq

        if self.state is SearchState.IDLE:
            # пока ответа нет, на экране остаётся каталог
            self._results = self.catalog.snapshot
        self.state = SearchState.PENDING
        self._timer = asyncio.get_running_loop().create_task(self._debounced(seq, query))
        return seq

    async def _debounced(self, seq: int, query: str) -> None:
        await asyncio.sleep(self.debounce)
        # с этого момента запрос не отменяется, устаревший ответ просто отбросим
        task = asyncio.current_task()
        if self._timer is task:
            self._timer = None
        self._tasks.add(task)
        try:
            await self._run(seq, query)
        finally:
            self._tasks.discard(task)

    async def _run(self, seq: int, query: str) -> SearchState:
        try:
            results = await self._api.search_products(query)
        except ApiError as e:
            if seq != self.seq:
                return self._discard(seq)
            self.error = classify_search_error(e)
            self.state = SearchState.FAILED
            logger.warning("search %r (seq=%d) failed: %s", query, seq, e)
            await self._notify()
            return SearchState.FAILED

        if seq != self.seq:
            return self._discard(seq)
        self._results = list(results)
        self.error = None
        self.state = SearchState.RESOLVED
        await self._notify()
        return SearchState.RESOLVED

    def _discard(self, seq: int) -> SearchState:
        self.superseded += 1
        logger.debug("search response seq=%d discarded, latest is %d", seq, self.seq)
        return SearchState.SUPERSEDED

    async def _notify(self) -> None:
        if self.on_update is None:
            return
        try:
            await self.on_update(self)
        except Exception:
            logger.exception("search update callback failed")

    def _spawn(self, coro) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def wait_idle(self) -> None:
        """Wait until no debounce timer or request is outstanding."""
        while self._timer is not None or self._tasks:
            pending = [t for t in (self._timer, *self._tasks) if t is not None]
            await asyncio.gather(*pending, return_exceptions=True)

    async def close(self) -> None:
        self._cancel_timer()
        for task in list(self._tasks):
            task.cancel()
        await self.wait_idle()
