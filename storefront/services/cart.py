from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence

from storefront.models import CartEntry, CartTotals, MergedCartItem, Product


def merge(cart_entries: Iterable[CartEntry], catalog: Iterable[Product]) -> List[MergedCartItem]:
    """
    Join the sparse server cart with the catalog.

    Order follows cart_entries. Entries whose product is missing from the
    catalog, and entries with qty <= 0, are dropped.
    """
    by_id: Dict[str, Product] = {p.id: p for p in catalog}
    items: List[MergedCartItem] = []
    for entry in cart_entries:
        if entry.qty <= 0:
            continue
        product = by_id.get(entry.product_id)
        if product is None:
            continue
        items.append(MergedCartItem.from_product(product, entry.qty))
    return items


def totals(items: Optional[Sequence[MergedCartItem]] = None) -> CartTotals:
    if not items:
        return CartTotals()
    subtotal = 0.0
    for it in items:
        subtotal += it.qty * it.cost
    return CartTotals(item_count=len(items), subtotal=subtotal)


class CartView:
    """
    Merged cart shown to the user.

    Only the initial load and CartMutationCoordinator write here, and every
    write replaces entries, items and totals together.
    """

    def __init__(self) -> None:
        self.entries: List[CartEntry] = []
        self.items: List[MergedCartItem] = []
        self.totals: CartTotals = CartTotals()

    def replace(self, entries: Iterable[CartEntry], catalog: Iterable[Product]) -> List[MergedCartItem]:
        entries = list(entries)
        items = merge(entries, catalog)
        self.entries, self.items, self.totals = entries, items, totals(items)
        return items

    def clear(self) -> None:
        self.replace([], [])

    def find(self, product_id: str) -> Optional[MergedCartItem]:
        for it in self.items:
            if it.id == product_id:
                return it
        return None

    def __contains__(self, product_id: object) -> bool:
        return any(it.id == product_id for it in self.items)

    def __len__(self) -> int:
        return len(self.items)
