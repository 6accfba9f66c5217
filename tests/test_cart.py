from storefront.models import CartEntry, CartTotals, MergedCartItem
from storefront.services.cart import CartView, merge, totals

from fakes import make_product


def test_scenario_single_line_merge_and_totals():
    catalog = [make_product("p1", 100)]
    items = merge([CartEntry("p1", 2)], catalog)

    assert len(items) == 1
    assert items[0].id == "p1"
    assert items[0].qty == 2
    assert items[0].cost == 100
    assert totals(items) == CartTotals(item_count=1, subtotal=200)


def test_merge_empty_cart_is_empty(products):
    assert merge([], products) == []
    assert merge([], []) == []


def test_totals_of_nothing_is_zero():
    assert totals([]) == CartTotals(item_count=0, subtotal=0)
    assert totals(None) == CartTotals(item_count=0, subtotal=0)
    assert totals() == CartTotals()


def test_merge_drops_entries_missing_from_catalog(products):
    entries = [CartEntry("p2", 1), CartEntry("ghost", 4), CartEntry("p1", 3)]
    items = merge(entries, products)

    assert [it.id for it in items] == ["p2", "p1"]
    catalog_ids = {p.id for p in products}
    assert all(it.id in catalog_ids for it in items)


def test_merge_keeps_cart_order_not_catalog_order(products):
    entries = [CartEntry("p3", 1), CartEntry("p1", 1), CartEntry("p2", 1)]
    assert [it.id for it in merge(entries, products)] == ["p3", "p1", "p2"]


def test_merge_drops_zero_quantity(products):
    items = merge([CartEntry("p1", 0), CartEntry("p2", 2)], products)
    assert [it.id for it in items] == ["p2"]


def test_merge_is_idempotent(products):
    entries = [CartEntry("p1", 2), CartEntry("p3", 5)]
    assert merge(entries, products) == merge(entries, products)


def test_merge_does_not_touch_catalog_records(products):
    before = list(products)
    merge([CartEntry("p1", 7)], products)
    assert products == before
    assert not hasattr(products[0], "qty")


def test_subtotal_matches_sum_over_entries(products):
    entries = [CartEntry("p1", 2), CartEntry("missing", 9), CartEntry("p2", 4), CartEntry("p3", 1)]
    costs = {p.id: p.cost for p in products}
    expected = sum(e.qty * costs[e.product_id] for e in entries if e.product_id in costs)

    result = totals(merge(entries, products))
    assert result.subtotal == expected
    assert result.item_count == 3  # distinct lines, not 7 units


def test_merged_item_line_total():
    item = MergedCartItem.from_product(make_product("p9", 12.5), 4)
    assert item.line_total == 50.0


def test_cart_view_replace_recomputes_everything(products):
    view = CartView()
    view.replace([CartEntry("p1", 1), CartEntry("p2", 2)], products)
    assert "p1" in view
    assert view.totals == CartTotals(item_count=2, subtotal=151.0)

    view.replace([CartEntry("p2", 1)], products)
    assert "p1" not in view
    assert view.find("p2").qty == 1
    assert view.entries == [CartEntry("p2", 1)]
    assert view.totals == CartTotals(item_count=1, subtotal=25.5)


def test_cart_view_clear(products):
    view = CartView()
    view.replace([CartEntry("p1", 1)], products)
    view.clear()
    assert len(view) == 0
    assert view.totals == CartTotals()
