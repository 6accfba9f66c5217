from storefront.models import CartEntry
from storefront.services.cart import merge, totals
from storefront.utils.formatters import cart_text, money, products_text, stars

from fakes import make_product


def test_money_and_stars():
    assert money(200) == "$200.00"
    assert stars(4) == "★★★★☆"
    assert stars(9) == "★★★★★"


def test_products_text_escapes_html():
    text = products_text([make_product("p1", name="<b>Bold</b> & co")])
    assert "&lt;b&gt;Bold&lt;/b&gt; &amp; co" in text
    assert "<code>p1</code>" in text


def test_cart_text_summary():
    catalog = [make_product("p1", 100), make_product("p2", 10)]
    items = merge([CartEntry("p1", 2), CartEntry("p2", 3)], catalog)
    text = cart_text(items, totals(items))

    assert "Order total: <b>$230.00</b>" in text
    assert "Products: 2" in text
    assert "Shipping Charges: $0.00" in text


def test_empty_cart_text():
    assert "Cart is empty" in cart_text([], totals([]))


def test_headers_are_english():
    catalog = [make_product("p1", 5)]
    items = merge([CartEntry("p1", 1)], catalog)

    assert products_text(catalog).startswith("<b>Products:</b>")
    assert cart_text(items, totals(items)).startswith("<b>🧺 Cart:</b>")
