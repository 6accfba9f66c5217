from html import escape
from typing import Iterable, List

from storefront.config import settings
from storefront.models import CartTotals, MergedCartItem, Product


def money(v: float) -> str:
    return f"{settings.currency}{v:.{settings.decimals}f}"


def stars(rating: int) -> str:
    r = max(0, min(5, int(rating)))
    return "★" * r + "☆" * (5 - r)


def product_line(p: Product) -> str:
    return f"• <b>{escape(p.name)}</b> — {money(p.cost)} {stars(p.rating)}\n  <code>{escape(p.id)}</code>"


def products_text(products: Iterable[Product], title: str = "Products") -> str:
    lines = [f"<b>{title}:</b>"]
    for p in products:
        lines.append(product_line(p))
    return "\n".join(lines)


def cart_text(items: List[MergedCartItem], totals: CartTotals) -> str:
    if not items:
        return "🧺 Cart is empty. Add more items to the cart to checkout."

    lines = ["<b>🧺 Cart:</b>"]
    for it in items:
        lines.append(f"• {escape(it.name)} × {it.qty} — {money(it.cost)}  <code>{escape(it.id)}</code>")
    lines.append("")
    lines.append(f"Order total: <b>{money(totals.subtotal)}</b>")
    lines.append("")
    lines.append("<b>Order Details</b>")
    lines.append(f"Products: {totals.item_count}")
    lines.append(f"Subtotal: {money(totals.subtotal)}")
    lines.append(f"Shipping Charges: {money(0)}")
    lines.append(f"<b>Total: {money(totals.subtotal)}</b>")
    return "\n".join(lines)
