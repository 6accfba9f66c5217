from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup, KeyboardButton, ReplyKeyboardMarkup

from storefront.constants import DECREMENT, INCREMENT
from storefront.models import MergedCartItem


def main_kb(logged_in: bool = False) -> ReplyKeyboardMarkup:
    auth_row = (
        [KeyboardButton(text="/cart"), KeyboardButton(text="/logout")]
        if logged_in
        else [KeyboardButton(text="/login"), KeyboardButton(text="/register")]
    )
    return ReplyKeyboardMarkup(
        keyboard=[
            [KeyboardButton(text="/products"), KeyboardButton(text="/search")],
            auth_row,
            [KeyboardButton(text="/help")],
        ],
        resize_keyboard=True,
    )


def add_to_cart_kb(product_id: str) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[[InlineKeyboardButton(text="🛒 Add to Cart", callback_data=f"add:{product_id}")]]
    )


def cart_kb(items: list[MergedCartItem]) -> InlineKeyboardMarkup:
    rows = []
    for it in items:
        rows.append(
            [
                InlineKeyboardButton(text="➖", callback_data=f"{DECREMENT}:{it.id}"),
                InlineKeyboardButton(text=f"{it.name[:20]} × {it.qty}", callback_data="noop"),
                InlineKeyboardButton(text="➕", callback_data=f"{INCREMENT}:{it.id}"),
            ]
        )
    return InlineKeyboardMarkup(inline_keyboard=rows)
