from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    category: str
    cost: float
    rating: int
    image_url: str

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Product":
        # бэкенд отдаёт _id и image
        return cls(
            id=str(data["_id"]),
            name=str(data["name"]),
            category=str(data.get("category", "")),
            cost=float(data["cost"]),
            rating=int(data.get("rating", 0)),
            image_url=str(data.get("image", "")),
        )


@dataclass(frozen=True)
class CartEntry:
    product_id: str
    qty: int

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "CartEntry":
        return cls(product_id=str(data["productId"]), qty=int(data["qty"]))


@dataclass(frozen=True)
class MergedCartItem:
    id: str
    name: str
    category: str
    cost: float
    rating: int
    image_url: str
    qty: int

    @classmethod
    def from_product(cls, product: Product, qty: int) -> "MergedCartItem":
        return cls(
            id=product.id,
            name=product.name,
            category=product.category,
            cost=product.cost,
            rating=product.rating,
            image_url=product.image_url,
            qty=qty,
        )

    @property
    def line_total(self) -> float:
        return self.qty * self.cost


@dataclass(frozen=True)
class CartTotals:
    item_count: int = 0  # distinct lines, not units
    subtotal: float = 0.0


@dataclass(frozen=True)
class Session:
    token: str
    username: str
    balance: float = 0.0
