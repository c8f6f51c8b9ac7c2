from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from ..money_utils import ZERO, money_to_json, to_money

# Fixed threshold used for alerts, the low-stock filter and dashboard counts
LOW_STOCK_THRESHOLD = 10


@dataclass(frozen=True)
class Product:
    """
    Catalog item with a live stock count.

    Owned by the catalog store. quantity only changes through restock,
    edit, or a committed sale and is never negative.
    """
    id: str
    name: str
    local_code: str
    bar_code: str = ""
    quantity: int = 0
    price: Decimal = ZERO

    @property
    def is_low_stock(self) -> bool:
        return self.quantity < LOW_STOCK_THRESHOLD

    def matches(self, term: str) -> bool:
        """Case-insensitive substring match on name, local code and bar code."""
        term = term.lower()
        return (
            term in self.name.lower()
            or term in self.local_code.lower()
            or term in self.bar_code.lower()
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "localCode": self.local_code,
            "barCode": self.bar_code,
            "quantity": self.quantity,
            "price": money_to_json(self.price),
            "isLowStock": self.is_low_stock,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Product":
        return cls(
            id=str(data["id"]),
            name=data["name"],
            local_code=data.get("localCode", ""),
            bar_code=data.get("barCode", "") or "",
            quantity=int(data.get("quantity", 0)),
            price=to_money(data.get("price", 0)),
        )
