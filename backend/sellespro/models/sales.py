from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal

from ..errors import InsufficientStockError, NotFoundError, ValidationError
from ..money_utils import ZERO, money_to_json, sum_money, to_money
from ..time_utils import parse_iso_datetime, to_utc_z
from .inventory import Product
from .shifts import ShiftType


@dataclass(frozen=True)
class SaleItem:
    """Snapshot of one cart line at sale time, decoupled from the live product."""
    product_id: str
    name: str
    quantity: int
    price: Decimal
    total: Decimal

    def to_dict(self) -> dict:
        return {
            "productId": self.product_id,
            "name": self.name,
            "quantity": self.quantity,
            "price": money_to_json(self.price),
            "total": money_to_json(self.total),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SaleItem":
        return cls(
            product_id=str(data["productId"]),
            name=data["name"],
            quantity=int(data["quantity"]),
            price=to_money(data["price"]),
            total=to_money(data["total"]),
        )


@dataclass(frozen=True)
class SaleRecord:
    """
    Committed sale. Append-only history; never mutated after creation.

    username is the operator's name at sale time so history stays
    displayable after the account is deleted.
    """
    id: str
    timestamp: datetime
    user_id: str
    username: str
    shift: ShiftType
    items: tuple[SaleItem, ...]
    total_amount: Decimal

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "timestamp": to_utc_z(self.timestamp),
            "userId": self.user_id,
            "username": self.username,
            "shift": self.shift.value,
            "items": [item.to_dict() for item in self.items],
            "totalAmount": money_to_json(self.total_amount),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SaleRecord":
        return cls(
            id=str(data["id"]),
            timestamp=parse_iso_datetime(data["timestamp"]),
            user_id=str(data["userId"]),
            username=data.get("username", ""),
            shift=ShiftType(data["shift"]),
            items=tuple(SaleItem.from_dict(item) for item in data.get("items", [])),
            total_amount=to_money(data["totalAmount"]),
        )


@dataclass(frozen=True)
class CartLine:
    """One uncommitted line: a copy of the product fields plus cart quantity and price."""
    product_id: str
    name: str
    cart_quantity: int
    edited_price: Decimal
    local_code: str = ""
    bar_code: str = ""
    unit_price: Decimal = ZERO

    @classmethod
    def for_product(cls, product: Product, quantity: int = 1) -> "CartLine":
        return cls(
            product_id=product.id,
            name=product.name,
            cart_quantity=quantity,
            edited_price=product.price,
            local_code=product.local_code,
            bar_code=product.bar_code,
            unit_price=product.price,
        )

    @property
    def total(self) -> Decimal:
        return to_money(self.edited_price * self.cart_quantity)

    def to_dict(self) -> dict:
        return {
            "productId": self.product_id,
            "name": self.name,
            "localCode": self.local_code,
            "barCode": self.bar_code,
            "price": money_to_json(self.unit_price),
            "cartQuantity": self.cart_quantity,
            "editedPrice": money_to_json(self.edited_price),
            "total": money_to_json(self.total),
        }


class Cart:
    """
    Ephemeral cart held by the register until commit or clear.

    Add-time stock checks here are a convenience for the cashier; the
    authoritative check happens again at commit against the live catalog.
    """

    def __init__(self, lines=None):
        self._lines: list[CartLine] = list(lines or [])

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self):
        return iter(tuple(self._lines))

    @property
    def lines(self) -> tuple[CartLine, ...]:
        return tuple(self._lines)

    @property
    def total(self) -> Decimal:
        return sum_money(line.total for line in self._lines)

    def _index(self, product_id: str) -> int:
        for i, line in enumerate(self._lines):
            if line.product_id == product_id:
                return i
        raise NotFoundError("Product is not in the cart", details={"product_id": product_id})

    def quantity_of(self, product_id: str) -> int:
        return sum(line.cart_quantity for line in self._lines if line.product_id == product_id)

    def add(self, product: Product) -> CartLine:
        """Add one unit of product, refusing to exceed the displayed stock."""
        in_cart = self.quantity_of(product.id)
        if in_cart >= product.quantity:
            raise InsufficientStockError(product.id, product.name, in_cart + 1, product.quantity)

        try:
            i = self._index(product.id)
        except NotFoundError:
            line = CartLine.for_product(product)
            self._lines.append(line)
            return line

        line = replace(self._lines[i], cart_quantity=self._lines[i].cart_quantity + 1)
        self._lines[i] = line
        return line

    def set_quantity(self, product: Product, quantity: int) -> CartLine:
        i = self._index(product.id)
        quantity = max(1, quantity)
        if quantity > product.quantity:
            raise InsufficientStockError(product.id, product.name, quantity, product.quantity)
        line = replace(self._lines[i], cart_quantity=quantity)
        self._lines[i] = line
        return line

    def set_price(self, product_id: str, price) -> CartLine:
        try:
            price = to_money(price)
        except ValueError:
            raise ValidationError("price must be a number")
        if price < 0:
            raise ValidationError("price must be >= 0")
        i = self._index(product_id)
        line = replace(self._lines[i], edited_price=price)
        self._lines[i] = line
        return line

    def remove(self, product_id: str) -> None:
        self._lines = [line for line in self._lines if line.product_id != product_id]

    def clear(self) -> None:
        self._lines = []

    def to_dict(self) -> dict:
        return {
            "lines": [line.to_dict() for line in self._lines],
            "total": money_to_json(self.total),
        }
