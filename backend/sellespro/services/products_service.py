# backend/sellespro/services/products_service.py
"""
Catalog store.

Every mutating function is a transition `(state, ...) -> (new_state, result)`
meant to run through StateContainer.apply(), which makes the check and the
write of each operation (notably decrement_stock) one atomic step.

Deleting a product never touches sale history: sale items carry their own
copy of name, price and quantity.
"""
from __future__ import annotations

from dataclasses import replace
from decimal import Decimal

from ..errors import InsufficientStockError, NotFoundError, ValidationError
from ..models import Product
from ..money_utils import ZERO, to_money
from ..state import AppState, new_id

PRODUCT_MUTABLE_FIELDS = {"name", "local_code", "bar_code", "quantity", "price"}


def _require_int(value, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field} must be an integer")
    return value


def _check_product(p: Product, others: tuple[Product, ...]) -> None:
    """Invariants every stored product must satisfy."""
    if not p.name.strip():
        raise ValidationError("name cannot be blank")
    if not p.local_code.strip():
        raise ValidationError("localCode cannot be blank")
    _require_int(p.quantity, "quantity")
    if p.quantity < 0:
        raise ValidationError("quantity must be >= 0")
    if p.price < 0:
        raise ValidationError("price must be >= 0")

    code = p.local_code.lower()
    for other in others:
        if other.id != p.id and other.local_code.lower() == code:
            raise ValidationError(
                "localCode already exists",
                details={"local_code": p.local_code, "product_id": other.id},
            )


def _money(value) -> Decimal:
    try:
        return to_money(value)
    except ValueError:
        raise ValidationError("price must be a number")


def apply_product_patch(p: Product, patch: dict) -> Product:
    changes = {k: v for k, v in patch.items() if k in PRODUCT_MUTABLE_FIELDS}
    for key in ("name", "local_code", "bar_code"):
        if key in changes:
            changes[key] = "" if changes[key] is None else str(changes[key]).strip()
    if "price" in changes:
        changes["price"] = _money(changes["price"])
    return replace(p, **changes)


def _get(state: AppState, product_id: str) -> Product:
    product = state.find_product(product_id)
    if product is None:
        raise NotFoundError("Product not found", details={"product_id": product_id})
    return product


def _swap(state: AppState, updated: Product) -> AppState:
    return replace(
        state,
        products=tuple(updated if p.id == updated.id else p for p in state.products),
    )


def create_product(state: AppState, patch: dict) -> tuple[AppState, Product]:
    """
    Add a product. name and local_code are required; quantity, price and
    bar_code default to 0, 0 and "".
    """
    base = Product(id=new_id("prod"), name="", local_code="", bar_code="", quantity=0, price=ZERO)
    defaults = {k: v for k, v in patch.items() if v is not None}
    product = apply_product_patch(base, defaults)
    _check_product(product, state.products)
    return replace(state, products=state.products + (product,)), product


def update_product(state: AppState, product_id: str, patch: dict) -> tuple[AppState, Product]:
    """Merge patch fields into an existing product."""
    updated = apply_product_patch(_get(state, product_id), patch)
    _check_product(updated, state.products)
    return _swap(state, updated), updated


def restock_product(state: AppState, product_id: str, amount: int) -> tuple[AppState, Product]:
    """Add a positive integer amount to the stock count."""
    _require_int(amount, "amount")
    if amount <= 0:
        raise ValidationError("amount must be > 0")
    product = _get(state, product_id)
    updated = replace(product, quantity=product.quantity + amount)
    return _swap(state, updated), updated


def delete_product(state: AppState, product_id: str) -> tuple[AppState, Product]:
    """Remove a product from the live catalog. Sale history is unaffected."""
    product = _get(state, product_id)
    products = tuple(p for p in state.products if p.id != product_id)
    return replace(state, products=products), product


def decrement_stock(state: AppState, product_id: str, amount: int) -> tuple[AppState, Product]:
    """
    Remove amount units from stock.

    Used by the sale processor. Rejected in full (never clamped) when amount
    exceeds the current quantity.
    """
    _require_int(amount, "amount")
    if amount <= 0:
        raise ValidationError("amount must be > 0")
    product = _get(state, product_id)
    if amount > product.quantity:
        raise InsufficientStockError(product.id, product.name, amount, product.quantity)
    updated = replace(product, quantity=product.quantity - amount)
    return _swap(state, updated), updated


class ProductSearch:
    """
    Lazy, restartable view over a product sequence.

    Each iteration re-scans the products it was built from, so it can be
    consumed any number of times.
    """

    def __init__(self, products, query: str = "", low_stock_only: bool = False):
        self._products = tuple(products)
        self.query = (query or "").strip()
        self.low_stock_only = low_stock_only

    def __iter__(self):
        for product in self._products:
            if self.query and not product.matches(self.query):
                continue
            if self.low_stock_only and not product.is_low_stock:
                continue
            yield product


def search_products(products, query: str = "", low_stock_only: bool = False) -> ProductSearch:
    return ProductSearch(products, query=query, low_stock_only=low_stock_only)


def low_stock_products(products) -> list[Product]:
    return list(ProductSearch(products, low_stock_only=True))
