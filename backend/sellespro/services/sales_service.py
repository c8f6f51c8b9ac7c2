"""
Sale processor.

WHY: Committing a sale must record the sale and take the stock out
together. commit_sale computes the complete next state (new sale appended,
every product decremented) and returns it; StateContainer.apply() swaps it
in as one step, so either both effects are visible or neither is.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime

from ..errors import (
    EmptyCartError,
    InsufficientStockError,
    NoActiveShiftError,
    NotFoundError,
    ValidationError,
)
from ..models import Cart, CartLine, Product, Role, SaleItem, SaleRecord
from ..money_utils import sum_money, to_money
from ..state import AppState, new_id
from ..time_utils import utcnow

logger = logging.getLogger(__name__)


def _check_line(line: CartLine) -> None:
    qty = line.cart_quantity
    if isinstance(qty, bool) or not isinstance(qty, int) or qty < 1:
        raise ValidationError(
            "cartQuantity must be an integer >= 1",
            details={"product_id": line.product_id},
        )
    if line.edited_price < 0:
        raise ValidationError(
            "editedPrice must be >= 0",
            details={"product_id": line.product_id},
        )


def _quantities_by_product(lines) -> dict[str, int]:
    # Two lines for the same product are checked against stock together
    totals: dict[str, int] = {}
    for line in lines:
        totals[line.product_id] = totals.get(line.product_id, 0) + line.cart_quantity
    return totals


def _validate_on_hand(state: AppState, lines) -> dict[str, int]:
    """
    Re-check every requested quantity against the live catalog.

    Raises InsufficientStockError for the first offending product; details
    list every shortfall in the cart. A product deleted since it was carted
    has nothing available.
    """
    totals = _quantities_by_product(lines)
    names = {line.product_id: line.name for line in lines}

    insufficient = []
    for product_id, qty in totals.items():
        product = state.find_product(product_id)
        on_hand = product.quantity if product is not None else 0
        if on_hand < qty:
            insufficient.append({
                "product_id": product_id,
                "name": product.name if product is not None else names[product_id],
                "requested": qty,
                "available": on_hand,
            })

    if insufficient:
        first = insufficient[0]
        raise InsufficientStockError(
            first["product_id"],
            first["name"],
            first["requested"],
            first["available"],
            details={"items": insufficient},
        )
    return totals


def commit_sale(
    state: AppState,
    cart,
    operator_id: str,
    now: datetime | None = None,
) -> tuple[AppState, SaleRecord]:
    """
    Turn a cart into a SaleRecord and take the sold units out of stock.

    Raises:
        EmptyCartError: the cart has no lines
        NotFoundError: operator_id does not name an account
        NoActiveShiftError: no shift is active, or a USER operator does not hold it
        InsufficientStockError: any line exceeds live stock (nothing is applied)

    The caller is expected to clear its cart after a successful commit.
    """
    lines = tuple(cart.lines if isinstance(cart, Cart) else cart)
    if not lines:
        raise EmptyCartError()

    operator = state.find_user(operator_id)
    if operator is None:
        raise NotFoundError("User not found", details={"user_id": operator_id})

    shift = state.active_shift
    if shift is None or not shift.is_active:
        raise NoActiveShiftError()
    if operator.role is Role.USER and shift.user_id != operator.id:
        raise NoActiveShiftError("The active shift belongs to another operator")

    for line in lines:
        _check_line(line)

    totals = _validate_on_hand(state, lines)

    items = tuple(
        SaleItem(
            product_id=line.product_id,
            name=line.name,
            quantity=line.cart_quantity,
            price=line.edited_price,
            total=line.total,
        )
        for line in lines
    )
    sale = SaleRecord(
        id=new_id("sale"),
        timestamp=now or utcnow(),
        user_id=operator.id,
        username=operator.username,
        shift=shift.type,
        items=items,
        total_amount=sum_money(item.total for item in items),
    )

    products = tuple(
        replace(p, quantity=p.quantity - totals[p.id]) if p.id in totals else p
        for p in state.products
    )

    logger.info("Sale %s committed by %s: %s", sale.id, operator.username, sale.total_amount)
    return replace(state, products=products, sales=state.sales + (sale,)), sale


def _line_from_payload(product: Product, data: dict) -> CartLine:
    quantity = data.get("quantity", data.get("cartQuantity", 1))
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationError("quantity must be an integer", details={"product_id": product.id})

    price = data.get("price", data.get("editedPrice"))
    if price is None:
        edited_price = product.price
    else:
        try:
            edited_price = to_money(price)
        except ValueError:
            raise ValidationError("price must be a number", details={"product_id": product.id})

    return replace(CartLine.for_product(product, quantity), edited_price=edited_price)


def cart_from_payload(state: AppState, lines: list) -> Cart:
    """
    Build a cart from API input `[{"product_id", "quantity", "price"?}]`.

    Product fields are copied from the current catalog; price defaults to
    the catalog price and may be overridden. Stock is checked at commit.
    """
    if not isinstance(lines, list):
        raise ValidationError("items must be a list")

    cart_lines = []
    for data in lines:
        if not isinstance(data, dict):
            raise ValidationError("each item must be an object")
        product_id = data.get("product_id") or data.get("productId")
        if not product_id:
            raise ValidationError("product_id required for each item")
        product = state.find_product(str(product_id))
        if product is None:
            raise NotFoundError("Product not found", details={"product_id": product_id})
        cart_lines.append(_line_from_payload(product, data))
    return Cart(cart_lines)
