# Overview: Request payload validation for catalog and staff routes.

from __future__ import annotations

import re
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from .errors import ValidationError
from .money_utils import to_money

# Register keypad ceiling: 9,999,999.99
MAX_PRICE = Decimal("9999999.99")

_PLAIN_INT = re.compile(r"^-?\d+$")


def coerce_int(value: Any, key: str) -> int:
    """
    Accept ints and plain digit strings only.

    Floats, "2.0", "1e3" and booleans are rejected so a stock count can
    never be silently truncated.
    """
    if isinstance(value, bool):
        raise ValidationError(f"{key} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and _PLAIN_INT.match(value.strip()):
        return int(value.strip())
    if isinstance(value, (float, Decimal, str)):
        raise ValidationError(f"{key} must be a whole number")
    raise ValidationError(f"{key} must be an integer")


@dataclass(frozen=True)
class FieldSpec:
    """How one JSON key maps onto a record attribute."""
    attr: str
    kind: str  # "str" | "int" | "money"
    nullable: bool = False
    max_length: int | None = None
    strip: bool = True  # passwords keep their whitespace

    def clean(self, key: str, raw: Any):
        if raw is None:
            if not self.nullable:
                raise ValidationError(f"{key} cannot be null")
            return None

        if self.kind == "int":
            return coerce_int(raw, key)

        if self.kind == "money":
            try:
                return to_money(raw)
            except ValueError:
                raise ValidationError(f"{key} must be a number")

        if isinstance(raw, (dict, list, bool)):
            raise ValidationError(f"{key} must be a string")
        text = str(raw)
        if self.strip:
            text = text.strip()
        if not text.strip() and not self.nullable:
            raise ValidationError(f"{key} cannot be blank")
        if self.max_length and len(text) > self.max_length:
            raise ValidationError(f"{key} exceeds max length {self.max_length}")
        return text


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Which JSON keys a route accepts.

    writable_fields is the allowlist; anything else is rejected outright.
    required_on_create only applies to full (non-partial) payloads.
    """
    writable_fields: set[str]
    required_on_create: set[str] = field(default_factory=set)

    def check_keys(self, payload: dict, partial: bool) -> None:
        unknown = sorted(k for k in payload if k not in self.writable_fields)
        if unknown:
            raise ValidationError(f"Field not allowed: {', '.join(unknown)}")
        if not partial:
            missing = sorted(self.required_on_create - payload.keys())
            if missing:
                raise ValidationError(f"Missing required fields: {', '.join(missing)}")


PRODUCT_FIELDS = {
    "name": FieldSpec("name", "str", max_length=128),
    "localCode": FieldSpec("local_code", "str", max_length=64),
    "barCode": FieldSpec("bar_code", "str", nullable=True, max_length=64),
    "quantity": FieldSpec("quantity", "int"),
    "price": FieldSpec("price", "money"),
}

USER_FIELDS = {
    "username": FieldSpec("username", "str", max_length=64),
    "password": FieldSpec("password", "str", strip=False),
    "role": FieldSpec("role", "str"),
}


def validate_payload(
    *,
    fields: dict[str, FieldSpec],
    payload: Any,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Check a JSON body against the policy and field specs.

    Returns a patch keyed by record attribute name (e.g. "localCode" ->
    "local_code") ready for the service layer. partial=True is PUT/PATCH
    semantics: only the keys present are checked.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    policy.check_keys(payload, partial)

    patch: dict = {}
    for key, raw in payload.items():
        spec = fields.get(key)
        if spec is None:
            raise ValidationError(f"Unknown field: {key}")
        patch[spec.attr] = spec.clean(key, raw)
    return patch


def enforce_rules_product(patch: dict) -> None:
    """Range rules on top of the field specs."""
    price = patch.get("price")
    if price is not None:
        if price < 0:
            raise ValidationError("price must be >= 0")
        if price > MAX_PRICE:
            raise ValidationError(f"price cannot exceed {MAX_PRICE:,.2f}")

    quantity = patch.get("quantity")
    if quantity is not None and quantity < 0:
        raise ValidationError("quantity must be >= 0")


def enforce_rules_restock(payload: dict) -> int:
    """Restock body is {"amount": <positive integer>}."""
    if not isinstance(payload, dict) or "amount" not in payload:
        raise ValidationError("amount is required")
    amount = coerce_int(payload["amount"], "amount")
    if amount <= 0:
        raise ValidationError("amount must be > 0")
    return amount
