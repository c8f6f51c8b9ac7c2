# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/sellespro/routes/products.py
"""
Product catalog routes.

SECURITY: All routes require a logged-in operator.
- Listing is open to both roles (cashiers must hold the active shift)
- Create, update, restock and delete require MANAGER
"""
from flask import Blueprint, request, current_app

from ..extensions import state_store
from ..errors import PosError
from ..models import Role
from ..services import products_service
from ..validation import (
    ModelValidationPolicy,
    PRODUCT_FIELDS,
    validate_payload,
    enforce_rules_product,
    enforce_rules_restock,
)
from ..decorators import require_auth, require_role, require_shift

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "localCode", "barCode", "quantity", "price"},
    required_on_create={"name", "localCode"},
)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


def _truthy(value: str | None) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes", "low"}


@products_bp.get("")
@require_auth
@require_shift
def list_products():
    """
    List products.

    Query params:
    - q: str (optional) - case-insensitive match on name, local code or bar code
    - low_stock: bool (optional) - only products below the low-stock threshold
    """
    query = request.args.get("q", "")
    low_stock_only = _truthy(request.args.get("low_stock"))

    products = products_service.search_products(
        state_store.state.products,
        query=query,
        low_stock_only=low_stock_only,
    )
    items = [p.to_dict() for p in products]
    return {"items": items, "count": len(items)}


@products_bp.get("/<product_id>")
@require_auth
@require_shift
def get_product(product_id: str):
    product = state_store.state.find_product(product_id)
    if product is None:
        return {"error": "Product not found"}, 404
    return product.to_dict()


@products_bp.post("")
@require_auth
@require_role(Role.MANAGER)
def create_product_route():
    """Create a new product. Requires MANAGER."""
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(fields=PRODUCT_FIELDS, payload=payload, policy=PRODUCT_POLICY, partial=False)
        enforce_rules_product(patch)
        created = state_store.apply(products_service.create_product, patch)
    except PosError as e:
        return e.to_dict(), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create product")
        return {"error": "Internal server error"}, 500

    return created.to_dict(), 201


@products_bp.put("/<product_id>")
@require_auth
@require_role(Role.MANAGER)
def update_product_route(product_id: str):
    """Update a product. Requires MANAGER."""
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(fields=PRODUCT_FIELDS, payload=payload, policy=PRODUCT_POLICY, partial=True)
        enforce_rules_product(patch)
        updated = state_store.apply(products_service.update_product, product_id, patch)
    except PosError as e:
        return e.to_dict(), e.status_code
    except Exception:
        current_app.logger.exception("Failed to update product")
        return {"error": "Internal server error"}, 500

    return updated.to_dict(), 200


@products_bp.post("/<product_id>/restock")
@require_auth
@require_role(Role.MANAGER)
def restock_product_route(product_id: str):
    """
    Add stock to a product. Requires MANAGER.

    Request body:
    {
        "amount": 10  // positive integer
    }
    """
    payload = request.get_json(silent=True) or {}

    try:
        amount = enforce_rules_restock(payload)
        restocked = state_store.apply(products_service.restock_product, product_id, amount)
    except PosError as e:
        return e.to_dict(), e.status_code
    except Exception:
        current_app.logger.exception("Failed to restock product")
        return {"error": "Internal server error"}, 500

    return restocked.to_dict(), 200


@products_bp.delete("/<product_id>")
@require_auth
@require_role(Role.MANAGER)
def delete_product_route(product_id: str):
    """
    Delete a product. Requires MANAGER.

    Sale history keeps its own copy of the product's name and price.
    """
    try:
        state_store.apply(products_service.delete_product, product_id)
    except PosError as e:
        return e.to_dict(), e.status_code
    except Exception:
        current_app.logger.exception("Failed to delete product")
        return {"error": "Internal server error"}, 500

    return {"ok": True}, 200
