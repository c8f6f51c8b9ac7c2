# Overview: Flask API routes for sales operations; parses input and returns JSON responses.

# backend/sellespro/routes/sales.py
"""Sales API routes with role enforcement"""

from flask import Blueprint, request, jsonify, g, current_app

from ..extensions import state_store
from ..errors import PosError
from ..models import Role
from ..services import sales_service, reporting_service
from ..decorators import require_auth, require_shift


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


@sales_bp.post("")
@require_auth
@require_shift
def commit_sale_route():
    """
    Commit a cart as a sale.

    Request body:
    {
        "items": [
            {"product_id": "1", "quantity": 2, "price": 14.00}  // price optional
        ]
    }

    Stock is re-checked against the live catalog; 409 with the offending
    product if any line exceeds it, in which case nothing is recorded.
    """
    try:
        data = request.get_json(silent=True) or {}
        items = data.get("items")

        if items is None:
            return jsonify({"error": "items required"}), 400

        cart = sales_service.cart_from_payload(state_store.state, items)
        sale = state_store.apply(sales_service.commit_sale, cart, g.current_user.id)

        return jsonify({"sale": sale.to_dict()}), 201

    except PosError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to commit sale")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.get("")
@require_auth
def list_sales_route():
    """
    List sales visible to the operator.

    Query params:
    - timeframe: today | week | month | lifetime (default lifetime)
    - shift: ALL | A | B (default ALL)

    Cashiers only see their own sales.
    """
    try:
        sales = reporting_service.filter_sales(
            state_store.state.sales,
            timeframe=request.args.get("timeframe", "lifetime"),
            shift_filter=request.args.get("shift", reporting_service.SHIFT_FILTER_ALL),
            viewer_role=g.current_user.role,
            viewer_id=g.current_user.id,
        )
    except PosError as e:
        return jsonify(e.to_dict()), e.status_code

    return jsonify({
        "items": [s.to_dict() for s in sales],
        "count": len(sales),
    }), 200


@sales_bp.get("/<sale_id>")
@require_auth
def get_sale_route(sale_id: str):
    """Get one sale (receipt data). Cashiers can only read their own."""
    user = g.current_user
    for sale in state_store.state.sales:
        if sale.id == sale_id:
            if user.role is Role.USER and sale.user_id != user.id:
                break
            return jsonify({"sale": sale.to_dict()}), 200

    return jsonify({"error": "Sale not found"}), 404
