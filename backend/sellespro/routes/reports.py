# Overview: Flask API routes for reports operations; parses input and returns JSON responses.

# backend/sellespro/routes/reports.py
"""
Reporting and analytics routes.

All figures are derived on demand from the sale history; nothing here
mutates state. Cashiers get figures for their own sales only.
"""

from concurrent.futures import TimeoutError as FutureTimeoutError

from flask import Blueprint, request, jsonify, g, current_app

from ..extensions import state_store
from ..errors import PosError
from ..models import Role
from ..services import reporting_service, insight_service
from ..decorators import require_auth, require_role


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/summary")
@require_auth
def sales_summary_route():
    """
    Revenue, top item, transaction volume and low-stock count.

    Query params:
    - timeframe: today | week | month | lifetime (default today)
    - shift: ALL | A | B (default ALL)
    """
    state = state_store.state
    timeframe = request.args.get("timeframe", "today")
    shift_filter = request.args.get("shift", reporting_service.SHIFT_FILTER_ALL)

    try:
        summary = reporting_service.summarize_sales(
            state.sales,
            state.products,
            timeframe=timeframe,
            shift_filter=shift_filter,
            viewer_role=g.current_user.role,
            viewer_id=g.current_user.id,
        )
    except PosError as e:
        return jsonify(e.to_dict()), e.status_code

    return jsonify({
        "timeframe": timeframe,
        "shift": shift_filter.upper(),
        "summary": summary.to_dict(),
    }), 200


@reports_bp.get("/dashboard")
@require_auth
def dashboard_route():
    """Landing-page figures: revenue, low stock, active staff, recent sales."""
    state = state_store.state
    try:
        payload = reporting_service.dashboard_summary(
            sales=state.sales,
            products=state.products,
            users=state.users,
            viewer=g.current_user,
            timeframe=request.args.get("timeframe", "today"),
        )
    except PosError as e:
        return jsonify(e.to_dict()), e.status_code
    return jsonify(payload), 200


@reports_bp.get("/insights")
@require_auth
@require_role(Role.MANAGER)
def insights_route():
    """
    Written commentary on the current figures.

    Built from the same period as the dashboard figures.

    Query params:
    - timeframe: today | week | month | lifetime (default today)

    Best effort: any failure or timeout returns the fallback text with
    200, since the dashboard treats commentary as optional.
    """
    state = state_store.state
    timeframe = request.args.get("timeframe", "today")
    try:
        sales = reporting_service.filter_sales(
            state.sales,
            timeframe=timeframe,
            viewer_role=g.current_user.role,
            viewer_id=g.current_user.id,
        )
    except PosError as e:
        return jsonify(e.to_dict()), e.status_code

    summary = insight_service.build_insight_summary(sales, state.products)
    client = insight_service.InsightClient.from_config(current_app.config)

    future = insight_service.submit_insights(client, summary)
    try:
        text = future.result(timeout=client.timeout + 1)
    except FutureTimeoutError:
        current_app.logger.warning("Insight generation timed out")
        text = insight_service.FALLBACK_MESSAGE

    return jsonify({
        "timeframe": timeframe,
        "insights": text,
        "fallback": text == insight_service.FALLBACK_MESSAGE,
        "summary": summary,
    }), 200
