# Overview: Read-only sales analytics; derives revenue, top item and volume from sale history.

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Iterable

from ..errors import ValidationError
from ..models import LOW_STOCK_THRESHOLD, Product, Role, SaleRecord, ShiftType, User
from ..money_utils import money_to_json, sum_money
from ..time_utils import ensure_aware, to_utc_z, utcnow

TIMEFRAMES = ("today", "week", "month", "lifetime")
SHIFT_FILTER_ALL = "ALL"

# Users with a sale inside this window count as active staff on the dashboard
ACTIVE_STAFF_WINDOW = timedelta(hours=1)
RECENT_SALES_LIMIT = 12


@dataclass(frozen=True)
class SalesSummary:
    total_revenue: Decimal
    top_item: str | None
    top_item_quantity: int
    transaction_volume: int
    low_stock_count: int

    def to_dict(self) -> dict:
        return {
            "totalRevenue": money_to_json(self.total_revenue),
            "topItem": self.top_item,
            "topItemQuantity": self.top_item_quantity,
            "transactionVolume": self.transaction_volume,
            "lowStockCount": self.low_stock_count,
        }


def _coerce_role(role) -> Role | None:
    if role is None or isinstance(role, Role):
        return role
    try:
        return Role(str(role).upper())
    except ValueError:
        raise ValidationError(f"viewer role must be one of: {', '.join(r.value for r in Role)}")


def _coerce_shift_filter(shift_filter) -> ShiftType | None:
    if shift_filter is None or str(shift_filter).upper() == SHIFT_FILTER_ALL:
        return None
    if isinstance(shift_filter, ShiftType):
        return shift_filter
    try:
        return ShiftType(str(shift_filter).upper())
    except ValueError:
        raise ValidationError("shift must be ALL, A or B")


def window_start(timeframe: str, now: datetime | None = None) -> datetime | None:
    """
    Lower bound of a reporting window in local time.

    today    -> local midnight
    week     -> most recent Sunday 00:00
    month    -> first of the month 00:00
    lifetime -> None (no lower bound)

    The arithmetic runs on the wall clock: a naive (or omitted) now is
    local time and the result is localized afterwards, so a window that
    spans a DST change starts at the right offset. An aware now keeps its
    own tzinfo.
    """
    timeframe = (timeframe or "").lower()
    if timeframe not in TIMEFRAMES:
        raise ValidationError(f"timeframe must be one of: {', '.join(TIMEFRAMES)}")
    if timeframe == "lifetime":
        return None

    wall = now if now is not None else datetime.now()
    start = wall.replace(hour=0, minute=0, second=0, microsecond=0)
    if timeframe == "week":
        # weekday(): Monday=0 ... Sunday=6
        start -= timedelta(days=(wall.weekday() + 1) % 7)
    elif timeframe == "month":
        start = start.replace(day=1)
    return ensure_aware(start)


def filter_sales(
    sales: Iterable[SaleRecord],
    *,
    timeframe: str = "lifetime",
    shift_filter=SHIFT_FILTER_ALL,
    viewer_role=None,
    viewer_id: str | None = None,
    now: datetime | None = None,
) -> list[SaleRecord]:
    """
    Sales visible to the viewer inside the window, in insertion order.

    A USER viewer only ever sees their own sales; the restriction is applied
    before windowing. Managers (or no viewer) see everything.
    """
    role = _coerce_role(viewer_role)
    shift = _coerce_shift_filter(shift_filter)
    start = window_start(timeframe, now)

    pool = list(sales)
    if role is Role.USER:
        pool = [s for s in pool if s.user_id == viewer_id]
    if start is not None:
        pool = [s for s in pool if s.timestamp >= start]
    if shift is not None:
        pool = [s for s in pool if s.shift is shift]
    return pool


def top_item(sales: Iterable[SaleRecord]) -> tuple[str | None, int]:
    """Item name with the highest summed quantity; ties go to the first one seen."""
    counts: dict[str, int] = {}
    for sale in sales:
        for item in sale.items:
            counts[item.name] = counts.get(item.name, 0) + item.quantity

    best_name, best_qty = None, 0
    for name, qty in counts.items():
        if best_name is None or qty > best_qty:
            best_name, best_qty = name, qty
    return best_name, best_qty


def low_stock_count(products: Iterable[Product]) -> int:
    return sum(1 for p in products if p.quantity < LOW_STOCK_THRESHOLD)


def summarize_sales(
    sales: Iterable[SaleRecord],
    products: Iterable[Product],
    *,
    timeframe: str = "lifetime",
    shift_filter=SHIFT_FILTER_ALL,
    viewer_role=None,
    viewer_id: str | None = None,
    now: datetime | None = None,
) -> SalesSummary:
    """
    Revenue, top item, transaction volume and low-stock count.

    Pure function of its arguments and `now`; calling it twice with the same
    inputs gives the same result.
    """
    filtered = filter_sales(
        sales,
        timeframe=timeframe,
        shift_filter=shift_filter,
        viewer_role=viewer_role,
        viewer_id=viewer_id,
        now=now,
    )
    name, qty = top_item(filtered)
    return SalesSummary(
        total_revenue=sum_money(s.total_amount for s in filtered),
        top_item=name,
        top_item_quantity=qty,
        transaction_volume=len(filtered),
        low_stock_count=low_stock_count(products),
    )


def dashboard_summary(
    *,
    sales: Iterable[SaleRecord],
    products: Iterable[Product],
    users: Iterable[User],
    viewer: User,
    timeframe: str = "today",
    now: datetime | None = None,
) -> dict:
    """
    Landing-page figures for the viewer.

    Cashiers get their own revenue; managers get the store's. Active staff
    is the viewer plus anyone who sold within the last hour.
    """
    clock = ensure_aware(now) if now is not None else utcnow()
    sales = list(sales)
    products = list(products)

    summary = summarize_sales(
        sales,
        products,
        timeframe=timeframe,
        viewer_role=viewer.role,
        viewer_id=viewer.id,
        now=now,
    )
    visible = filter_sales(
        sales,
        timeframe=timeframe,
        viewer_role=viewer.role,
        viewer_id=viewer.id,
        now=now,
    )

    cutoff = clock - ACTIVE_STAFF_WINDOW
    recent_sellers = {s.user_id for s in sales if s.timestamp > cutoff}
    active_staff = [
        u.to_dict() for u in users
        if u.id == viewer.id or u.id in recent_sellers
    ]

    return {
        "timeframe": timeframe,
        "summary": summary.to_dict(),
        "lowStockProducts": [p.to_dict() for p in products if p.is_low_stock],
        "activeStaff": active_staff,
        "recentSales": [
            {
                "id": s.id,
                "timestamp": to_utc_z(s.timestamp),
                "totalAmount": money_to_json(s.total_amount),
            }
            for s in visible[-RECENT_SALES_LIMIT:]
        ],
    }
