"""
Best-effort sales commentary from an external text-generation endpoint.

WHY: Managers get a short written analysis on the dashboard. The call is
optional: any failure (no endpoint configured, network error, bad response)
yields FALLBACK_MESSAGE, and requests run on a background executor so
nothing in the sale path ever waits for them.
"""

from __future__ import annotations

import json
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Iterable

import httpx

from ..models import Product, SaleRecord
from ..money_utils import money_to_json, sum_money
from ..time_utils import to_utc_z

logger = logging.getLogger(__name__)

FALLBACK_MESSAGE = "Unable to load AI insights at this time."
SYSTEM_INSTRUCTION = (
    "You are a senior business analyst for a retail management system. "
    "Provide concise, data-driven insights."
)
RECENT_SALES_LIMIT = 5

_executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="insights")


def build_insight_summary(sales: Iterable[SaleRecord], products: Iterable[Product]) -> dict:
    """{totalSales, revenue, inventoryAlerts, recentSales} sent to the generator."""
    sales = list(sales)
    return {
        "totalSales": len(sales),
        "revenue": money_to_json(sum_money(s.total_amount for s in sales)),
        "inventoryAlerts": [p.name for p in products if p.is_low_stock],
        "recentSales": [
            {"date": to_utc_z(s.timestamp), "amount": money_to_json(s.total_amount)}
            for s in sales[-RECENT_SALES_LIMIT:]
        ],
    }


class InsightClient:
    """Thin HTTP client for the insight endpoint."""

    def __init__(
        self,
        url: str | None,
        *,
        api_key: str | None = None,
        model: str | None = None,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.url = url
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_config(cls, config) -> "InsightClient":
        return cls(
            config.get("INSIGHTS_URL"),
            api_key=config.get("INSIGHTS_API_KEY"),
            model=config.get("INSIGHTS_MODEL"),
            timeout=float(config.get("INSIGHTS_TIMEOUT_SECONDS", 10)),
        )

    def _request_body(self, summary: dict) -> dict:
        return {
            "model": self.model,
            "system": SYSTEM_INSTRUCTION,
            "prompt": (
                "Analyze this sales data for Sellespro POS and provide a "
                f"3-point business strategy:\n{json.dumps(summary)}"
            ),
        }

    def generate(self, summary: dict) -> str:
        """Return commentary text, or FALLBACK_MESSAGE on any failure."""
        if not self.url:
            return FALLBACK_MESSAGE

        headers = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(self.url, json=self._request_body(summary), headers=headers)
                response.raise_for_status()
                text = response.json().get("text")
        except (httpx.HTTPError, ValueError, AttributeError):
            logger.warning("Insight request failed", exc_info=True)
            return FALLBACK_MESSAGE

        if not isinstance(text, str) or not text.strip():
            return FALLBACK_MESSAGE
        return text.strip()


def submit_insights(client: InsightClient, summary: dict) -> Future:
    """Schedule generation in the background; the Future always resolves to a string."""
    return _executor.submit(client.generate, summary)
