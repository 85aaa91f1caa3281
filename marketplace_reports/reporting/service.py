"""
Report Service

Builds the reports page snapshot and the landing dashboard summary.

Each metric group fetches its own rows and owns a disjoint set of output
fields. Groups run concurrently; a failing group is logged and falls back
to its zero/empty defaults without affecting the others. Nothing is cached:
every call re-fetches and recomputes.
"""

import asyncio
from datetime import datetime, timezone, tzinfo
from typing import Any, Awaitable, Callable, Dict, Optional, Union
from zoneinfo import ZoneInfo

import structlog

from marketplace_reports.config import get_settings
from .aggregator import (
    buyer_engagement,
    compute_sales_metrics,
    cumulative_growth_series,
    growth_percentage,
    sales_trend,
    seller_engagement,
    top_sellers,
)
from .distribution import category_distribution
from .periods import Granularity, ReportRange, trend_window_start
from .repository import ReportRepository
from .schemas import DashboardSummary, MetricSnapshot, PercentageChange, TopSeller

logger = structlog.get_logger(__name__)
settings = get_settings()


def report_timezone(name: Optional[str] = None) -> tzinfo:
    """Configured report timezone."""
    name = name or settings.reports.timezone
    if name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


class ReportService:
    """
    Report metric computation over a ReportRepository.

    Example:
        service = ReportService(ReportRepository(get_session_factory()))
        snapshot = await service.build_snapshot(ReportRange.MONTHLY)
    """

    def __init__(
        self,
        repository: ReportRepository,
        tz: Optional[tzinfo] = None,
        top_sellers_limit: Optional[int] = None,
        active_stock_threshold: Optional[int] = None,
    ):
        self.repository = repository
        self.tz = tz or report_timezone()
        self.top_sellers_limit = top_sellers_limit or settings.reports.top_sellers_limit
        self.active_stock_threshold = (
            settings.reports.active_stock_threshold
            if active_stock_threshold is None
            else active_stock_threshold
        )

    async def _run_group(self, name: str, compute: Callable[[], Awaitable[Any]], default: Any) -> Any:
        try:
            return await compute()
        except Exception as e:
            logger.warning(
                "Metric group failed, using defaults",
                group=name,
                error=str(e),
                error_type=type(e).__name__,
            )
            return default

    # ------------------------------------------------------------------
    # Reports page
    # ------------------------------------------------------------------

    async def _sales_group(self) -> Dict[str, Any]:
        orders = await self.repository.fetch_orders()
        return compute_sales_metrics(orders).model_dump()

    async def _buyers_group(self) -> Dict[str, Any]:
        total_orders, total_buyers = await asyncio.gather(
            self.repository.count_orders(),
            self.repository.count_buyers(),
        )
        return {
            "buyer_count": total_buyers or 0,
            "buyer_engagement": buyer_engagement(total_orders, total_buyers),
        }

    async def _sellers_group(self) -> Dict[str, Any]:
        shop_ids, total_shops = await asyncio.gather(
            self.repository.fetch_order_shop_ids(),
            self.repository.count_shops(),
        )
        return {
            "seller_count": total_shops or 0,
            "seller_engagement": seller_engagement(shop_ids, total_shops),
        }

    async def _trend_group(self, report_range: ReportRange, month: Optional[int], now: datetime) -> Dict[str, Any]:
        orders = await self.repository.fetch_orders(since=trend_window_start(report_range, now))
        trend = sales_trend(orders, report_range, self.tz, month=month)
        return {
            "sales_trend": trend,
            "sales_change": float(growth_percentage([point.sales for point in trend])),
        }

    async def _growth_group(self, granularity: Granularity) -> Dict[str, Any]:
        buyers, shops = await asyncio.gather(
            self.repository.fetch_buyer_created_at(),
            self.repository.fetch_shop_created_at(),
        )
        series = cumulative_growth_series(buyers, shops, granularity)
        return {
            "user_growth": series,
            "buyer_growth": growth_percentage([point.buyers for point in series]),
            "seller_growth": growth_percentage([point.sellers for point in series]),
        }

    async def _categories_group(self) -> Dict[str, Any]:
        products = await self.repository.fetch_product_stock()
        return {"top_categories": category_distribution(products)}

    async def build_snapshot(
        self,
        report_range: Union[ReportRange, str],
        month: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> MetricSnapshot:
        """
        Compute every reports-page metric from scratch.

        ``month`` (1-12) narrows the yearly sales trend to one month and is
        ignored for other ranges.
        """
        report_range = ReportRange(report_range)
        now = now or datetime.now(timezone.utc)
        month = month if report_range == ReportRange.YEARLY else None

        logger.info("Building report snapshot", granularity=report_range.value, month=month)

        sales, buyers, sellers, trend, growth, categories = await asyncio.gather(
            self._run_group("sales", self._sales_group, {}),
            self._run_group("buyers", self._buyers_group, {}),
            self._run_group("sellers", self._sellers_group, {}),
            self._run_group(
                "trend",
                lambda: self._trend_group(report_range, month, now),
                {"sales_trend": [], "sales_change": 0.0},
            ),
            self._run_group(
                "growth",
                lambda: self._growth_group(Granularity(report_range.value)),
                {"user_growth": [], "buyer_growth": "0.0", "seller_growth": "0.0"},
            ),
            self._run_group("categories", self._categories_group, {}),
        )

        snapshot = MetricSnapshot(
            granularity=report_range,
            month=month,
            generated_at=now,
            **sales,
            **buyers,
            **sellers,
            **categories,
            sales_trend=trend["sales_trend"],
            user_growth=growth["user_growth"],
            percentage_change=PercentageChange(
                sales=trend["sales_change"],
                buyers=float(growth["buyer_growth"]),
                sellers=float(growth["seller_growth"]),
            ),
        )

        logger.info(
            "Report snapshot built",
            total_sales=snapshot.total_sales,
            orders=snapshot.order_count,
            trend_points=len(snapshot.sales_trend),
            categories=len(snapshot.top_categories),
        )
        return snapshot

    # ------------------------------------------------------------------
    # Landing dashboard
    # ------------------------------------------------------------------

    async def _top_sellers_group(self) -> list:
        shop_ids = await self.repository.fetch_order_shop_ids()
        ranked = top_sellers(shop_ids, self.top_sellers_limit)
        if not ranked:
            return []

        shops = await self.repository.fetch_shops([shop_id for shop_id, _ in ranked])
        by_id = {shop["shop_id"]: shop for shop in shops}

        sellers = []
        for shop_id, order_count in ranked:
            shop = by_id.get(shop_id, {})
            sellers.append(
                TopSeller(
                    shop_id=shop_id,
                    shop_name=shop.get("shop_name") or "Unknown Shop",
                    nickname=shop.get("nickname") or "",
                    profile_photo=shop.get("profile_photo") or "",
                    order_count=order_count,
                )
            )
        return sellers

    async def build_dashboard(self, period: Union[Granularity, str] = Granularity.MONTHLY) -> DashboardSummary:
        """Counts, cumulative user growth and best sellers for the landing page."""
        period = Granularity(period)
        threshold = self.active_stock_threshold

        total_buyers, total_sellers, active_products, total_products, growth, sellers = await asyncio.gather(
            self._run_group("buyer_count", self.repository.count_buyers, 0),
            self._run_group("seller_count", self.repository.count_shops, 0),
            self._run_group("active_products", lambda: self.repository.count_products(threshold), 0),
            self._run_group("total_products", self.repository.count_products, 0),
            self._run_group(
                "growth",
                lambda: self._growth_group(period),
                {"user_growth": [], "buyer_growth": "0.0", "seller_growth": "0.0"},
            ),
            self._run_group("top_sellers", self._top_sellers_group, []),
        )

        return DashboardSummary(
            period=period,
            total_buyers=total_buyers or 0,
            total_sellers=total_sellers or 0,
            active_products=active_products or 0,
            total_products=total_products or 0,
            user_growth=growth["user_growth"],
            buyer_growth=growth["buyer_growth"],
            seller_growth=growth["seller_growth"],
            top_sellers=sellers,
        )


class ReportSession:
    """
    Latest snapshot for one report view.

    Each refresh takes a new generation number; a refresh that completes
    after a newer one has started is discarded, so a slow request for an old
    range can never overwrite the result of a newer request.

    Meant for long-lived callers that keep one report view open and switch
    ranges on it (a dashboard worker, a notebook). The HTTP routes are
    stateless and call ReportService directly.
    """

    def __init__(self, service: ReportService):
        self.service = service
        self.snapshot: Optional[MetricSnapshot] = None
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    async def refresh(
        self,
        report_range: Union[ReportRange, str],
        month: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> Optional[MetricSnapshot]:
        self._generation += 1
        generation = self._generation

        snapshot = await self.service.build_snapshot(report_range, month=month, now=now)

        if generation != self._generation:
            logger.info("Discarding stale report snapshot", generation=generation, current=self._generation)
            return self.snapshot

        self.snapshot = snapshot
        return snapshot
