"""
Metric Aggregator

Turns raw marketplace rows into summary metrics and time series:

- cumulative buyer/seller growth series per period bucket
- point-to-point growth badges
- order totals, engagement metrics
- sales trend buckets for the reports chart
- best sellers by order count

All functions are pure; fetching lives in the repository.
"""

import math
from collections import Counter
from datetime import timezone, tzinfo
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import polars as pl
import structlog

from .periods import (
    Granularity,
    ReportRange,
    Timestamp,
    bucket_key,
    parse_timestamp,
    sales_trend_key,
    to_local,
)
from .schemas import SalesMetrics, SeriesPoint, TrendPoint

logger = structlog.get_logger(__name__)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def _count_by_period(
    timestamps: Iterable[Optional[Timestamp]],
    granularity: Granularity,
    column: str,
) -> pl.DataFrame:
    keys = [bucket_key(ts, granularity) for ts in timestamps if ts is not None]
    return (
        pl.DataFrame({"period": keys}, schema={"period": pl.Utf8})
        .group_by("period")
        .agg(pl.len().alias(column))
    )


def cumulative_growth_series(
    buyer_timestamps: Iterable[Optional[Timestamp]],
    shop_timestamps: Iterable[Optional[Timestamp]],
    granularity: Union[Granularity, str],
) -> List[SeriesPoint]:
    """
    Build cumulative buyer and seller counts per period.

    Buckets both lists, takes the sorted union of bucket keys and emits one
    running total per key. Both series are non-decreasing.
    """
    granularity = Granularity(granularity)
    buyers = _count_by_period(buyer_timestamps, granularity, "buyers")
    sellers = _count_by_period(shop_timestamps, granularity, "sellers")

    series = (
        buyers.join(sellers, on="period", how="full", coalesce=True)
        .with_columns(
            pl.col("buyers").fill_null(0),
            pl.col("sellers").fill_null(0),
        )
        .sort("period")
        .with_columns(
            pl.col("buyers").cum_sum(),
            pl.col("sellers").cum_sum(),
        )
    )

    return [
        SeriesPoint(period=row["period"], buyers=int(row["buyers"]), sellers=int(row["sellers"]))
        for row in series.iter_rows(named=True)
    ]


def growth_percentage(values: Sequence[float]) -> str:
    """
    Change between the two most recent values, as a one-decimal percentage string.

    A zero previous value is treated as 1. Fewer than two values give "0.0".
    """
    if len(values) < 2:
        return "0.0"
    previous, last = values[-2], values[-1]
    return f"{(last - previous) / (previous or 1) * 100:.1f}"


def compute_sales_metrics(orders: Iterable[Mapping[str, Any]]) -> SalesMetrics:
    """Total sales, order count and average order value (2 decimals). Missing prices count as 0."""
    total_sales = 0.0
    order_count = 0
    for order in orders:
        total_sales += float(order.get("total_price") or 0)
        order_count += 1

    average = round(total_sales / order_count, 2) if order_count > 0 else 0.0
    return SalesMetrics(
        total_sales=total_sales,
        order_count=order_count,
        average_order_value=average,
    )


def buyer_engagement(total_orders: int, total_buyers: int) -> int:
    """Orders minus buyers. A raw difference, not a ratio."""
    return (total_orders or 0) - (total_buyers or 0)


def seller_engagement(order_shop_ids: Iterable[Optional[str]], total_shops: int) -> int:
    """Percentage of shops with at least one order, rounded to an integer."""
    if not total_shops:
        return 0
    active = {shop_id for shop_id in order_shop_ids if shop_id is not None}
    return round_half_up(len(active) / total_shops * 100)


def sales_trend(
    orders: Iterable[Mapping[str, Any]],
    report_range: Union[ReportRange, str],
    tz: tzinfo = timezone.utc,
    month: Optional[int] = None,
) -> List[TrendPoint]:
    """
    Sum sales and count orders per trend bucket.

    Orders are expected ascending by created_at; buckets keep first-seen
    order. ``month`` (1-12) keeps only orders from that calendar month.
    """
    report_range = ReportRange(report_range)
    names: List[str] = []
    prices: List[Optional[float]] = []

    for order in orders:
        created_at = order.get("created_at")
        if created_at is None:
            continue
        local = to_local(parse_timestamp(created_at), tz)
        if month is not None and local.month != month:
            continue
        price = order.get("total_price")
        names.append(sales_trend_key(local, report_range, tz))
        prices.append(float(price) if price is not None else None)

    frame = pl.DataFrame(
        {"name": names, "total_price": prices},
        schema={"name": pl.Utf8, "total_price": pl.Float64},
    )
    buckets = frame.group_by("name", maintain_order=True).agg(
        pl.col("total_price").fill_null(0.0).sum().alias("sales"),
        pl.len().alias("orders"),
    )

    return [
        TrendPoint(name=row["name"], sales=float(row["sales"]), orders=int(row["orders"]))
        for row in buckets.iter_rows(named=True)
    ]


def top_sellers(order_shop_ids: Iterable[Optional[str]], limit: int = 3) -> List[Tuple[str, int]]:
    """Shop ids with the most orders; ties keep first-seen order."""
    counter = Counter(shop_id for shop_id in order_shop_ids if shop_id)
    return counter.most_common(limit)
