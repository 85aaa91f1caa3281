"""
Category Distribution

Share of total inventory stock held by each product category.
"""

from typing import Any, Iterable, List, Mapping

import polars as pl

from .aggregator import round_half_up
from .schemas import CategoryShare


def category_distribution(products: Iterable[Mapping[str, Any]]) -> List[CategoryShare]:
    """
    Percentage of total stock per category, largest first.

    Products without a category or with missing or non-positive stock are skipped.
    Each percentage is rounded on its own, so the sum may drift from 100.
    """
    categories: List[str] = []
    stocks: List[int] = []
    for product in products:
        category = product.get("category")
        stock = product.get("stock")
        if not category or stock is None or stock <= 0:
            continue
        categories.append(category)
        stocks.append(int(stock))

    frame = pl.DataFrame(
        {"category": categories, "stock": stocks},
        schema={"category": pl.Utf8, "stock": pl.Int64},
    )
    per_category = frame.group_by("category", maintain_order=True).agg(
        pl.col("stock").sum().alias("stock_count"),
    )

    total = sum(per_category["stock_count"].to_list())
    if total <= 0:
        return []

    shares = [
        CategoryShare(
            name=row["category"],
            percentage=round_half_up(row["stock_count"] / total * 100),
            stock_count=int(row["stock_count"]),
        )
        for row in per_category.iter_rows(named=True)
    ]
    return sorted(shares, key=lambda share: share.percentage, reverse=True)
