"""
Report Schemas

Ephemeral report entities. Rebuilt on every request; never persisted.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from .periods import Granularity, ReportRange


class SeriesPoint(BaseModel):
    """Cumulative buyer/seller counts up to and including a period"""
    period: str
    buyers: int
    sellers: int


class TrendPoint(BaseModel):
    """Sales trend bucket"""
    name: str
    sales: float
    orders: int


class CategoryShare(BaseModel):
    """Share of total stock held by a product category"""
    name: str
    percentage: int = Field(ge=0, le=100)
    stock_count: int


class PercentageChange(BaseModel):
    """Point-to-point change badges"""
    sales: float = 0.0
    buyers: float = 0.0
    sellers: float = 0.0


class SalesMetrics(BaseModel):
    """Order totals"""
    total_sales: float = 0.0
    order_count: int = 0
    average_order_value: float = 0.0


class MetricSnapshot(BaseModel):
    """All metrics shown on the reports page"""
    granularity: ReportRange
    month: Optional[int] = None
    generated_at: datetime

    total_sales: float = 0.0
    order_count: int = 0
    average_order_value: float = 0.0
    buyer_count: int = 0
    buyer_engagement: int = 0
    seller_count: int = 0
    seller_engagement: int = 0
    percentage_change: PercentageChange = Field(default_factory=PercentageChange)
    sales_trend: List[TrendPoint] = Field(default_factory=list)
    user_growth: List[SeriesPoint] = Field(default_factory=list)
    top_categories: List[CategoryShare] = Field(default_factory=list)


class TopSeller(BaseModel):
    """Shop ranked by order count"""
    shop_id: str
    shop_name: str = "Unknown Shop"
    nickname: str = ""
    profile_photo: str = ""
    order_count: int


class DashboardSummary(BaseModel):
    """Landing dashboard cards, growth chart and best sellers"""
    period: Granularity
    total_buyers: int = 0
    total_sellers: int = 0
    active_products: int = 0
    total_products: int = 0
    user_growth: List[SeriesPoint] = Field(default_factory=list)
    buyer_growth: str = "0.0"
    seller_growth: str = "0.0"
    top_sellers: List[TopSeller] = Field(default_factory=list)
