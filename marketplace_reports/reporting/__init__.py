"""
Reporting Module

Period bucketing, metric aggregation, category distribution, report
assembly and PDF export.
"""
from .periods import Granularity, ReportRange, bucket_key, sales_trend_key
from .aggregator import (
    buyer_engagement,
    compute_sales_metrics,
    cumulative_growth_series,
    growth_percentage,
    sales_trend,
    seller_engagement,
)
from .distribution import category_distribution
from .repository import ReportRepository
from .service import ReportService, ReportSession
from .credentials import ExportAuthorizer, hash_password, verify_password
from .export import ReportExporter, export_filename
from .exceptions import ReportError, InvalidCredentialsError, CredentialLookupError, ReportRenderError

__all__ = [
    "Granularity",
    "ReportRange",
    "bucket_key",
    "sales_trend_key",
    "buyer_engagement",
    "compute_sales_metrics",
    "cumulative_growth_series",
    "growth_percentage",
    "sales_trend",
    "seller_engagement",
    "category_distribution",
    "ReportRepository",
    "ReportService",
    "ReportSession",
    "ExportAuthorizer",
    "hash_password",
    "verify_password",
    "ReportExporter",
    "export_filename",
    "ReportError",
    "InvalidCredentialsError",
    "CredentialLookupError",
    "ReportRenderError",
]
