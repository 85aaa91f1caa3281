"""
Dashboard API Endpoints
"""

from fastapi import APIRouter, Depends, Query

from marketplace_reports.reporting.periods import Granularity
from marketplace_reports.reporting.schemas import DashboardSummary
from marketplace_reports.reporting.service import ReportService
from marketplace_reports.serving.api.dependencies import get_report_service

router = APIRouter()


@router.get("/summary", response_model=DashboardSummary)
async def get_dashboard_summary(
    period: Granularity = Query(Granularity.MONTHLY),
    service: ReportService = Depends(get_report_service),
) -> DashboardSummary:
    """Buyer/seller/product counts, cumulative user growth and best sellers."""
    return await service.build_dashboard(period)
