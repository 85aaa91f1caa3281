"""
Reports API Endpoints

Reports page metrics and the password-gated PDF export.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field, SecretStr
import structlog

from marketplace_reports.reporting.credentials import ExportAuthorizer
from marketplace_reports.reporting.exceptions import (
    CredentialLookupError,
    InvalidCredentialsError,
    ReportRenderError,
)
from marketplace_reports.reporting.export import ReportExporter, export_filename
from marketplace_reports.reporting.periods import ReportRange
from marketplace_reports.reporting.schemas import MetricSnapshot
from marketplace_reports.reporting.service import ReportService
from marketplace_reports.serving.api.dependencies import (
    get_export_authorizer,
    get_report_exporter,
    get_report_service,
)

router = APIRouter()
logger = structlog.get_logger(__name__)


class ExportRequest(BaseModel):
    """PDF export request, authenticated by an admin login"""
    email: str = Field(min_length=1)
    password: SecretStr
    granularity: ReportRange = ReportRange.DAILY
    month: Optional[int] = Field(default=None, ge=1, le=12)


@router.get("/metrics", response_model=MetricSnapshot)
async def get_report_metrics(
    granularity: ReportRange = Query(ReportRange.DAILY),
    month: Optional[int] = Query(None, ge=1, le=12, description="Month filter for the yearly view"),
    service: ReportService = Depends(get_report_service),
) -> MetricSnapshot:
    """
    Get all reports-page metrics.

    Metric groups that fail to load are returned as zero/empty values.
    """
    return await service.build_snapshot(granularity, month=month)


@router.post(
    "/export",
    response_class=Response,
    responses={
        200: {"content": {"application/pdf": {}}, "description": "PDF report"},
        401: {"description": "Invalid admin password"},
        500: {"description": "PDF generation failed"},
        503: {"description": "Admin credentials could not be verified"},
    },
)
async def export_report(
    request: ExportRequest,
    service: ReportService = Depends(get_report_service),
    authorizer: ExportAuthorizer = Depends(get_export_authorizer),
    exporter: ReportExporter = Depends(get_report_exporter),
) -> Response:
    """Export the report as a paginated PDF download."""
    try:
        await authorizer.authorize(request.email, request.password.get_secret_value())
    except InvalidCredentialsError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except CredentialLookupError as e:
        raise HTTPException(status_code=503, detail=str(e))

    snapshot = await service.build_snapshot(request.granularity, month=request.month)

    try:
        pdf_bytes = await run_in_threadpool(exporter.render, snapshot)
    except ReportRenderError as e:
        raise HTTPException(status_code=500, detail=str(e))

    filename = export_filename(request.granularity)
    logger.info("Report exported", filename=filename)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
