"""
FastAPI Dependencies

Wires repositories, services and exporters into route handlers.
Tests override get_report_repository to point at a fixture database.
"""

from fastapi import Depends

from marketplace_reports.database.connection import get_session_factory
from marketplace_reports.reporting.credentials import ExportAuthorizer
from marketplace_reports.reporting.export import ReportExporter
from marketplace_reports.reporting.repository import ReportRepository
from marketplace_reports.reporting.service import ReportService


def get_report_repository() -> ReportRepository:
    return ReportRepository(get_session_factory())


def get_report_service(repository: ReportRepository = Depends(get_report_repository)) -> ReportService:
    return ReportService(repository)


def get_export_authorizer(repository: ReportRepository = Depends(get_report_repository)) -> ExportAuthorizer:
    return ExportAuthorizer(repository)


def get_report_exporter() -> ReportExporter:
    return ReportExporter()
