"""
Report Exporter

Renders a MetricSnapshot as a fixed-layout A4 PDF:

Page 1: branded header, generation time, key metrics summary grid
Page 2: sales trend chart, category breakdown with proportional bars
Every page: "Page i of N" and the confidentiality notice

The document is built fully in memory; callers get either the complete
bytes or a ReportRenderError.
"""

from datetime import date, datetime
from functools import partial
from io import BytesIO
from typing import List, Optional, Union
from xml.sax.saxutils import escape

import structlog
from matplotlib.figure import Figure
from reportlab.graphics.shapes import Drawing, Rect
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas
from reportlab.platypus import Image, PageBreak, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from marketplace_reports.config import get_settings
from .exceptions import ReportRenderError
from .periods import ReportRange, month_name
from .schemas import CategoryShare, MetricSnapshot, TrendPoint

logger = structlog.get_logger(__name__)
settings = get_settings()

BRAND_HEX = "#9333ea"
ORDERS_HEX = "#3b82f6"
BRAND_COLOR = colors.HexColor(BRAND_HEX)
PANEL_COLOR = colors.HexColor("#f7f8fa")
BAR_TRACK_COLOR = colors.HexColor("#e9ecef")

CONTENT_WIDTH = 170 * mm
BAR_WIDTH = 50 * mm
BAR_HEIGHT = 3 * mm


def export_filename(report_range: Union[ReportRange, str], today: Optional[date] = None) -> str:
    """Download name, e.g. sales_analytics_report_monthly_2024-03-14.pdf"""
    report_range = ReportRange(report_range)
    today = today or date.today()
    return f"{settings.reports.filename_prefix}_{report_range.value}_{today.isoformat()}.pdf"


class _NumberedCanvas(canvas.Canvas):
    """Canvas that defers page output until the total page count is known."""

    def __init__(self, *args, notice: str = "", **kwargs):
        super().__init__(*args, **kwargs)
        self._notice = notice
        self._saved_page_states = []

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        total = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            self._draw_footer(total)
            super().showPage()
        super().save()

    def _draw_footer(self, total: int) -> None:
        width, _ = self._pagesize
        self.saveState()
        self.setFont("Helvetica", 8)
        self.setFillColor(colors.grey)
        self.drawCentredString(width / 2, 10 * mm, f"Page {self.getPageNumber()} of {total}")
        self.drawCentredString(width / 2, 5 * mm, self._notice)
        self.restoreState()


class ReportExporter:
    """
    PDF renderer for report snapshots.

    Example:
        exporter = ReportExporter()
        pdf_bytes = exporter.render(snapshot)
    """

    def __init__(
        self,
        title: Optional[str] = None,
        brand_name: Optional[str] = None,
        currency: Optional[str] = None,
        notice: Optional[str] = None,
    ):
        self.title = title or settings.reports.title
        self.brand_name = brand_name or settings.reports.brand_name
        self.currency = currency or settings.reports.currency
        self.notice = notice or settings.reports.confidentiality_notice

        styles = getSampleStyleSheet()
        self.styles = {
            "title": ParagraphStyle(
                "ReportTitle", parent=styles["Title"], fontSize=24, leading=28, textColor=colors.white,
            ),
            "subtitle": ParagraphStyle(
                "ReportSubtitle", parent=styles["Normal"], fontSize=12, alignment=1, textColor=colors.white,
            ),
            "heading": ParagraphStyle("ReportHeading", parent=styles["Heading2"], fontSize=14),
            "body": ParagraphStyle("ReportBody", parent=styles["Normal"], fontSize=10),
        }

    def format_currency(self, amount: float) -> str:
        return f"{self.currency} {amount:,.2f}"

    def subtitle(self, snapshot: MetricSnapshot) -> str:
        text = f"{snapshot.granularity.value.capitalize()} Report"
        if snapshot.month:
            text += f" - {month_name(snapshot.month)}"
        return text

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------

    def _header(self, snapshot: MetricSnapshot) -> Table:
        header = Table(
            [
                [Paragraph(escape(self.title), self.styles["title"])],
                [Paragraph(escape(f"{self.brand_name} | {self.subtitle(snapshot)}"), self.styles["subtitle"])],
            ],
            colWidths=[CONTENT_WIDTH],
        )
        header.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, -1), BRAND_COLOR),
            ("TOPPADDING", (0, 0), (-1, 0), 12),
            ("BOTTOMPADDING", (0, -1), (-1, -1), 12),
        ]))
        return header

    def _metrics_grid(self, snapshot: MetricSnapshot) -> Table:
        items = [
            f"Total Sales: {self.format_currency(snapshot.total_sales)}",
            f"Total Orders: {snapshot.order_count:,}",
            f"Average Order Value: {self.format_currency(snapshot.average_order_value)}",
            f"Active Buyers: {snapshot.buyer_count:,}",
            f"Active Sellers: {snapshot.seller_count:,}",
            f"Buyer Engagement (orders vs buyers): {snapshot.buyer_engagement:,}",
            f"Seller Engagement: {snapshot.seller_engagement}%",
            f"Sales Change: {snapshot.percentage_change.sales:+.1f}%",
        ]
        cells = [Paragraph(escape(text), self.styles["body"]) for text in items]
        rows = [cells[i:i + 2] for i in range(0, len(cells), 2)]

        grid = Table(rows, colWidths=[CONTENT_WIDTH / 2] * 2)
        grid.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, -1), PANEL_COLOR),
            ("TOPPADDING", (0, 0), (-1, -1), 6),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
        ]))
        return grid

    def _trend_chart(self, trend: List[TrendPoint]) -> bytes:
        fig = Figure(figsize=(8, 4))
        ax = fig.subplots()
        names = [point.name for point in trend]

        lines = ax.plot(names, [point.sales for point in trend], color=BRAND_HEX, linewidth=2, label="Sales")
        ax.set_ylabel(f"Sales ({self.currency})")
        ax.grid(alpha=0.3)
        ax.tick_params(axis="x", labelrotation=45, labelsize=8)

        orders_ax = ax.twinx()
        lines += orders_ax.plot(names, [point.orders for point in trend], color=ORDERS_HEX, linewidth=2, label="Orders")
        orders_ax.set_ylabel("Orders")

        ax.legend(lines, [line.get_label() for line in lines], loc="upper left")

        buffer = BytesIO()
        fig.savefig(buffer, format="png", dpi=120, bbox_inches="tight")
        return buffer.getvalue()

    def _category_bar(self, share: CategoryShare) -> Drawing:
        bar = Drawing(BAR_WIDTH, BAR_HEIGHT)
        bar.add(Rect(0, 0, BAR_WIDTH, BAR_HEIGHT, fillColor=BAR_TRACK_COLOR, strokeColor=None))
        bar.add(Rect(0, 0, BAR_WIDTH * share.percentage / 100, BAR_HEIGHT, fillColor=BRAND_COLOR, strokeColor=None))
        return bar

    def _category_breakdown(self, categories: List[CategoryShare]):
        if not categories:
            return Paragraph("No category data available", self.styles["body"])

        rows = [
            [
                Paragraph(
                    escape(f"{share.name}: {share.percentage}% ({share.stock_count:,} items)"),
                    self.styles["body"],
                ),
                self._category_bar(share),
            ]
            for share in categories
        ]
        table = Table(rows, colWidths=[CONTENT_WIDTH - BAR_WIDTH, BAR_WIDTH])
        table.setStyle(TableStyle([("VALIGN", (0, 0), (-1, -1), "MIDDLE")]))
        return table

    # ------------------------------------------------------------------
    # Document
    # ------------------------------------------------------------------

    def build_story(self, snapshot: MetricSnapshot, generated_at: Optional[datetime] = None) -> list:
        generated_at = generated_at or datetime.now()
        story = [
            self._header(snapshot),
            Spacer(1, 6 * mm),
            Paragraph(f"Generated: {generated_at:%Y-%m-%d %H:%M:%S}", self.styles["body"]),
            Spacer(1, 6 * mm),
            Paragraph("Key Metrics Summary", self.styles["heading"]),
            self._metrics_grid(snapshot),
            PageBreak(),
            Paragraph("Sales Trend Analysis", self.styles["heading"]),
        ]

        if snapshot.sales_trend:
            chart = self._trend_chart(snapshot.sales_trend)
            story.append(Image(BytesIO(chart), width=CONTENT_WIDTH, height=80 * mm))
        else:
            story.append(Paragraph("No sales recorded for this period", self.styles["body"]))

        story += [
            Spacer(1, 8 * mm),
            Paragraph("Category Distribution", self.styles["heading"]),
            self._category_breakdown(snapshot.top_categories),
        ]
        return story

    def render(self, snapshot: MetricSnapshot, generated_at: Optional[datetime] = None) -> bytes:
        """
        Render the snapshot to PDF bytes.

        Raises:
            ReportRenderError: if any part of the document fails to build
        """
        try:
            buffer = BytesIO()
            doc = SimpleDocTemplate(
                buffer,
                pagesize=A4,
                leftMargin=20 * mm,
                rightMargin=20 * mm,
                topMargin=15 * mm,
                bottomMargin=20 * mm,
                title=self.title,
                author=self.brand_name,
            )
            doc.build(
                self.build_story(snapshot, generated_at),
                canvasmaker=partial(_NumberedCanvas, notice=self.notice),
            )
            pdf_bytes = buffer.getvalue()
        except Exception as e:
            logger.error("PDF report generation failed", error=str(e), error_type=type(e).__name__)
            raise ReportRenderError("Failed to generate PDF. Please try again.") from e

        logger.info("PDF report generated", granularity=snapshot.granularity.value, size_bytes=len(pdf_bytes))
        return pdf_bytes
