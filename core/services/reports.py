from __future__ import annotations

import io
import logging
from datetime import date, datetime
from typing import Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_RIGHT
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from core.services.aggregation import (
    BranchSummary,
    BudgetStatus,
    CategorySummary,
    DashboardStats,
    RecordFilter,
    TrendPoint,
    describe_filter,
    total_value,
)
from core.services.records import WasteRecord
from core.utils import fmt_money, fmt_pct

logger = logging.getLogger(__name__)

APP_NAME = "Waste Tracker"
BRAND_COLOR = colors.HexColor("#00BCB4")
EMPTY = "—"


def report_filename(today: Optional[date] = None) -> str:
    return f"waste_report_{(today or date.today()).isoformat()}.pdf"


def record_rows(records: list[WasteRecord], currency: str = "Q") -> list[list[str]]:
    """Table rows for the records report; same money format as the screens."""
    return [
        [
            r.date,
            r.branch,
            r.category,
            r.code or EMPTY,
            r.inventory_number or EMPTY,
            r.description or EMPTY,
            fmt_money(r.value, currency),
        ]
        for r in records
    ]


def _draw_footer(canvas, doc) -> None:
    canvas.saveState()
    canvas.setFont("Helvetica", 7)
    canvas.setFillColor(colors.grey)
    width, _ = doc.pagesize
    text = f"{APP_NAME} — generated {doc.generated_at} — page {canvas.getPageNumber()}"
    canvas.drawCentredString(width / 2, 0.4 * inch, text)
    canvas.restoreState()


class PDFReportGenerator:
    """Base class for the waste PDF reports."""

    def __init__(self, title, orientation="portrait", currency="Q"):
        self.title = title
        self.pagesize = A4 if orientation == "portrait" else landscape(A4)
        self.currency = currency
        self.generated_at = datetime.now().strftime("%d %B %Y %H:%M")
        self.styles = getSampleStyleSheet()
        self.elements = []

        self.title_style = ParagraphStyle(
            "CustomTitle",
            parent=self.styles["Heading1"],
            fontSize=20,
            textColor=BRAND_COLOR,
            spaceAfter=12,
            alignment=TA_CENTER,
        )
        self.heading_style = ParagraphStyle(
            "CustomHeading",
            parent=self.styles["Heading2"],
            fontSize=13,
            spaceAfter=8,
        )
        self.meta_style = ParagraphStyle(
            "Meta",
            parent=self.styles["Normal"],
            fontSize=9,
            textColor=colors.grey,
        )

    def add_header(self, subtitle: str = ""):
        self.elements.append(Paragraph(f"<b>{APP_NAME}</b>", self.title_style))
        self.elements.append(Paragraph(escape(self.title), self.heading_style))
        if subtitle:
            self.elements.append(Paragraph(escape(subtitle), self.meta_style))
        self.elements.append(Paragraph(f"Generated: {self.generated_at}", self.meta_style))
        self.elements.append(Spacer(1, 12))

    def add_summary_boxes(self, summary_data):
        data = []
        row = []
        for item in summary_data:
            row.append(Paragraph(f"<b>{escape(item['label'])}</b><br/>{escape(str(item['value']))}", self.styles["Normal"]))
            if len(row) == 2:
                data.append(row)
                row = []
        if row:
            row.append("")
            data.append(row)

        if data:
            table = Table(data, colWidths=[2.5 * inch, 2.5 * inch])
            table.setStyle(TableStyle([
                ("BACKGROUND", (0, 0), (-1, -1), colors.HexColor("#f7f8fc")),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ("PADDING", (0, 0), (-1, -1), 8),
            ]))
            self.elements.append(table)
            self.elements.append(Spacer(1, 16))

    def add_table(self, headers, rows, col_widths=None, right_align_cols=()):
        if not rows:
            self.elements.append(Paragraph("No records.", self.meta_style))
            self.elements.append(Spacer(1, 12))
            return
        table = Table([headers] + rows, colWidths=col_widths, repeatRows=1)
        style = [
            # Header
            ("BACKGROUND", (0, 0), (-1, 0), BRAND_COLOR),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, 0), 8),
            # Body
            ("FONTNAME", (0, 1), (-1, -1), "Helvetica"),
            ("FONTSIZE", (0, 1), (-1, -1), 7.5),
            ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#f7f8fc")]),
        ]
        for col in right_align_cols:
            style.append(("ALIGN", (col, 1), (col, -1), "RIGHT"))
        table.setStyle(TableStyle(style))
        self.elements.append(table)
        self.elements.append(Spacer(1, 12))

    def money(self, value) -> str:
        return fmt_money(value, self.currency)

    def add_section_heading(self, text):
        self.elements.append(Paragraph(escape(text), self.heading_style))

    def add_total_line(self, text):
        style = ParagraphStyle("Total", parent=self.styles["Normal"], fontSize=10, alignment=TA_RIGHT)
        self.elements.append(Paragraph(f"<b>{escape(text)}</b>", style))

    def generate(self, buffer):
        doc = SimpleDocTemplate(
            buffer,
            pagesize=self.pagesize,
            rightMargin=36,
            leftMargin=36,
            topMargin=36,
            bottomMargin=48,
            title=self.title,
        )
        doc.generated_at = self.generated_at
        doc.build(self.elements, onFirstPage=_draw_footer, onLaterPages=_draw_footer)
        return buffer

    def to_bytes(self) -> bytes:
        buffer = io.BytesIO()
        self.generate(buffer)
        logger.info("Rendered PDF report %r (%d bytes)", self.title, buffer.tell())
        return buffer.getvalue()


class WasteRecordsPDF(PDFReportGenerator):
    """Filtered record listing with total."""

    def __init__(self, records: list[WasteRecord], record_filter: Optional[RecordFilter] = None, currency="Q"):
        super().__init__("Waste Report", orientation="landscape", currency=currency)
        self.records = records
        self.record_filter = record_filter

    def build(self):
        self.add_header(describe_filter(self.record_filter))
        headers = ["Date", "Branch", "Category", "Code", "Inventory No.", "Description", "Value"]
        widths = [0.9 * inch, 1.6 * inch, 2.0 * inch, 0.9 * inch, 1.1 * inch, 3.2 * inch, 1.0 * inch]
        self.add_table(headers, record_rows(self.records, self.currency), col_widths=widths, right_align_cols=(6,))
        self.add_total_line(f"Total: {fmt_money(total_value(self.records), self.currency)}")
        self.add_total_line(f"{len(self.records)} records")
        return self


class WasteSummaryPDF(PDFReportGenerator):
    """Period summary: stats, branch/category breakdowns, trend and budget status."""

    def __init__(
        self,
        period_label: str,
        stats: DashboardStats,
        branches: list[BranchSummary],
        categories: list[CategorySummary],
        trend: list[TrendPoint],
        statuses: list[BudgetStatus],
        overall: Optional[BudgetStatus] = None,
        currency="Q",
    ):
        super().__init__(f"Waste Summary: {period_label}", currency=currency)
        self.stats = stats
        self.branches = branches
        self.categories = categories
        self.trend = trend
        self.statuses = statuses
        self.overall = overall

    def build(self):
        self.add_header()
        boxes = [
            {"label": "Total waste", "value": self.money(self.stats.total)},
            {"label": "Records", "value": self.stats.count},
            {"label": "Average per record", "value": self.money(self.stats.average)},
            {"label": "Branches over threshold", "value": self.stats.branches_in_danger},
        ]
        if self.overall is not None:
            boxes.append({"label": "Overall waste / sales", "value": f"{fmt_pct(self.overall.percentage)} ({self.overall.status})"})
        self.add_summary_boxes(boxes)

        if self.branches:
            self.add_section_heading("Waste by branch")
            rows = [[b.branch, str(b.count), self.money(b.total)] for b in self.branches]
            self.add_table(["Branch", "Records", "Total"], rows, right_align_cols=(1, 2))

        if self.categories:
            self.add_section_heading("Waste by category")
            rows = [[c.category, str(c.count), self.money(c.total)] for c in self.categories]
            self.add_table(["Category", "Records", "Total"], rows, right_align_cols=(1, 2))

        if self.trend:
            self.add_section_heading("Monthly trend")
            rows = [[p.label, self.money(p.total)] for p in self.trend]
            self.add_table(["Month", "Total"], rows, right_align_cols=(1,))

        if self.statuses:
            self.add_section_heading("Budget status")
            rows = [
                [s.branch, self.money(s.sales), self.money(s.waste), fmt_pct(s.percentage), fmt_pct(s.threshold, 1), s.status.upper()]
                for s in self.statuses
            ]
            self.add_table(["Branch", "Monthly sales", "Waste", "Waste %", "Threshold", "Status"], rows, right_align_cols=(1, 2, 3, 4))
        return self
