from __future__ import annotations

from datetime import date

from conftest import make_record
from core.services.aggregation import (
    RecordFilter,
    aggregate_by_branch,
    aggregate_by_category,
    budget_statuses,
    dashboard_stats,
    monthly_trend,
)
from core.services.app_config import default_config
from core.services.reports import WasteRecordsPDF, WasteSummaryPDF, record_rows, report_filename


def test_record_rows_use_screen_formatting():
    rows = record_rows([make_record(date="2024-01-05", branch="A", value=1.005, code="X1")])
    assert rows == [["2024-01-05", "A", "Mermas Bodega", "X1", "—", "—", "Q1.01"]]


def test_report_filename():
    assert report_filename(date(2024, 3, 9)) == "waste_report_2024-03-09.pdf"


def test_records_pdf_renders():
    records = [make_record(value=v, description="Leche & pan <1L>") for v in (10, 20.5)]
    pdf = WasteRecordsPDF(records, RecordFilter(branch="A")).build().to_bytes()
    assert pdf.startswith(b"%PDF")


def test_records_pdf_renders_when_empty():
    assert WasteRecordsPDF([]).build().to_bytes().startswith(b"%PDF")


def test_summary_pdf_renders():
    cfg = default_config()
    branch = cfg.branches[0]
    cfg.monthly_sales[branch] = 1000.0
    records = [make_record(branch=branch, value=35, date="2024-01-10")]
    statuses = budget_statuses(records, cfg)
    pdf = WasteSummaryPDF(
        "Jan 24",
        dashboard_stats(records, statuses),
        aggregate_by_branch(records),
        aggregate_by_category(records),
        monthly_trend(records, 12),
        statuses,
    ).build().to_bytes()
    assert pdf.startswith(b"%PDF")
