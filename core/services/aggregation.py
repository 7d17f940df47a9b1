"""
Aggregation engine: pure functions over waste records.

Nothing here touches the database. Callers pass in the record list (usually a
RecordFeed snapshot) and the current AppConfig, and re-run these on every
change.
"""

from __future__ import annotations

import calendar
from decimal import Decimal
from dataclasses import dataclass
from typing import Iterable, Optional

from core.services.app_config import AppConfig
from core.services.records import WasteRecord
from core.utils import month_label, round2, safe_div

DASHBOARD_TREND_MONTHS = 6
REPORT_TREND_MONTHS = 12

STATUS_SAFE = "safe"
STATUS_WARNING = "warning"
STATUS_DANGER = "danger"

# A branch with no sales figure has nothing to compare against and never alerts.
ZERO_SALES_STATUS = STATUS_SAFE
# Warning starts at this fraction of the threshold percentage.
WARNING_RATIO = Decimal("0.8")


@dataclass(frozen=True)
class RecordFilter:
    branch: str = ""
    category: str = ""
    date_from: str = ""
    date_to: str = ""
    search: str = ""

    def is_empty(self) -> bool:
        return not (self.branch or self.category or self.date_from or self.date_to or self.search)


@dataclass(frozen=True)
class BranchSummary:
    branch: str
    total: float
    count: int


@dataclass(frozen=True)
class CategorySummary:
    category: str
    total: float
    count: int


@dataclass(frozen=True)
class TrendPoint:
    month: str
    total: float

    @property
    def label(self) -> str:
        return month_label(self.month)


@dataclass(frozen=True)
class BudgetStatus:
    branch: str
    sales: float
    waste: float
    percentage: float
    threshold: float
    status: str


@dataclass(frozen=True)
class DashboardStats:
    total: float
    count: int
    average: float
    branches_in_danger: int


# ---- filtering ----

def month_filter(year_month: str, **extra: str) -> RecordFilter:
    """Filter covering one calendar month, e.g. month_filter("2024-02")."""
    year, month = (int(p) for p in year_month.split("-"))
    last_day = calendar.monthrange(year, month)[1]
    return RecordFilter(date_from=f"{year_month}-01", date_to=f"{year_month}-{last_day:02d}", **extra)


def _matches(r: WasteRecord, f: RecordFilter, needle: str) -> bool:
    if f.branch and r.branch != f.branch:
        return False
    if f.category and r.category != f.category:
        return False
    # ISO dates are fixed width, so string order is date order.
    if f.date_from and r.date < f.date_from:
        return False
    if f.date_to and r.date > f.date_to:
        return False
    if needle:
        fields = (r.code, r.description, r.inventory_number, r.notes)
        if not any(needle in (s or "").lower() for s in fields):
            return False
    return True


def filter_records(records: Iterable[WasteRecord], f: Optional[RecordFilter] = None) -> list[WasteRecord]:
    records = list(records)
    if f is None or f.is_empty():
        return records
    needle = f.search.lower()
    return [r for r in records if _matches(r, f, needle)]


def describe_filter(f: Optional[RecordFilter]) -> str:
    if f is None or f.is_empty():
        return "No filters applied"
    parts = []
    if f.branch:
        parts.append(f"Branch: {f.branch}")
    if f.category:
        parts.append(f"Category: {f.category}")
    if f.date_from:
        parts.append(f"From: {f.date_from}")
    if f.date_to:
        parts.append(f"To: {f.date_to}")
    if f.search:
        parts.append(f"Search: {f.search}")
    return " | ".join(parts)


# ---- grouping ----

def total_value(records: Iterable[WasteRecord]) -> float:
    return sum(r.value for r in records)


def _group(records: Iterable[WasteRecord], key: str) -> list[tuple[str, float, int]]:
    # dicts keep first-seen order; sorted() is stable, so ties stay in that order
    groups: dict[str, list] = {}
    for r in records:
        g = groups.setdefault(getattr(r, key), [0.0, 0])
        g[0] += r.value
        g[1] += 1
    ordered = sorted(groups.items(), key=lambda kv: kv[1][0], reverse=True)
    return [(name, total, count) for name, (total, count) in ordered]


def aggregate_by_branch(records: Iterable[WasteRecord]) -> list[BranchSummary]:
    return [BranchSummary(branch=k, total=t, count=c) for k, t, c in _group(records, "branch")]


def aggregate_by_category(records: Iterable[WasteRecord]) -> list[CategorySummary]:
    return [CategorySummary(category=k, total=t, count=c) for k, t, c in _group(records, "category")]


# ---- trend ----

def monthly_trend(
    records: Iterable[WasteRecord],
    months: int = DASHBOARD_TREND_MONTHS,
    *,
    branch: str = "",
    category: str = "",
) -> list[TrendPoint]:
    """
    Trailing monthly totals over the whole history.

    Only branch/category narrowing is accepted here; a date filter would cut
    the window short.
    """
    buckets: dict[str, float] = {}
    for r in records:
        if branch and r.branch != branch:
            continue
        if category and r.category != category:
            continue
        if len(r.date) < 7:
            continue
        m = r.date[:7]
        buckets[m] = buckets.get(m, 0.0) + r.value

    keys = sorted(buckets)[-months:] if months > 0 else []
    return [TrendPoint(month=m, total=round2(buckets[m])) for m in keys]


# ---- thresholds ----

def classify(percentage: float, threshold_pct) -> str:
    # Decimal, unrounded: 0.8 x 3.33 is 2.664, and 0.8 x 3 is exactly 2.4.
    pct = Decimal(str(percentage))
    limit = Decimal(str(threshold_pct))
    if pct >= limit:
        return STATUS_DANGER
    if pct >= limit * WARNING_RATIO:
        return STATUS_WARNING
    return STATUS_SAFE


def budget_status(branch: str, waste: float, sales: float, waste_threshold: float) -> BudgetStatus:
    threshold_pct = Decimal(str(waste_threshold)) * 100
    if sales > 0:
        percentage = round2(safe_div(waste, sales) * 100)
        status = classify(percentage, threshold_pct)
    else:
        percentage = 0.0
        status = ZERO_SALES_STATUS
    return BudgetStatus(
        branch=branch,
        sales=float(sales),
        waste=round2(waste),
        percentage=percentage,
        threshold=float(threshold_pct),
        status=status,
    )


def budget_statuses(period_records: Iterable[WasteRecord], config: AppConfig) -> list[BudgetStatus]:
    """One status per configured branch, in configuration order."""
    waste_by_branch: dict[str, float] = {}
    for r in period_records:
        waste_by_branch[r.branch] = waste_by_branch.get(r.branch, 0.0) + r.value
    return [
        budget_status(
            b,
            waste_by_branch.get(b, 0.0),
            config.monthly_sales.get(b, 0.0),
            config.waste_threshold,
        )
        for b in config.branches
    ]


def global_status(period_records: Iterable[WasteRecord], config: AppConfig, branch: str = "") -> BudgetStatus:
    """
    Aggregate status over all configured branches, or over one branch when a
    branch filter is active.
    """
    records = list(period_records)
    if branch:
        waste = total_value(r for r in records if r.branch == branch)
        sales = config.monthly_sales.get(branch, 0.0)
        label = branch
    else:
        configured = set(config.branches)
        waste = total_value(r for r in records if r.branch in configured)
        sales = sum(config.monthly_sales.get(b, 0.0) for b in config.branches)
        label = "All branches"
    return budget_status(label, waste, sales, config.waste_threshold)


def dashboard_stats(period_records: Iterable[WasteRecord], statuses: Iterable[BudgetStatus]) -> DashboardStats:
    records = list(period_records)
    total = total_value(records)
    count = len(records)
    return DashboardStats(
        total=round2(total),
        count=count,
        average=round2(safe_div(total, count)),
        branches_in_danger=sum(1 for s in statuses if s.status == STATUS_DANGER),
    )
