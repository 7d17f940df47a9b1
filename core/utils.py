from __future__ import annotations

from datetime import datetime, date, timezone
from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal("0.01")


def iso_today() -> str:
    return date.today().isoformat()


def iso_now() -> str:
    # Use UTC ISO timestamps for consistency.
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def current_month(today: date | None = None) -> str:
    return (today or date.today()).strftime("%Y-%m")


def safe_div(n: float, d: float) -> float:
    return float(n) / float(d) if d else 0.0


def round2(value: float) -> float:
    """
    Round to cents, half away from zero.

    Goes through str() so that 1.005 rounds to 1.01 the way it reads,
    not to 1.0 as binary floating point would have it.
    """
    return float(Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP))


def fmt_money(value: float, currency: str = "Q") -> str:
    amount = Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)
    return f"{currency}{amount:,.2f}"


def fmt_pct(value: float, digits: int = 2) -> str:
    quant = Decimal(1).scaleb(-digits)
    pct = Decimal(str(value)).quantize(quant, rounding=ROUND_HALF_UP)
    return f"{pct:.{digits}f}%"


def month_label(month_key: str) -> str:
    # "2024-01" -> "Jan 24"
    try:
        return datetime.strptime(month_key, "%Y-%m").strftime("%b %y")
    except ValueError:
        return month_key
