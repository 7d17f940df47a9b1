from __future__ import annotations

import pytest

from core.utils import fmt_money, fmt_pct, month_label, round2, safe_div


@pytest.mark.parametrize(
    "value,expected",
    [
        (1.005, 1.01),
        (2.675, 2.68),
        (0.125, 0.13),
        (0.1 + 0.2, 0.3),
        (10, 10.0),
        (0, 0.0),
    ],
)
def test_round2_is_half_up_on_cents(value, expected):
    assert round2(value) == expected


def test_fmt_money_always_two_digits():
    assert fmt_money(0) == "Q0.00"
    assert fmt_money(1234.5) == "Q1,234.50"
    assert fmt_money(2.675) == "Q2.68"
    assert fmt_money(7, currency="KES ") == "KES 7.00"


def test_fmt_pct():
    assert fmt_pct(3.5) == "3.50%"
    assert fmt_pct(3.0, 1) == "3.0%"
    assert fmt_pct(1.666) == "1.67%"


def test_month_label():
    assert month_label("2024-01") == "Jan 24"
    assert month_label("garbage") == "garbage"


def test_safe_div():
    assert safe_div(1, 0) == 0.0
    assert safe_div(1, 4) == 0.25
