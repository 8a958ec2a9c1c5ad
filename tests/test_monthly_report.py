# tests/test_monthly_report.py
"""Tests for monthly KPIs and month comparison (domain/services/monthly_report.py)."""

from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from jewelbill.domain.services.monthly_report import (
    compare_months,
    month_bounds,
    previous_month,
    summarize_invoices,
)


def _line(karat="22K", line_total=0.0, net=0.0, rate=0.0, hallmark=0.0, stone_cost=0.0):
    return SimpleNamespace(
        karat=karat, line_total=line_total, net=net, rate=rate, hallmark=hallmark, stone_cost=stone_cost
    )


def _invoice(no, day, mobile, new_items=(), misc=(), old_total=0.0, cgst=0.0, sgst=0.0, total=0.0):
    return SimpleNamespace(
        id=f"inv-{no}",
        invoice_no=no,
        color="white",
        customer_mobile=mobile,
        issued_at=datetime(2026, 3, day, 11, 30, tzinfo=timezone.utc),
        new_items=list(new_items),
        misc_items=[SimpleNamespace(amount=a) for a in misc],
        old_total=old_total,
        cgst_amount=cgst,
        sgst_amount=sgst,
        total=total,
    )


@pytest.fixture
def march_invoices():
    return [
        _invoice(
            1, 3, "9876543210",
            new_items=[_line("22K", 66100, 10, 6000, hallmark=100)],
            cgst=991.5, sgst=991.5, total=68083,
        ),
        _invoice(
            2, 3, "9876543210",
            new_items=[_line("22K", 66100, 10, 6000, hallmark=100)],
            old_total=25000, cgst=991.5, sgst=991.5, total=43083,
        ),
        _invoice(
            3, 15, "9000000001",
            new_items=[_line("18K", 10000, 2, 5000, stone_cost=500), _line("22K", 6200, 1, 6200)],
            misc=[800],
            cgst=254.0, sgst=254.0, total=17508,
        ),
    ]


class TestMonthBounds:
    def test_regular_month(self):
        start, end = month_bounds(2026, 3)
        assert start == datetime(2026, 3, 1, tzinfo=timezone.utc)
        assert end == datetime(2026, 4, 1, tzinfo=timezone.utc)

    def test_december_rolls_year(self):
        assert month_bounds(2026, 12)[1] == datetime(2027, 1, 1, tzinfo=timezone.utc)

    def test_bad_month(self):
        with pytest.raises(ValueError):
            month_bounds(2026, 13)

    def test_previous_month(self):
        assert previous_month(2026, 1) == (2025, 12)
        assert previous_month(2026, 7) == (2026, 6)


class TestSummarizeInvoices:
    """KPIs computed from stored invoice rows."""

    def test_kpis(self, march_invoices):
        report = summarize_invoices(2026, 3, march_invoices)
        k = report.kpis
        assert k.invoice_count == 3
        assert k.unique_customers == 2
        assert k.gross == 66100 + 66100 + 10000 + 6200 + 800
        assert k.old_exchange == 25000
        assert k.total_cgst == 2237.0
        assert k.total_sgst == 2237.0
        assert k.tax == 4474.0
        assert k.net == k.gross + k.tax - k.old_exchange

    def test_by_day_sums_invoice_totals(self, march_invoices):
        report = summarize_invoices(2026, 3, march_invoices)
        assert report.by_day == [
            {"day": "2026-03-03", "netAmount": 111166.0},
            {"day": "2026-03-15", "netAmount": 17508.0},
        ]

    def test_karat_breakdown_and_extras(self, march_invoices):
        report = summarize_invoices(2026, 3, march_invoices)
        by_karat = {b.karat: b for b in report.karat_breakdown}
        assert by_karat["22K"].amount == 138400.0
        assert by_karat["22K"].grams == 21.0
        assert by_karat["22K"].avg_rate == 6066.67
        assert by_karat["18K"].grams == 2.0
        assert report.hallmark_total == 200.0
        assert report.stone_total == 500.0

    def test_to_dict_shape(self, march_invoices):
        data = summarize_invoices(2026, 3, march_invoices).to_dict()
        assert data["month"] == "2026-03"
        assert set(data["kpis"]) == {
            "invoiceCount", "uniqueCustomers", "gross", "oldExchange", "totalCGST", "totalSGST", "net",
        }
        assert data["invoices"][0]["number"] == 1
        assert data["extras"] == {"hallmarkTotal": 200.0, "stoneTotal": 500.0}

    def test_empty_month(self):
        report = summarize_invoices(2026, 2, [])
        assert report.kpis.invoice_count == 0
        assert report.kpis.net == 0.0
        assert report.by_day == []
        assert report.summary_text() == (
            "Summary for 2026-02 - Invoices: 0; Gross: ₹0.00; Old Exchange: ₹0.00; Tax: ₹0.00; Net: ₹0.00"
        )


class TestCompareMonths:
    def test_growth(self, march_invoices):
        current = summarize_invoices(2026, 3, march_invoices)
        previous = summarize_invoices(2026, 2, march_invoices[:1])
        cmp = compare_months(current, previous)
        assert cmp.count_delta == 2
        assert cmp.bullets[0] == "Invoices: 3 vs 1 (+2)"
        assert cmp.text().startswith("Comparison (2026-03 vs 2026-02):\n- Invoices: 3 vs 1 (+2)\n- Net: ")

    def test_empty_previous_month_counts_as_full_growth(self, march_invoices):
        current = summarize_invoices(2026, 3, march_invoices)
        previous = summarize_invoices(2026, 2, [])
        cmp = compare_months(current, previous)
        assert cmp.net_change_pct == 100.0
        assert "(+100.0%)" in cmp.bullets[1]

    def test_decline(self, march_invoices):
        current = summarize_invoices(2026, 3, [])
        previous = summarize_invoices(2026, 2, march_invoices)
        cmp = compare_months(current, previous)
        assert cmp.bullets[0] == "Invoices: 0 vs 3 (-3)"
        assert cmp.net_change_pct == -100.0
