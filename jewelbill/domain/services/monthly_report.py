# jewelbill/domain/services/monthly_report.py
"""
Monthly sales report.

summarize_invoices() is pure and works on anything shaped like the stored
Invoice rows (issued_at, total, cgst_amount, sgst_amount, old_total,
new_items, misc_items), so it is tested without a database.

Tax KPIs sum the stored tax *amounts* of each invoice.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from jewelbill.domain.services.billing_math import round2, to_amount
from jewelbill.infrastructure.db.repositories.invoice_repository import InvoiceRepository

logger = logging.getLogger("monthly_report")


def month_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    """[start, end) of a calendar month in UTC. Raises ValueError for a bad month."""
    if not 1 <= month <= 12:
        raise ValueError(f"month must be 1-12, got {month}")
    start = datetime(year, month, 1, tzinfo=timezone.utc)
    if month == 12:
        end = datetime(year + 1, 1, 1, tzinfo=timezone.utc)
    else:
        end = datetime(year, month + 1, 1, tzinfo=timezone.utc)
    return start, end


def previous_month(year: int, month: int) -> tuple[int, int]:
    return (year - 1, 12) if month == 1 else (year, month - 1)


@dataclass
class MonthlyKpis:
    invoice_count: int = 0
    unique_customers: int = 0
    gross: float = 0.0
    old_exchange: float = 0.0
    total_cgst: float = 0.0
    total_sgst: float = 0.0
    net: float = 0.0

    @property
    def tax(self) -> float:
        return round2(self.total_cgst + self.total_sgst)

    def to_dict(self) -> dict[str, Any]:
        return {
            "invoiceCount": self.invoice_count,
            "uniqueCustomers": self.unique_customers,
            "gross": self.gross,
            "oldExchange": self.old_exchange,
            "totalCGST": self.total_cgst,
            "totalSGST": self.total_sgst,
            "net": self.net,
        }


@dataclass
class KaratBreakdown:
    karat: str
    amount: float
    grams: float
    avg_rate: float

    def to_dict(self) -> dict[str, Any]:
        return {"karat": self.karat, "amount": self.amount, "grams": self.grams, "avgRate": self.avg_rate}


@dataclass
class MonthlyReport:
    year: int
    month: int
    kpis: MonthlyKpis
    by_day: list[dict[str, Any]] = field(default_factory=list)
    karat_breakdown: list[KaratBreakdown] = field(default_factory=list)
    hallmark_total: float = 0.0
    stone_total: float = 0.0
    invoices: list[dict[str, Any]] = field(default_factory=list)

    @property
    def label(self) -> str:
        return f"{self.year}-{self.month:02d}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "month": self.label,
            "kpis": self.kpis.to_dict(),
            "byDay": self.by_day,
            "karatBreakdown": [k.to_dict() for k in self.karat_breakdown],
            "invoices": self.invoices,
            "extras": {"hallmarkTotal": self.hallmark_total, "stoneTotal": self.stone_total},
        }

    def summary_text(self) -> str:
        k = self.kpis
        return (
            f"Summary for {self.label} - Invoices: {k.invoice_count}; "
            f"Gross: ₹{k.gross:.2f}; Old Exchange: ₹{k.old_exchange:.2f}; "
            f"Tax: ₹{k.tax:.2f}; Net: ₹{k.net:.2f}"
        )


def summarize_invoices(year: int, month: int, invoices: Iterable[Any]) -> MonthlyReport:
    invoices = list(invoices)

    gross = 0.0
    old_exchange = 0.0
    cgst = 0.0
    sgst = 0.0
    hallmark = 0.0
    stone = 0.0
    customers: set[str] = set()
    by_day: "OrderedDict[str, float]" = OrderedDict()
    karats: dict[str, dict[str, Any]] = {}
    listing: list[dict[str, Any]] = []

    for inv in invoices:
        gross += sum(to_amount(i.line_total) for i in inv.new_items)
        gross += sum(to_amount(m.amount) for m in inv.misc_items)
        old_exchange += to_amount(inv.old_total)
        cgst += to_amount(inv.cgst_amount)
        sgst += to_amount(inv.sgst_amount)
        if inv.customer_mobile:
            customers.add(inv.customer_mobile)

        day = inv.issued_at.strftime("%Y-%m-%d")
        by_day[day] = by_day.get(day, 0.0) + to_amount(inv.total)

        for item in inv.new_items:
            hallmark += to_amount(item.hallmark)
            stone += to_amount(item.stone_cost)
            bucket = karats.setdefault(item.karat, {"amount": 0.0, "grams": 0.0, "rates": []})
            bucket["amount"] += to_amount(item.line_total)
            bucket["grams"] += to_amount(item.net)
            bucket["rates"].append(to_amount(item.rate))

        listing.append({
            "id": inv.id,
            "number": inv.invoice_no,
            "color": inv.color,
            "mobile": inv.customer_mobile,
            "issuedAt": inv.issued_at.isoformat(),
            "total": round2(inv.total),
            "cgst": round2(inv.cgst_amount),
            "sgst": round2(inv.sgst_amount),
        })

    kpis = MonthlyKpis(
        invoice_count=len(invoices),
        unique_customers=len(customers),
        gross=round2(gross),
        old_exchange=round2(old_exchange),
        total_cgst=round2(cgst),
        total_sgst=round2(sgst),
        net=round2(gross + cgst + sgst - old_exchange),
    )
    breakdown = [
        KaratBreakdown(
            karat=karat,
            amount=round2(b["amount"]),
            grams=round2(b["grams"]),
            avg_rate=round2(sum(b["rates"]) / len(b["rates"])) if b["rates"] else 0.0,
        )
        for karat, b in sorted(karats.items())
    ]
    return MonthlyReport(
        year=year,
        month=month,
        kpis=kpis,
        by_day=[{"day": d, "netAmount": round2(v)} for d, v in by_day.items()],
        karat_breakdown=breakdown,
        hallmark_total=round2(hallmark),
        stone_total=round2(stone),
        invoices=listing,
    )


@dataclass(frozen=True)
class MonthComparison:
    current_label: str
    previous_label: str
    count_delta: int
    net_change_pct: float
    bullets: tuple[str, ...]

    def text(self) -> str:
        lines = "\n- ".join(self.bullets)
        return f"Comparison ({self.current_label} vs {self.previous_label}):\n- {lines}"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _change_pct(current: float, previous: float) -> float:
    # An empty previous month counts as +100%
    if previous == 0:
        return 100.0
    return (current - previous) / previous * 100


def compare_months(current: MonthlyReport, previous: MonthlyReport) -> MonthComparison:
    cur, prev = current.kpis, previous.kpis
    delta = cur.invoice_count - prev.invoice_count
    pct = _change_pct(cur.net, prev.net)
    bullets = (
        f"Invoices: {cur.invoice_count} vs {prev.invoice_count} ({'+' if delta >= 0 else ''}{delta})",
        f"Net: ₹{cur.net:.2f} vs ₹{prev.net:.2f} ({'+' if pct >= 0 else ''}{pct:.1f}%)",
        f"Gross & Tax: ₹{cur.gross:.2f} + ₹{cur.tax:.2f} (prev ₹{prev.gross:.2f} + ₹{prev.tax:.2f})",
    )
    return MonthComparison(
        current_label=current.label,
        previous_label=previous.label,
        count_delta=delta,
        net_change_pct=round(pct, 1),
        bullets=bullets,
    )


async def build_monthly_report(db: AsyncSession, year: int, month: int) -> MonthlyReport:
    start, end = month_bounds(year, month)
    invoices = await InvoiceRepository(db).list_for_period(start, end)
    logger.debug("Monthly report %d-%02d over %d invoices", year, month, len(invoices))
    return summarize_invoices(year, month, invoices)
