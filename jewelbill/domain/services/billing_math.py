# jewelbill/domain/services/billing_math.py
"""
Billing computation engine.

Pure functions: line-item pricing for new, old (exchange) and misc items, the
bill totals aggregator and the shared 2-decimal rounding policy.

Nothing here raises for bad numbers. None, non-numeric strings, NaN and inf
are read as 0 so a half-filled bill still produces a total.
"""

from __future__ import annotations

import math
import sys
from decimal import ROUND_HALF_DOWN, ROUND_HALF_UP, Decimal
from typing import Any, Iterable

from jewelbill.domain.models.billing import (
    BillInput,
    BillTotals,
    MakingChargeMode,
    MiscItem,
    NewItem,
    OldItem,
)

EPSILON = sys.float_info.epsilon
_CENT = Decimal("0.01")


# ---------------------------------------------------------------------------
# Numeric policy
# ---------------------------------------------------------------------------

def to_amount(value: Any) -> float:
    """Coerce any input to a finite float; anything unusable becomes 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        num = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(num):
        return 0.0
    return num


def round2(value: Any) -> float:
    """
    Half-up rounding to 2 decimals, with an epsilon nudge against 1.005 -> 1.00.

    Half cents always round towards +inf, so -1.005 -> -1.00 and 1.005 -> 1.01.
    """
    num = to_amount(value) + EPSILON
    # repr() gives the shortest decimal string, so 1.005 stays "1.005"
    exact = Decimal(repr(num))
    if exact >= 0:
        return float(exact.quantize(_CENT, rounding=ROUND_HALF_UP))
    # "or" folds -0.0 into 0.0
    return float(-(-exact).quantize(_CENT, rounding=ROUND_HALF_DOWN)) or 0.0


def _sum_rounded(amounts: Iterable[float]) -> float:
    return round2(sum(amounts, 0.0))


# ---------------------------------------------------------------------------
# Line-item pricing
# ---------------------------------------------------------------------------

def compute_new_item_net_weight_gm(item: NewItem) -> float:
    """Gross minus stone weight, never below zero."""
    net = to_amount(item.gross_weight_gm) - to_amount(item.stone_weight_gm)
    return max(0.0, round2(net))


def compute_making_charge(item: NewItem, net_weight: float, net_amount: float) -> float:
    value = to_amount(item.making_charge_value)
    mode = MakingChargeMode.parse(item.making_charge_mode)
    if mode is MakingChargeMode.PERCENT:
        return net_amount * value / 100
    if mode is MakingChargeMode.PER_GM:
        return net_weight * value
    if mode is MakingChargeMode.FIXED:
        return value
    return 0.0


def compute_new_item_amount(item: NewItem) -> float:
    # Wastage (wastage_value / wastage_unit) is intentionally not priced.
    net_weight = compute_new_item_net_weight_gm(item)
    net_amount = net_weight * to_amount(item.rate_per_gm)
    mc = compute_making_charge(item, net_weight, net_amount)
    return round2(
        net_amount + mc + to_amount(item.hallmark_cost) + to_amount(item.stone_cost)
    )


def compute_old_item_payable_weight_gm(item: OldItem) -> float:
    return max(0.0, to_amount(item.weight_gm) - to_amount(item.wastage_gm))


def compute_old_item_amount(item: OldItem) -> float:
    return round2(compute_old_item_payable_weight_gm(item) * to_amount(item.rate_per_gm))


def compute_misc_item_amount(item: MiscItem) -> float:
    return round2(item.amount)


# ---------------------------------------------------------------------------
# Aggregator
# ---------------------------------------------------------------------------

def compute_bill_totals(bill: BillInput) -> BillTotals:
    """
    Totals for one bill. Each step is rounded before the next one uses it.

    Taxes are charged on new + misc only. The old-exchange total is a payment
    offset subtracted after tax.
    """
    new_items_total = _sum_rounded(compute_new_item_amount(i) for i in bill.new_items or [])
    old_items_total = _sum_rounded(compute_old_item_amount(i) for i in bill.old_items or [])
    misc_total = _sum_rounded(compute_misc_item_amount(i) for i in bill.misc_items or [])

    gross_total = round2(new_items_total + misc_total)
    cgst_amount = round2(gross_total * to_amount(bill.cgst_pct) / 100)
    sgst_amount = round2(gross_total * to_amount(bill.sgst_pct) / 100)
    net_amount = round2(gross_total + cgst_amount + sgst_amount - old_items_total)

    return BillTotals(
        new_items_total=new_items_total,
        old_items_total=old_items_total,
        misc_total=misc_total,
        gross_total=gross_total,
        cgst_amount=cgst_amount,
        sgst_amount=sgst_amount,
        net_amount=net_amount,
        grand_total=net_amount,
    )


# ---------------------------------------------------------------------------
# Presentation
# ---------------------------------------------------------------------------

def format_inr(value: Any) -> str:
    """Format as rupees with Indian digit grouping, e.g. ₹1,00,300.00."""
    num = round2(value)
    sign = "-" if num < 0 else ""
    whole, frac = f"{abs(num):.2f}".split(".")
    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        whole = ",".join(groups + [tail])
    return f"{sign}₹{whole}.{frac}"
