# tests/test_billing_math.py
"""Tests for the billing computation engine (domain/services/billing_math.py)."""

import math

import pytest

from jewelbill.domain.models.billing import (
    BillInput,
    Karat,
    MakingChargeMode,
    MiscItem,
    NewItem,
    OldItem,
)
from jewelbill.domain.services.billing_math import (
    compute_bill_totals,
    compute_making_charge,
    compute_misc_item_amount,
    compute_new_item_amount,
    compute_new_item_net_weight_gm,
    compute_old_item_amount,
    compute_old_item_payable_weight_gm,
    format_inr,
    round2,
    to_amount,
)
from jewelbill.domain.services.rate_defaults import default_rate_table


class TestRounding:
    """Numeric policy: coercion and half-up rounding."""

    def test_half_up_on_binary_edge(self):
        assert round2(1.005) == 1.01
        assert round2(2.675) == 2.68

    def test_plain_values(self):
        assert round2(991.5) == 991.5
        assert round2(0) == 0.0
        assert round2(10.004) == 10.0

    def test_negative_half_rounds_up(self):
        assert round2(-1.005) == -1.0
        assert round2(-0.025) == -0.02
        assert round2(-1.006) == -1.01
        assert round2(-9000) == -9000.0

    def test_tiny_negative_is_plain_zero(self):
        assert math.copysign(1.0, round2(-0.001)) == 1.0

    @pytest.mark.parametrize("raw", [None, "", "abc", math.nan, math.inf, -math.inf, [], True])
    def test_unusable_inputs_are_zero(self, raw):
        assert to_amount(raw) == 0.0
        assert round2(raw) == 0.0

    def test_numeric_strings_are_accepted(self):
        assert to_amount("12.5") == 12.5


class TestNewItemPricing:
    """Line-item pricing for new pieces."""

    def test_percent_making_with_hallmark(self, ring_22k):
        # 10 g * 6000 = 60000, +10% = 66000, +100 hallmark
        assert compute_new_item_amount(ring_22k) == 66100.00

    def test_per_gram_making(self):
        item = NewItem(
            karat=Karat.K18,
            gross_weight_gm=3,
            rate_per_gm=5000,
            making_charge_mode=MakingChargeMode.PER_GM,
            making_charge_value=50,
        )
        net = compute_new_item_net_weight_gm(item)
        assert compute_making_charge(item, net, net * 5000) == 150
        assert compute_new_item_amount(item) == 15150.00

    def test_fixed_making(self):
        item = NewItem(
            gross_weight_gm=2,
            rate_per_gm=1000,
            making_charge_mode=MakingChargeMode.FIXED,
            making_charge_value=750,
        )
        assert compute_new_item_amount(item) == 2750.00

    def test_no_making_mode_means_no_making_charge(self):
        item = NewItem(gross_weight_gm=2, rate_per_gm=1000, making_charge_value=500)
        assert compute_new_item_amount(item) == 2000.00

    def test_missing_rate_leaves_only_charges(self):
        """A karat absent from the rate table is priced at 0/g."""
        rate = default_rate_table().rate_for("19K")
        item = NewItem(
            karat=Karat.K19,
            gross_weight_gm=4,
            rate_per_gm=rate,
            making_charge_mode=MakingChargeMode.PER_GM,
            making_charge_value=100,
            hallmark_cost=45,
            stone_cost=1200,
        )
        assert rate == 0.0
        assert compute_new_item_amount(item) == 400 + 45 + 1200

    def test_stone_heavier_than_gross_clamps_to_zero(self):
        item = NewItem(gross_weight_gm=2, stone_weight_gm=3, rate_per_gm=6000, stone_cost=500)
        assert compute_new_item_net_weight_gm(item) == 0.0
        assert compute_new_item_amount(item) == 500.00

    def test_net_weight_subtracts_stone(self):
        item = NewItem(gross_weight_gm=5.25, stone_weight_gm=0.5)
        assert compute_new_item_net_weight_gm(item) == 4.75

    def test_wastage_is_not_priced(self, ring_22k):
        ring_22k.wastage_value = 8
        assert compute_new_item_amount(ring_22k) == 66100.00

    def test_garbage_fields_do_not_raise(self):
        item = NewItem(gross_weight_gm="abc", rate_per_gm=None, hallmark_cost=math.nan)
        assert compute_new_item_amount(item) == 0.0


class TestOldAndMisc:
    """Exchange and misc lines."""

    def test_old_item_amount(self):
        assert compute_old_item_amount(OldItem(weight_gm=5, rate_per_gm=5000)) == 25000.00

    def test_old_item_wastage_is_deducted(self):
        item = OldItem(weight_gm=5, wastage_gm=0.5, rate_per_gm=5000)
        assert compute_old_item_payable_weight_gm(item) == 4.5
        assert compute_old_item_amount(item) == 22500.00

    def test_old_item_wastage_above_weight_clamps(self):
        assert compute_old_item_amount(OldItem(weight_gm=1, wastage_gm=2, rate_per_gm=5000)) == 0.0

    def test_misc_amount_is_rounded(self):
        assert compute_misc_item_amount(MiscItem(amount=99.999)) == 100.00
        assert compute_misc_item_amount(MiscItem(amount="oops")) == 0.0


class TestBillTotals:
    """The totals aggregator."""

    def test_single_item_bill(self, sample_bill):
        totals = compute_bill_totals(sample_bill)
        assert totals.new_items_total == 66100.00
        assert totals.misc_total == 0.0
        assert totals.gross_total == 66100.00
        assert totals.cgst_amount == 991.50
        assert totals.sgst_amount == 991.50
        assert totals.net_amount == 68083.00
        assert totals.grand_total == 68083.00

    def test_exchange_reduces_net_but_not_tax(self, exchange_bill):
        totals = compute_bill_totals(exchange_bill)
        assert totals.old_items_total == 25000.00
        assert totals.cgst_amount == 991.50
        assert totals.sgst_amount == 991.50
        assert totals.grand_total == 43083.00

    def test_misc_is_taxed(self, sample_bill):
        sample_bill.misc_items.append(MiscItem(description="Polish", amount=900))
        totals = compute_bill_totals(sample_bill)
        assert totals.gross_total == 67000.00
        assert totals.cgst_amount == 1005.00
        assert totals.grand_total == 69010.00

    def test_empty_bill(self):
        totals = compute_bill_totals(BillInput())
        assert totals.to_dict() == {
            "newItemsTotal": 0.0,
            "oldItemsTotal": 0.0,
            "miscTotal": 0.0,
            "grossTotal": 0.0,
            "cgstAmount": 0.0,
            "sgstAmount": 0.0,
            "netAmount": 0.0,
            "grandTotal": 0.0,
        }

    def test_exchange_larger_than_purchase_goes_negative(self):
        bill = BillInput(
            new_items=[NewItem(gross_weight_gm=1, rate_per_gm=1000)],
            old_items=[OldItem(weight_gm=10, rate_per_gm=1000)],
        )
        assert compute_bill_totals(bill).grand_total == -9000.00

    def test_totals_are_consistent(self, exchange_bill):
        exchange_bill.misc_items.append(MiscItem(amount=333.33))
        t = compute_bill_totals(exchange_bill)
        assert t.gross_total == round2(t.new_items_total + t.misc_total)
        assert t.net_amount == round2(t.gross_total + t.cgst_amount + t.sgst_amount - t.old_items_total)
        assert t.net_amount == t.grand_total

    def test_repeatable(self, exchange_bill):
        assert compute_bill_totals(exchange_bill) == compute_bill_totals(exchange_bill)

    def test_old_amount_grows_with_rate_and_weight(self):
        amounts = [
            compute_old_item_amount(OldItem(weight_gm=w, wastage_gm=0.25, rate_per_gm=r))
            for w, r in [(1, 4000), (1, 5000), (2, 5000), (3, 5000)]
        ]
        assert amounts == sorted(amounts)

    def test_taxes_ignore_old_items(self, sample_bill):
        plain = compute_bill_totals(sample_bill)
        sample_bill.old_items.append(OldItem(weight_gm=50, rate_per_gm=5000))
        assert compute_bill_totals(sample_bill).cgst_amount == plain.cgst_amount

    def test_bad_tax_percent_counts_as_zero(self, sample_bill):
        sample_bill.cgst_pct = "n/a"
        totals = compute_bill_totals(sample_bill)
        assert totals.cgst_amount == 0.0
        assert totals.sgst_amount == 991.50


class TestFormatInr:
    """Indian digit grouping for display."""

    def test_lakh_grouping(self):
        assert format_inr(100300) == "₹1,00,300.00"
        assert format_inr(68083) == "₹68,083.00"

    def test_small_and_negative(self):
        assert format_inr(5) == "₹5.00"
        assert format_inr(-9000) == "-₹9,000.00"

    def test_crore(self):
        assert format_inr(12345678.9) == "₹1,23,45,678.90"
