# tests/test_invoice_repository.py
"""Tests for invoice storage and numbering (infrastructure/db/repositories/invoice_repository.py)."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import insert

from jewelbill.domain.models.billing import BillInput, NewItem
from jewelbill.domain.services.invoice_service import prepare_invoice
from jewelbill.infrastructure.db.models import Invoice, InvoiceCounter
from jewelbill.infrastructure.db.repositories import (
    CustomerRepository,
    InvoiceNumberConflict,
    InvoiceRepository,
)
from jewelbill.infrastructure.db.repositories.customer_repository import clamp_limit


def _bill(mobile="9876543210", name="Ravi Kumar", grams=1.0, address=""):
    return BillInput(
        customer_name=name,
        customer_mobile=mobile,
        customer_address=address,
        new_items=[NewItem(gross_weight_gm=grams, rate_per_gm=6000)],
    )


def _store(event_loop, db, bill, **kwargs):
    record = prepare_invoice(bill, **kwargs)
    return event_loop.run_until_complete(InvoiceRepository(db).create_invoice(record))


class TestNumbering:
    """Per-color invoice numbers."""

    def test_sequential_per_color(self, db, event_loop):
        numbers = [_store(event_loop, db, _bill()).invoice_no for _ in range(3)]
        assert numbers == [1, 2, 3]
        assert _store(event_loop, db, _bill(), color="pink").invoice_no == 1
        assert _store(event_loop, db, _bill()).invoice_no == 4

    def test_explicit_number_moves_counter(self, db, event_loop):
        assert _store(event_loop, db, _bill()).invoice_no == 1
        assert _store(event_loop, db, _bill(), invoice_no=10).invoice_no == 10
        assert _store(event_loop, db, _bill()).invoice_no == 11

    def test_lower_explicit_number_keeps_counter(self, db, event_loop):
        _store(event_loop, db, _bill(), invoice_no=20)
        assert _store(event_loop, db, _bill(), invoice_no=5).invoice_no == 5
        assert _store(event_loop, db, _bill()).invoice_no == 21

    def test_counter_seeds_from_existing_rows(self, db, event_loop):
        db.add(Invoice(
            invoice_no=41,
            color="gold",
            issued_at=datetime(2026, 1, 5, tzinfo=timezone.utc),
            total=100,
            snapshot="{}",
        ))
        event_loop.run_until_complete(db.commit())
        assert _store(event_loop, db, _bill(), color="gold").invoice_no == 42

    def test_duplicate_explicit_number_conflicts(self, db, event_loop):
        _store(event_loop, db, _bill(), invoice_no=5)
        with pytest.raises(InvoiceNumberConflict):
            _store(event_loop, db, _bill(mobile="9111111111", name="Asha"), invoice_no=5)

        # The conflicting submission left nothing behind
        customer = event_loop.run_until_complete(CustomerRepository(db).get_by_mobile("9111111111"))
        assert customer is None
        stats = event_loop.run_until_complete(InvoiceRepository(db).stats())
        assert stats == {"invoices": 1, "lastInvoiceNo": 5}

    def test_same_number_allowed_in_other_color(self, db, event_loop):
        _store(event_loop, db, _bill(), invoice_no=5)
        assert _store(event_loop, db, _bill(), invoice_no=5, color="pink").invoice_no == 5


class TestTransaction:
    def test_failure_rolls_back_customer(self, db, event_loop):
        with patch.object(InvoiceRepository, "_next_number", AsyncMock(side_effect=RuntimeError("boom"))):
            with pytest.raises(RuntimeError):
                _store(event_loop, db, _bill(mobile="9222222222"))

        customer = event_loop.run_until_complete(CustomerRepository(db).get_by_mobile("9222222222"))
        assert customer is None
        assert event_loop.run_until_complete(CustomerRepository(db).count()) == 0

    def test_number_taken_concurrently_conflicts(self, db, event_loop):
        """Another submission stored the same number after the availability check."""
        _store(event_loop, db, _bill(), invoice_no=5, color="white")
        with patch.object(InvoiceRepository, "_claim_number", AsyncMock(return_value=5)):
            with pytest.raises(InvoiceNumberConflict):
                _store(event_loop, db, _bill(mobile="9333333333"), invoice_no=5, color="white")

        stats = event_loop.run_until_complete(InvoiceRepository(db).stats())
        assert stats == {"invoices": 1, "lastInvoiceNo": 5}
        customer = event_loop.run_until_complete(CustomerRepository(db).get_by_mobile("9333333333"))
        assert customer is None

    def test_counter_seeded_concurrently_conflicts(self, db, event_loop):
        """Another submission created the color's counter row first."""
        _store(event_loop, db, _bill(), color="pink")

        async def seed_again(color):
            await db.execute(insert(InvoiceCounter).values(color=color, last_no=1))
            return 1

        with patch.object(InvoiceRepository, "_next_number", AsyncMock(side_effect=seed_again)):
            with pytest.raises(InvoiceNumberConflict):
                _store(event_loop, db, _bill(), color="pink")

        assert _store(event_loop, db, _bill(), color="pink").invoice_no == 2

    def test_customer_upsert_keeps_stored_values(self, db, event_loop):
        _store(event_loop, db, _bill(name="Ravi Kumar", address="MG Road"))
        _store(event_loop, db, _bill(name="", address=""))
        customer = event_loop.run_until_complete(CustomerRepository(db).get_by_mobile("9876543210"))
        assert customer.name == "Ravi Kumar"
        assert customer.address == "MG Road"

        _store(event_loop, db, _bill(name="Ravi K", address="Station Road"))
        event_loop.run_until_complete(db.refresh(customer))
        assert customer.name == "Ravi K"
        assert customer.address == "Station Road"


class TestQueries:
    """Read paths used by lookups, reports and the assistant."""

    def test_list_for_customer_newest_first(self, db, event_loop):
        _store(event_loop, db, _bill(), issued_at=datetime(2026, 1, 5, tzinfo=timezone.utc))
        _store(event_loop, db, _bill(), issued_at=datetime(2026, 3, 5, tzinfo=timezone.utc))
        _store(event_loop, db, _bill(mobile="9000000001"))
        invoices = event_loop.run_until_complete(InvoiceRepository(db).list_for_customer("9876543210"))
        assert [i.invoice_no for i in invoices] == [2, 1]

    def test_list_for_period_is_half_open(self, db, event_loop):
        _store(event_loop, db, _bill(), issued_at=datetime(2026, 2, 28, 23, 0, tzinfo=timezone.utc))
        _store(event_loop, db, _bill(), issued_at=datetime(2026, 3, 1, 0, 0, tzinfo=timezone.utc))
        _store(event_loop, db, _bill(), issued_at=datetime(2026, 4, 1, 0, 0, tzinfo=timezone.utc))
        invoices = event_loop.run_until_complete(
            InvoiceRepository(db).list_for_period(
                datetime(2026, 3, 1, tzinfo=timezone.utc),
                datetime(2026, 4, 1, tzinfo=timezone.utc),
            )
        )
        assert [i.invoice_no for i in invoices] == [2]
        assert len(invoices[0].new_items) == 1

    def test_search_purchases_by_name(self, db, event_loop):
        _store(event_loop, db, _bill(grams=10), issued_at=datetime(2026, 2, 1, tzinfo=timezone.utc))
        _store(event_loop, db, _bill(grams=1), issued_at=datetime(2026, 3, 1, tzinfo=timezone.utc))
        _store(event_loop, db, _bill(grams=20), issued_at=datetime(2025, 3, 1, tzinfo=timezone.utc))
        rows = event_loop.run_until_complete(
            InvoiceRepository(db).search_purchases_by_name("ravi", 50000, 2026)
        )
        assert [(inv.invoice_no, cust.name) for inv, cust in rows] == [(1, "Ravi Kumar")]

    def test_customer_search_and_listing(self, db, event_loop):
        _store(event_loop, db, _bill(name="Ravi Kumar"))
        _store(event_loop, db, _bill(mobile="9000000001", name="Asha Devi"))
        repo = CustomerRepository(db)
        found = event_loop.run_until_complete(repo.search_by_name("RAVI"))
        assert [c.mobile for c in found] == ["9876543210"]
        assert event_loop.run_until_complete(repo.search_by_name("  ")) == []
        listed = event_loop.run_until_complete(repo.list_all(limit=1, offset=1))
        assert [c.name for c in listed] == ["Ravi Kumar"]

    def test_clamp_limit(self):
        assert clamp_limit(None) == 200
        assert clamp_limit(0) == 1
        assert clamp_limit(10_000) == 500
