# tests/test_rate_service.py
"""Tests for rate resolution and updates (domain/services/rate_service.py)."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from jewelbill.domain.services.rate_service import (
    InvalidRateError,
    RateService,
    validate_rates,
)


class TestValidateRates:
    def test_labels_are_normalized(self):
        assert validate_rates({"22k": "6100", "silver": 80}) == {"22K": 6100.0, "SILVER": 80.0}

    @pytest.mark.parametrize("bad", [-1, "abc", None, float("nan"), float("inf")])
    def test_bad_values_reject(self, bad):
        with pytest.raises(InvalidRateError):
            validate_rates({"22K": 6100, "18K": bad})

    def test_empty_label_rejects(self):
        with pytest.raises(InvalidRateError):
            validate_rates({"  ": 100})

    def test_zero_is_allowed(self):
        assert validate_rates({"14K": 0}) == {"14K": 0.0}


class TestRateResolution:
    """DB first, hardcoded defaults as the fallback."""

    def test_empty_store_uses_defaults(self, db, event_loop):
        table = event_loop.run_until_complete(RateService().get_rate_table(db))
        assert table.source == "hardcoded"
        assert table.rate_for("22K") == 9166.67

    def test_stored_rates_win(self, db, event_loop):
        service = RateService()
        with patch("jewelbill.domain.services.rate_service.log_rates_changed") as audit:
            event_loop.run_until_complete(service.save_rates(db, {"22k": 6100, "SILVER": 80}))
        audit.assert_called_once_with({"22K": 6100.0, "SILVER": 80.0}, source="manual")

        table = event_loop.run_until_complete(service.get_rate_table(db))
        assert table.source == "db"
        assert dict(table.rates) == {"22K": 6100.0, "SILVER": 80.0}
        assert table.lookup("18K").missing is True

    def test_update_overwrites_existing_entry(self, db, event_loop):
        service = RateService()
        event_loop.run_until_complete(service.save_rates(db, {"22K": 6100}))
        table = event_loop.run_until_complete(service.save_rates(db, {"22K": 6200, "18K": 5000}))
        assert dict(table.rates) == {"18K": 5000.0, "22K": 6200.0}

    def test_invalid_update_stores_nothing(self, db, event_loop):
        service = RateService()
        with pytest.raises(InvalidRateError):
            event_loop.run_until_complete(service.save_rates(db, {"22K": 6100, "18K": -5}))
        table = event_loop.run_until_complete(service.get_rate_table(db))
        assert table.source == "hardcoded"

    def test_empty_update_rejected(self, db, event_loop):
        with pytest.raises(InvalidRateError):
            event_loop.run_until_complete(RateService().save_rates(db, {}))

    def test_unreachable_store_falls_back(self, event_loop):
        broken = MagicMock()
        broken.execute = AsyncMock(side_effect=ConnectionError("db down"))
        broken.rollback = AsyncMock()
        table = event_loop.run_until_complete(RateService().get_rate_table(broken))
        assert table.source == "hardcoded"
        assert table.rate_for("24K") == 10000
        broken.rollback.assert_awaited_once()

    def test_failed_lookup_leaves_session_usable(self, db, event_loop):
        """A failed rate query must not poison the caller's later writes."""
        service = RateService()
        with patch(
            "jewelbill.domain.services.rate_service.RateRepository.list_rates",
            AsyncMock(side_effect=RuntimeError("query failed")),
        ), patch.object(db, "rollback", wraps=db.rollback) as rollback:
            table = event_loop.run_until_complete(service.get_rate_table(db))
        assert table.source == "hardcoded"
        rollback.assert_called_once()

        event_loop.run_until_complete(service.save_rates(db, {"22K": 6100}))
        assert event_loop.run_until_complete(service.get_rate_table(db)).source == "db"
