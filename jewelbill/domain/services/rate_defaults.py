# jewelbill/domain/services/rate_defaults.py
"""
Hardcoded karat rates, the last-resort fallback when the rate store is empty or
unreachable.
"""

from __future__ import annotations

from jewelbill.domain.models.rate_table import RateTable


def default_rate_table() -> RateTable:
    """Return the hardcoded rate table."""
    return RateTable(
        rates={
            "24K": 10000,
            "22K": 9166.67,
            "20K": 8333.33,
            "18K": 7500,
            "14K": 5833.33,
            "SILVER": 150,
        },
        source="hardcoded",
    )
