# jewelbill/infrastructure/audit.py
"""
Audit logger for shop actions that change money or prices.

Each entry is one structured log line on the "audit" logger so it can be
picked out of the normal application log.
"""

import logging
from datetime import datetime, timezone
from typing import Any

logger = logging.getLogger("audit")


def log_invoice_submitted(
    *,
    invoice_id: str,
    invoice_no: int,
    color: str,
    customer_mobile: str = "",
    total: float = 0.0,
) -> None:
    """Log a stored invoice."""
    logger.info(
        "INVOICE_SUBMITTED id=%s number=%s color=%s mobile=%s total=%.2f time=%s",
        invoice_id,
        invoice_no,
        color,
        customer_mobile,
        total,
        datetime.now(timezone.utc).isoformat(),
    )


def log_rates_changed(
    rates: dict[str, float],
    *,
    source: str = "manual",
    details: dict[str, Any] | None = None,
) -> None:
    """Log a rate table update (manual edit, derived table, assistant)."""
    logger.info(
        "RATES_CHANGED source=%s rates=%s time=%s details=%s",
        source,
        rates,
        datetime.now(timezone.utc).isoformat(),
        details or {},
    )
