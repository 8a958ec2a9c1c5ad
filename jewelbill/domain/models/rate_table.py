# jewelbill/domain/models/rate_table.py
"""
Karat rate snapshot.

A RateTable is an immutable karat -> currency-per-gram mapping read once and
passed into draft building / line-item construction. Pricing itself only sees
the rate already captured on each item.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from jewelbill.domain.models.billing import Karat
from jewelbill.domain.services.billing_math import round2

# Purity factors per gold grade (karat / 24), as shown on the rate screen
KARAT_PURITY: dict[str, float] = {
    "10K": 0.4166667,
    "11K": 0.4583333,
    "12K": 0.5,
    "13K": 0.5416667,
    "14K": 0.5833333,
    "15K": 0.625,
    "16K": 0.6666667,
    "17K": 0.7083333,
    "18K": 0.75,
    "19K": 0.7916667,
    "20K": 0.8333333,
    "21K": 0.875,
    "22K": 0.9166667,
    "23K": 0.9583333,
    "24K": 1.0,
}

SILVER = Karat.SILVER.value


def normalize_label(label: Any) -> str:
    """'22k' / Karat.K22 / ' 22K ' -> '22K'. Unknown text is upper-cased as is."""
    if isinstance(label, Karat):
        return label.value
    parsed = Karat.parse(label)
    if parsed is not None:
        return parsed.value
    text = str(label or "").strip().upper().replace(" ", "")
    if text.endswith("KARAT"):
        text = text[: -len("KARAT")] + "K"
    return text


@dataclass(frozen=True)
class RateLookup:
    karat: str
    rate: float
    missing: bool


@dataclass(frozen=True)
class RateTable:
    rates: Mapping[str, float] = field(default_factory=dict)
    source: str = "hardcoded"  # "hardcoded", "db", "derived"

    def __post_init__(self) -> None:
        cleaned: dict[str, float] = {}
        for label, value in dict(self.rates).items():
            try:
                num = float(value)
            except (TypeError, ValueError):
                continue
            if math.isfinite(num):
                cleaned[normalize_label(label)] = num
        object.__setattr__(self, "rates", MappingProxyType(cleaned))

    def lookup(self, karat: Any) -> RateLookup:
        label = normalize_label(karat)
        if label in self.rates:
            return RateLookup(karat=label, rate=self.rates[label], missing=False)
        return RateLookup(karat=label, rate=0.0, missing=True)

    def rate_for(self, karat: Any) -> float:
        """Rate for a karat, 0 when the table has no entry."""
        return self.lookup(karat).rate

    def to_dict(self) -> dict[str, Any]:
        return {"rates": dict(self.rates), "source": self.source}

    def summary(self) -> str:
        """Compact 'K=V' listing used as assistant context."""
        return ", ".join(f"{k}={v:.2f}" for k, v in self.rates.items())


def derive_karat_rates(
    pure_24k: float,
    silver: float,
    overrides: Mapping[str, float] | None = None,
) -> RateTable:
    """Derive every gold grade from the 24K rate, then apply manual overrides."""
    rates = {label: round2(pure_24k * factor) for label, factor in KARAT_PURITY.items()}
    rates[SILVER] = round2(silver)
    for label, value in (overrides or {}).items():
        if value is None:
            continue
        rates[normalize_label(label)] = round2(value)
    return RateTable(rates=rates, source="derived")
