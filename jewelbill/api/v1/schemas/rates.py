# jewelbill/api/v1/schemas/rates.py
"""Schemas for the karat rate endpoints."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class RatesUpdate(BaseModel):
    """Karat label -> rate per gram. Values are validated by the rate service."""

    rates: dict[str, Any] = Field(default_factory=dict)


class RatesDerive(BaseModel):
    """Derive every gold grade from the pure 24K rate."""

    pure_24k: float = Field(gt=0, alias="pure24k")
    silver: float = Field(default=0, ge=0)
    overrides: dict[str, float] | None = None
    save: bool = False

    model_config = ConfigDict(populate_by_name=True)
