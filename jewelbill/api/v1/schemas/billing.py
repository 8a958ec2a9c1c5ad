# jewelbill/api/v1/schemas/billing.py
"""Request schemas for bills and invoices (camelCase on the wire)."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from jewelbill.domain.models.billing import BillInput, Karat
from jewelbill.domain.services.billing_math import to_amount


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


def _lenient_amount(v: Any) -> float | None:
    """Blank or non-numeric form input reads as 0 so a half-filled bill still totals."""
    if v is None:
        return None
    return to_amount(v)


class NewItemIn(_CamelModel):
    id: str | None = None
    description: str = "Item"
    karat: str
    gross_weight_gm: float | None = 0
    stone_weight_gm: float | None = 0
    wastage_value: float | None = 0
    wastage_unit: str | None = "%"
    stone_cost: float | None = 0
    rate_per_gm: float | None = 0
    making_charge_mode: str | None = None
    making_charge_value: float | None = None
    hallmark_cost: float | None = 0

    @field_validator("karat")
    @classmethod
    def _known_karat(cls, v: str) -> str:
        karat = Karat.parse(v)
        if karat is None:
            raise ValueError(f"unsupported karat {v!r}")
        return karat.value

    @field_validator(
        "gross_weight_gm",
        "stone_weight_gm",
        "wastage_value",
        "stone_cost",
        "rate_per_gm",
        "making_charge_value",
        "hallmark_cost",
        mode="before",
    )
    @classmethod
    def _amounts(cls, v: Any) -> float | None:
        return _lenient_amount(v)


class OldItemIn(_CamelModel):
    id: str | None = None
    description: str = "Old Item"
    weight_gm: float | None = 0
    wastage_gm: float | None = 0
    rate_per_gm: float | None = 0

    @field_validator("weight_gm", "wastage_gm", "rate_per_gm", mode="before")
    @classmethod
    def _amounts(cls, v: Any) -> float | None:
        return _lenient_amount(v)


class MiscItemIn(_CamelModel):
    id: str | None = None
    description: str = "Misc"
    amount: float | None = 0

    @field_validator("amount", mode="before")
    @classmethod
    def _amounts(cls, v: Any) -> float | None:
        return _lenient_amount(v)


class BillIn(_CamelModel):
    customer_name: str = ""
    customer_mobile: str = ""
    customer_address: str = ""
    cgst_pct: float | None = 0
    sgst_pct: float | None = 0
    new_items: list[NewItemIn] = Field(default_factory=list)
    old_items: list[OldItemIn] = Field(default_factory=list)
    misc_items: list[MiscItemIn] = Field(default_factory=list)

    @field_validator("cgst_pct", "sgst_pct", mode="before")
    @classmethod
    def _percents(cls, v: Any) -> float | None:
        return _lenient_amount(v)

    def to_domain(self) -> BillInput:
        return BillInput.from_dict(self.model_dump(by_alias=True))


class InvoiceCreate(_CamelModel):
    """Submit a bill as a numbered invoice."""

    bill: BillIn
    color: str | None = Field(default=None, max_length=20)
    invoice_no: int | None = Field(default=None, description="Explicit number; omitted or <= 0 assigns the next one")
    issued_at: datetime | None = None
