# jewelbill/domain/models/billing.py
"""
Domain dataclasses for a jewelry bill.

BillInput is the aggregate root edited during a billing session. BillTotals is
a derived projection and is always recomputed from a BillInput, never stored
on its own.

The portable dict form (``to_dict`` / ``from_dict``) uses camelCase keys so
snapshots written by earlier versions of the shop app decode unchanged.
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

DEFAULT_ITEM_DESCRIPTION = "Item"


class Karat(str, Enum):
    K24 = "24K"
    K22 = "22K"
    K21 = "21K"
    K20 = "20K"
    K19 = "19K"
    K18 = "18K"
    K17 = "17K"
    K16 = "16K"
    K15 = "15K"
    K14 = "14K"
    SILVER = "SILVER"

    @classmethod
    def parse(cls, raw: Any) -> Karat | None:
        """Accept '22K', '22k', '22 K', '22 karat', 'silver'. None if unknown."""
        if isinstance(raw, Karat):
            return raw
        if raw is None:
            return None
        text = str(raw).strip().upper()
        if text == "SILVER":
            return cls.SILVER
        m = re.fullmatch(r"(\d{2})\s*(?:K|KT|KARAT|CARAT)?", text)
        if not m:
            return None
        try:
            return cls(f"{m.group(1)}K")
        except ValueError:
            return None


class MakingChargeMode(str, Enum):
    PERCENT = "PERCENT"
    PER_GM = "PER_GM"
    FIXED = "FIXED"

    @classmethod
    def parse(cls, raw: Any) -> MakingChargeMode | None:
        if isinstance(raw, MakingChargeMode):
            return raw
        if not raw:
            return None
        try:
            return cls(str(raw).strip().upper())
        except ValueError:
            return None


class WastageUnit(str, Enum):
    GRAMS = "g"
    PERCENT = "%"
    AMOUNT = "AMOUNT"


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class NewItem:
    """A piece being sold. ``rate_per_gm`` is captured when the item is built."""

    karat: Karat = Karat.K22
    description: str = DEFAULT_ITEM_DESCRIPTION
    gross_weight_gm: float = 0.0
    stone_weight_gm: float = 0.0
    # Kept on the item for display; pricing does not use wastage.
    wastage_value: float = 0.0
    wastage_unit: WastageUnit = WastageUnit.PERCENT
    stone_cost: float = 0.0
    rate_per_gm: float = 0.0
    making_charge_mode: MakingChargeMode | None = None
    making_charge_value: float | None = None
    hallmark_cost: float = 0.0
    id: str = field(default_factory=_new_id)

    def __post_init__(self) -> None:
        if not (self.description or "").strip():
            self.description = DEFAULT_ITEM_DESCRIPTION

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "description": self.description,
            "karat": self.karat.value,
            "grossWeightGm": self.gross_weight_gm,
            "stoneWeightGm": self.stone_weight_gm,
            "wastageValue": self.wastage_value,
            "wastageUnit": self.wastage_unit.value,
            "stoneCost": self.stone_cost,
            "ratePerGm": self.rate_per_gm,
            "makingChargeMode": self.making_charge_mode.value if self.making_charge_mode else None,
            "makingChargeValue": self.making_charge_value,
            "hallmarkCost": self.hallmark_cost,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NewItem:
        karat = Karat.parse(data.get("karat"))
        if karat is None:
            raise ValueError(f"Unsupported karat: {data.get('karat')!r}")
        try:
            unit = WastageUnit(data.get("wastageUnit") or WastageUnit.PERCENT.value)
        except ValueError:
            unit = WastageUnit.PERCENT
        return cls(
            id=data.get("id") or _new_id(),
            description=data.get("description") or DEFAULT_ITEM_DESCRIPTION,
            karat=karat,
            gross_weight_gm=data.get("grossWeightGm", 0),
            stone_weight_gm=data.get("stoneWeightGm", 0),
            wastage_value=data.get("wastageValue", 0),
            wastage_unit=unit,
            stone_cost=data.get("stoneCost", 0),
            rate_per_gm=data.get("ratePerGm", 0),
            making_charge_mode=MakingChargeMode.parse(data.get("makingChargeMode")),
            making_charge_value=data.get("makingChargeValue"),
            hallmark_cost=data.get("hallmarkCost", 0),
        )


@dataclass
class OldItem:
    """Exchange material returned by the customer; its value is a deduction."""

    description: str = "Old Item"
    weight_gm: float = 0.0
    wastage_gm: float = 0.0
    rate_per_gm: float = 0.0
    id: str = field(default_factory=_new_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "description": self.description,
            "weightGm": self.weight_gm,
            "wastageGm": self.wastage_gm,
            "ratePerGm": self.rate_per_gm,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OldItem:
        return cls(
            id=data.get("id") or _new_id(),
            description=data.get("description") or "Old Item",
            weight_gm=data.get("weightGm", 0),
            wastage_gm=data.get("wastageGm", 0),
            rate_per_gm=data.get("ratePerGm", 0),
        )


@dataclass
class MiscItem:
    description: str = "Misc"
    amount: float = 0.0
    id: str = field(default_factory=_new_id)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "description": self.description, "amount": self.amount}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MiscItem:
        return cls(
            id=data.get("id") or _new_id(),
            description=data.get("description") or "Misc",
            amount=data.get("amount", 0),
        )


@dataclass
class BillInput:
    """Everything needed to price one invoice."""

    customer_name: str = ""
    customer_mobile: str = ""
    customer_address: str = ""
    cgst_pct: float = 0.0
    sgst_pct: float = 0.0
    new_items: list[NewItem] = field(default_factory=list)
    old_items: list[OldItem] = field(default_factory=list)
    misc_items: list[MiscItem] = field(default_factory=list)

    # ---- serialization ----

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the portable camelCase dict used for snapshots."""
        return {
            "customerName": self.customer_name,
            "customerMobile": self.customer_mobile,
            "customerAddress": self.customer_address,
            "cgstPct": self.cgst_pct,
            "sgstPct": self.sgst_pct,
            "newItems": [i.to_dict() for i in self.new_items],
            "oldItems": [i.to_dict() for i in self.old_items],
            "miscItems": [i.to_dict() for i in self.misc_items],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BillInput:
        """Reconstruct from a portable dict. Raises ValueError on unknown karats."""
        return cls(
            customer_name=data.get("customerName") or "",
            customer_mobile=data.get("customerMobile") or "",
            customer_address=data.get("customerAddress") or "",
            cgst_pct=data.get("cgstPct", 0),
            sgst_pct=data.get("sgstPct", 0),
            new_items=[NewItem.from_dict(i) for i in data.get("newItems") or []],
            old_items=[OldItem.from_dict(i) for i in data.get("oldItems") or []],
            misc_items=[MiscItem.from_dict(i) for i in data.get("miscItems") or []],
        )


@dataclass(frozen=True)
class BillTotals:
    new_items_total: float = 0.0
    old_items_total: float = 0.0
    misc_total: float = 0.0
    gross_total: float = 0.0
    cgst_amount: float = 0.0
    sgst_amount: float = 0.0
    net_amount: float = 0.0
    # Same value as net_amount; kept as its own field for API stability.
    grand_total: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return {
            "newItemsTotal": self.new_items_total,
            "oldItemsTotal": self.old_items_total,
            "miscTotal": self.misc_total,
            "grossTotal": self.gross_total,
            "cgstAmount": self.cgst_amount,
            "sgstAmount": self.sgst_amount,
            "netAmount": self.net_amount,
            "grandTotal": self.grand_total,
        }
