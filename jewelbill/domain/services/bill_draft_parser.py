# jewelbill/domain/services/bill_draft_parser.py
"""
Free-text -> draft bill.

Each rule below extracts one kind of fragment from the prompt. Rules run in a
fixed order and old-item matches claim their text span, so later rules (misc
items, new items, the explicit "@rate") skip text that already belongs to an
exchange line such as "old chain 4g @ 5800".

The result is always a best-effort BillInput. Nothing here raises on odd
input; problems are reported through BillDraft.warnings.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from jewelbill.domain.models.billing import (
    BillInput,
    Karat,
    MakingChargeMode,
    MiscItem,
    NewItem,
    OldItem,
    WastageUnit,
)
from jewelbill.domain.models.rate_table import RateTable

DEFAULT_DRAFT_KARAT = "18K"
MIN_MOBILE_DIGITS = 8

CUSTOMER_INLINE_RE = re.compile(r"customer\s*:\s*([^\n,]+?)\s+(\d{8,15})", re.IGNORECASE)
CUSTOMER_FOR_RE = re.compile(r"\bfor\s+([A-Za-z][A-Za-z\s'.-]{1,60})\b", re.IGNORECASE)
MOBILE_RE = re.compile(r"\bmobile(?:\s+number)?\s*[:\-]?\s*(\d{8,15})\b", re.IGNORECASE)

OLD_ITEM_RE = re.compile(
    r"(old|exchange)\s*:?\s*([a-zA-Z ]+)?\s*(\d+(?:\.\d+)?)\s*g(?:m|ram)?\s*@\s*(\d+(?:\.\d+)?)",
    re.IGNORECASE,
)
MISC_ITEM_RE = re.compile(r"(misc|service|charge)\s*:?\s*([a-zA-Z ]+)?\s*(\d+(?:\.\d+)?)", re.IGNORECASE)
# "making charge 500" / "hallmark charge 100" are not misc lines
MISC_BLOCKER_RE = re.compile(r"(?:making|mc|hallmark|hm)\s*$", re.IGNORECASE)

# "22K 5g ring" / "22 karat 5 gram chain"
KARAT_ITEM_RE = re.compile(
    r"(\d{2})\s*(?:karat|k)\b\s*(\d+(?:\.\d+)?)\s*g(?:m|ram)?\s*([a-zA-Z ]+)",
    re.IGNORECASE,
)
# "2x rings each 2g 18K"
QUANTITY_ITEM_RE = re.compile(
    r"(\d+)\s*x\s*([a-zA-Z ]+)\s*(each\s*)?(\d+(?:\.\d+)?)\s*g(?:m|ram)?\s*(\d{2}K|SILVER)?",
    re.IGNORECASE,
)

MAKING_PCT_RE = re.compile(r"(?:making|mc)\s*(\d+(?:\.\d+)?)\s*%", re.IGNORECASE)
HALLMARK_RE = re.compile(r"(?:hallmark|hm)\s*(\d+(?:\.\d+)?)", re.IGNORECASE)
EXPLICIT_RATE_RE = re.compile(r"@\s*(\d+(?:\.\d+)?)")

_DESCRIPTION_CUT_RE = re.compile(
    r"\s(?:for|customer|mobile|making|mc|hallmark|hm|each|with|and)\b|[,:]|-\s",
    re.IGNORECASE,
)
_NAME_MOBILE_TAIL_RE = re.compile(
    r"\b(?:and\s+)?mobile(?:\s+number)?[\s:,-]*[\d\s-]*$",
    re.IGNORECASE,
)
_NAME_MOBILE_INLINE_RE = re.compile(
    r"\b(?:and\s+)?mobile(?:\s+number)?[\s:,-]*\d+[\d\s-]*",
    re.IGNORECASE,
)


Span = tuple[int, int]


@dataclass
class DraftNewItem:
    description: str
    weight_gm: float
    karat: str


@dataclass
class ParsedDraft:
    """Raw fragments pulled out of the prompt, before rates are applied."""

    customer_name: str = ""
    customer_mobile: str = ""
    new_items: list[DraftNewItem] = field(default_factory=list)
    old_items: list[OldItem] = field(default_factory=list)
    misc_items: list[MiscItem] = field(default_factory=list)
    making_pct: float | None = None
    hallmark: float | None = None
    explicit_rate: float | None = None
    claimed: list[Span] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass
class BillDraft:
    bill: BillInput
    need_customer: bool
    warnings: list[str] = field(default_factory=list)

    @property
    def has_items(self) -> bool:
        return bool(self.bill.new_items)


# ---------------------------------------------------------------------------
# Cleaning helpers
# ---------------------------------------------------------------------------

def clean_description(raw: str, default: str = "Item") -> str:
    """Cut at customer/charge phrases and keep at most three words."""
    text = raw or ""
    m = _DESCRIPTION_CUT_RE.search(text)
    if m:
        text = text[: m.start()]
    words = text.split()
    return " ".join(words[:3]) or default


def clean_customer_name(raw: str) -> str:
    name = (raw or "").strip().strip('"').strip()
    name = _NAME_MOBILE_INLINE_RE.sub("", name)
    name = _NAME_MOBILE_TAIL_RE.sub("", name)
    return " ".join(name.split())


def clean_mobile(raw: str) -> str:
    return re.sub(r"\D+", "", raw or "")


def _inside(pos: int, spans: list[Span]) -> bool:
    return any(start <= pos < end for start, end in spans)


# ---------------------------------------------------------------------------
# Rules, in order
# ---------------------------------------------------------------------------

def extract_customer(text: str, draft: ParsedDraft) -> None:
    m = CUSTOMER_INLINE_RE.search(text)
    if m:
        name, mobile = m.group(1), m.group(2)
    else:
        name_m = CUSTOMER_FOR_RE.search(text)
        mobile_m = MOBILE_RE.search(text)
        if not (name_m and mobile_m):
            return
        name, mobile = name_m.group(1), mobile_m.group(1)
    draft.customer_name = clean_customer_name(name)
    draft.customer_mobile = clean_mobile(mobile)


def extract_old_items(text: str, draft: ParsedDraft) -> None:
    for m in OLD_ITEM_RE.finditer(text):
        draft.old_items.append(
            OldItem(
                description=(m.group(2) or "").strip() or "Old Item",
                weight_gm=float(m.group(3)),
                wastage_gm=0.0,
                rate_per_gm=float(m.group(4)),
            )
        )
        draft.claimed.append(m.span())


def extract_misc_items(text: str, draft: ParsedDraft) -> None:
    for m in MISC_ITEM_RE.finditer(text):
        if _inside(m.start(), draft.claimed):
            continue
        if MISC_BLOCKER_RE.search(text[: m.start()]):
            continue
        draft.misc_items.append(
            MiscItem(
                description=(m.group(2) or "").strip() or "Misc",
                amount=float(m.group(3)),
            )
        )


def extract_new_items(text: str, draft: ParsedDraft) -> None:
    """
    The karat-first form wins. The quantity form is only tried when it found
    nothing, so "22K" is never read as a quantity of 22.
    """
    for m in KARAT_ITEM_RE.finditer(text):
        if _inside(m.start(), draft.claimed):
            continue
        draft.new_items.append(
            DraftNewItem(
                description=clean_description(m.group(3)),
                weight_gm=float(m.group(2)),
                karat=f"{m.group(1)}K",
            )
        )
    if draft.new_items:
        return

    for m in QUANTITY_ITEM_RE.finditer(text):
        if _inside(m.start(), draft.claimed):
            continue
        description = clean_description(m.group(2))
        weight = float(m.group(4))
        karat = (m.group(5) or DEFAULT_DRAFT_KARAT).upper()
        for _ in range(int(m.group(1))):
            draft.new_items.append(DraftNewItem(description, weight, karat))


def extract_charges(text: str, draft: ParsedDraft) -> None:
    mc = MAKING_PCT_RE.search(text)
    if mc:
        draft.making_pct = float(mc.group(1))
    hm = HALLMARK_RE.search(text)
    if hm:
        draft.hallmark = float(hm.group(1))


def extract_explicit_rate(text: str, draft: ParsedDraft) -> None:
    for m in EXPLICIT_RATE_RE.finditer(text):
        if not _inside(m.start(), draft.claimed):
            draft.explicit_rate = float(m.group(1))
            return


RULES = (
    extract_customer,
    extract_old_items,
    extract_misc_items,
    extract_new_items,
    extract_charges,
    extract_explicit_rate,
)


def parse_draft(text: str) -> ParsedDraft:
    draft = ParsedDraft()
    for rule in RULES:
        rule(text or "", draft)
    return draft


# ---------------------------------------------------------------------------
# Draft -> BillInput
# ---------------------------------------------------------------------------

def build_bill_draft(
    text: str,
    rates: RateTable,
    cgst_pct: float,
    sgst_pct: float,
) -> BillDraft:
    """
    Build a draft bill from free text.

    Rates are captured per item: the explicit "@rate" when given, otherwise
    the karat's entry in `rates`. A missing entry leaves the rate at 0 and
    adds a warning.
    """
    parsed = parse_draft(text)
    warnings = list(parsed.warnings)
    new_items: list[NewItem] = []

    for d in parsed.new_items:
        karat = Karat.parse(d.karat)
        if karat is None:
            warnings.append(f"Unsupported karat {d.karat} for '{d.description}', item skipped.")
            continue
        if parsed.explicit_rate is not None:
            rate = parsed.explicit_rate
        else:
            found = rates.lookup(karat)
            rate = found.rate
            if found.missing:
                warnings.append(f"No rate set for {karat.value}; '{d.description}' priced at 0/g.")
        new_items.append(
            NewItem(
                description=d.description,
                karat=karat,
                gross_weight_gm=d.weight_gm,
                stone_weight_gm=0.0,
                wastage_value=0.0,
                wastage_unit=WastageUnit.PERCENT,
                stone_cost=0.0,
                rate_per_gm=rate,
                making_charge_mode=MakingChargeMode.PERCENT if parsed.making_pct is not None else MakingChargeMode.FIXED,
                making_charge_value=parsed.making_pct if parsed.making_pct is not None else 0.0,
                hallmark_cost=parsed.hallmark or 0.0,
            )
        )

    bill = BillInput(
        customer_name=parsed.customer_name,
        customer_mobile=parsed.customer_mobile,
        customer_address="",
        cgst_pct=cgst_pct,
        sgst_pct=sgst_pct,
        new_items=new_items,
        old_items=parsed.old_items,
        misc_items=parsed.misc_items,
    )
    need_customer = not (
        parsed.customer_name and len(parsed.customer_mobile) >= MIN_MOBILE_DIGITS
    )
    return BillDraft(bill=bill, need_customer=need_customer, warnings=warnings)
