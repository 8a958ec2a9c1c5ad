# jewelbill/domain/services/assistant_service.py
"""
Shop assistant: routes a chat message to one local intent.

Intent precedence:
1. Draft bill        ("generate bill ... 22K 5g ring ...")
2. Set rate          ("set 22K to 6100")
3. Monthly summary   ("summary for 2026-03", "report this month")
4. Compare months    ("compare this month with last month")
5. Purchases by name ("find all Ravi purchases above 50000 this year")
6. Purchases by mobile
7. Gemini fallback   (only when an API key is configured)
8. Default help text

Local answers never depend on Gemini. When it is configured it may reword
a draft or summary reply, and any failure there falls back to the local text.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from jewelbill.config.settings import settings
from jewelbill.domain.models.rate_table import normalize_label
from jewelbill.domain.services.bill_draft_parser import build_bill_draft
from jewelbill.domain.services.billing_math import format_inr
from jewelbill.domain.services.monthly_report import (
    build_monthly_report,
    compare_months,
    previous_month,
)
from jewelbill.domain.services.rate_service import rate_service
from jewelbill.domain.services.snapshot_codec import snapshot_to_share_param
from jewelbill.infrastructure.db.repositories.customer_repository import CustomerRepository
from jewelbill.infrastructure.db.repositories.invoice_repository import InvoiceRepository
from jewelbill.infrastructure.external import gemini_client

logger = logging.getLogger("assistant_service")

DEFAULT_HELP = "I can help with rates, monthly summaries, or generate a draft bill from a prompt."
PARSE_FAILURE = "Couldn't parse items. Try: '2x ring each 2g 18K @6000, MC 15%, HM 100'"
DRAFT_NEEDS_CUSTOMER = "Draft bill prepared. Please provide customer name and mobile, then Open Billing."
DRAFT_READY = "Draft bill prepared. Click Open Billing to review."

NAME_PURCHASES_LIMIT = 5
MOBILE_PURCHASES_LIMIT = 10

MONTH_NAMES = (
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
)

DRAFT_VERB_RE = re.compile(r"\b(generate|create)\b", re.IGNORECASE)
DRAFT_NOUN_RE = re.compile(r"\b(bill|invoice)\b", re.IGNORECASE)
SET_RATE_RE = re.compile(
    r"(set|update)\s+(?:rate\s+for\s+)?((?:\d{2})\s*(?:karat|k)|\d{2}K|SILVER)\s*(?:to|=)\s*(\d+(?:\.\d+)?)",
    re.IGNORECASE,
)
SUMMARY_RE = re.compile(r"\b(summary|summarise|summarize|monthly|report|reports)\b", re.IGNORECASE)
COMPARE_RE = re.compile(r"\bcompare\b", re.IGNORECASE)
MONTH_WORD_RE = re.compile(r"\bmonths?\b", re.IGNORECASE)
YEAR_MONTH_RE = re.compile(r"\b(\d{4})[-/](\d{1,2})\b")
THIS_MONTH_RE = re.compile(r"\b(this|current)\s+month\b", re.IGNORECASE)
NAME_PURCHASES_RE = re.compile(
    r"find\s+all\s+([a-zA-Z][a-zA-Z\s'.-]{1,60})\s+purchases\s+above\s+(\d+(?:\.\d+)?)\s*(?:this\s+year|(\d{4}))?",
    re.IGNORECASE,
)
MOBILE_PURCHASES_RES = (
    re.compile(r"find\s+all\s+purchases\s+by\s+(?:mobile|number|phone)\s*[:\-]?\s*(\d[\d\s-]{6,})", re.IGNORECASE),
    re.compile(r"purchases\s+for\s+mobile\s*[:\-]?\s*(\d[\d\s-]{6,})", re.IGNORECASE),
    re.compile(r"by\s+mobile\s*(\d[\d\s-]{6,})", re.IGNORECASE),
)

_GOOGLE_AFTER_RATE_RE = re.compile(r"\brate\b[^\n]{0,20}\bgoogle\b", re.IGNORECASE)
_GOOGLE_BEFORE_RATE_RE = re.compile(r"\bgoogle\b[^\n]{0,20}\brate\b", re.IGNORECASE)
_GOOGLE_RE = re.compile(r"google", re.IGNORECASE)


@dataclass
class AssistantReply:
    text: str
    intent: str = "help"
    bill: dict[str, Any] | None = None
    need_customer: bool | None = None
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"text": self.text}
        if self.bill is not None:
            out["bill"] = self.bill
            out["needCustomer"] = bool(self.need_customer)
        if self.warnings:
            out["warnings"] = self.warnings
        return out


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------

def _to_gold(m: re.Match) -> str:
    return _GOOGLE_RE.sub("gold", m.group(0))


def normalize_text(raw: str) -> str:
    """Fix the voice-typing slip 'google rate' -> 'gold rate'."""
    text = (raw or "").strip()
    text = _GOOGLE_AFTER_RATE_RE.sub(_to_gold, text)
    text = _GOOGLE_BEFORE_RATE_RE.sub(_to_gold, text)
    return text


def parse_month(text: str, today: date | None = None) -> tuple[int, int] | None:
    """'2026-03', 'this month', 'march' -> (year, month). Month names use the current year."""
    today = today or date.today()
    m = YEAR_MONTH_RE.search(text)
    if m:
        month = int(m.group(2))
        if 1 <= month <= 12:
            return int(m.group(1)), month
    if THIS_MONTH_RE.search(text):
        return today.year, today.month
    lower = text.lower()
    for idx, name in enumerate(MONTH_NAMES, start=1):
        if re.search(rf"\b{name}\b", lower):
            return today.year, idx
    return None


def parse_rate_update(text: str) -> tuple[str, float] | None:
    m = SET_RATE_RE.search(text)
    if not m:
        return None
    label = normalize_label(m.group(2))
    if label != "SILVER" and not re.fullmatch(r"\d{2}K", label):
        return None
    return label, float(m.group(3))


def detect_intent(text: str) -> str:
    if DRAFT_VERB_RE.search(text) and DRAFT_NOUN_RE.search(text):
        return "draft_bill"
    if SET_RATE_RE.search(text):
        return "set_rate"
    if SUMMARY_RE.search(text):
        return "monthly_summary"
    if COMPARE_RE.search(text) and MONTH_WORD_RE.search(text):
        return "compare_months"
    if NAME_PURCHASES_RE.search(text):
        return "purchases_by_name"
    if any(r.search(text) for r in MOBILE_PURCHASES_RES):
        return "purchases_by_mobile"
    return "fallback"


def _purchase_line(invoice) -> str:
    link = ""
    if invoice.snapshot:
        link = f" (open: /invoice?data={snapshot_to_share_param(invoice.snapshot)})"
    return f"#{invoice.invoice_no} on {invoice.issued_at:%d/%m/%Y} - {format_inr(invoice.total)}{link}"


# ---------------------------------------------------------------------------
# Intent handlers
# ---------------------------------------------------------------------------

async def _draft_bill(db: AsyncSession, text: str) -> AssistantReply:
    rates = await rate_service.get_rate_table(db)
    draft = build_bill_draft(text, rates, settings.DEFAULT_CGST_PCT, settings.DEFAULT_SGST_PCT)
    if not draft.has_items:
        return AssistantReply(text=PARSE_FAILURE, intent="draft_bill", warnings=draft.warnings)

    bill = draft.bill
    local = DRAFT_NEEDS_CUSTOMER if draft.need_customer else DRAFT_READY
    prompt = (
        f"{text}\n\nDraft bill items parsed: {len(bill.new_items)} new, "
        f"{len(bill.old_items)} old, {len(bill.misc_items)} misc. "
        f"{'Customer missing.' if draft.need_customer else 'Customer provided.'}\n"
        f"Rates: {rates.summary()}\nRespond concisely."
    )
    reply = await gemini_client.generate_reply(prompt, fallback=local)
    return AssistantReply(
        text=reply,
        intent="draft_bill",
        bill=bill.to_dict(),
        need_customer=draft.need_customer,
        warnings=draft.warnings,
    )


async def _set_rate(db: AsyncSession, text: str) -> AssistantReply:
    parsed = parse_rate_update(text)
    if parsed is None:
        return AssistantReply(text=DEFAULT_HELP)
    karat, value = parsed
    await rate_service.save_rates(db, {karat: value}, source="assistant")
    return AssistantReply(text=f"Updated rate: {karat} = ₹{value:.2f}/g", intent="set_rate")


async def _monthly_summary(db: AsyncSession, text: str, today: date) -> AssistantReply:
    year, month = parse_month(text, today) or (today.year, today.month)
    report = await build_monthly_report(db, year, month)
    local = report.summary_text()
    k = report.kpis
    compact = {
        "month": report.label,
        "invoiceCount": k.invoice_count,
        "gross": k.gross,
        "oldExchange": k.old_exchange,
        "tax": k.tax,
        "net": k.net,
    }
    rates = await rate_service.get_rate_table(db)
    prompt = f"{text}\nRates: {rates.summary()}\nData: {json.dumps(compact)}\nSummarize in 3 bullets."
    reply = await gemini_client.generate_reply(prompt, fallback=local)
    return AssistantReply(text=reply, intent="monthly_summary")


async def _compare_months(db: AsyncSession, text: str, today: date) -> AssistantReply:
    year, month = parse_month(text, today) or (today.year, today.month)
    prev_year, prev_month = previous_month(year, month)
    current = await build_monthly_report(db, year, month)
    previous = await build_monthly_report(db, prev_year, prev_month)
    return AssistantReply(text=compare_months(current, previous).text(), intent="compare_months")


async def _purchases_by_name(db: AsyncSession, text: str, today: date) -> AssistantReply:
    m = NAME_PURCHASES_RE.search(text)
    name = m.group(1).strip()
    min_total = float(m.group(2))
    year = int(m.group(3)) if m.group(3) else today.year

    rows = await InvoiceRepository(db).search_purchases_by_name(name, min_total, year)
    if not rows:
        return AssistantReply(
            text=f"No purchases found for {name} above {format_inr(min_total)} in {year}.",
            intent="purchases_by_name",
        )
    shown = rows[:NAME_PURCHASES_LIMIT]
    lines = "\n- ".join(_purchase_line(inv) for inv, _customer in shown)
    out = f"Found {len(rows)} purchases for {name} above {format_inr(min_total)} in {year}:\n- {lines}"
    if len(rows) > len(shown):
        out += f"\nShowing {len(shown)} of {len(rows)}."
    return AssistantReply(text=out, intent="purchases_by_name")


async def _purchases_by_mobile(db: AsyncSession, text: str) -> AssistantReply:
    m = next(r.search(text) for r in MOBILE_PURCHASES_RES if r.search(text))
    mobile = re.sub(r"\D+", "", m.group(1))

    customer = await CustomerRepository(db).get_by_mobile(mobile)
    invoices = await InvoiceRepository(db).list_for_customer(mobile)
    if not invoices:
        return AssistantReply(text=f"No purchases found for {mobile}.", intent="purchases_by_mobile")

    header = f"Purchases for {customer.name} ({mobile}):" if customer and customer.name else f"Purchases for {mobile}:"
    lines = "\n- ".join(_purchase_line(inv) for inv in invoices[:MOBILE_PURCHASES_LIMIT])
    return AssistantReply(text=f"{header}\n- {lines}", intent="purchases_by_mobile")


async def _fallback(db: AsyncSession, text: str) -> AssistantReply:
    if not gemini_client.is_configured():
        return AssistantReply(text=DEFAULT_HELP)
    rates = await rate_service.get_rate_table(db)
    web_query = re.search(r"\b(web|online|google)\b", text, re.IGNORECASE)
    prompt = text if web_query else f"{text}\n\nRates: {rates.summary()}"
    reply = await gemini_client.generate_reply(prompt, fallback=DEFAULT_HELP, max_output_tokens=512)
    return AssistantReply(text=reply, intent="llm" if reply != DEFAULT_HELP else "help")


async def handle_message(db: AsyncSession, raw_text: str, today: date | None = None) -> AssistantReply:
    """Answer one chat message. Raises ValueError for empty text."""
    text = normalize_text(raw_text)
    if not text:
        raise ValueError("empty message")
    today = today or date.today()

    intent = detect_intent(text)
    logger.info("Assistant intent=%s", intent)

    if intent == "draft_bill":
        return await _draft_bill(db, text)
    if intent == "set_rate":
        return await _set_rate(db, text)
    if intent == "monthly_summary":
        return await _monthly_summary(db, text, today)
    if intent == "compare_months":
        return await _compare_months(db, text, today)
    if intent == "purchases_by_name":
        return await _purchases_by_name(db, text, today)
    if intent == "purchases_by_mobile":
        return await _purchases_by_mobile(db, text)
    return await _fallback(db, text)
