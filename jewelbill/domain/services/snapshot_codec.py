# jewelbill/domain/services/snapshot_codec.py
"""
Snapshot codec for submitted bills.

The full BillInput is stored as JSON next to the invoice so a historical
invoice can be redisplayed by decoding it and recomputing totals. The same
JSON, base64-encoded, is used as the share parameter of "open invoice" links.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging

from jewelbill.domain.models.billing import BillInput

logger = logging.getLogger("snapshot_codec")


def encode_snapshot(bill: BillInput) -> str:
    return json.dumps(bill.to_dict(), ensure_ascii=False, separators=(",", ":"))


def decode_snapshot(raw: str | bytes | None) -> BillInput | None:
    """Decode a stored snapshot. Returns None for anything that is not a bill."""
    if not raw:
        return None
    try:
        data = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("Snapshot is not valid JSON")
        return None
    if not isinstance(data, dict):
        return None
    try:
        return BillInput.from_dict(data)
    except (TypeError, ValueError, AttributeError) as exc:
        logger.warning("Snapshot could not be decoded: %s", exc)
        return None


def encode_share_param(bill: BillInput) -> str:
    return snapshot_to_share_param(encode_snapshot(bill))


def snapshot_to_share_param(snapshot: str) -> str:
    """Base64 of the UTF-8 snapshot JSON."""
    return base64.b64encode(snapshot.encode("utf-8")).decode("ascii")


def decode_share_param(param: str | None) -> BillInput | None:
    if not param:
        return None
    try:
        raw = base64.b64decode(param, validate=True).decode("utf-8")
    except (binascii.Error, ValueError):
        return None
    return decode_snapshot(raw)
