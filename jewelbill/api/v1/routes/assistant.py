# jewelbill/api/v1/routes/assistant.py
"""
Shop assistant chat endpoint.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from jewelbill.api.v1.envelope import ok
from jewelbill.api.v1.schemas.assistant import ChatRequest
from jewelbill.core.db import get_db
from jewelbill.domain.services.assistant_service import handle_message

logger = logging.getLogger("api.v1.assistant")

router = APIRouter(prefix="/assistant", tags=["Assistant"])


@router.post("/chat", response_model=dict)
async def chat(
    body: ChatRequest,
    db: AsyncSession = Depends(get_db),
):
    """Answer one message: draft bills, rate updates, summaries and lookups."""
    if not body.text.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Message is empty")
    reply = await handle_message(db, body.text)
    return ok(data=reply.to_dict())
