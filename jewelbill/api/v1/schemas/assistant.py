# jewelbill/api/v1/schemas/assistant.py
"""Schemas for the assistant chat endpoint."""

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    text: str = Field(default="", max_length=2000, description="Free-text message from the shop user")
