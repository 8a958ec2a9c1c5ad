# jewelbill/infrastructure/external/gemini_client.py
"""
Google Gemini `generateContent` integration for assistant wording.

Requires environment variables:
    GEMINI_API_KEY (or GOOGLE_API_KEY)   API key
    GEMINI_MODEL                         model name (default: gemini-2.0-flash)

If not configured, or if the call fails, returns the fallback text.
"""

import logging
import re

import httpx

from jewelbill.config.settings import settings

logger = logging.getLogger("gemini_client")

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"

SYSTEM_INSTRUCTION = (
    "You are a helpful assistant for a small jewelry shop's billing app. "
    "Always assume the domain is gold/silver jewelry billing.\n"
    "- When the user asks for rates, refer to the provided 'Rates: ...' context.\n"
    "- When asked to summarise months, use the provided KPIs; do not ask for more data.\n"
    "- When generating bills, acknowledge parsed items and mention missing customer details if any.\n"
    "- Be concise and do not interpret 'gold' as 'Google'.\n"
    "- Respond in plain text. Do not output code blocks or tool call snippets."
)

_CODE_FENCE_RE = re.compile(r"```[\s\S]*?```")
_TOOL_CODE_TAIL_RE = re.compile(r"\s*tool_code[\s\S]*$", re.IGNORECASE)


def is_configured() -> bool:
    return bool(settings.GEMINI_API_KEY)


def clean_llm_text(text: str) -> str:
    """Drop code fences and trailing tool_code blocks."""
    text = _CODE_FENCE_RE.sub("", text or "")
    text = _TOOL_CODE_TAIL_RE.sub("", text)
    return text.strip()


def _extract_text(data: dict) -> str:
    candidates = data.get("candidates") or []
    if not candidates:
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return " ".join(p.get("text", "") for p in parts if isinstance(p, dict))


async def generate_reply(
    prompt: str,
    *,
    fallback: str,
    max_output_tokens: int = 256,
) -> str:
    """Ask Gemini for a reply.

    Parameters
    ----------
    prompt : str
        User text plus any compact context (rates, KPIs).
    fallback : str
        Locally computed reply, returned whenever Gemini is unavailable.

    Returns
    -------
    str
        Cleaned model text, or ``fallback``.
    """
    if not is_configured():
        return fallback

    url = f"{GEMINI_BASE_URL}/{settings.GEMINI_MODEL}:generateContent"
    payload = {
        "systemInstruction": {"role": "system", "parts": [{"text": SYSTEM_INSTRUCTION}]},
        "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        "generationConfig": {"temperature": 0.2, "maxOutputTokens": max_output_tokens},
    }

    try:
        async with httpx.AsyncClient(timeout=settings.GEMINI_TIMEOUT) as client:
            resp = await client.post(url, params={"key": settings.GEMINI_API_KEY}, json=payload)
            resp.raise_for_status()
            text = clean_llm_text(_extract_text(resp.json()))
    except httpx.HTTPStatusError as e:
        logger.warning("Gemini HTTP %s: %s", e.response.status_code, e.response.text[:200])
        return fallback
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("Gemini request failed: %s", e)
        return fallback

    return text or fallback
