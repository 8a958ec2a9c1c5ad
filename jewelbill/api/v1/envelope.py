# jewelbill/api/v1/envelope.py
"""
Response envelope shared by the billing, rate, customer, report and
assistant endpoints.

    {
        "status": "ok" | "error",
        "data": <payload>,
        "message": <optional string>,
        "errors": <optional list of {"field", "message"} dicts>
    }

Field paths in `errors` use the camelCase names of the request body
(`bill.newItems.0.karat`), so the billing form can mark the offending input.
"""

from __future__ import annotations

from typing import Any, Generic, Iterable, TypeVar

from pydantic import BaseModel

T = TypeVar("T")

# Leading loc parts FastAPI adds for the request section
_LOC_SECTIONS = {"body", "query", "path", "header"}


class ApiResponse(BaseModel, Generic[T]):
    status: str = "ok"
    data: T | None = None
    message: str | None = None
    errors: list[dict[str, Any]] | None = None


class PaginatedData(BaseModel, Generic[T]):
    """One page of a customer listing."""

    items: list[T]
    total: int
    limit: int
    offset: int
    has_more: bool


def ok(data: Any = None, message: str | None = None) -> dict:
    return ApiResponse(status="ok", data=data, message=message).model_dump()


def error(message: str, errors: list[dict[str, Any]] | None = None, status: str = "error") -> dict:
    return ApiResponse(status=status, message=message, errors=errors).model_dump()


def paginated(items: list, total: int, limit: int, offset: int) -> dict:
    page = PaginatedData(
        items=items,
        total=total,
        limit=limit,
        offset=offset,
        has_more=(offset + limit) < total,
    )
    return ApiResponse(status="ok", data=page).model_dump()


def field_errors(details: Iterable[dict[str, Any]]) -> list[dict[str, str]]:
    """Flatten pydantic error details into {"field": "bill.newItems.0.karat", "message": ...}."""
    out: list[dict[str, str]] = []
    for detail in details:
        loc = list(detail.get("loc") or ())
        if loc and loc[0] in _LOC_SECTIONS:
            loc = loc[1:]
        out.append({
            "field": ".".join(str(part) for part in loc) or "body",
            "message": str(detail.get("msg", "invalid value")),
        })
    return out


def validation_error(details: Iterable[dict[str, Any]]) -> dict:
    """Envelope for a rejected request body (HTTP 422)."""
    return error("Invalid request", errors=field_errors(details))
