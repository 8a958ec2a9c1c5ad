import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from jewelbill.config.settings import settings
from jewelbill.core.db import get_db

logger = logging.getLogger("health")

router = APIRouter()


@router.get("/")
async def health():
    return {"status": "ok", "message": f"{settings.APP_NAME} running"}


@router.get("/health/db")
async def health_db(db: AsyncSession = Depends(get_db)):
    """Round-trip a trivial query; 503 when the database is unreachable."""
    try:
        await db.execute(text("SELECT 1"))
    except Exception as exc:
        logger.warning("Database health check failed: %s", exc)
        return JSONResponse(content={"status": "down", "database": str(exc)}, status_code=503)
    return {"status": "ok", "database": "up"}
