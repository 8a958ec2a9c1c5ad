from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from jewelbill.api.routes import api_router
from jewelbill.api.v1 import v1_router
from jewelbill.api.v1.envelope import error, validation_error
from jewelbill.config.settings import settings
from jewelbill.core.db import engine
from jewelbill.core.logging_config import setup_logging
from jewelbill.infrastructure.db.base import Base

# Registers the ORM tables on Base.metadata
import jewelbill.infrastructure.db.models  # noqa: F401

setup_logging()

app = FastAPI(title=settings.APP_NAME, debug=settings.DEBUG)


@app.on_event("startup")
async def startup():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content=error(str(exc.detail)), headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_failed(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content=validation_error(exc.errors()),
    )


app.include_router(api_router)
app.include_router(v1_router)
