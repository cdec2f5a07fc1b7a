from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from src.api.routes import CORS_HEADERS, router
from src.api.routes_notifications import router as notifications_router
from src.config import ConfigurationError, settings
from src.models.db import init_db

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)


def _init_db_with_retries(max_attempts: int = 8, delay_seconds: int = 3) -> None:
    last_error: Exception | None = None

    for attempt in range(1, max_attempts + 1):
        try:
            init_db()
            logger.info("Database initialization completed", extra={"attempt": attempt})
            return
        except SQLAlchemyError as exc:
            last_error = exc
            logger.exception(
                "Database initialization failed",
                extra={"attempt": attempt, "max_attempts": max_attempts},
            )
            if attempt < max_attempts:
                time.sleep(delay_seconds)

    raise RuntimeError("Database initialization failed after retries") from last_error


@asynccontextmanager
async def lifespan(_app: FastAPI):
    _init_db_with_retries()
    yield


app = FastAPI(
    title=settings.app_name,
    description="Paystack payments and FCM push notifications for the food delivery app",
    version="0.1.0",
    debug=settings.app_debug,
    lifespan=lifespan,
)


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())[1:])
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request body"


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    headers = CORS_HEADERS if request.url.path.startswith("/api/payments") else None
    return JSONResponse(status_code=400, content={"error": _format_validation_errors(exc)}, headers=headers)


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
    logger.error("Configuration error", extra={"path": request.url.path, "error": str(exc)})
    return JSONResponse(status_code=500, content={"error": str(exc)})


app.include_router(router)
app.include_router(notifications_router)


def main() -> None:
    uvicorn.run("src.app:app", host=settings.app_host, port=settings.app_port)
