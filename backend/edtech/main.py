"""
Edtech AI FastAPI Application Entry Point.

Run with: uvicorn edtech.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from edtech.config import get_settings
from edtech.api.routes import admin, chat, documents, events, profile
from edtech.db.session import is_remote_available
from edtech.services.errors import (
    EdtechError,
    ExtractionError,
    NotFoundError,
    PermissionDeniedError,
    QuotaExceededError,
    SetupRequiredError,
)

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

_ERROR_STATUS: dict[type[EdtechError], int] = {
    SetupRequiredError: status.HTTP_503_SERVICE_UNAVAILABLE,
    QuotaExceededError: status.HTTP_403_FORBIDDEN,
    PermissionDeniedError: status.HTTP_403_FORBIDDEN,
    ExtractionError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup/shutdown."""
    # Startup: decide the backing store once for the process
    is_remote_available()
    if not settings.anthropic_api_key:
        logger.warning("ANTHROPIC_API_KEY is not set; chat requests will return 'setup required'")
    yield
    # Shutdown


app = FastAPI(
    title=settings.app_name,
    description="Educator assistant API: documents, AI chat and content generation",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(EdtechError)
async def edtech_error_handler(request: Request, exc: EdtechError) -> JSONResponse:
    """Map domain errors to HTTP responses."""
    status_code = _ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
    body: dict[str, str] = {"detail": str(exc)}
    if isinstance(exc, QuotaExceededError):
        body["reason"] = exc.reason.value
    if isinstance(exc, SetupRequiredError):
        body["reason"] = "setup_required"
    return JSONResponse(status_code=status_code, content=body)


# Include routers
app.include_router(profile.router)
app.include_router(documents.router)
app.include_router(events.router)
app.include_router(chat.router)
app.include_router(admin.router)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {
        "status": "healthy",
        "store": "remote" if is_remote_available() else "local",
    }
