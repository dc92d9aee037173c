# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.config import settings
from src.rbac.exceptions import AuthorizationDenied, InternalLookupError, Unauthenticated
from src.services.principal_service import build_identity_provider
from src.services.ticket_service import DepartmentNotFoundError, TicketServiceError

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown events."""
    logger.info(
        "Starting %s (environment=%s)", settings.app_name, settings.environment
    )
    yield
    logger.info("Shutting down %s", settings.app_name)


app = FastAPI(
    title=settings.app_name,
    description="Tenant-scoped access control and ticket visibility service",
    version="0.1.0",
    lifespan=lifespan,
)

# Chosen once; never re-evaluated per request
app.state.identity_provider = build_identity_provider(settings)

# CORS middleware for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Unauthenticated)
async def unauthenticated_handler(request: Request, exc: Unauthenticated) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"detail": str(exc) or "Not authenticated"},
    )


@app.exception_handler(AuthorizationDenied)
async def authorization_denied_handler(
    request: Request, exc: AuthorizationDenied
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_403_FORBIDDEN,
        content={"detail": str(exc) or "Permission denied"},
    )


@app.exception_handler(InternalLookupError)
async def internal_lookup_handler(
    request: Request, exc: InternalLookupError
) -> JSONResponse:
    # Details are logged where the lookup failed, never returned
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Access control temporarily unavailable"},
    )


@app.exception_handler(TicketServiceError)
async def ticket_service_error_handler(
    request: Request, exc: TicketServiceError
) -> JSONResponse:
    code = (
        status.HTTP_404_NOT_FOUND
        if isinstance(exc, DepartmentNotFoundError)
        else status.HTTP_400_BAD_REQUEST
    )
    return JSONResponse(status_code=code, content={"detail": str(exc)})


@app.get("/health")
def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "healthy"}


# Import and include API router after it's created
from src.api.v1.router import api_router  # noqa: E402

app.include_router(api_router, prefix="/api/v1")
