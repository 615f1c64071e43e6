"""FastAPI application entry point for ImpactCRM."""

import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from impactcrm import __version__
from impactcrm.config import settings
from impactcrm.database import close_db, init_db
from impactcrm.logging_setup import configure_logging
from impactcrm.services.import_service import RECORD_SCHEMAS

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)

MIN_SECRET_KEY_LENGTH = 32


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers; tenant data under /api is never cached."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "no-referrer"
        # The API serves JSON and file downloads only
        response.headers["Content-Security-Policy"] = (
            "default-src 'none'; frame-ancestors 'none'; base-uri 'none'"
        )
        if request.url.path.startswith("/api/"):
            response.headers["Cache-Control"] = "no-store"

        if settings.enforce_https:
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )

        return response


def _is_production() -> bool:
    """True when not in debug mode and not under pytest."""
    return not settings.debug and not os.getenv("PYTEST_CURRENT_TEST")


def security_findings() -> tuple[list[str], list[str]]:
    """Return ``(issues, warnings)`` for the current configuration.

    Issues block startup in production. Warnings are only logged.
    """
    issues: list[str] = []
    warnings: list[str] = []

    if len(settings.secret_key) < MIN_SECRET_KEY_LENGTH:
        issues.append(
            "Token signing key is shorter than "
            f"{MIN_SECRET_KEY_LENGTH} characters. Set IMPACTCRM_SECRET_KEY."
        )
    if settings.secret_key_generated:
        issues.append(
            "No token signing key configured; a random one is in use and no "
            "identity-provider token will verify. Set IMPACTCRM_SECRET_KEY."
        )

    if _is_production():
        if not settings.jwt_audience:
            warnings.append(
                "auth.audience is not set; tokens issued for any audience "
                "under the signing key are accepted."
            )
        if "localhost" in settings.mongodb_url or "127.0.0.1" in settings.mongodb_url:
            warnings.append("MongoDB URL points to localhost in production.")
        if not settings.enforce_https:
            warnings.append("HTTPS enforcement is disabled (server.enforce_https).")

    return issues, warnings


def _validate_security_configuration() -> None:
    """Log security findings and refuse to start on issues in production.

    Raises:
        RuntimeError: If critical security issues are detected in production.
    """
    issues, warnings = security_findings()

    for warning in warnings:
        logger.warning("SECURITY WARNING: %s", warning)

    if issues and _is_production():
        for issue in issues:
            logger.error("SECURITY ERROR: %s", issue)
        raise RuntimeError(
            "Application startup blocked due to security configuration issues. "
            "See logs for details."
        )
    for issue in issues:
        logger.warning("SECURITY WARNING (development mode): %s", issue)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    configure_logging()
    _validate_security_configuration()

    settings.data_dir.mkdir(parents=True, exist_ok=True)

    await init_db()
    logger.info(
        "Connected to MongoDB database %s; record types: %s",
        settings.mongodb_database,
        ", ".join(sorted(RECORD_SCHEMAS)),
    )

    yield

    await close_db()


app = FastAPI(
    title=settings.app_name,
    description="Nonprofit CRM with tenant-scoped CSV import, export and dashboards",
    version=__version__,
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Empty list means same-origin only
if settings.cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=["Authorization", "Content-Type"],
        expose_headers=["Content-Disposition"],
        max_age=600,
    )

app.add_middleware(SecurityHeadersMiddleware)


@app.get("/health", tags=["Health"])
async def health_check() -> JSONResponse:
    """Liveness check; does not touch the database."""
    return JSONResponse(
        content={
            "status": "healthy",
            "version": __version__,
            "app_name": settings.app_name,
            "record_types": sorted(RECORD_SCHEMAS),
        }
    )


from impactcrm.routers import dashboard, export, import_router, records  # noqa: E402

app.include_router(import_router.router, prefix="/api/import", tags=["Import"])
app.include_router(records.router, prefix="/api/records", tags=["Records"])
app.include_router(export.router, prefix="/api/export", tags=["Export"])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["Dashboard"])
