"""
api/main.py -- FastAPI application entry point for PeanechEstate.

Exposes the listing catalogue, the session endpoints, and the two role-gated
dashboards to the browser client.

Run with:      uvicorn asgi:app --reload

Middleware stack (outermost to innermost):
  1. TrustedHostMiddleware -- rejects requests with unexpected Host headers
  2. CORSMiddleware        -- adds CORS headers for allowed browser origins
  3. SlowAPIMiddleware     -- enforces per-route rate limits from api.limiter

Lifespan creates the single SessionStore for this process, rehydrates it from
durable storage, and closes the storage engine on shutdown.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from api.limiter import limiter
from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.v1.auth import SessionOperationGuard
from api.routes.v1.auth import router as auth_router
from api.routes.v1.dashboard import router as dashboard_router
from api.routes.v1.navigation import router as navigation_router
from api.routes.v1.properties import router as properties_router
from api.routes.v1.users import router as users_router
from auth.directory import UserRoster
from auth.session import SessionStore
from core.config import get_settings
from listings.catalog import PropertyCatalog
from storage.store import LocalStorage

__version__ = "0.1.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("peanech.api")

_settings = get_settings()

# ---------------------------------------------------------------------------
# Lifespan -- modern startup / shutdown pattern (replaces @app.on_event)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application-level resources across the full server lifetime.

    Startup order matters:
      1. Storage first -- the session store reads from it.
      2. Session store second -- initialize() rehydrates the previous session
         before any request can ask who is signed in.
      3. Catalogue and roster last -- pure in-memory demo data.
    """
    logger.info("PeanechEstate API starting up")
    app.state.storage = LocalStorage(_settings.storage_url)
    app.state.session_store = SessionStore(app.state.storage)
    restored = app.state.session_store.initialize()
    logger.info("Session initialized (restored=%s)", restored is not None)
    app.state.session_guard = SessionOperationGuard()
    app.state.catalog = PropertyCatalog()
    app.state.roster = UserRoster()

    yield

    app.state.storage.close()
    logger.info("PeanechEstate API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="PeanechEstate API",
    description="Property listings with role-gated administration. Mock data, single local session.",
    version=__version__,
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware stack
#
# Register in the order you want the request to encounter them:
# TrustedHost -> CORS -> SlowAPI.
# ---------------------------------------------------------------------------

app.add_middleware(
    TrustedHostMiddleware,
    allowed_hosts=_settings.allowed_hosts,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_methods=["GET", "POST", "PATCH", "DELETE"],
    allow_headers=["Content-Type"],
    max_age=3600,
)

app.add_middleware(SlowAPIMiddleware)

# SlowAPI looks for app.state.limiter by convention.
app.state.limiter = limiter


# ---------------------------------------------------------------------------
# Request logging
#
# One line per request, tagged with the role of the session that served it
# ("-" when signed out). The role is read after the handler runs, so a login
# or logout line shows the state it left behind.
# ---------------------------------------------------------------------------


def _session_role(request: Request) -> str:
    store = getattr(request.app.state, "session_store", None)
    if store is None or store.current is None:
        return "-"
    return store.current.role.value


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    logger.info(
        "%s %s -> %d in %.1fms [role=%s]",
        request.method,
        request.url.path,
        response.status_code,
        (time.perf_counter() - start) * 1000,
        _session_role(request),
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, prefix="/api/v1", tags=["Auth"])
app.include_router(navigation_router, prefix="/api/v1", tags=["Navigation"])
app.include_router(properties_router, prefix="/api/v1", tags=["Properties"])
app.include_router(dashboard_router, prefix="/api/v1", tags=["Dashboard"])
app.include_router(users_router, prefix="/api/v1", tags=["Users"])


# ---------------------------------------------------------------------------
# Exception handlers -- every error body is {"error": {"code", "message", ...}}
# ---------------------------------------------------------------------------


def _error(status_code: int, code: str, message: str, detail: Optional[str] = None) -> JSONResponse:
    body = ErrorResponse(error=ErrorDetail(code=code, message=message, detail=detail))
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """429 for repeated login attempts; Retry-After carries slowapi's window."""
    logger.warning("Rate limit hit on %s from %s", request.url.path, request.client.host if request.client else "?")
    response = _error(429, "rate_limited", "Too many sign-in attempts. Try again shortly.", str(exc))
    response.headers["Retry-After"] = str(int(getattr(exc, "retry_after", 60)))
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _error(422, "validation_error", "Request validation failed.", str(exc.errors()))


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Pass route-built dict details through as the error body.

    401/403 details from auth.dependencies carry extra keys (required_roles,
    role) that the client uses to render the denial page.
    """
    if isinstance(exc.detail, dict):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})
    return _error(exc.status_code, f"http_{exc.status_code}", str(exc.detail))


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error(500, "internal_error", "An unexpected error occurred.")


# ---------------------------------------------------------------------------
# Health endpoint -- public, unlimited, reports whether a session is active
# ---------------------------------------------------------------------------


@app.get("/api/v1/health", include_in_schema=True, tags=["Health"])
async def health(request: Request) -> HealthResponse:
    """Return API liveness, version, and whether a session is active."""
    store: SessionStore = request.app.state.session_store
    return HealthResponse(version=__version__, authenticated=store.current is not None)
