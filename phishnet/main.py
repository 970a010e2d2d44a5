"""FastAPI application entry point."""
import logging
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from phishnet.core.config import settings
from phishnet.core.errors import AccessDeniedError, PhishNetError, ValidationFailedError
from phishnet.core.structured_logging import build_log_context, configure_logging, format_log_context
from phishnet.storage import Storage, create_storage

configure_logging()
logger = logging.getLogger("phishnet")

# ============================================================================
# Sentry Integration (optional, for production error tracking)
# ============================================================================

if settings.SENTRY_DSN and settings.ENV != "dev":
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENV,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
        traces_sample_rate=0.1,  # 10% of requests for performance monitoring
        send_default_pii=False,  # Don't send PII to Sentry
    )
    logger.info("Sentry initialized for error tracking")

# ============================================================================
# Rate Limiting
# ============================================================================

from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from phishnet.core.rate_limit import limiter

REQUEST_ID_HEADER = "X-Request-ID"


# ============================================================================
# Exception Handlers
# ============================================================================

def _error_body(exc: PhishNetError) -> dict:
    body = {"detail": exc.message}
    if isinstance(exc, ValidationFailedError):
        body["errors"] = exc.errors
    if isinstance(exc, AccessDeniedError) and exc.invalid:
        body["invalid"] = exc.invalid
    return body


async def phishnet_error_handler(request: Request, exc: PhishNetError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(_error_body(exc)))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies are a 400, same shape as service validation errors."""
    errors = [
        {key: value for key, value in error.items() if key not in ("ctx", "url")}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content=jsonable_encoder({"detail": "Validation error", "errors": errors}),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log the traceback; the client only gets a generic message."""
    context = build_log_context(
        request_id=getattr(request.state, "request_id", None),
        route=request.url.path,
        method=request.method,
    )
    logger.exception("Unhandled error %s", format_log_context(context))
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# ============================================================================
# FastAPI App
# ============================================================================

def create_app(store: Storage | None = None) -> FastAPI:
    """
    Build the API.

    The store is created here (or injected by the caller, e.g. tests) and
    attached to app.state; it is closed on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        app.state.store.close()

    app = FastAPI(
        title="PhishNet API",
        description="Multi-tenant phishing simulation management API",
        version=settings.VERSION,
        docs_url="/docs" if settings.ENV == "dev" else None,
        redoc_url="/redoc" if settings.ENV == "dev" else None,
        lifespan=lifespan,
    )
    app.state.store = store if store is not None else create_storage(settings)

    # Add rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.add_exception_handler(PhishNetError, phishnet_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    @app.middleware("http")
    async def request_logging(request: Request, call_next):
        """Assign/propagate X-Request-ID and log one line per request."""
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        started = time.perf_counter()
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id

        route = request.scope.get("route")
        context = build_log_context(
            user_id=getattr(request.state, "user_id", None),
            org_id=getattr(request.state, "org_id", None),
            request_id=request_id,
            route=getattr(route, "path", request.url.path),
            method=request.method,
            status_code=response.status_code,
        )
        logger.info(
            "request %s duration_ms=%d",
            format_log_context(context),
            (time.perf_counter() - started) * 1000,
        )
        return response

    # CORS middleware - added last so it wraps everything
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,  # Required for cookies
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "X-Requested-With", REQUEST_ID_HEADER],
        expose_headers=[REQUEST_ID_HEADER],
    )

    # ========================================================================
    # Routers
    # ========================================================================

    from phishnet.routers import (
        auth,
        campaigns,
        dashboard,
        email_templates,
        groups,
        landing_pages,
        smtp_profiles,
        users,
    )

    app.include_router(auth.router, prefix="/api")
    app.include_router(dashboard.router, prefix="/api")
    app.include_router(groups.router, prefix="/api")
    app.include_router(smtp_profiles.router, prefix="/api")
    app.include_router(email_templates.router, prefix="/api")
    app.include_router(landing_pages.router, prefix="/api")
    app.include_router(campaigns.router, prefix="/api")
    app.include_router(users.router, prefix="/api")

    # ========================================================================
    # Health Check
    # ========================================================================

    @app.get("/api/status")
    def status():
        """Liveness check."""
        return {"status": "ok"}

    return app


app = create_app()
