import uuid
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.base import BaseHTTPMiddleware

from authtracker.config import DEFAULT_SESSION_SECRET, get_settings
from authtracker.database import async_session, create_tables, engine
from authtracker.exceptions import TrackerError
from authtracker.logging_config import configure_logging
from authtracker.routers import auth as auth_router
from authtracker.routers import records, settings as settings_router, users
from authtracker.services.credential_store import get_credential_store

logger = structlog.get_logger(__name__)


async def seed_admin_user():
    """Create the primary admin account if it doesn't exist. Idempotent."""
    settings = get_settings()
    async with async_session() as session:
        await get_credential_store().seed_admin(session, settings.admin_password)
        await session.commit()


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_json)
    if settings.session_secret == DEFAULT_SESSION_SECRET:
        logger.warning("default_session_secret_in_use")

    # Startup: create tables then seed the admin account
    await create_tables()
    await seed_admin_user()
    yield
    # Shutdown
    await engine.dispose()


app = FastAPI(
    title="Authorization Tracker",
    description="Insurance pre-authorization request tracking with role-gated access",
    version="1.0.0",
    lifespan=lifespan,
)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind a request id into the structlog context for the duration of a request."""
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        structlog.contextvars.bind_contextvars(
            request_id=request_id, method=request.method, path=request.url.path
        )
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("request_id", "method", "path")
        response.headers["X-Request-ID"] = request_id
        return response


class NoCacheMiddleware(BaseHTTPMiddleware):
    """Middleware to add no-cache headers so API responses always reflect the store."""
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, proxy-revalidate, max-age=0"
        response.headers["Expires"] = "0"
        response.headers["Pragma"] = "no-cache"
        return response


app.add_middleware(NoCacheMiddleware)
app.add_middleware(RequestContextMiddleware)


@app.exception_handler(TrackerError)
async def tracker_error_handler(request: Request, exc: TrackerError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "reason": exc.reason},
    )


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("database_error", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "reason": "internal_error"},
    )


app.include_router(auth_router.router, prefix="/api/auth", tags=["Auth"])
app.include_router(records.router, prefix="/api/records", tags=["Records"])
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(settings_router.router, prefix="/api/settings", tags=["Settings"])


@app.get("/api/health")
async def health_check():
    return {"status": "healthy", "service": "authtracker"}
