"""Finance Tracker - personal income and expense tracking API."""

import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from finance_tracker.config import get_settings
from finance_tracker.database import Base, engine, get_db
from finance_tracker.models.password_reset import PasswordReset, ResetGrant  # noqa: F401
from finance_tracker.models.transaction import Transaction  # noqa: F401
from finance_tracker.models.user import User  # noqa: F401
from finance_tracker.rate_limit import limiter
from finance_tracker.routers import auth_router, transactions_router

# Logging
logger = logging.getLogger("finance_tracker")
logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    for warning in settings.validate():
        logger.warning("CONFIG %s", warning)
    if settings.AUTO_CREATE_TABLES:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables verified/created")
    yield


app = FastAPI(title="Finance Tracker", version="0.1.0", lifespan=lifespan)
app.state.limiter = limiter


# --- Security headers middleware ---
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Content-Security-Policy"] = (
            "default-src 'self'; style-src 'self' 'unsafe-inline'; img-src 'self' data:"
        )
        return response


# --- Request size limit middleware ---
class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    MAX_BODY_SIZE = 1024 * 1024  # 1MB, every request body is a small JSON document

    async def dispatch(self, request: Request, call_next) -> Response:
        content_length = request.headers.get("content-length")
        if content_length and int(content_length) > self.MAX_BODY_SIZE:
            return JSONResponse(status_code=413, content={"detail": "Request body too large"})
        return await call_next(request)


# --- Audit logging middleware ---
class AuditLogMiddleware(BaseHTTPMiddleware):
    AUDIT_PATHS = {
        "/api/register",
        "/api/login",
        "/api/logout",
        "/api/forgot-password",
        "/api/verify-otp",
        "/api/reset-password",
        "/api/transactions",
    }

    async def dispatch(self, request: Request, call_next) -> Response:
        start = time.time()
        response = await call_next(request)
        duration_ms = (time.time() - start) * 1000

        path = request.url.path
        method = request.method
        if method in ("POST", "DELETE") and any(path.startswith(p) for p in self.AUDIT_PATHS):
            logger.info(
                "AUDIT %s %s -> %d (%.0fms) from %s",
                method,
                path,
                response.status_code,
                duration_ms,
                request.client.host if request.client else "unknown",
            )

        return response


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestSizeLimitMiddleware)
app.add_middleware(AuditLogMiddleware)

# API routers
app.include_router(auth_router)
app.include_router(transactions_router)


# --- Rate limit error handler ---
@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """Handle rate limit exceeded."""
    return JSONResponse(status_code=429, content={"detail": "Rate limit exceeded. Try again later."})


# --- Malformed request bodies: 400 instead of FastAPI's default 422 ---
@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> Response:
    """Reject missing or malformed fields."""
    return JSONResponse(
        status_code=400,
        content={"detail": "Missing or invalid fields.", "errors": jsonable_encoder(exc.errors())},
    )


# --- Store failures: log everything, tell the client nothing ---
@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError) -> Response:
    """Handle database errors."""
    logger.exception("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# --- Health check ---
@app.get("/health")
def health_check(db: Session = Depends(get_db)) -> dict:
    """Health check endpoint. Round-trips to the database."""
    db_time = db.execute(text("SELECT CURRENT_TIMESTAMP")).scalar()
    return {"status": "ok", "dbTime": str(db_time)}


# Static front end, served last so API routes take precedence
if Path(settings.STATIC_DIR).is_dir():
    app.mount("/", StaticFiles(directory=settings.STATIC_DIR, html=True), name="static")
