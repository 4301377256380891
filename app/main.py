"""Contentify issuer FastAPI application."""
import logging
import time
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api import credential, health, stats, user
from app.config import (
    ALLOWED_ORIGINS,
    CHEQD_NETWORK,
    IS_PRODUCTION,
    SERVICE_VERSION,
)
from app.core.exceptions import ContentifyError
from app.core.logging import configure_logging
from app.db.session import check_database, close_database, get_db_session, init_database

configure_logging()
log = logging.getLogger("contentify")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    log.info("Starting Contentify issuer service...")

    try:
        init_database()

        with get_db_session() as db:
            if check_database(db):
                log.info("Database connected")
            else:
                log.warning("Database not reachable at startup")

        log.info(f"Contentify issuer started (cheqd network: {CHEQD_NETWORK})")
    except Exception as e:
        log.error(f"Failed to initialize service: {e}")
        raise

    yield

    log.info("Shutting down Contentify issuer service...")
    close_database()
    log.info("Contentify issuer stopped")


app = FastAPI(
    title="Contentify Issuer",
    version=SERVICE_VERSION,
    description="Verifiable content credentials for AI-generated content",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=ALLOWED_ORIGINS != ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


# -----------------------------------------------------------------------------
# API Routers
# -----------------------------------------------------------------------------

app.include_router(health.router)
app.include_router(stats.router)
app.include_router(credential.router)
app.include_router(user.router)


@app.middleware("http")
async def request_logging(request: Request, call_next):
    """Log all requests with timing."""
    start = time.time()
    response = await call_next(request)
    duration_ms = int((time.time() - start) * 1000)

    log.info(
        f"request_complete status={response.status_code} duration_ms={duration_ms}",
        extra={
            "route": request.url.path,
            "method": request.method,
            "status": response.status_code,
            "duration_ms": duration_ms,
        },
    )
    return response


# -----------------------------------------------------------------------------
# Exception Handlers
# -----------------------------------------------------------------------------

@app.exception_handler(ContentifyError)
async def contentify_error_handler(request: Request, exc: ContentifyError):
    """Map the service exception hierarchy to ``{"error": ...}`` bodies."""
    if exc.status_code >= 500:
        log.error(f"{type(exc).__name__} on {request.url.path}: {exc}")
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Report malformed request bodies and query strings as 400."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    else:
        message = "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(404)
async def not_found_handler(request: Request, exc):
    """JSON 404 for unknown routes."""
    return JSONResponse(status_code=404, content={"error": "Route not found"})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    """Last-resort 500; includes the traceback outside production."""
    log.exception(f"Unhandled error on {request.method} {request.url.path}")
    content = {"error": "Internal server error"}
    if not IS_PRODUCTION:
        content["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return JSONResponse(status_code=500, content=content)


