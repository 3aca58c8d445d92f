"""
Shipment tracking service

Public tracking pages and lookup API, the password-gated admin panel for
shipments and their event timelines, and the ops endpoints.
"""

import os
import subprocess
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from shared.core import RequestLoggingMiddleware, ServiceHealth, get_logger, setup_logging
from tracking.api.admin_routes import router as admin_router
from tracking.api.pages import router as pages_router
from tracking.api.routes import router as tracking_router
from tracking.application.errors import TrackingError
from tracking.core_settings import get_settings
from tracking.infrastructure.db import engine, init_models

SERVICE_NAME = "tracking-service"
SERVICE_VERSION = os.getenv("SERVICE_VERSION", "1.0.0")
PROJECT_ROOT = Path(__file__).resolve().parent.parent

settings = get_settings()
setup_logging(SERVICE_NAME, level=settings.LOG_LEVEL)
logger = get_logger(__name__)

def alembic(*args: str) -> bool:
    """Run an alembic command against this project; a failure is logged and reported as False."""
    command = " ".join(args)
    try:
        proc = subprocess.run(
            ["alembic", *args],
            cwd=PROJECT_ROOT, capture_output=True, text=True, check=False,
        )
    except OSError as e:
        logger.error(f"alembic {command} could not be started: {e}")
        return False
    if proc.returncode != 0:
        logger.warning(f"alembic {command} failed: {proc.stderr.strip()}")
        return False
    return True

def prepare_schema() -> None:
    """Bring the schema to head, falling back to ``create_all`` when alembic cannot."""
    if alembic("upgrade", "head"):
        logger.info("Schema at head")
        return
    init_models()
    # without a revision every later upgrade would replay 0001 over these tables
    if alembic("stamp", "head"):
        logger.warning("Tables created without migrations; stamped at head")
    else:
        logger.error("Tables created without migrations and could not be stamped; the next upgrade will fail")

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"{SERVICE_NAME} {SERVICE_VERSION} starting", fields={"database": engine.url.render_as_string()})
    prepare_schema()
    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    yield
    logger.info(f"{SERVICE_NAME} stopping")

app = FastAPI(
    title="Shipment Tracking",
    description="Tracking lookup, admin panel and quote requests",
    version=SERVICE_VERSION,
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url=None,
    openapi_url="/api/openapi.json",
)
app.add_middleware(RequestLoggingMiddleware)

@app.exception_handler(TrackingError)
async def tracking_error_handler(request: Request, exc: TrackingError):
    logger.warning(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
    body = {"detail": exc.message}
    if getattr(exc, "fields", None):
        body["fields"] = exc.fields
    return JSONResponse(status_code=exc.status_code, content=body)

health = ServiceHealth(SERVICE_NAME, SERVICE_VERSION, engine=engine, upload_dir=settings.UPLOAD_DIR)
app.include_router(health.create_health_router())
app.include_router(tracking_router)
app.include_router(admin_router)
app.include_router(pages_router)

# StaticFiles checks the directory when mounted
os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
app.mount(settings.UPLOAD_URL_PREFIX, StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

@app.get("/info", tags=["ops"])
async def info():
    return {
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "environment": os.getenv("ENVIRONMENT", "development"),
        "tracking_prefix": settings.TRACKING_PREFIX,
        "endpoints": {
            "track": "/api/track/{tracking_number}",
            "quotes": "/api/quotes",
            "admin": "/api/admin",
            "pages": "/",
            "docs": "/api/docs",
            "health": "/health",
            "ready": "/health/ready",
        },
    }
