# fleet_inspection/main.py
"""
FastAPI application entry point.
Includes security middleware, error handlers, all routers and the uploads mount.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.middleware.base import BaseHTTPMiddleware
from fleet_inspection.routers import (
    drivers, health, inspection_requests, public_inspections, vehicle_sets, vehicles,
)
from fleet_inspection.database import build_engine, configure_session_factory, create_tables
from fleet_inspection.errors import FleetError
from fleet_inspection.config import settings
from fleet_inspection.utils.logger import get_logger
import os
import time

logger = get_logger(__name__)

app = FastAPI(
    title="Fleet Inspection API",
    description="Vehicle and driver registry, vehicle sets, and tokenised driver inspections.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS (allow the staff dashboard and the driver form to call the API) ────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── API Key Middleware ───────────────────────────────────────────────────────
class APIKeyMiddleware(BaseHTTPMiddleware):
    """
    Optional lightweight API key auth for staff endpoints.
    The public inspection form and served photos are excluded, drivers only hold a token.
    Set API_KEY in .env. Leave empty to disable auth.
    """
    open_paths = {"/api/v1/health", "/docs", "/redoc", "/openapi.json"}
    open_prefixes = ("/api/v1/public/",)

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if (
            not settings.API_KEY
            or path in self.open_paths
            or path.startswith(self.open_prefixes)
            or path.startswith(settings.UPLOAD_URL_PREFIX.rstrip("/") + "/")
            or request.method == "OPTIONS"
        ):
            return await call_next(request)

        api_key = request.headers.get("X-API-Key") or request.query_params.get("api_key")
        if api_key != settings.API_KEY:
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"detail": "Invalid or missing API key"},
            )
        return await call_next(request)


if settings.API_KEY:
    app.add_middleware(APIKeyMiddleware)


# ── Request Timing Middleware ────────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 2)
    logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
    return response


# ── Error Handlers ───────────────────────────────────────────────────────────
@app.exception_handler(FleetError)
async def fleet_error_handler(request: Request, exc: FleetError):
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    else:
        logger.info(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(vehicles.router,            prefix="/api/v1", tags=["🚚 Vehicles"])
app.include_router(drivers.router,             prefix="/api/v1", tags=["🧑 Drivers"])
app.include_router(vehicle_sets.router,        prefix="/api/v1", tags=["🔗 Vehicle Sets"])
app.include_router(inspection_requests.router, prefix="/api/v1", tags=["📋 Inspection Requests"])
app.include_router(public_inspections.router,  prefix="/api/v1", tags=["📝 Public Inspection Form"])
app.include_router(health.router,              prefix="/api/v1", tags=["💚 Health"])

# Stored photos; the directory is created at startup
app.mount(settings.UPLOAD_URL_PREFIX, StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False), name="uploads")


# ── Startup ───────────────────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    logger.info("🚀 Fleet Inspection backend starting up...")
    if settings.DATABASE_URL.startswith("sqlite:///"):
        db_dir = os.path.dirname(settings.DATABASE_URL[len("sqlite:///"):])
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)
    os.makedirs(settings.inspections_upload_dir, exist_ok=True)

    engine = build_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)
    configure_session_factory(engine)
    create_tables(engine)
    app.state.engine = engine
    logger.info("✅ Database tables ready")
    logger.info(f"🖼️  Photos stored in {settings.UPLOAD_DIR}, served at {settings.UPLOAD_URL_PREFIX}")
    logger.info(f"🌐 Listening on http://{settings.BACKEND_HOST}:{settings.BACKEND_PORT}")
    logger.info("📖 API docs at /docs")


@app.on_event("shutdown")
async def shutdown():
    logger.info("🛑 Fleet Inspection backend shutting down...")
    engine = getattr(app.state, "engine", None)
    if engine is not None:
        engine.dispose()
