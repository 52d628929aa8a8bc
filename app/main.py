# app/main.py
"""
FastAPI application entry point.
Wires middleware, error handlers, the push channel objects and all routers.
"""

import time

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.database import create_tables
from app.routers import admin, auth, health, incidents, navigation, push, routes, statistics
from app.services.broadcaster import IncidentBroadcaster
from app.services.connection_registry import ConnectionRegistry
from app.utils.errors import AuthenticationRequired, WaypointError
from app.utils.logger import get_logger

logger = get_logger(__name__)

app = FastAPI(
    title="Waypoint Traffic API",
    description="Crowdsourced incidents, live incident push channel, route planning.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── Push channel state (one registry per process) ───────────────────────────
app.state.registry = ConnectionRegistry()
app.state.broadcaster = IncidentBroadcaster(app.state.registry)

# ── CORS ─────────────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Request Timing Middleware ────────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 2)
    logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
    return response


# ── Exception Handlers ───────────────────────────────────────────────────────
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid request data", "errors": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(WaypointError)
async def domain_exception_handler(request: Request, exc: WaypointError):
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationRequired) else None
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=headers)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(auth.router,       prefix="/api", tags=["🔑 Auth"])
app.include_router(incidents.router,  prefix="/api", tags=["🚧 Incidents"])
app.include_router(navigation.router, prefix="/api", tags=["🧭 Navigation"])
app.include_router(routes.router,     prefix="/api", tags=["🗺️  Saved Routes"])
app.include_router(statistics.router, prefix="/api", tags=["📊 Statistics"])
app.include_router(admin.router,      prefix="/api", tags=["🛠️  Admin"])
app.include_router(health.router,     prefix="/api", tags=["💚 Health"])
app.include_router(push.router,                      tags=["📡 Push Channel"])


# ── Startup ───────────────────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    logger.info("🚀 Waypoint Backend starting up...")
    create_tables()
    logger.info("✅ Database tables ready")
    logger.info(f"📡 Push channel at ws://{settings.BACKEND_HOST}:{settings.BACKEND_PORT}/ws")
    logger.info(f"🔔 Alert radius {settings.ALERT_RADIUS_METERS:.0f} m, "
                f"client identity trusted: {settings.WS_TRUST_CLIENT_IDENTITY}")
    logger.info("📖 API docs at /docs")


@app.on_event("shutdown")
async def shutdown():
    logger.info(f"🛑 Waypoint Backend shutting down ({len(app.state.registry)} channels open)")
