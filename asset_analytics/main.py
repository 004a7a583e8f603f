# asset_analytics/main.py
"""
FastAPI application entry point.
Includes security middleware, global error handlers, and all routers.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from asset_analytics.routers import assets, compliance, health, protection, reports, utilization
from asset_analytics.database import create_tables
from asset_analytics.config import settings
from asset_analytics.services.entity_store import EntityStoreError
from asset_analytics.utils.logger import get_logger
import time

logger = get_logger(__name__)

app = FastAPI(
    title="Facility Asset Analytics API",
    description="Utilization, protection and compliance analytics over the hospital asset dataset.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS (allow the admin dashboard to call the API) ────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],   # Restrict to dashboard origin in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── API Key Middleware ───────────────────────────────────────────────────────
class APIKeyMiddleware(BaseHTTPMiddleware):
    """
    Optional lightweight API key auth.
    Health check and docs stay open. Set API_KEY in .env; leave empty to disable auth.
    """
    open_paths = {"/api/v1/health", "/docs", "/redoc", "/openapi.json"}

    async def dispatch(self, request: Request, call_next):
        if request.url.path in self.open_paths or not settings.API_KEY:
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


# ── Exception Handlers ───────────────────────────────────────────────────────
@app.exception_handler(EntityStoreError)
async def entity_store_exception_handler(request: Request, exc: EntityStoreError):
    logger.error(f"Dataset unavailable on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(utilization.router, prefix="/api/v1", tags=["📈 Utilization"])
app.include_router(protection.router,  prefix="/api/v1", tags=["🛡️ Protection"])
app.include_router(compliance.router,  prefix="/api/v1", tags=["✅ Compliance"])
app.include_router(reports.router,     prefix="/api/v1", tags=["📄 Reports"])
app.include_router(assets.router,      prefix="/api/v1", tags=["🏷️ Assets"])
app.include_router(health.router,      prefix="/api/v1", tags=["💚 Health"])


# ── Startup ───────────────────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    logger.info("🚀 Asset Analytics starting up...")
    create_tables()
    logger.info("✅ Report archive tables ready")
    logger.info(f"📂 Dataset: {settings.DATA_PATH}")
    logger.info(f"🎲 Random seed: {settings.RANDOM_SEED if settings.RANDOM_SEED is not None else 'unseeded (live simulation)'}")
    logger.info(f"🌐 Listening on http://{settings.BACKEND_HOST}:{settings.BACKEND_PORT}")
    logger.info("📖 API docs at /docs")


@app.on_event("shutdown")
async def shutdown():
    logger.info("🛑 Asset Analytics shutting down...")
