import time
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request

from app.core.config import settings
from app.core.database import close_connections
from app.core.errors import register_exception_handlers
from app.core.logging_config import configure_logging
from app.controllers import (
    nlq_controller,
    dashboard_controller,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Configure logging on startup, dispose database pools on shutdown
    """
    configure_logging(settings.LOG_LEVEL)
    logger.info(f"{settings.APP_TITLE} v{settings.APP_VERSION} starting (sandbox={settings.SANDBOX_MODE})")
    yield
    await close_connections()


# Create FastAPI app
app = FastAPI(title=settings.APP_TITLE, version=settings.APP_VERSION, lifespan=lifespan)

register_exception_handlers(app)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - started) * 1000
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({duration_ms:.0f}ms)")
    return response


# Include routers
app.include_router(nlq_controller.router)
app.include_router(dashboard_controller.router)


@app.get("/")
def root():
    """Root endpoint"""
    return {
        "message": settings.APP_TITLE,
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "endpoints": {
            "nlq": "/api/nlq",
            "dashboard": "/api/dashboard",
            "health": "/health",
        },
    }


@app.get("/health")
def health():
    """Process liveness (no dependency checks; see /api/nlq/health)"""
    return {"status": "ok", "timestamp": time.time()}
