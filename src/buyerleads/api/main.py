"""
FastAPI Main Application

Buyer Lead Management REST API.
"""
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Depends, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session

from config.settings import settings
from src.buyerleads.api.dependencies import get_db
from src.buyerleads.api.errors import register_exception_handlers
from src.buyerleads.api.routers import buyers
from src.buyerleads.api.schemas import HealthCheck
from src.buyerleads.db.session import close_connections, health_check as database_health_check
from src.buyerleads.utils.logger import (
    bind_request_context,
    clear_request_context,
    get_logger,
    setup_logging,
)

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("api_started", version=settings.api_version, environment=settings.environment)
    yield
    close_connections()


# Create FastAPI app
app = FastAPI(
    title="Buyer Lead Management API",
    description="REST API for capturing, searching, importing and exporting real estate buyer leads",
    version=settings.api_version,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Configure CORS for the web frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)

register_exception_handlers(app)


@app.middleware("http")
async def request_context(request: Request, call_next):
    request_id = bind_request_context(
        request.headers.get("X-Request-ID"),
        method=request.method,
        path=request.url.path,
    )
    try:
        response = await call_next(request)
    finally:
        clear_request_context()
    response.headers["X-Request-ID"] = request_id
    return response


# Include routers
app.include_router(buyers.router)


@app.get("/health", response_model=HealthCheck, tags=["health"])
def health_check(db: Session = Depends(get_db)):
    """
    Health check endpoint.

    Returns:
        Health status with database connectivity check
    """
    connected = database_health_check(db)

    return HealthCheck(
        status="healthy" if connected else "degraded",
        version=settings.api_version,
        database="connected" if connected else "unavailable",
        timestamp=datetime.now(timezone.utc),
    )


@app.get("/", tags=["root"])
def root():
    """
    Root endpoint.

    Returns:
        API information
    """
    return {
        "name": "Buyer Lead Management API",
        "version": settings.api_version,
        "docs": "/docs",
        "health": "/health",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.buyerleads.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
