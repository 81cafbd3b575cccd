"""Main FastAPI application for the PlantUML gateway API."""

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from fastapi import FastAPI, Request, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from .. import __version__
from ..core.errors import GatewayError
from ..utils.config import Config
from .dependencies import get_diagram_cache
from .models.config import APIConfig
from .models.responses import ErrorResponse
from .routes import health, generate, markdown

logger = logging.getLogger(__name__)

# Global config instance
config = APIConfig.from_env()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Starting PlantUML Gateway API v%s", app.version)
    logger.info("Configuration: %s", config.model_dump())
    logger.info("Processing configuration: %s", Config().to_dict())

    # Start background cache maintenance task
    cleanup_task = asyncio.create_task(periodic_cleanup())

    yield

    # Shutdown
    cleanup_task.cancel()
    try:
        await cleanup_task
    except asyncio.CancelledError:
        pass
    logger.info("API shutdown complete")


async def periodic_cleanup():
    """Periodic purge of expired diagram cache entries."""
    cache = get_diagram_cache()

    while True:
        try:
            await asyncio.sleep(config.cache_purge_interval_seconds)
            removed = cache.purge_expired()
            if removed > 0:
                logger.info("Cache cleanup: removed %d expired diagrams", removed)
        except asyncio.CancelledError:
            break
        except Exception:
            logger.exception("Cache cleanup error")


# Create FastAPI app
app = FastAPI(
    title="PlantUML Gateway API",
    description="HTTP API for rendering PlantUML diagrams and processing markdown documents",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_response(status_code: int, error_detail: dict) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(ErrorResponse(
            error=error_detail,
            timestamp=datetime.now()
        ))
    )


@app.exception_handler(GatewayError)
async def gateway_exception_handler(request: Request, exc: GatewayError):
    """Map rendering and processing errors to structured responses."""
    if exc.status_code >= 500:
        logger.error("%s on %s: %s", exc.code, request.url.path, exc.message)
    else:
        logger.warning("%s on %s: %s", exc.code, request.url.path, exc.message)

    return _error_response(exc.status_code, {
        "code": exc.code,
        "message": exc.message,
        "details": type(exc).__name__
    })


# Global exception handler
@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions with structured error responses."""

    # If detail is already a dict (from our endpoints), use it directly
    if isinstance(exc.detail, dict):
        error_detail = exc.detail
    else:
        # Convert string details to structured format
        error_detail = {
            "code": "HTTP_ERROR",
            "message": str(exc.detail),
            "details": None
        }

    return _error_response(exc.status_code, error_detail)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception("Unexpected error on %s", request.url.path)

    return _error_response(500, {
        "code": "INTERNAL_ERROR",
        "message": "An unexpected error occurred",
        "details": str(exc) if config.show_error_details else None
    })


# Include routers
app.include_router(health.router)
app.include_router(generate.router)
app.include_router(markdown.router)


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "PlantUML Gateway API",
        "version": __version__,
        "description": "HTTP API for rendering PlantUML diagrams and processing markdown documents",
        "docs": "/docs",
        "health": "/health"
    }


if __name__ == "__main__":
    uvicorn.run(
        "plantuml_gateway.api.main:app",
        host=config.host,
        port=config.port,
        reload=True,
        log_level=config.log_level.lower()
    )
