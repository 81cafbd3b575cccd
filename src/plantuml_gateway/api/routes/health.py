"""Liveness endpoint reporting renderer and cache state."""

from pathlib import Path

from fastapi import APIRouter, Depends

from ... import __version__
from ...core.cache import DiagramCache
from ...utils.config import Config
from ..dependencies import get_diagram_cache, get_processing_config
from ..models.responses import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(
    config: Config = Depends(get_processing_config),
    cache: DiagramCache = Depends(get_diagram_cache),
):
    """
    Report service status.

    A missing PlantUML jar does not make the service unhealthy: requests
    still validate, and rendering fails per diagram with a clear error.
    """
    return HealthResponse(
        status="healthy",
        version=__version__,
        plantuml_jar_present=Path(config.PLANTUML_JAR).is_file(),
        cached_diagrams=len(cache),
    )
