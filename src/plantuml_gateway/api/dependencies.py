"""
API Dependencies - Dependency injection for FastAPI.

The render engine and the diagram cache are process-wide; tests replace them
through ``app.dependency_overrides``.
"""

from functools import lru_cache

from fastapi import Depends

from ..core.cache import DiagramCache
from ..core.renderer import PlantUMLJarEngine, RenderEngine
from ..library import PlantUMLLibrary, build_cache
from ..utils.config import Config
from .models.config import APIConfig
from .services.diagram_service import DiagramService


def get_config() -> APIConfig:
    """Get API configuration."""
    return APIConfig.from_env()


def get_processing_config() -> Config:
    """Get rendering and processing configuration."""
    return Config()


@lru_cache(maxsize=1)
def get_diagram_cache() -> DiagramCache:
    """Shared diagram cache for all requests."""
    return build_cache(Config())


def get_render_engine(config: Config = Depends(get_processing_config)) -> RenderEngine:
    """Get the PlantUML engine adapter."""
    return PlantUMLJarEngine.from_config(config)


def get_library(
    config: Config = Depends(get_processing_config),
    engine: RenderEngine = Depends(get_render_engine),
    cache: DiagramCache = Depends(get_diagram_cache),
) -> PlantUMLLibrary:
    """Get a library instance bound to the shared cache."""
    return PlantUMLLibrary(config=config, engine=engine, cache=cache)


def get_diagram_service(library: PlantUMLLibrary = Depends(get_library)) -> DiagramService:
    """Get diagram service instance."""
    return DiagramService(library)
