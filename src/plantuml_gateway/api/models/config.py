"""Configuration models for the API."""

from pydantic import BaseModel, Field
import os


class APIConfig(BaseModel):
    """API configuration settings.

    Rendering and processing limits live in ``plantuml_gateway.utils.config.Config``.
    """
    
    # Server settings
    host: str = Field(default="0.0.0.0", description="Host to bind to")
    port: int = Field(default=8080, description="Port to bind to")
    log_level: str = Field(default="INFO", description="Root log level")
    
    # Cache maintenance
    cache_purge_interval_seconds: int = Field(default=900, description="Interval between expired cache purges")
    
    # Error reporting
    show_error_details: bool = Field(default=False, description="Include exception text in 500 responses")
    
    # Security
    cors_origins: list = Field(default=["*"], description="CORS allowed origins")
    
    @classmethod
    def from_env(cls) -> "APIConfig":
        """Create config from environment variables."""
        return cls(
            host=os.getenv("API_HOST", "0.0.0.0"),
            port=int(os.getenv("API_PORT", "8080")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            cache_purge_interval_seconds=int(os.getenv("CACHE_PURGE_INTERVAL_SECONDS", "900")),
            show_error_details=os.getenv("SHOW_ERROR_DETAILS", "false").lower() in ("1", "true", "yes"),
            cors_origins=os.getenv("CORS_ORIGINS", "*").split(","),
        )
