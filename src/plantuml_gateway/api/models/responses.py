"""Response models for the API."""

from typing import List, Optional, Dict, Any
from pydantic import BaseModel
from datetime import datetime


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    plantuml_jar_present: bool
    cached_diagrams: int


class GenerateResponse(BaseModel):
    """Response from the diagram generation endpoint."""
    success: bool
    format: str
    media_type: str
    size_bytes: int
    data: str  # base64


class DiagramInfo(BaseModel):
    """Information about a generated diagram."""
    sequence: int
    filename: str
    size_bytes: int


class BlockFailureInfo(BaseModel):
    """A PlantUML block that could not be rendered."""
    sequence: int
    reason: str


class ProcessingSummary(BaseModel):
    """Result of processing a markdown document without archiving it."""
    success: bool
    original_file: str
    processing_time: float
    output_format: str
    total_blocks: int
    diagrams: List[DiagramInfo]
    failures: List[BlockFailureInfo]
    processed_markdown: str


class ErrorResponse(BaseModel):
    """Error response model."""
    success: bool = False
    error: Dict[str, Any]
    timestamp: datetime
