"""Request models for the API."""

from pydantic import BaseModel, Field


class GenerateRequest(BaseModel):
    """JSON body for diagram generation.

    The form-based ``/generate`` endpoint takes the same fields as form data.
    """
    text: str = Field(..., description="PlantUML source code")
    format: str = Field(default="svg", description="Output format: png, svg, pdf or eps")
    raw: bool = Field(default=False, description="Return image bytes instead of JSON")
