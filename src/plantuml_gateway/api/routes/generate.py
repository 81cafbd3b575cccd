"""Diagram generation endpoints."""

from fastapi import APIRouter, Form, Depends
from fastapi.responses import Response

from ..dependencies import get_diagram_service
from ..models.requests import GenerateRequest
from ..models.responses import GenerateResponse
from ..services.diagram_service import DiagramService


router = APIRouter(prefix="/api/v1")


def _respond(service: DiagramService, text: str, format: str, raw: bool):
    rendered = service.generate(text, format)
    if raw:
        return Response(content=rendered["data"], media_type=rendered["format"].media_type)
    return service.build_generate_response(rendered)


@router.post("/generate", response_model=GenerateResponse)
def generate_diagram(
    text: str = Form(..., description="PlantUML source code"),
    format: str = Form("svg", description="Output format: png, svg, pdf or eps"),
    raw: bool = Form(False, description="Return image bytes instead of base64 JSON"),
    diagram_service: DiagramService = Depends(get_diagram_service)
):
    """
    Generate a PlantUML diagram from source code.
    
    Returns the diagram base64-encoded in a JSON body, or the raw image bytes
    with the matching media type when ``raw`` is set. Rendering errors are
    reported as structured 400 responses.
    """
    return _respond(diagram_service, text, format, raw)


@router.post("/generate/json", response_model=GenerateResponse)
def generate_diagram_json(
    request: GenerateRequest,
    diagram_service: DiagramService = Depends(get_diagram_service)
):
    """Same as ``/generate`` but takes a JSON body."""
    return _respond(diagram_service, request.text, request.format, request.raw)
