"""Markdown processing endpoints."""

from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, UploadFile, File, Form, Depends
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response

from ..dependencies import get_diagram_service
from ..models.responses import ProcessingSummary
from ..services.diagram_service import DiagramService


router = APIRouter(prefix="/api/v1")


def content_disposition(file_name: str) -> str:
    """Attachment header value; non-ASCII names use the RFC 5987 form."""
    quoted = quote(file_name)
    if quoted != file_name:
        return f"attachment; filename*=utf-8''{quoted}"
    return f'attachment; filename="{file_name}"'


@router.post("/process-markdown")
async def process_markdown(
    markdown_file: UploadFile = File(..., description="Markdown file containing ```plantuml blocks"),
    format: Optional[str] = Form(None, description="Output format for generated diagrams"),
    diagram_service: DiagramService = Depends(get_diagram_service)
):
    """
    Process a markdown file and return a ZIP bundle.
    
    The bundle contains the rewritten markdown, one image per rendered
    PlantUML block and a metadata summary. Blocks that fail to render stay
    in the document with an error comment.
    """
    
    # Reject bad names before reading the upload
    diagram_service.validate_file_name(markdown_file.filename)
    
    content = await markdown_file.read()
    
    outcome = await run_in_threadpool(
        diagram_service.process_upload, markdown_file.filename, content, format
    )
    result = outcome["result"]
    
    return Response(
        content=outcome["archive"],
        media_type="application/zip",
        headers={
            "Content-Disposition": content_disposition(outcome["download_name"]),
            "X-Total-Blocks": str(result.total_blocks),
            "X-Generated-Diagrams": str(len(result.diagrams)),
            "X-Processing-Time": str(outcome["processing_time"]),
        }
    )


@router.post("/process-markdown/preview", response_model=ProcessingSummary)
async def preview_markdown(
    markdown_file: UploadFile = File(..., description="Markdown file containing ```plantuml blocks"),
    format: Optional[str] = Form(None, description="Output format for generated diagrams"),
    diagram_service: DiagramService = Depends(get_diagram_service)
):
    """
    Process a markdown file and describe the result as JSON.
    
    Useful to check which blocks render before downloading the bundle.
    """
    diagram_service.validate_file_name(markdown_file.filename)
    content = await markdown_file.read()
    return await run_in_threadpool(
        diagram_service.preview, markdown_file.filename, content, format
    )
