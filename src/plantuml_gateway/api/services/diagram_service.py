"""Diagram service that wraps the library for the HTTP layer."""

import base64
import logging
import time
from typing import Any, Dict, Optional, Tuple

from ...core.archive import archive_file_name
from ...core.processor import ProcessingResult
from ...core.renderer import parse_format
from ...core.validator import FileValidator
from ...library import PlantUMLLibrary
from ..models.responses import BlockFailureInfo, DiagramInfo, GenerateResponse, ProcessingSummary

logger = logging.getLogger(__name__)


class DiagramService:
    """Service for rendering diagrams and processing uploaded markdown."""
    
    def __init__(self, library: PlantUMLLibrary):
        self.library = library
        self.file_validator = FileValidator(library.config)
    
    def generate(self, text: str, format_token: str) -> Dict[str, Any]:
        """
        Render a single diagram.
        
        Args:
            text: PlantUML source code
            format_token: Requested output format (png, svg, pdf, eps)
            
        Returns:
            Dictionary with the output format and the image bytes
        """
        output_format = parse_format(format_token)
        logger.info("Generating PlantUML diagram, format: %s, size: %d chars", output_format.name, len(text))
        
        data = self.library.generate_diagram(text, output_format)
        return {
            "format": output_format,
            "data": data,
        }
    
    def build_generate_response(self, rendered: Dict[str, Any]) -> GenerateResponse:
        output_format = rendered["format"]
        return GenerateResponse(
            success=True,
            format=output_format.extension,
            media_type=output_format.media_type,
            size_bytes=len(rendered["data"]),
            data=base64.b64encode(rendered["data"]).decode("ascii"),
        )
    
    def validate_file_name(self, file_name: str) -> str:
        """Reject bad upload names before any content is read."""
        return self.file_validator.validate_file_name(file_name)
    
    def process_upload(self, file_name: str, content: bytes, format_token: Optional[str] = None) -> Dict[str, Any]:
        """
        Validate and process an uploaded markdown file, then build the ZIP bundle.
        
        Args:
            file_name: Original name of the uploaded file
            content: Raw file content
            format_token: Output format for generated diagrams (default from config)
            
        Returns:
            Dictionary containing the processing result, archive bytes and download name
        """
        start_time = time.time()
        name, result = self._process(file_name, content, format_token)
        archive = self.library.create_archive(result, name)
        
        logger.info("Processed markdown file: %s -> %d bytes", name, len(archive))
        return {
            "result": result,
            "archive": archive,
            "download_name": archive_file_name(name),
            "processing_time": round(time.time() - start_time, 3),
        }
    
    def preview(self, file_name: str, content: bytes, format_token: Optional[str] = None) -> ProcessingSummary:
        """Process an uploaded file and summarize the outcome without archiving."""
        start_time = time.time()
        name, result = self._process(file_name, content, format_token)
        return self._build_summary(result, name, time.time() - start_time)
    
    def _process(self, file_name: str, content: bytes,
                 format_token: Optional[str] = None) -> Tuple[str, ProcessingResult]:
        # Resolve the format first so an unknown token fails before any work.
        output_format = parse_format(format_token) if format_token else None
        name = self.file_validator.validate_file_name(file_name)
        text = self.file_validator.validate_upload(name, content)
        return name, self.library.process_markdown(text, file_name=name, fmt=output_format)
    
    def _build_summary(self, result: ProcessingResult, file_name: str, processing_time: float) -> ProcessingSummary:
        return ProcessingSummary(
            success=True,
            original_file=file_name,
            processing_time=round(processing_time, 3),
            output_format=result.output_format.extension,
            total_blocks=result.total_blocks,
            diagrams=[
                DiagramInfo(sequence=d.sequence, filename=d.file_name, size_bytes=d.size)
                for d in result.diagrams
            ],
            failures=[
                BlockFailureInfo(sequence=f.sequence, reason=f.reason)
                for f in result.failures
            ],
            processed_markdown=result.rewritten_text,
        )
