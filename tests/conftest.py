"""Pytest configuration and fixtures."""

import pytest

from plantuml_gateway.core.cache import NullDiagramCache
from plantuml_gateway.core.errors import EngineRenderError
from plantuml_gateway.core.renderer import DiagramRenderer, OutputFormat
from plantuml_gateway.library import PlantUMLLibrary
from plantuml_gateway.utils.config import Config


SIMPLE_DIAGRAM = "@startuml\nAlice -> Bob: hello\n@enduml"

_SIGNATURES = {
    OutputFormat.SVG: b'<?xml version="1.0" encoding="UTF-8" standalone="no"?><svg xmlns="http://www.w3.org/2000/svg">',
    OutputFormat.PNG: b"\x89PNG\r\n\x1a\n",
    OutputFormat.PDF: b"%PDF-1.4\n",
    OutputFormat.EPS: b"%!PS-Adobe-3.0 EPSF-3.0\n",
}


class FakeEngine:
    """Stand-in for PlantUML.

    Sources containing ``FAIL`` are rejected like a syntax error, sources
    containing ``EMPTY`` produce no output.
    """

    def __init__(self):
        self.calls = []

    def render(self, source, fmt):
        self.calls.append((source, fmt))
        if "FAIL" in source:
            raise EngineRenderError("Syntax Error? (Assumed diagram type: sequence) line 2")
        if "EMPTY" in source:
            return b""
        body = source.encode("utf-8")
        if fmt is OutputFormat.SVG:
            return _SIGNATURES[fmt] + b"<!--" + body + b"--></svg>"
        return _SIGNATURES[fmt] + body


def plantuml_block(body: str) -> str:
    """Wrap diagram source in a markdown fence."""
    return f"```plantuml\n{body}\n```"


def diagram(label: str) -> str:
    return f"@startuml\nAlice -> Bob: {label}\n@enduml"


@pytest.fixture
def fake_engine():
    """Engine double recording every render call."""
    return FakeEngine()


@pytest.fixture
def config():
    """Configuration with explicit defaults, independent of the environment."""
    return Config(
        default_format="SVG",
        validate_code=True,
        max_blocks_per_file=5,
        max_code_size=50000,
        max_document_size=1000000,
        max_file_size_mb=1,
        max_line_length=10000,
        allowed_extensions=[".md", ".markdown", ".txt"],
        zip_compression_level=6,
        include_source_in_zip=False,
        enable_caching=False,
    )


@pytest.fixture
def renderer(fake_engine, config):
    """Renderer over the fake engine without caching."""
    return DiagramRenderer(fake_engine, config, NullDiagramCache())


@pytest.fixture
def library(fake_engine, config):
    """Library facade over the fake engine."""
    return PlantUMLLibrary(config=config, engine=fake_engine, cache=NullDiagramCache())
