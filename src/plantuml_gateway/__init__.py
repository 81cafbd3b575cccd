"""
PlantUML rendering gateway.

Renders PlantUML source to PNG, SVG, PDF or EPS and turns markdown documents
with fenced ``plantuml`` blocks into a rewritten document plus images. Exposed
both as a plain library (``PlantUMLLibrary``) and as a FastAPI service
(``plantuml_gateway.api``).
"""

__version__ = "1.0.0"

from .core.errors import GatewayError, DocumentError, BlockError
from .core.processor import ProcessingResult, RenderedDiagram
from .core.renderer import OutputFormat
from .library import PlantUMLLibrary
from .utils.config import Config

__all__ = [
    "BlockError",
    "Config",
    "DocumentError",
    "GatewayError",
    "OutputFormat",
    "PlantUMLLibrary",
    "ProcessingResult",
    "RenderedDiagram",
]
