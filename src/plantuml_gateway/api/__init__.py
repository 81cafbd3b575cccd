"""
REST layer of the PlantUML gateway.

Routes under ``/api/v1`` render single diagrams and turn uploaded markdown
documents into ZIP bundles; ``/health`` reports engine and cache state.
Run with ``uvicorn plantuml_gateway.api.main:app``.
"""

from .. import __version__

__all__ = ["__version__"]
