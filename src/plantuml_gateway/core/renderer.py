"""
Diagram Rendering

Wraps the external PlantUML engine behind a narrow ``render(source, format)``
capability, adds source validation and result caching, and maps the engine's
failures onto ``EngineRenderError`` / ``EmptyRenderOutputError``.

The default engine runs ``plantuml.jar`` in pipe mode::

    java -jar plantuml.jar -tsvg -pipe < diagram.puml > diagram.svg
"""

import logging
import subprocess
from enum import Enum
from typing import List, Optional, Protocol

from .cache import DiagramCache, NullDiagramCache, make_cache_key
from .errors import EmptyInputError, EmptyRenderOutputError, EngineRenderError, UnsupportedFormatError
from .validator import validate_block_source
from ..utils.config import Config

logger = logging.getLogger(__name__)


class OutputFormat(Enum):
    """Image formats the rendering engine can produce."""
    PNG = "png"
    SVG = "svg"
    PDF = "pdf"
    EPS = "eps"

    @property
    def extension(self) -> str:
        return self.value

    @property
    def plantuml_flag(self) -> str:
        return f"-t{self.value}"

    @property
    def media_type(self) -> str:
        return _MEDIA_TYPES[self]


_MEDIA_TYPES = {
    OutputFormat.PNG: "image/png",
    OutputFormat.SVG: "image/svg+xml",
    OutputFormat.PDF: "application/pdf",
    OutputFormat.EPS: "application/postscript",
}


def parse_format(token) -> OutputFormat:
    """
    Resolve a format token such as ``"png"`` or ``"SVG"``.

    ``None`` selects SVG. ``OutputFormat`` members pass through unchanged.

    Raises:
        UnsupportedFormatError: token is not one of PNG, SVG, PDF, EPS
    """
    if token is None:
        return OutputFormat.SVG
    if isinstance(token, OutputFormat):
        return token
    try:
        return OutputFormat[str(token).strip().upper()]
    except KeyError:
        raise UnsupportedFormatError(str(token)) from None


class RenderEngine(Protocol):
    """Anything that turns PlantUML source into image bytes.

    Implementations raise ``EngineRenderError`` when the engine rejects the
    source or cannot be run.
    """

    def render(self, source: str, fmt: OutputFormat) -> bytes:
        ...


class PlantUMLJarEngine:
    """Runs the PlantUML jar as a subprocess, one invocation per diagram."""

    def __init__(self, jar_path: str, java_bin: str = "java", timeout_seconds: float = 60):
        self.jar_path = jar_path
        self.java_bin = java_bin
        self.timeout_seconds = timeout_seconds

    @classmethod
    def from_config(cls, config: Config) -> "PlantUMLJarEngine":
        return cls(
            jar_path=config.PLANTUML_JAR,
            java_bin=config.JAVA_BIN,
            timeout_seconds=config.RENDER_TIMEOUT_SECONDS,
        )

    def build_command(self, fmt: OutputFormat) -> List[str]:
        return [
            self.java_bin,
            "-Djava.awt.headless=true",
            "-jar", self.jar_path,
            fmt.plantuml_flag,
            "-pipe",
            "-charset", "UTF-8",
        ]

    def render(self, source: str, fmt: OutputFormat) -> bytes:
        cmd = self.build_command(fmt)
        try:
            result = subprocess.run(
                cmd,
                input=source.encode("utf-8"),
                capture_output=True,
                timeout=self.timeout_seconds,
            )
        except subprocess.TimeoutExpired:
            raise EngineRenderError(
                f"PlantUML rendering timed out after {self.timeout_seconds} seconds"
            ) from None
        except FileNotFoundError as e:
            raise EngineRenderError(f"PlantUML engine not available: {e}") from e

        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            raise EngineRenderError(
                f"Failed to generate diagram (exit code {result.returncode}): "
                f"{stderr or 'no error output'}"
            )

        return result.stdout


class DiagramRenderer:
    """Validates diagram source, consults the cache and calls the engine."""

    def __init__(
        self,
        engine: RenderEngine,
        config: Optional[Config] = None,
        cache: Optional[DiagramCache] = None,
    ):
        self.engine = engine
        self.config = config or Config()
        self.cache = cache if cache is not None else NullDiagramCache()

    def render(self, source: str, fmt=None, sequence: Optional[int] = None) -> bytes:
        """
        Render one diagram.

        Args:
            source: PlantUML source text
            fmt: Output format token or ``OutputFormat`` (default from config)
            sequence: Block number, only used in error messages

        Returns:
            Non-empty image bytes
        """
        output_format = parse_format(fmt if fmt is not None else self.config.DEFAULT_FORMAT)

        if source is None or not source.strip():
            raise EmptyInputError("PlantUML code cannot be empty")

        validate_block_source(source, self.config, sequence)

        cache_key = make_cache_key(source, output_format.name)
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.debug("Cache hit for diagram %s", cache_key[:12])
            return cached

        data = self.engine.render(source, output_format)
        if not data:
            raise EmptyRenderOutputError("PlantUML generation resulted in empty output")

        self.cache.put(cache_key, data)
        logger.debug("Generated %s diagram of %d bytes", output_format.name, len(data))
        return data
