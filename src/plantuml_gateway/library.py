"""
Plain library facade for PlantUML diagram generation.

Usable without the HTTP layer::

    library = PlantUMLLibrary()

    png = library.generate_png("@startuml\\nAlice -> Bob\\n@enduml")
    svg = library.generate_svg("@startuml\\nAlice -> Bob\\n@enduml")

    result = library.process_markdown(markdown_text, file_name="notes.md")
    bundle = library.create_archive(result)
"""

import logging
from pathlib import Path
from typing import Dict, Any, List, Optional

from .core.archive import ArchiveAssembler, archive_file_name, processed_file_name
from .core.cache import DiagramCache, InMemoryDiagramCache, NullDiagramCache
from .core.errors import NotTextContentError
from .core.processor import MarkdownProcessor, ProcessingResult
from .core.renderer import DiagramRenderer, OutputFormat, PlantUMLJarEngine, RenderEngine
from .utils.config import Config

logger = logging.getLogger(__name__)


def build_cache(config: Config) -> DiagramCache:
    """Cache matching the configuration (a no-op cache when caching is off)."""
    if not config.ENABLE_CACHING:
        return NullDiagramCache()
    return InMemoryDiagramCache(
        ttl_seconds=config.CACHE_TTL_SECONDS,
        max_entries=config.CACHE_MAX_ENTRIES,
    )


def read_text_file(path: Path) -> str:
    """Read a UTF-8 file, dropping a leading BOM."""
    try:
        return Path(path).read_bytes().decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise NotTextContentError(f"File is not valid UTF-8 text: {e}") from e


class PlantUMLLibrary:
    """Diagram generation, markdown processing and archive assembly."""

    def __init__(
        self,
        config: Optional[Config] = None,
        engine: Optional[RenderEngine] = None,
        cache: Optional[DiagramCache] = None,
    ):
        self.config = config or Config()
        self.engine = engine or PlantUMLJarEngine.from_config(self.config)
        self.cache = cache if cache is not None else build_cache(self.config)
        self.renderer = DiagramRenderer(self.engine, self.config, self.cache)
        self.processor = MarkdownProcessor(self.renderer, self.config)
        self.assembler = ArchiveAssembler(self.config)

    def generate_diagram(self, source: str, fmt=None) -> bytes:
        """Render PlantUML source in the given format (default from config)."""
        return self.renderer.render(source, fmt)

    def generate_png(self, source: str) -> bytes:
        return self.renderer.render(source, OutputFormat.PNG)

    def generate_svg(self, source: str) -> bytes:
        return self.renderer.render(source, OutputFormat.SVG)

    def process_markdown(self, text: str, file_name: Optional[str] = None, fmt=None) -> ProcessingResult:
        return self.processor.process(text, file_name=file_name, fmt=fmt)

    def create_archive(self, result: ProcessingResult, file_name: Optional[str] = None) -> bytes:
        return self.assembler.create_archive(result, file_name)

    def process_markdown_file(self, input_path: Path, output_dir: Path, fmt=None,
                              as_archive: bool = False) -> Dict[str, Any]:
        """
        Process a markdown file from disk and write the results.

        Args:
            input_path: Markdown file to read
            output_dir: Directory that receives the output files
            fmt: Output format token
            as_archive: Write a single ZIP instead of loose files

        Returns:
            Summary with the processing result and the files written
        """
        input_path = Path(input_path)
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        text = read_text_file(input_path)
        result = self.process_markdown(text, file_name=input_path.name, fmt=fmt)

        written: List[Path] = []
        if as_archive:
            target = output_dir / archive_file_name(input_path.name)
            target.write_bytes(self.create_archive(result, input_path.name))
            written.append(target)
        else:
            target = output_dir / processed_file_name(input_path.name)
            target.write_text(result.rewritten_text, encoding="utf-8")
            written.append(target)
            for diagram in result.diagrams:
                diagram_path = output_dir / diagram.file_name
                diagram_path.write_bytes(diagram.data)
                written.append(diagram_path)

        logger.info("Wrote %d files to %s", len(written), output_dir)
        return {
            "result": result,
            "files": written,
        }
