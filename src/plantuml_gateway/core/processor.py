"""
Markdown Processing

Extracts PlantUML blocks from a markdown document, renders each one and
rewrites the document: rendered blocks become image references, failed
blocks are kept as they were, preceded by an HTML comment with the reason.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .errors import BlockError
from .extractor import SourceBlock, list_blocks
from .renderer import DiagramRenderer, OutputFormat, parse_format
from .validator import DocumentValidator
from ..utils.config import Config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderedDiagram:
    """A successfully rendered block."""
    sequence: int
    file_name: str
    data: bytes
    source: str

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class BlockFailure:
    """A block that was left in place because it could not be rendered."""
    sequence: int
    reason: str


@dataclass(frozen=True)
class ProcessingResult:
    """Outcome of processing one markdown document."""
    rewritten_text: str
    diagrams: Tuple[RenderedDiagram, ...]
    total_blocks: int
    output_format: OutputFormat
    source_text: str
    file_name: Optional[str] = None
    failures: Tuple[BlockFailure, ...] = ()


def strip_extension(file_name: str) -> str:
    """Remove the last extension, keeping dot-files such as ``.md`` intact."""
    dot = file_name.rfind(".")
    return file_name[:dot] if dot > 0 else file_name


def diagram_file_name(sequence: int, fmt: OutputFormat, file_name: Optional[str] = None) -> str:
    """``<base>_diagram_<n>.<ext>``, or ``diagram_<n>.<ext>`` without a file name."""
    if file_name:
        return f"{strip_extension(file_name)}_diagram_{sequence}.{fmt.extension}"
    return f"diagram_{sequence}.{fmt.extension}"


def image_reference(sequence: int, file_name: str) -> str:
    return f"![PlantUML Diagram {sequence}]({file_name})"


def error_annotation(reason: str, raw_block: str) -> str:
    # "-->" would close the comment early; PlantUML arrows often contain it.
    safe_reason = reason.replace("-->", "- ->")
    return f"<!-- PlantUML Error: {safe_reason} -->\n{raw_block}"


class MarkdownProcessor:
    """Rewrites markdown documents, rendering their PlantUML blocks."""

    def __init__(self, renderer: DiagramRenderer, config: Optional[Config] = None):
        self.renderer = renderer
        self.config = config or renderer.config
        self.validator = DocumentValidator(self.config)

    def process(self, text: str, file_name: Optional[str] = None, fmt=None) -> ProcessingResult:
        """
        Process a markdown document.

        Document-level problems (empty text, too many blocks, oversized
        blocks, unknown format) raise before anything is rendered. Problems
        with an individual block are recorded and that block is annotated
        in place.

        Args:
            text: Markdown document
            file_name: Original file name, used to name generated diagrams
            fmt: Output format token (default from config)

        Returns:
            ProcessingResult with the rewritten text and rendered diagrams
        """
        output_format = parse_format(fmt if fmt is not None else self.config.DEFAULT_FORMAT)
        self.validator.validate_text(text)

        blocks = list_blocks(text)
        self.validator.validate_blocks(blocks)

        logger.info("Processing markdown %s: %d PlantUML blocks", file_name or "<text>", len(blocks))

        pieces: List[str] = []
        diagrams: List[RenderedDiagram] = []
        failures: List[BlockFailure] = []
        position = 0

        for block in blocks:
            pieces.append(text[position:block.start])
            position = block.end

            try:
                diagram = self._render_block(block, output_format, file_name)
            except BlockError as e:
                logger.warning("Failed to process PlantUML block #%d: %s", block.sequence, e.message)
                failures.append(BlockFailure(block.sequence, e.message))
                pieces.append(error_annotation(e.message, block.raw_text))
                continue

            diagrams.append(diagram)
            pieces.append(image_reference(diagram.sequence, diagram.file_name))
            logger.debug("Rendered block #%d as %s", block.sequence, diagram.file_name)

        pieces.append(text[position:])

        logger.info(
            "Processed %d PlantUML blocks (%d rendered, %d failed) from %s",
            len(blocks), len(diagrams), len(failures), file_name or "<text>",
        )

        return ProcessingResult(
            rewritten_text="".join(pieces),
            diagrams=tuple(diagrams),
            total_blocks=len(blocks),
            output_format=output_format,
            source_text=text,
            file_name=file_name,
            failures=tuple(failures),
        )

    def _render_block(self, block: SourceBlock, fmt: OutputFormat, file_name: Optional[str]) -> RenderedDiagram:
        if not block.source:
            raise BlockError("PlantUML code cannot be empty")

        data = self.renderer.render(block.source, fmt, sequence=block.sequence)
        return RenderedDiagram(
            sequence=block.sequence,
            file_name=diagram_file_name(block.sequence, fmt, file_name),
            data=data,
            source=block.source,
        )
