"""
ZIP Archive Assembly

Bundles a processed markdown document with its generated diagrams. Entries
are written in a fixed order:

1. ``<base>_processed.md``
2. every diagram, in block order
3. ``source/<file name>`` (optional)
4. ``metadata.txt``
"""

import io
import logging
import zipfile
from datetime import datetime, timezone
from typing import List, Optional

from .errors import ArchiveWriteError
from .processor import ProcessingResult, strip_extension
from ..utils.config import Config

logger = logging.getLogger(__name__)

METADATA_FILE_NAME = "metadata.txt"
DEFAULT_DOCUMENT_NAME = "document.md"


def processed_file_name(file_name: str) -> str:
    return f"{strip_extension(file_name)}_processed.md"


def archive_file_name(file_name: str) -> str:
    """Name offered for download, e.g. ``notes_processed.zip``."""
    return f"{strip_extension(file_name)}_processed.zip"


class ArchiveAssembler:
    """Creates ZIP bundles from processing results."""

    def __init__(self, config: Optional[Config] = None, clock=None):
        self.config = config or Config()
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def create_archive(self, result: ProcessingResult, file_name: Optional[str] = None) -> bytes:
        """
        Build the archive in memory.

        Args:
            result: Output of ``MarkdownProcessor.process``
            file_name: Original file name (defaults to the one on ``result``)

        Returns:
            ZIP file content

        Raises:
            ArchiveWriteError: any entry could not be written
        """
        name = file_name or result.file_name or DEFAULT_DOCUMENT_NAME
        logger.info("Creating ZIP archive for file: %s", name)

        buffer = io.BytesIO()
        try:
            with zipfile.ZipFile(
                buffer,
                mode="w",
                compression=zipfile.ZIP_DEFLATED,
                compresslevel=self.config.ZIP_COMPRESSION_LEVEL,
            ) as archive:
                self._write(archive, processed_file_name(name), result.rewritten_text.encode("utf-8"),
                            "Processed markdown with PlantUML diagram references")

                for diagram in result.diagrams:
                    self._write(archive, diagram.file_name, diagram.data,
                                f"Generated PlantUML diagram #{diagram.sequence}")

                if self.config.INCLUDE_SOURCE_IN_ZIP:
                    self._write(archive, f"source/{name}", result.source_text.encode("utf-8"),
                                "Original markdown source file")

                self._write(archive, METADATA_FILE_NAME, self.build_metadata(result, name).encode("utf-8"),
                            "Processing metadata")
        except (OSError, ValueError, zipfile.BadZipFile) as e:
            logger.error("Failed to create ZIP archive for %s: %s", name, e)
            raise ArchiveWriteError(f"Archive generation failed: {e}") from e

        data = buffer.getvalue()
        logger.info("Created ZIP archive of %d bytes with %d diagrams", len(data), len(result.diagrams))
        return data

    def _write(self, archive: zipfile.ZipFile, entry_name: str, data: bytes, comment: str) -> None:
        info = zipfile.ZipInfo(entry_name, date_time=self._clock().timetuple()[:6])
        info.compress_type = zipfile.ZIP_DEFLATED
        info.comment = comment.encode("utf-8")
        archive.writestr(info, data, compresslevel=self.config.ZIP_COMPRESSION_LEVEL)
        logger.debug("Added %s (%d bytes)", entry_name, len(data))

    def build_metadata(self, result: ProcessingResult, file_name: str) -> str:
        """Plain-text summary stored as the last archive entry."""
        lines: List[str] = [
            "PlantUML Processing Metadata",
            "============================",
            "",
            f"Original file: {file_name}",
            f"Processed on: {self._clock().isoformat()}",
            f"Total PlantUML blocks: {result.total_blocks}",
            f"Generated diagrams: {len(result.diagrams)}",
            f"Failed blocks: {len(result.failures)}",
            f"Output format: {result.output_format.name}",
            "",
            "Generated Files:",
            f"- {processed_file_name(file_name)}",
        ]
        lines.extend(f"- {d.file_name} ({d.size} bytes)" for d in result.diagrams)
        return "\n".join(lines) + "\n"
