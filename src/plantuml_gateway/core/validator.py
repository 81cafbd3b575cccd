"""
Input Validation

Checks applied before the rendering engine is invoked:

* document checks (empty input, document size, block count, block size)
  abort processing of the whole document;
* diagram source checks (``!include`` traversal, ``!define`` code execution,
  missing ``@start``/``@end``) only reject the block they apply to;
* uploaded file checks (file name, size, text sniffing, malicious markers,
  line length) run before the content is processed at all.
"""

import logging
import re
from typing import List, Optional, Sequence

from .errors import (
    BlockTooLargeError,
    EmptyInputError,
    FileTooLargeError,
    InvalidFileNameError,
    LineTooLongError,
    MaliciousContentError,
    MissingStartEndTagsError,
    NotTextContentError,
    PathTraversalError,
    TooManyBlocksError,
    UnsafeDirectiveError,
)
from .extractor import SourceBlock, count_blocks
from ..utils.config import Config

logger = logging.getLogger(__name__)

UTF8_BOM = b"\xef\xbb\xbf"
TEXT_SNIFF_WINDOW = 1024
MIN_PRINTABLE_RATIO = 0.95
MAX_FILE_NAME_LENGTH = 255
RESERVED_NAME_PREFIXES = ("con.", "prn.", "aux.", "nul.")

MALICIOUS_PATTERNS = [
    re.compile(r"<script", re.IGNORECASE),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"vbscript:", re.IGNORECASE),
    re.compile(r"data:text/html", re.IGNORECASE),
    re.compile(
        r"\bon(?:load|error|click|dblclick|mouseover|mouseout|mousedown|mouseup"
        r"|focus|blur|submit|change|input|keydown|keyup|keypress)\s*=",
        re.IGNORECASE,
    ),
]

_PRINTABLE_BYTES = frozenset(range(32, 127)) | {9, 10, 13}


def validate_block_source(source: str, config: Optional[Config] = None, sequence: Optional[int] = None) -> None:
    """
    Validate a single diagram source.

    The size limit always applies. The directive and tag checks run only
    when ``VALIDATE_CODE`` is enabled. They are plain substring tests on the
    whole source, so ``..`` anywhere next to an ``!include`` is rejected while
    an absolute ``!include`` path is not. Treat them as a coarse filter.

    Raises:
        BlockTooLargeError: source exceeds ``MAX_CODE_SIZE`` bytes
        PathTraversalError: ``!include`` combined with ``..``
        UnsafeDirectiveError: ``!define`` combined with ``java``
        MissingStartEndTagsError: no ``@start``/``@end`` directive pair
    """
    config = config or Config()

    size = len(source.encode("utf-8"))
    if size > config.MAX_CODE_SIZE:
        raise BlockTooLargeError(size, config.MAX_CODE_SIZE, sequence)

    if not config.VALIDATE_CODE:
        return

    if "!include" in source and ".." in source:
        raise PathTraversalError("Path traversal in !include directive not allowed")

    if "!define" in source and "java" in source:
        raise UnsafeDirectiveError("Java execution in !define not allowed")

    if "@start" not in source or "@end" not in source:
        raise MissingStartEndTagsError(
            "PlantUML code must contain @startuml/@startsalt and @enduml/@endsalt tags"
        )


class DocumentValidator:
    """Whole-document checks for markdown processing."""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()

    def validate_text(self, text: str) -> None:
        if text is None or not text.strip():
            raise EmptyInputError("Markdown content cannot be empty")

        if len(text) > self.config.MAX_DOCUMENT_SIZE:
            raise FileTooLargeError(
                f"Markdown content too large ({len(text)} characters, "
                f"max {self.config.MAX_DOCUMENT_SIZE})"
            )

    def validate_blocks(self, blocks: Sequence[SourceBlock]) -> None:
        """Check block count and per-block size before anything is rendered."""
        if len(blocks) > self.config.MAX_BLOCKS_PER_FILE:
            raise TooManyBlocksError(len(blocks), self.config.MAX_BLOCKS_PER_FILE)

        for block in blocks:
            if block.size_bytes > self.config.MAX_CODE_SIZE:
                raise BlockTooLargeError(block.size_bytes, self.config.MAX_CODE_SIZE, block.sequence)


class FileValidator:
    """Security and format checks for uploaded markdown files."""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()

    @property
    def allowed_extensions(self) -> List[str]:
        return [ext.lower() for ext in self.config.ALLOWED_EXTENSIONS]

    def validate_upload(self, file_name: str, data: bytes) -> str:
        """
        Run every file check and return the decoded document text.

        Args:
            file_name: Original name of the uploaded file
            data: Raw file content

        Returns:
            The file content decoded as UTF-8 (byte-order mark removed)
        """
        self.validate_file_name(file_name)
        self.validate_file_size(len(data))
        text = self.validate_content(data)
        logger.info("File validation passed for: %s", file_name)
        return text

    def validate_file_name(self, file_name: Optional[str]) -> str:
        if file_name is None or not file_name.strip():
            raise InvalidFileNameError("File name cannot be empty")

        name = file_name.strip()

        if ".." in name or "/" in name or "\\" in name:
            raise InvalidFileNameError("File name contains invalid path characters")

        if "\0" in name:
            raise InvalidFileNameError("File name contains null bytes")

        if len(name) > MAX_FILE_NAME_LENGTH:
            raise InvalidFileNameError(f"File name too long (max {MAX_FILE_NAME_LENGTH} characters)")

        lower_name = name.lower()
        if not any(lower_name.endswith(ext) for ext in self.allowed_extensions):
            raise InvalidFileNameError(
                f"File extension not allowed. Allowed extensions: {', '.join(self.config.ALLOWED_EXTENSIONS)}"
            )

        if lower_name.startswith(RESERVED_NAME_PREFIXES):
            raise InvalidFileNameError("Reserved file name not allowed")

        return name

    def validate_file_size(self, size: int) -> None:
        if size <= 0:
            raise EmptyInputError("File is empty")

        if size > self.config.max_file_size_bytes:
            raise FileTooLargeError(
                f"File size ({size} bytes) exceeds maximum allowed ({self.config.MAX_FILE_SIZE_MB}MB)"
            )

    def validate_content(self, data: bytes) -> str:
        if not is_text_content(data):
            raise NotTextContentError("File does not appear to be a text file")

        try:
            text = data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise NotTextContentError(f"File is not valid UTF-8 text: {e}") from e

        for pattern in MALICIOUS_PATTERNS:
            if pattern.search(text):
                raise MaliciousContentError(
                    f"File contains potentially malicious content ({pattern.pattern[:20]})"
                )

        self.validate_line_lengths(text)

        blocks = count_blocks(text)
        if blocks > self.config.MAX_BLOCKS_PER_FILE:
            raise TooManyBlocksError(blocks, self.config.MAX_BLOCKS_PER_FILE)

        return text

    def validate_line_lengths(self, text: str) -> None:
        limit = self.config.MAX_LINE_LENGTH
        for line_number, line in enumerate(text.split("\n"), start=1):
            if len(line) > limit:
                raise LineTooLongError(line_number, len(line), limit)


def is_text_content(data: bytes) -> bool:
    """
    Heuristic text/binary check on the first 1024 bytes.

    A leading UTF-8 byte-order mark is skipped. Any NUL byte marks the data
    as binary, otherwise at least 95% of the window must be printable ASCII
    or tab/newline/carriage return.
    """
    start = len(UTF8_BOM) if data.startswith(UTF8_BOM) else 0
    window = data[start:start + TEXT_SNIFF_WINDOW]
    if not window:
        return True

    if b"\0" in window:
        return False

    printable = sum(1 for b in window if b in _PRINTABLE_BYTES)
    return printable / len(window) >= MIN_PRINTABLE_RATIO
