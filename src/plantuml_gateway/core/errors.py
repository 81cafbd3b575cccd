"""
Error types raised while rendering diagrams and processing documents.

Two families matter to callers:

* ``DocumentError`` aborts the whole request. No partial result is produced.
* ``BlockError`` concerns a single diagram source. Inside markdown processing
  it is recovered: the block is annotated in place and processing continues.
  For single-diagram generation it propagates like any other error.

``ArchiveWriteError`` only aborts archive assembly; the processing result it
was built from remains valid.
"""

from typing import Optional


class GatewayError(Exception):
    """Base class for all rendering and processing errors."""
    code = "GATEWAY_ERROR"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class DocumentError(GatewayError):
    """Failure that aborts processing of the whole input."""
    code = "DOCUMENT_ERROR"


class EmptyInputError(DocumentError):
    code = "EMPTY_INPUT"


class TooManyBlocksError(DocumentError):
    code = "TOO_MANY_BLOCKS"

    def __init__(self, found: int, limit: int):
        super().__init__(f"Too many PlantUML blocks ({found}). Maximum allowed: {limit}")
        self.found = found
        self.limit = limit


class BlockTooLargeError(DocumentError):
    code = "BLOCK_TOO_LARGE"

    def __init__(self, size: int, limit: int, sequence: Optional[int] = None):
        where = f"PlantUML block #{sequence}" if sequence else "PlantUML code"
        super().__init__(f"{where} too large ({size} bytes, max {limit} bytes)")
        self.size = size
        self.limit = limit
        self.sequence = sequence


class UnsupportedFormatError(DocumentError):
    code = "UNSUPPORTED_FORMAT"

    def __init__(self, token: str):
        super().__init__(f"Unsupported format: {token}. Supported formats: PNG, SVG, PDF, EPS")
        self.token = token


class InvalidFileNameError(DocumentError):
    code = "INVALID_FILE_NAME"


class FileTooLargeError(DocumentError):
    code = "FILE_TOO_LARGE"
    status_code = 413


class NotTextContentError(DocumentError):
    code = "NOT_TEXT_CONTENT"


class MaliciousContentError(DocumentError):
    code = "MALICIOUS_CONTENT"


class LineTooLongError(DocumentError):
    code = "LINE_TOO_LONG"

    def __init__(self, line_number: int, length: int, limit: int):
        super().__init__(
            f"Line {line_number} is too long ({length} characters, max {limit})"
        )
        self.line_number = line_number
        self.length = length
        self.limit = limit


class BlockError(GatewayError):
    """Failure confined to a single diagram source."""
    code = "BLOCK_ERROR"


class UnsafeDirectiveError(BlockError):
    code = "UNSAFE_DIRECTIVE"


class PathTraversalError(UnsafeDirectiveError):
    code = "PATH_TRAVERSAL"


class MissingStartEndTagsError(BlockError):
    code = "MISSING_START_END_TAGS"


class EngineRenderError(BlockError):
    """The rendering engine reported an error for this source."""
    code = "ENGINE_RENDER_FAILURE"


class EmptyRenderOutputError(BlockError):
    code = "EMPTY_RENDER_OUTPUT"


class ArchiveWriteError(GatewayError):
    code = "ARCHIVE_WRITE_FAILURE"
    status_code = 500
