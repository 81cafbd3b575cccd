"""Configuration parameters for diagram rendering and markdown processing."""

import os
from typing import Dict, Any, List


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


def _env_list(name: str, default: str) -> List[str]:
    return [item.strip() for item in os.getenv(name, default).split(',') if item.strip()]


class Config:
    """Configuration class for rendering and processing parameters.

    Class attributes hold the environment-derived defaults. An instance can
    override any of them with lower-case keyword arguments::

        Config(max_blocks_per_file=3, default_format='png')
    """

    # Rendering
    DEFAULT_FORMAT = os.getenv('DEFAULT_FORMAT', 'SVG')
    VALIDATE_CODE = _env_bool('VALIDATE_CODE', 'true')
    PLANTUML_JAR = os.getenv('PLANTUML_JAR', '/opt/plantuml/plantuml.jar')
    JAVA_BIN = os.getenv('JAVA_BIN', 'java')
    RENDER_TIMEOUT_SECONDS = int(os.getenv('RENDER_TIMEOUT_SECONDS', '60'))

    # Limits
    MAX_BLOCKS_PER_FILE = int(os.getenv('MAX_BLOCKS_PER_FILE', '50'))
    MAX_CODE_SIZE = int(os.getenv('MAX_CODE_SIZE', '50000'))  # bytes per block
    MAX_DOCUMENT_SIZE = int(os.getenv('MAX_DOCUMENT_SIZE', '1000000'))  # characters
    MAX_FILE_SIZE_MB = int(os.getenv('MAX_FILE_SIZE_MB', '10'))
    MAX_LINE_LENGTH = int(os.getenv('MAX_LINE_LENGTH', '10000'))
    ALLOWED_EXTENSIONS = _env_list('ALLOWED_EXTENSIONS', '.md,.markdown,.txt')

    # Archive output
    ZIP_COMPRESSION_LEVEL = int(os.getenv('ZIP_COMPRESSION_LEVEL', '6'))
    INCLUDE_SOURCE_IN_ZIP = _env_bool('INCLUDE_SOURCE_IN_ZIP', 'false')

    # Result cache
    ENABLE_CACHING = _env_bool('ENABLE_CACHING', 'true')
    CACHE_TTL_SECONDS = int(os.getenv('CACHE_TTL_SECONDS', '3600'))
    CACHE_MAX_ENTRIES = int(os.getenv('CACHE_MAX_ENTRIES', '512'))

    def __init__(self, **overrides: Any):
        for key, value in overrides.items():
            name = key.upper()
            if not hasattr(type(self), name):
                raise TypeError(f"Unknown configuration option: {key}")
            setattr(self, name, value)

    @property
    def max_file_size_bytes(self) -> int:
        return self.MAX_FILE_SIZE_MB * 1024 * 1024

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            'default_format': self.DEFAULT_FORMAT,
            'validate_code': self.VALIDATE_CODE,
            'plantuml_jar': self.PLANTUML_JAR,
            'java_bin': self.JAVA_BIN,
            'render_timeout_seconds': self.RENDER_TIMEOUT_SECONDS,
            'max_blocks_per_file': self.MAX_BLOCKS_PER_FILE,
            'max_code_size': self.MAX_CODE_SIZE,
            'max_document_size': self.MAX_DOCUMENT_SIZE,
            'max_file_size_mb': self.MAX_FILE_SIZE_MB,
            'max_line_length': self.MAX_LINE_LENGTH,
            'allowed_extensions': list(self.ALLOWED_EXTENSIONS),
            'zip_compression_level': self.ZIP_COMPRESSION_LEVEL,
            'include_source_in_zip': self.INCLUDE_SOURCE_IN_ZIP,
            'enable_caching': self.ENABLE_CACHING,
            'cache_ttl_seconds': self.CACHE_TTL_SECONDS,
            'cache_max_entries': self.CACHE_MAX_ENTRIES,
        }
