"""
PlantUML Block Extraction

This module scans markdown text for fenced ```plantuml code blocks and yields
them as immutable records in document order, together with their positions
in the original text.
"""

import re
from dataclasses import dataclass
from typing import Iterator, List


# Opening fence on a line of its own, body, then the next bare closing fence.
PLANTUML_BLOCK_PATTERN = re.compile(
    r"^```plantuml[ \t]*\r?\n(?P<body>.*?)^```[ \t]*(?=\r?$)",
    re.DOTALL | re.MULTILINE | re.IGNORECASE,
)


@dataclass(frozen=True)
class SourceBlock:
    """A fenced PlantUML block found in a markdown document."""
    source: str        # trimmed text between the fences
    raw_text: str      # the whole fenced block as it appears in the document
    start: int
    end: int
    sequence: int      # 1-based, document order

    @property
    def size_bytes(self) -> int:
        return len(self.source.encode("utf-8"))


def extract_blocks(text: str) -> Iterator[SourceBlock]:
    """
    Yield every complete PlantUML block of ``text`` in document order.

    An opening fence without a matching closing fence is not reported.
    Calling this again on the same text yields the same blocks.
    """
    for sequence, match in enumerate(PLANTUML_BLOCK_PATTERN.finditer(text), start=1):
        yield SourceBlock(
            source=match.group("body").strip(),
            raw_text=match.group(0),
            start=match.start(),
            end=match.end(),
            sequence=sequence,
        )


def list_blocks(text: str) -> List[SourceBlock]:
    """Materialize ``extract_blocks`` into a list."""
    return list(extract_blocks(text))


def count_blocks(text: str) -> int:
    """Count complete PlantUML blocks without building block records."""
    return sum(1 for _ in PLANTUML_BLOCK_PATTERN.finditer(text))
