"""Tests for ZIP archive assembly."""

import io
import zipfile
from datetime import datetime, timezone

import pytest

from plantuml_gateway.core.archive import (
    ArchiveAssembler,
    METADATA_FILE_NAME,
    archive_file_name,
    processed_file_name,
)
from plantuml_gateway.core.errors import ArchiveWriteError
from plantuml_gateway.core.processor import MarkdownProcessor
from plantuml_gateway.utils.config import Config

from conftest import diagram, plantuml_block

FIXED_TIME = datetime(2024, 5, 1, 12, 30, 0, tzinfo=timezone.utc)


@pytest.fixture
def result(renderer, config):
    text = (
        "# Notes\n\n"
        + plantuml_block(diagram("one")) + "\n\n"
        + plantuml_block("@startuml\nFAIL\n@enduml") + "\n\n"
        + plantuml_block(diagram("three")) + "\n"
    )
    return MarkdownProcessor(renderer, config).process(text, file_name="notes.md")


def open_zip(data: bytes) -> zipfile.ZipFile:
    return zipfile.ZipFile(io.BytesIO(data))


class TestArchiveNames:

    def test_processed_file_name(self):
        assert processed_file_name("notes.md") == "notes_processed.md"

    def test_archive_file_name(self):
        assert archive_file_name("notes.markdown") == "notes_processed.zip"


class TestArchiveAssembler:
    """Tests for entry order and content."""

    def test_entry_order(self, result, config):
        data = ArchiveAssembler(config, clock=lambda: FIXED_TIME).create_archive(result)

        with open_zip(data) as archive:
            assert archive.namelist() == [
                "notes_processed.md",
                "notes_diagram_1.svg",
                "notes_diagram_3.svg",
                METADATA_FILE_NAME,
            ]

    def test_entries_match_result(self, result, config):
        data = ArchiveAssembler(config).create_archive(result)

        with open_zip(data) as archive:
            assert archive.read("notes_processed.md").decode("utf-8") == result.rewritten_text
            assert archive.read("notes_diagram_3.svg") == result.diagrams[1].data
            assert archive.testzip() is None

    def test_source_entry(self, result):
        config = Config(include_source_in_zip=True)
        data = ArchiveAssembler(config).create_archive(result)

        with open_zip(data) as archive:
            names = archive.namelist()
            assert names[-2:] == ["source/notes.md", METADATA_FILE_NAME]
            assert archive.read("source/notes.md").decode("utf-8") == result.source_text

    def test_metadata(self, result, config):
        data = ArchiveAssembler(config, clock=lambda: FIXED_TIME).create_archive(result)

        with open_zip(data) as archive:
            metadata = archive.read(METADATA_FILE_NAME).decode("utf-8")

        assert "Original file: notes.md" in metadata
        assert "Processed on: 2024-05-01T12:30:00+00:00" in metadata
        assert "Total PlantUML blocks: 3" in metadata
        assert "Generated diagrams: 2" in metadata
        assert "Failed blocks: 1" in metadata
        assert "Output format: SVG" in metadata
        assert f"- notes_diagram_1.svg ({result.diagrams[0].size} bytes)" in metadata

    def test_entry_timestamps_use_clock(self, result, config):
        data = ArchiveAssembler(config, clock=lambda: FIXED_TIME).create_archive(result)

        with open_zip(data) as archive:
            assert archive.getinfo(METADATA_FILE_NAME).date_time == (2024, 5, 1, 12, 30, 0)

    def test_default_document_name(self, renderer, config):
        result = MarkdownProcessor(renderer, config).process(plantuml_block(diagram("a")))
        data = ArchiveAssembler(config).create_archive(result)

        with open_zip(data) as archive:
            assert archive.namelist() == ["document_processed.md", "diagram_1.svg", METADATA_FILE_NAME]

    def test_explicit_name_overrides_result(self, result, config):
        data = ArchiveAssembler(config).create_archive(result, "other.md")

        with open_zip(data) as archive:
            assert archive.namelist()[0] == "other_processed.md"

    def test_no_compression(self, result):
        data = ArchiveAssembler(Config(zip_compression_level=0)).create_archive(result)

        with open_zip(data) as archive:
            assert archive.read("notes_processed.md").decode("utf-8") == result.rewritten_text

    def test_write_failure(self, result, config, monkeypatch):
        def broken_writestr(self, *args, **kwargs):
            raise OSError("disk full")

        monkeypatch.setattr(zipfile.ZipFile, "writestr", broken_writestr)

        with pytest.raises(ArchiveWriteError, match="Archive generation failed: disk full"):
            ArchiveAssembler(config).create_archive(result)
