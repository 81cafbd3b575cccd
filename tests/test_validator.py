"""Tests for document, diagram source and uploaded file validation."""

import pytest

from plantuml_gateway.core.errors import (
    BlockTooLargeError,
    DocumentError,
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
from plantuml_gateway.core.extractor import list_blocks
from plantuml_gateway.core.validator import (
    DocumentValidator,
    FileValidator,
    is_text_content,
    validate_block_source,
)
from plantuml_gateway.utils.config import Config

from conftest import SIMPLE_DIAGRAM, diagram, plantuml_block


class TestValidateBlockSource:
    """Tests for per-diagram content safety checks."""

    def test_valid_source_passes(self, config):
        validate_block_source(SIMPLE_DIAGRAM, config)

    def test_include_with_parent_directory_rejected(self, config):
        """``!include ../../etc/passwd`` is a path traversal attempt."""
        source = "@startuml\n!include ../../etc/passwd\n@enduml"
        with pytest.raises(PathTraversalError, match="Path traversal"):
            validate_block_source(source, config)

    def test_path_traversal_is_an_unsafe_directive(self, config):
        source = "@startuml\n!include ../x.puml\n@enduml"
        with pytest.raises(UnsafeDirectiveError):
            validate_block_source(source, config)

    def test_include_without_parent_directory_allowed(self, config):
        """The check needs both tokens, so a plain include passes."""
        validate_block_source("@startuml\n!include common.puml\n@enduml", config)

    def test_define_with_java_rejected(self, config):
        source = "@startuml\n!define RUN java.lang.Runtime\n@enduml"
        with pytest.raises(UnsafeDirectiveError, match="!define"):
            validate_block_source(source, config)

    def test_missing_start_tag_rejected(self, config):
        with pytest.raises(MissingStartEndTagsError):
            validate_block_source("Alice -> Bob\n@enduml", config)

    def test_missing_end_tag_rejected(self, config):
        with pytest.raises(MissingStartEndTagsError):
            validate_block_source("@startuml\nAlice -> Bob", config)

    def test_startsalt_accepted(self, config):
        validate_block_source("@startsalt\n{ Login | \"user\" }\n@endsalt", config)

    def test_size_limit(self):
        config = Config(max_code_size=20)
        with pytest.raises(BlockTooLargeError, match="max 20 bytes"):
            validate_block_source(SIMPLE_DIAGRAM, config)

    def test_disabled_validation_skips_directive_checks(self):
        config = Config(validate_code=False)
        validate_block_source("Alice -> Bob\n!include ../secret", config)

    def test_disabled_validation_keeps_size_limit(self):
        config = Config(validate_code=False, max_code_size=5)
        with pytest.raises(BlockTooLargeError):
            validate_block_source("Alice -> Bob", config)


class TestDocumentValidator:
    """Tests for whole-document checks."""

    @pytest.fixture
    def validator(self, config):
        return DocumentValidator(config)

    @pytest.mark.parametrize("text", ["", "   ", "\n\t\n"])
    def test_empty_document(self, validator, text):
        with pytest.raises(EmptyInputError):
            validator.validate_text(text)

    def test_document_too_large(self):
        validator = DocumentValidator(Config(max_document_size=10))
        with pytest.raises(FileTooLargeError):
            validator.validate_text("x" * 11)

    def test_too_many_blocks_names_limit(self, validator):
        text = "\n".join(plantuml_block(diagram(str(i))) for i in range(6))
        with pytest.raises(TooManyBlocksError, match="Maximum allowed: 5") as excinfo:
            validator.validate_blocks(list_blocks(text))
        assert excinfo.value.found == 6

    def test_block_limit_is_inclusive(self, validator):
        text = "\n".join(plantuml_block(diagram(str(i))) for i in range(5))
        validator.validate_blocks(list_blocks(text))

    def test_block_too_large_aborts_document(self):
        validator = DocumentValidator(Config(max_code_size=30, max_blocks_per_file=5))
        text = plantuml_block("@startuml\n" + "A -> B\n" * 10 + "@enduml")
        with pytest.raises(BlockTooLargeError, match="block #1") as excinfo:
            validator.validate_blocks(list_blocks(text))
        assert isinstance(excinfo.value, DocumentError)


class TestFileNameValidation:
    """Tests for uploaded file name checks."""

    @pytest.fixture
    def validator(self, config):
        return FileValidator(config)

    @pytest.mark.parametrize("name", ["notes.md", "README.MARKDOWN", "todo.txt", "  spaced.md  "])
    def test_valid_names(self, validator, name):
        assert validator.validate_file_name(name) == name.strip()

    @pytest.mark.parametrize("name", [
        None,
        "",
        "   ",
        "../evil.md",
        "dir/notes.md",
        "dir\\notes.md",
        "notes\0.md",
        "notes.exe",
        "notes.md.exe",
        "con.md",
        "PRN.md",
        "Aux.markdown",
        "nul.txt",
    ])
    def test_invalid_names(self, validator, name):
        with pytest.raises(InvalidFileNameError):
            validator.validate_file_name(name)

    def test_name_too_long(self, validator):
        with pytest.raises(InvalidFileNameError, match="255"):
            validator.validate_file_name("a" * 253 + ".md")

    def test_name_at_length_limit(self, validator):
        name = "a" * 252 + ".md"
        assert validator.validate_file_name(name) == name

    def test_custom_extensions(self):
        validator = FileValidator(Config(allowed_extensions=[".mdx"]))
        validator.validate_file_name("page.mdx")
        with pytest.raises(InvalidFileNameError, match=".mdx"):
            validator.validate_file_name("page.md")


class TestFileSizeValidation:
    """Tests for uploaded file size checks."""

    def test_empty_file(self, config):
        with pytest.raises(EmptyInputError):
            FileValidator(config).validate_file_size(0)

    def test_over_limit(self, config):
        with pytest.raises(FileTooLargeError, match="1MB"):
            FileValidator(config).validate_file_size(1024 * 1024 + 1)

    def test_at_limit(self, config):
        FileValidator(config).validate_file_size(1024 * 1024)


class TestIsTextContent:
    """Tests for the text/binary heuristic."""

    def test_plain_text(self):
        assert is_text_content(b"# Title\n\nSome text\twith tabs\r\n")

    def test_empty(self):
        assert is_text_content(b"")

    def test_bom_only(self):
        assert is_text_content(b"\xef\xbb\xbf")

    def test_bom_is_skipped(self):
        assert is_text_content(b"\xef\xbb\xbf" + b"hello world")

    def test_null_byte_is_binary(self):
        assert not is_text_content(b"hello\0world")

    def test_null_byte_after_window_is_ignored(self):
        assert is_text_content(b"a" * 1024 + b"\0")

    def test_png_header_is_binary(self):
        assert not is_text_content(b"\x89PNG\r\n\x1a\n" + bytes(range(128, 256)))

    def test_ratio_threshold(self):
        """Five non-printable bytes in a hundred is still text, six is not."""
        assert is_text_content(b"a" * 95 + b"\x80" * 5)
        assert not is_text_content(b"a" * 94 + b"\x80" * 6)


class TestFileContentValidation:
    """Tests for uploaded file content checks."""

    @pytest.fixture
    def validator(self, config):
        return FileValidator(config)

    def test_returns_decoded_text_without_bom(self, validator):
        text = validator.validate_content(b"\xef\xbb\xbf# Notes\n")
        assert text == "# Notes\n"

    def test_binary_rejected(self, validator):
        with pytest.raises(NotTextContentError):
            validator.validate_content(b"\0\1\2\3binary")

    def test_invalid_utf8_rejected(self, validator):
        with pytest.raises(NotTextContentError, match="UTF-8"):
            validator.validate_content(b"a" * 200 + b"\xff")

    @pytest.mark.parametrize("payload", [
        "<script>alert(1)</script>",
        "<SCRIPT src=x>",
        "[x](javascript:alert(1))",
        "[x](VBScript:msgbox)",
        "<img src=x onerror=alert(1)>",
        '<body onload = "go()">',
        "<a href='data:text/html;base64,AAAA'>x</a>",
    ])
    def test_malicious_markers_rejected(self, validator, payload):
        with pytest.raises(MaliciousContentError):
            validator.validate_content(f"# Notes\n\n{payload}\n".encode("utf-8"))

    def test_words_starting_with_on_are_fine(self, validator):
        validator.validate_content(b"Go online = fine. Only = ok. Once=fine\n")

    def test_long_line_rejected(self, validator):
        with pytest.raises(LineTooLongError, match="Line 2"):
            validator.validate_content(b"ok\n" + b"x" * 10001 + b"\n")

    def test_line_at_limit_accepted(self, validator):
        validator.validate_content(b"x" * 10000 + b"\n")

    def test_too_many_blocks_rejected(self, validator):
        text = "\n".join(plantuml_block(diagram(str(i))) for i in range(6))
        with pytest.raises(TooManyBlocksError):
            validator.validate_content(text.encode("utf-8"))

    def test_validate_upload_checks_name_first(self, validator):
        """A bad name is rejected before the content is inspected."""
        with pytest.raises(InvalidFileNameError):
            validator.validate_upload("../evil.md", b"\0binary")

    def test_validate_upload(self, validator):
        text = validator.validate_upload("notes.md", plantuml_block(SIMPLE_DIAGRAM).encode("utf-8"))
        assert "@startuml" in text
