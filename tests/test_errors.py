"""Tests for custom exceptions."""

from knowledge_import.utils.errors import (
    FileReadError,
    KnowledgeImportException,
    ParseError,
    RegionRestrictedError,
    TestGenerationError,
    UnsupportedFileTypeError,
)


class TestCustomExceptions:
    """Test suite for custom exceptions."""

    def test_base_exception(self):
        error = KnowledgeImportException("Something broke")
        assert str(error) == "Something broke"
        assert error.status_code == 500
        assert error.code == "KnowledgeImportException"
        assert error.details == {}

    def test_to_dict(self):
        error = FileReadError("File is empty", details={"filename": "a.docx"})
        assert error.to_dict() == {
            "error": {
                "message": "File read error: File is empty",
                "code": "FILE_READ_ERROR",
                "status_code": 400,
                "details": {"filename": "a.docx"},
            }
        }

    def test_unsupported_file_type(self):
        error = UnsupportedFileTypeError("pdf")
        assert error.message == "Unsupported file type: pdf"
        assert error.status_code == 415
        assert error.code == "UNSUPPORTED_FILE_TYPE"
        assert error.details == {"file_type": "pdf"}

    def test_parse_error(self):
        error = ParseError("Failed to parse XLSX: bad zip", file_type="xlsx")
        assert error.message == "Parse error: Failed to parse XLSX: bad zip"
        assert error.status_code == 422
        assert error.code == "PARSE_ERROR"
        assert error.details["file_type"] == "xlsx"

    def test_test_generation_error(self):
        error = TestGenerationError("Completion provider returned 500", provider_status=500)
        assert error.status_code == 502
        assert error.code == "TEST_GENERATION_ERROR"
        assert error.details == {"provider_status": 500}

    def test_region_restricted_error(self):
        error = RegionRestrictedError(provider_status=403)
        assert error.status_code == 451
        assert error.code == "REGION_RESTRICTED"
        assert error.provider_status == 403

    def test_exception_inheritance(self):
        """Test that all custom exceptions inherit from base."""
        assert issubclass(UnsupportedFileTypeError, KnowledgeImportException)
        assert issubclass(FileReadError, KnowledgeImportException)
        assert issubclass(ParseError, KnowledgeImportException)
        assert issubclass(TestGenerationError, KnowledgeImportException)
        assert issubclass(RegionRestrictedError, TestGenerationError)
