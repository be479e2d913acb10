"""Custom exception classes for the Knowledge Import service."""

from typing import Any, Dict, Optional


class KnowledgeImportException(Exception):
    """Base exception for all Knowledge Import errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        return {
            "error": {
                "message": self.message,
                "code": self.code,
                "status_code": self.status_code,
                "details": self.details,
            }
        }


class UnsupportedFileTypeError(KnowledgeImportException):
    """Raised when no extractor exists for a file's extension."""

    def __init__(
        self,
        file_type: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        error_details = details or {}
        error_details["file_type"] = file_type
        self.file_type = file_type
        super().__init__(
            message=f"Unsupported file type: {file_type}",
            status_code=415,
            code="UNSUPPORTED_FILE_TYPE",
            details=error_details,
        )


class FileReadError(KnowledgeImportException):
    """Raised when the upload bytes cannot be acquired or an extractor fails unexpectedly."""

    def __init__(
        self,
        message: str = "Failed to read file",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=f"File read error: {message}",
            status_code=400,
            code="FILE_READ_ERROR",
            details=details,
        )


class ParseError(KnowledgeImportException):
    """Raised when format-specific extraction fails."""

    def __init__(
        self,
        message: str = "Document parsing failed",
        file_type: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        error_details = details or {}
        if file_type:
            error_details["file_type"] = file_type
        super().__init__(
            message=f"Parse error: {message}",
            status_code=422,
            code="PARSE_ERROR",
            details=error_details,
        )


class TestGenerationError(KnowledgeImportException):
    """Raised when the completion provider call fails."""

    __test__ = False

    def __init__(
        self,
        message: str = "Test generation failed",
        status_code: int = 502,
        code: str = "TEST_GENERATION_ERROR",
        provider_status: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        error_details = details or {}
        if provider_status is not None:
            error_details["provider_status"] = provider_status
        self.provider_status = provider_status
        super().__init__(
            message=message,
            status_code=status_code,
            code=code,
            details=error_details,
        )


class RegionRestrictedError(TestGenerationError):
    """Raised when the completion provider refuses requests from this region."""

    def __init__(
        self,
        message: str = "Completion provider is not available in this region",
        provider_status: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            status_code=451,
            code="REGION_RESTRICTED",
            provider_status=provider_status,
            details=details,
        )
