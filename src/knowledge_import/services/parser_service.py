"""Document parsing service for uploaded DOCX and XLSX files."""

import io
import re
from typing import Callable, List, Optional

from openpyxl import load_workbook
from starlette.concurrency import run_in_threadpool

from knowledge_import.config import EmptyExtractionPolicy, get_settings
from knowledge_import.models.document import (
    ExtractedText,
    ExtractionMetadata,
    ParsedContent,
    RawDocument,
    Table,
)
from knowledge_import.services.segmentation_service import (
    HeadingRule,
    all_caps_heading,
    segment_text,
)
from knowledge_import.utils.errors import (
    FileReadError,
    KnowledgeImportException,
    ParseError,
    UnsupportedFileTypeError,
)
from knowledge_import.utils.logging import get_logger, log_document_parsed

logger = get_logger("parser_service")

ZIP_SIGNATURE = b"PK"
SUPPORTED_TYPES = ("docx", "xlsx")

_RUN_TEXT = re.compile(r"<w:t[^>]*>([^<]*)</w:t>")
_ANY_TAG = re.compile(r"<[^>]*>")
_NOT_READABLE = re.compile(r"[^A-Za-z0-9_\s\u0400-\u04FF]")
_WHITESPACE = re.compile(r"\s+")

# Recovered text this short is treated as a failed extraction
MIN_READABLE_LENGTH = 10


def _collapse_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def _metadata(file_data: bytes, filename: Optional[str], include: bool) -> Optional[ExtractionMetadata]:
    if not include:
        return None
    return ExtractionMetadata(
        parser_version=get_settings().parser.version,
        filename=filename,
        file_size=len(file_data),
    )


def looks_like_zip(file_data: bytes) -> bool:
    """Shallow container check: at least 4 bytes starting with the ZIP signature."""
    return len(file_data) >= 4 and file_data[:2] == ZIP_SIGNATURE


def extract_docx_text(
    file_data: bytes,
    filename: Optional[str] = None,
    include_metadata: bool = True,
    normalize_whitespace: bool = True,
) -> ExtractedText:
    """
    Recover plain text from a DOCX buffer without unzipping it.

    Run-level ``<w:t>`` nodes are searched for directly in the UTF-8-decoded
    bytes. When they yield no text, tags are stripped and only ASCII letters,
    digits, underscores, whitespace and Cyrillic are kept. If that still
    leaves ten characters or fewer, the configured placeholder text is
    returned with ``low_confidence`` set, or ``ParseError`` is raised when
    the ``error`` policy is configured.

    Args:
        file_data: DOCX file bytes
        filename: Filename for logging and metadata
        include_metadata: Attach ExtractionMetadata to the result
        normalize_whitespace: Collapse all whitespace runs to single spaces

    Returns:
        ExtractedText with flat text and no tables

    Raises:
        ParseError: If the buffer is empty or nothing readable was found
            under the ``error`` policy
    """
    if not file_data:
        raise ParseError("Failed to parse DOCX: Empty or invalid buffer provided", file_type="docx")

    parser_settings = get_settings().parser
    decoded = file_data.decode("utf-8", errors="replace")

    runs = _RUN_TEXT.findall(decoded)
    text = _collapse_whitespace(" ".join(runs))
    low_confidence = False
    if not text:
        readable = _collapse_whitespace(_NOT_READABLE.sub(" ", _ANY_TAG.sub(" ", decoded)))
        if len(readable) > MIN_READABLE_LENGTH:
            text = readable
        elif parser_settings.empty_extraction == EmptyExtractionPolicy.ERROR:
            raise ParseError(
                "Failed to parse DOCX: no readable text found",
                file_type="docx",
            )
        else:
            logger.warning(
                f"No readable text recovered from {filename or 'document'}; returning placeholder text"
            )
            text = parser_settings.placeholder_text
            low_confidence = True

    if normalize_whitespace:
        text = _collapse_whitespace(text)

    logger.debug(f"DOCX extraction finished: runs={len(runs)}, chars={len(text)}")

    return ExtractedText(
        text=text,
        metadata=_metadata(file_data, filename, include_metadata),
        low_confidence=low_confidence,
    )


def _cell_to_str(value) -> str:
    if value is None:
        return ""
    return str(value)


def _sheet_grid(sheet) -> List[List[str]]:
    """Rectangular string grid for a worksheet; empty when the sheet has no values."""
    rows = [[_cell_to_str(cell) for cell in row] for row in sheet.iter_rows(values_only=True)]
    if not any(cell.strip() for row in rows for cell in row):
        return []
    width = max(len(row) for row in rows)
    return [row + [""] * (width - len(row)) for row in rows]


def extract_xlsx_text(
    file_data: bytes,
    filename: Optional[str] = None,
    include_metadata: bool = True,
) -> ExtractedText:
    """
    Read every sheet of an XLSX workbook into text and tables.

    Each non-empty sheet contributes a ``## <sheet name>`` heading followed by
    one `` | ``-joined line of non-blank cells per row. A sheet with a header
    row and at least one data row also yields a Table titled after the sheet.

    The workbook is loaded fully rather than in read-only mode: read-only
    worksheets trust the stored dimension record, which some writers leave
    at ``A1``.

    Raises:
        ParseError: If openpyxl cannot read the workbook
    """
    try:
        workbook = load_workbook(io.BytesIO(file_data), data_only=True)
    except Exception as e:
        raise ParseError(f"Failed to parse XLSX: {str(e)}", file_type="xlsx") from e

    text_parts: List[str] = []
    tables: List[Table] = []
    try:
        for sheet in workbook.worksheets:
            rows = _sheet_grid(sheet)
            if not rows:
                continue

            text_parts.append(f"\n## {sheet.title}\n\n")

            headers, data_rows = rows[0], rows[1:]
            if headers and data_rows:
                tables.append(Table(title=sheet.title, headers=headers, rows=data_rows))

            for row in rows:
                row_text = " | ".join(cell for cell in row if cell.strip())
                if row_text:
                    text_parts.append(row_text + "\n")
    except Exception as e:
        raise ParseError(f"Failed to parse XLSX: {str(e)}", file_type="xlsx") from e
    finally:
        workbook.close()

    logger.debug(f"XLSX extraction finished: sheets={len(workbook.sheetnames)}, tables={len(tables)}")

    return ExtractedText(
        text="".join(text_parts),
        metadata=_metadata(file_data, filename, include_metadata),
        tables=tuple(tables),
    )


class ParserService:
    """
    Service for parsing uploaded documents into structured content.

    Supports:
    - DOCX (`.docx`) - heuristic run-text extraction
    - XLSX (`.xlsx`) - openpyxl
    """

    def __init__(self, heading_rule: Optional[HeadingRule] = all_caps_heading):
        """Initialize parser service."""
        self.settings = get_settings()
        self.allowed_types = self.settings.allowed_file_types
        if not self.settings.parser.implicit_headings:
            heading_rule = None
        self.heading_rule = heading_rule

    def _select_extractor(self, file_type: str) -> Optional[Callable[[bytes, str], ExtractedText]]:
        if file_type not in SUPPORTED_TYPES or file_type not in self.allowed_types:
            return None
        return getattr(self, f"_parse_{file_type}")

    def parse_document(
        self, file_data: bytes, filename: str, content_type: Optional[str] = None
    ) -> ParsedContent:
        """
        Parse a document chosen by its filename extension.

        Args:
            file_data: Raw file bytes
            filename: Original filename; its last extension selects the extractor
            content_type: Declared MIME type, logged only

        Returns:
            ParsedContent with sections, tables and counts

        Raises:
            UnsupportedFileTypeError: If the extension has no extractor
            ParseError: If the DOCX signature check or extraction fails
            FileReadError: If the buffer is empty or an extractor fails unexpectedly
        """
        document = RawDocument(data=file_data or b"", filename=filename or "", content_type=content_type)
        file_type = document.extension or "unknown"

        extractor = self._select_extractor(file_type)
        if extractor is None:
            raise UnsupportedFileTypeError(file_type, details={"filename": filename})

        if not document.data:
            raise FileReadError("File is empty", details={"filename": filename})

        logger.info(
            f"Parsing document: type={file_type}, filename={filename}, "
            f"size={document.size}, content_type={content_type or 'n/a'}"
        )

        try:
            extracted = extractor(document.data, document.filename)
        except KnowledgeImportException as e:
            e.details.setdefault("filename", filename)
            raise
        except Exception as e:
            logger.error(f"Unexpected error parsing document: {filename} - {e}", exc_info=True)
            raise FileReadError(
                f"Failed to read file: {str(e)}",
                details={"filename": filename, "file_type": file_type},
            ) from e

        tables = list(extracted.tables) if file_type == "xlsx" else None
        content = segment_text(
            extracted.text,
            document.filename,
            tables=tables,
            heading_rule=self.heading_rule,
        )

        log_document_parsed(
            filename=filename,
            file_type=file_type,
            size=document.size,
            sections=content.metadata.total_sections,
            tables=content.metadata.total_tables,
            words=content.metadata.word_count,
            low_confidence=extracted.low_confidence,
        )
        return content

    async def parse_upload(self, upload) -> ParsedContent:
        """
        Read a FastAPI ``UploadFile`` and parse it.

        Raises:
            FileReadError: If reading the upload fails or exceeds the size limit
        """
        filename = upload.filename or "unknown"
        try:
            file_data = await upload.read()
        except Exception as e:
            raise FileReadError(f"Failed to read file: {str(e)}", details={"filename": filename}) from e

        if len(file_data) > self.settings.max_upload_size_bytes:
            raise FileReadError(
                f"File exceeds maximum size of {self.settings.max_upload_size_mb}MB",
                details={"filename": filename, "size": len(file_data)},
            )

        return await run_in_threadpool(
            self.parse_document, file_data, filename, getattr(upload, "content_type", None)
        )

    def _parse_docx(self, file_data: bytes, filename: str) -> ExtractedText:
        if not looks_like_zip(file_data):
            raise ParseError(
                "Invalid DOCX file format - file does not appear to be a valid DOCX document",
                file_type="docx",
            )
        return extract_docx_text(file_data, filename=filename)

    def _parse_xlsx(self, file_data: bytes, filename: str) -> ExtractedText:
        return extract_xlsx_text(file_data, filename=filename)


_parser_service: Optional[ParserService] = None


def get_parser_service() -> ParserService:
    """Get the shared ParserService instance."""
    global _parser_service
    if _parser_service is None:
        _parser_service = ParserService()
    return _parser_service


def parse_document(file_data: bytes, filename: str, content_type: Optional[str] = None) -> ParsedContent:
    """Parse a document with the shared ParserService."""
    return get_parser_service().parse_document(file_data, filename, content_type)
