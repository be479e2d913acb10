"""Document models for uploaded files and parsed content."""

from datetime import datetime, timezone
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class RawDocument(BaseModel):
    """An uploaded file held in memory for the duration of one parse call."""

    model_config = ConfigDict(frozen=True)

    data: bytes = Field(..., description="Raw file bytes")
    filename: str = Field(..., description="Original filename as supplied by the client")
    content_type: Optional[str] = Field(None, description="Declared MIME type, if any")

    @property
    def extension(self) -> Optional[str]:
        """Lowercased text after the last dot of the filename."""
        if "." not in self.filename:
            return None
        return self.filename.rsplit(".", 1)[-1].lower() or None

    @property
    def size(self) -> int:
        return len(self.data)


class ExtractionMetadata(BaseModel):
    """Bookkeeping attached to an extractor's output."""

    model_config = ConfigDict(frozen=True)

    parsed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    parser_version: str = Field(default="1.0.0", description="Extractor version")
    filename: Optional[str] = Field(None, description="Source filename")
    file_size: Optional[int] = Field(None, description="Source size in bytes")


class Table(BaseModel):
    """A titled grid of string cells with a distinguished header row."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(..., description="Sheet name or 'Data Table' for detected tables")
    headers: List[str] = Field(default_factory=list, description="Header row cells")
    # Row length is not forced to match the header length
    rows: List[List[str]] = Field(default_factory=list, description="Data rows")


class ExtractedText(BaseModel):
    """
    Flat text produced by an extractor.

    The spreadsheet extractor also fills ``tables`` with the grids it read
    directly from the workbook; those bypass pipe-table detection.
    """

    model_config = ConfigDict(frozen=True)

    text: str = Field(default="", description="Unstructured extracted text")
    metadata: Optional[ExtractionMetadata] = Field(None, description="Extraction metadata")
    tables: Tuple[Table, ...] = Field(default=(), description="Tables read directly from the source")
    low_confidence: bool = Field(
        default=False,
        description="True when the text is a placeholder rather than recovered content",
    )


class Section(BaseModel):
    """A titled, leveled span of a document's extracted text."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(..., description="Heading text")
    level: int = Field(..., ge=1, le=6, description="Heading level")
    content: str = Field(default="", description="Body lines, newline-joined")
    order: int = Field(..., ge=1, description="1-based position in the document")


class ContentMetadata(BaseModel):
    """Aggregate counts for a parsed document."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    total_sections: int = Field(..., ge=0, alias="totalSections")
    total_tables: int = Field(..., ge=0, alias="totalTables")
    word_count: int = Field(..., ge=0, alias="wordCount")


class ParsedContent(BaseModel):
    """Structured result of parsing one uploaded document."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    sections: List[Section] = Field(..., min_length=1, description="Sections in document order")
    tables: List[Table] = Field(default_factory=list, description="Tables in document order")
    metadata: ContentMetadata = Field(..., description="Aggregate counts")
