"""Pytest configuration and fixtures."""

import io
import zipfile
from typing import Dict, List, Sequence

import pytest
from openpyxl import Workbook

from knowledge_import import config
from knowledge_import.services import parser_service, test_generation_service

_ENV_VARS = (
    "APP_NAME",
    "ENVIRONMENT",
    "DEBUG",
    "LOG_LEVEL",
    "ALLOWED_FILE_TYPES",
    "MAX_UPLOAD_SIZE_MB",
    "CORS_ORIGINS",
    "PARSER_VERSION",
    "PARSER_PLACEHOLDER_TEXT",
    "PARSER_EMPTY_EXTRACTION",
    "SEGMENTER_IMPLICIT_HEADINGS",
    "GROK_API_KEY",
    "GROK_BASE_URL",
    "GROK_MODEL",
)


def _reset_singletons() -> None:
    config._settings = None
    parser_service._parser_service = None
    test_generation_service._test_generation_service = None


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Start every test from default settings with no provider key."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    _reset_singletons()
    yield
    _reset_singletons()


def build_docx(paragraphs: Sequence[str]) -> bytes:
    """A minimal DOCX-shaped ZIP; stored uncompressed so run text is visible in the bytes."""
    body = "".join(
        f'<w:p><w:r><w:t xml:space="preserve">{text}</w:t></w:r></w:p>' for text in paragraphs
    )
    document_xml = (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        '<w:document xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main">'
        f"<w:body>{body}</w:body></w:document>"
    )
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_STORED) as archive:
        archive.writestr("[Content_Types].xml", "<Types/>")
        archive.writestr("word/document.xml", document_xml)
    return buffer.getvalue()


def build_xlsx(sheets: Dict[str, List[list]]) -> bytes:
    """An XLSX workbook with one sheet per entry, in insertion order."""
    workbook = Workbook()
    workbook.remove(workbook.active)
    for title, rows in sheets.items():
        sheet = workbook.create_sheet(title=title)
        for row in rows:
            sheet.append(row)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def docx_bytes() -> bytes:
    return build_docx(["Fire safety briefing", "Exits are marked in green."])


@pytest.fixture
def two_sheet_xlsx() -> bytes:
    return build_xlsx(
        {
            "Staff": [["Name", "Role"], ["Anna", "Manager"], ["Boris", "Employee"]],
            "Courses": [["Course", "Hours"], ["Onboarding", 4], ["Safety", 2]],
        }
    )


@pytest.fixture
def make_docx():
    return build_docx


@pytest.fixture
def make_xlsx():
    return build_xlsx
