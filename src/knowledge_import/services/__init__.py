"""Services package."""

from knowledge_import.services.parser_service import ParserService, get_parser_service, parse_document
from knowledge_import.services.segmentation_service import all_caps_heading, segment_text
from knowledge_import.services.test_generation_service import (
    TestGenerationService,
    get_test_generation_service,
)

__all__ = [
    "ParserService",
    "TestGenerationService",
    "all_caps_heading",
    "get_parser_service",
    "get_test_generation_service",
    "parse_document",
    "segment_text",
]
