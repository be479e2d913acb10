"""Document import endpoints."""

from fastapi import APIRouter, Depends, File, UploadFile

from knowledge_import.models.document import ParsedContent
from knowledge_import.services.parser_service import ParserService, get_parser_service

router = APIRouter(prefix="/documents", tags=["documents"])


@router.post(
    "/parse",
    response_model=ParsedContent,
    response_model_by_alias=True,
    summary="Parse Document",
    description="Extract sections and tables from an uploaded DOCX or XLSX file.",
    responses={
        400: {"description": "File could not be read"},
        415: {"description": "Unsupported file type"},
        422: {"description": "File could not be parsed"},
    },
)
async def parse_document(
    file: UploadFile = File(..., description="DOCX or XLSX file"),
    parser: ParserService = Depends(get_parser_service),
) -> ParsedContent:
    """
    Parse an uploaded document.

    Nothing is stored: the parsed structure is returned for preview and
    the upload is discarded.
    """
    return await parser.parse_upload(file)
