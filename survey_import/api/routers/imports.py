"""
Survey import endpoints: server-side preview parsing and sample templates.
"""
import logging
from typing import Optional

from fastapi import APIRouter, File, Form, HTTPException, UploadFile
from fastapi.responses import JSONResponse, Response

from survey_import.api.schemas.shared import ImportFileType, PreviewResponse
from survey_import.core.config import settings
from survey_import.domain.imports.orchestrator import detect_file_type, parse_import
from survey_import.domain.imports.templates import SAMPLE_FORMATS, get_sample_template

router = APIRouter(prefix="/api/surveys", tags=["imports"])

logger = logging.getLogger(__name__)


@router.post("/import/preview", response_model=PreviewResponse)
async def preview_import_endpoint(
    file: UploadFile = File(...),
    file_type: Optional[ImportFileType] = Form(None),
):
    """
    Parse an uploaded survey file and return structured preview data.

    Parameters:
    - file: JSON, CSV or TSV file
    - file_type: Optional declared format; detected from the file name otherwise

    Returns:
    - 200 with the parsed questions, warnings, invalid rows and column mappings
    - 422 with the same shape when the file has fatal errors
    """
    file_content = await file.read()
    max_bytes = settings.upload_max_file_size_mb * 1024 * 1024

    if not file_content:
        raise HTTPException(status_code=400, detail="No file content provided. Please upload a JSON, CSV, or TSV file.")
    if len(file_content) > max_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File size exceeds {settings.upload_max_file_size_mb}MB limit. Please reduce the file size.",
        )

    resolved_type = file_type or detect_file_type(file.filename, file.content_type)
    logger.info("Received import preview for '%s' as %s", file.filename, resolved_type.value)

    try:
        result = parse_import(file_content, resolved_type)
    except UnicodeDecodeError:
        logger.warning("Upload '%s' is not UTF-8 text", file.filename)
        raise HTTPException(status_code=400, detail="Failed to parse file. Please check the format and try again.")
    except Exception:
        logger.exception("Unexpected error while parsing '%s'", file.filename)
        raise HTTPException(status_code=500, detail="Failed to parse file. Please check the format and try again.")

    response = PreviewResponse.from_result(result)
    if result.is_fatal:
        return JSONResponse(status_code=422, content=response.model_dump(mode="json", by_alias=True))
    return response


@router.get("/import/samples/{sample_format}")
async def get_sample_template_endpoint(sample_format: str):
    """Download a sample template file (json, csv or tsv)."""
    if sample_format not in SAMPLE_FORMATS:
        raise HTTPException(
            status_code=400,
            detail=f'Unsupported format "{sample_format}". Use json, csv, or tsv.',
        )

    content_type, file_name = SAMPLE_FORMATS[sample_format]
    return Response(
        content=get_sample_template(sample_format),
        media_type=content_type,
        headers={"Content-Disposition": f'attachment; filename="{file_name}"'},
    )
