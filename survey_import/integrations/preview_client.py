"""
Preview client: remote parsing first, local pipeline as fallback.

The preview service and the local pipeline produce the same ImportResult, so
callers only need ``PreviewOutcome.source`` to show whether the file was
validated by the server or parsed locally.
"""
import logging
from typing import Optional, Union

import requests
from pydantic import ValidationError

from survey_import.api.schemas.shared import ImportFileType, ImportResult, PreviewOutcome
from survey_import.core.config import settings
from survey_import.domain.imports.orchestrator import parse_import

logger = logging.getLogger(__name__)

PREVIEW_PATH = "/api/surveys/import/preview"

# Status codes whose body is an ImportResult (422 carries a fatal result)
CONTRACT_STATUS_CODES = (200, 422)

_UPLOAD_CONTENT_TYPES = {
    ImportFileType.JSON: "application/json",
    ImportFileType.CSV: "text/csv",
    ImportFileType.EXCEL: "text/tab-separated-values",
}


def fetch_remote_preview(
    content: bytes,
    file_type: ImportFileType,
    filename: Optional[str] = None,
    base_url: Optional[str] = None,
    timeout: Optional[float] = None,
) -> ImportResult:
    """
    Ask the preview service to parse a file.

    Raises:
        requests.exceptions.RequestException: On network errors or an unexpected status
        ValueError: If the response body is not a valid ImportResult
    """
    url = (base_url or settings.remote_preview_url).rstrip("/") + PREVIEW_PATH
    upload_name = filename or f"import.{'tsv' if file_type == ImportFileType.EXCEL else file_type.value}"

    response = requests.post(
        url,
        files={"file": (upload_name, content, _UPLOAD_CONTENT_TYPES[file_type])},
        data={"file_type": file_type.value},
        timeout=timeout or settings.remote_preview_timeout_seconds,
    )
    if response.status_code not in CONTRACT_STATUS_CODES:
        raise requests.exceptions.HTTPError(
            f"Preview service returned HTTP {response.status_code}", response=response
        )

    try:
        return ImportResult.model_validate(response.json())
    except ValidationError as e:
        raise ValueError(f"Preview service response does not match ImportResult: {e}") from e


def preview_import(
    content: Union[bytes, str],
    file_type: Union[ImportFileType, str],
    filename: Optional[str] = None,
    base_url: Optional[str] = None,
) -> PreviewOutcome:
    """
    Preview a file, preferring the remote service.

    Any remote failure (network error, unexpected status, malformed body)
    falls back to the local pipeline. When no service URL is configured the
    local pipeline runs directly.

    Raises:
        UnicodeDecodeError: If the content is not UTF-8 text
    """
    file_type = ImportFileType(file_type)
    raw = content.encode("utf-8") if isinstance(content, str) else content

    if base_url or settings.remote_preview_url:
        try:
            result = fetch_remote_preview(raw, file_type, filename=filename, base_url=base_url)
            return PreviewOutcome(result=result, source="server")
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.warning(f"Remote preview failed, parsing locally instead: {e}")

    return PreviewOutcome(result=parse_import(raw, file_type), source="local")
