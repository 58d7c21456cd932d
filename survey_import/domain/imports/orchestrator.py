"""
Import orchestration: decode, dispatch to a format processor, aggregate.

``parse_import`` is the single entry point used by the preview API, the
preview client's local fallback and the console. It is a pure function of
(content, file type): no state is kept between calls, so the same bytes
always produce the same ImportResult.
"""
import csv
import logging
from dataclasses import dataclass, field
from functools import reduce
from io import StringIO
from typing import Iterable, List, Optional, Sequence, Union

from survey_import.api.schemas.shared import (
    ImportFileType,
    ImportResult,
    InvalidRow,
    QuestionRecord,
)
from survey_import.core.config import settings
from survey_import.domain.imports.processors.csv_processor import process_csv
from survey_import.domain.imports.processors.json_processor import process_json
from survey_import.domain.imports.validators import AcceptedQuestion, ParsedFile, RowOutcome

logger = logging.getLogger(__name__)

IMPORTED_ID_PREFIX = "imported_"

_EXTENSION_FILE_TYPES = {
    "json": ImportFileType.JSON,
    "csv": ImportFileType.CSV,
    "tsv": ImportFileType.EXCEL,
    "tab": ImportFileType.EXCEL,
    "txt": ImportFileType.EXCEL,
    "xls": ImportFileType.EXCEL,
}


@dataclass
class OutcomeTally:
    """Accumulators for the outcome fold."""
    questions: List[QuestionRecord] = field(default_factory=list)
    invalid_rows: List[InvalidRow] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def _fold_outcome(tally: OutcomeTally, outcome: RowOutcome) -> OutcomeTally:
    tally.warnings.extend(outcome.warnings)
    if isinstance(outcome, AcceptedQuestion):
        question_id = f"{IMPORTED_ID_PREFIX}{len(tally.questions) + 1}"
        tally.questions.append(QuestionRecord(id=question_id, **outcome.fields))
    elif outcome.invalid_row is not None:
        tally.invalid_rows.append(outcome.invalid_row)
    else:
        tally.warnings.append(outcome.reason)
    return tally


def aggregate_outcomes(outcomes: Iterable[RowOutcome]) -> OutcomeTally:
    """
    Fold per-row outcomes into accepted questions and rejections.

    Ids are assigned here, counting accepted questions only, so they stay
    contiguous (imported_1, imported_2 ...) regardless of skipped input.
    """
    return reduce(_fold_outcome, outcomes, OutcomeTally())


def build_import_result(parsed: ParsedFile) -> ImportResult:
    """Turn a processor's ParsedFile into the final ImportResult."""
    if parsed.errors:
        return ImportResult(
            title=parsed.title,
            description=parsed.description,
            errors=list(parsed.errors),
            warnings=list(parsed.warnings),
            column_mappings=list(parsed.column_mappings),
        )

    tally = aggregate_outcomes(parsed.outcomes)
    warnings = list(parsed.warnings) + tally.warnings
    if tally.invalid_rows:
        warnings.append(f"{len(tally.invalid_rows)} row(s) skipped due to validation errors")

    return ImportResult(
        title=parsed.title,
        description=parsed.description,
        questions=tally.questions,
        warnings=warnings,
        errors=[],
        invalid_rows=tally.invalid_rows,
        column_mappings=list(parsed.column_mappings),
    )


def parse_import(
    content: Union[bytes, str],
    file_type: Union[ImportFileType, str],
    max_questions: Optional[int] = None,
) -> ImportResult:
    """
    Parse an uploaded question file into an ImportResult.

    Args:
        content: File content; bytes are decoded as UTF-8
        file_type: Declared file type (json, csv or excel/TSV)
        max_questions: Optional override of the per-file question cap

    Returns:
        ImportResult. Fatal problems are reported in ``errors``, never raised.

    Raises:
        UnicodeDecodeError: If the bytes are not UTF-8 text at all
    """
    file_type = ImportFileType(file_type)
    text = content.decode("utf-8") if isinstance(content, bytes) else content
    limit = settings.max_questions_per_file if max_questions is None else max_questions

    if file_type == ImportFileType.JSON:
        parsed = process_json(text, max_questions=limit)
    else:
        parsed = process_csv(text, max_questions=limit)

    result = build_import_result(parsed)
    logger.info(
        f"Parsed {file_type.value} import: {len(result.questions)} question(s), "
        f"{len(result.invalid_rows)} invalid row(s), {len(result.warnings)} warning(s), "
        f"{len(result.errors)} error(s)"
    )
    return result


def detect_file_type(filename: Optional[str], content_type: Optional[str] = None) -> ImportFileType:
    """
    Pick the import format from a file name, falling back to the content type.

    Unknown extensions are parsed as delimited text.
    """
    extension = ""
    if filename and "." in filename:
        extension = filename.rsplit(".", 1)[-1].lower()
    if extension in _EXTENSION_FILE_TYPES:
        return _EXTENSION_FILE_TYPES[extension]
    if content_type == "application/json":
        return ImportFileType.JSON
    if content_type == "text/tab-separated-values":
        return ImportFileType.EXCEL
    return ImportFileType.CSV


def serialize_invalid_rows_to_csv(invalid_rows: Sequence[InvalidRow], headers: Sequence[str] = ()) -> str:
    """
    Serialize rejected rows so the user can fix and re-import them.

    The output starts with a ``row`` and ``reason`` column followed by the
    original cells. csv.writer takes care of quoting commas and quotes.
    """
    buffer = StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(["row", "reason", *headers])
    for invalid_row in invalid_rows:
        writer.writerow([invalid_row.row_index, invalid_row.reason, *invalid_row.raw_values])
    return buffer.getvalue()
