"""
Delimited text (CSV, TSV, semicolon) question files.

The first non-blank line is the header: it picks the delimiter and is
auto-mapped to question fields. Every following line is validated on its own.
"""
import logging
from typing import List, Tuple

from survey_import.domain.imports.mapper import (
    auto_map_columns,
    clean_header,
    describe_confidence,
    field_index_from_mappings,
    get_columns_needing_review,
    has_missing_required_field,
)
from survey_import.domain.imports.validators import ParsedFile, build_question_from_row

logger = logging.getLogger(__name__)

BYTE_ORDER_MARK = "\ufeff"


def normalize_text(content: str) -> Tuple[str, List[str]]:
    """
    Normalize raw file text before tokenizing.

    Drops a leading byte-order mark, converts CRLF and lone CR line endings
    to LF, and splits into lines, discarding lines that are blank.

    Args:
        content: Decoded file text

    Returns:
        Tuple of (normalized_text, non_blank_lines)
    """
    if content.startswith(BYTE_ORDER_MARK):
        content = content[1:]
    normalized = content.replace("\r\n", "\n").replace("\r", "\n")
    lines = [line for line in normalized.split("\n") if line.strip()]
    return normalized, lines


def detect_delimiter(header_line: str) -> str:
    """
    Infer the field delimiter from the header line.

    Counts tabs, commas and semicolons outside double quotes. Any tab wins
    when it is at least as frequent as the other two; a semicolon must
    strictly outnumber commas; comma is the default.
    """
    tab_count = comma_count = semicolon_count = 0
    in_quotes = False
    i = 0
    while i < len(header_line):
        char = header_line[i]
        if char == '"':
            if in_quotes and i + 1 < len(header_line) and header_line[i + 1] == '"':
                i += 2  # escaped quote, stays inside
                continue
            in_quotes = not in_quotes
        elif not in_quotes:
            if char == "\t":
                tab_count += 1
            elif char == ",":
                comma_count += 1
            elif char == ";":
                semicolon_count += 1
        i += 1

    if tab_count > 0 and tab_count >= comma_count and tab_count >= semicolon_count:
        return "\t"
    if semicolon_count > comma_count:
        return ";"
    return ","


def parse_delimited_line(line: str, delimiter: str = ",") -> List[str]:
    """
    Split one line into fields, honouring double-quoted values.

    A field that starts with ``"`` is quoted: delimiters inside it are kept,
    ``""`` is an escaped quote and a lone ``"`` closes it. Unquoted fields
    are trimmed; quoted content keeps its whitespace.

    Examples:
        '"a, b",c' -> ['a, b', 'c']
        '"a""b",c' -> ['a"b', 'c']
    """
    fields: List[str] = []
    current: List[str] = []
    in_quotes = False
    was_quoted = False
    quoted_length = 0  # characters belonging to the quoted section

    def finish_field() -> None:
        value = "".join(current)
        if was_quoted:
            fields.append(value[:quoted_length] + value[quoted_length:].rstrip())
        else:
            fields.append(value.strip())

    i = 0
    while i < len(line):
        char = line[i]
        if in_quotes:
            if char == '"':
                if i + 1 < len(line) and line[i + 1] == '"':
                    current.append('"')
                    i += 2
                    continue
                in_quotes = False
                quoted_length = len(current)
            else:
                current.append(char)
        elif char == delimiter:
            finish_field()
            current = []
            was_quoted = False
            quoted_length = 0
        elif char == '"' and not "".join(current).strip():
            # Opening quote, possibly after leading spaces
            current = []
            in_quotes = True
            was_quoted = True
        else:
            current.append(char)
        i += 1

    if in_quotes:
        # Unterminated quote: everything up to end of line belongs to the field
        quoted_length = len(current)
    finish_field()
    return fields


def process_csv(content: str, max_questions: int = 200) -> ParsedFile:
    """
    Parse delimited (CSV, TSV, semicolon) question text.

    The header row is auto-mapped to question fields, then every data row is
    validated on its own. Fatal problems (no data rows, no question text
    column, too many rows) are returned in ``errors``.

    Args:
        content: Decoded file text
        max_questions: Maximum number of data rows accepted in one file

    Returns:
        ParsedFile with one outcome per data row
    """
    parsed = ParsedFile()
    _, lines = normalize_text(content)

    if len(lines) < 2:
        parsed.errors.append("File must have a header row and at least one data row")
        return parsed

    delimiter = detect_delimiter(lines[0])
    headers = [clean_header(header) for header in parse_delimited_line(lines[0], delimiter)]
    logger.info(f"Detected delimiter {delimiter!r} with {len(headers)} header columns")

    parsed.column_mappings = auto_map_columns(headers)

    if has_missing_required_field(parsed.column_mappings):
        parsed.errors.append(
            'Missing required column: "text" or "question". '
            "No column could be auto-mapped to the question text field."
        )
        return parsed

    for mapping in get_columns_needing_review(parsed.column_mappings):
        parsed.warnings.append(
            f'Column "{mapping.header_text}" -> "{mapping.target_field.value}" '
            f"({describe_confidence(mapping.confidence)}), verify mapping"
        )

    data_lines = lines[1:]
    if len(data_lines) > max_questions:
        parsed.errors.append(
            f"File contains {len(data_lines)} data rows. Maximum is {max_questions}."
        )
        return parsed

    field_index = field_index_from_mappings(parsed.column_mappings)
    column_indexes = {target.value: index for target, index in field_index.items()}
    logger.debug(f"Column indexes: {column_indexes}")

    parsed.outcomes = [
        build_question_from_row(row_number, parse_delimited_line(line, delimiter), field_index)
        for row_number, line in enumerate(data_lines, start=2)
    ]
    return parsed
