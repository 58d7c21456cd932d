"""
Field-level validation and question building for imported survey rows.

Every data row (CSV/TSV) or question item (JSON) is turned into exactly one
outcome: ``AcceptedQuestion`` carrying the validated fields, or
``RejectedQuestion`` carrying the reason it was skipped. Outcomes are folded
into the final result by the orchestrator, so one bad row can never affect
another.
"""
import json
import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from survey_import.api.schemas.shared import (
    CHOICE_QUESTION_TYPES,
    MIN_CHOICE_OPTIONS,
    RANGED_QUESTION_TYPES,
    ColumnMapping,
    InvalidRow,
    Number,
    QuestionType,
    TargetField,
)

logger = logging.getLogger(__name__)


# Descriptive spellings accepted in addition to the enum values
QUESTION_TYPE_ALIASES = {
    "short-text": QuestionType.TEXT,
    "short_text": QuestionType.TEXT,
    "short text": QuestionType.TEXT,
    "single-choice": QuestionType.RADIO,
    "single_choice": QuestionType.RADIO,
    "single choice": QuestionType.RADIO,
    "multi-choice": QuestionType.CHECKBOX,
    "multi_choice": QuestionType.CHECKBOX,
    "multi choice": QuestionType.CHECKBOX,
}

_INTEGER_RE = re.compile(r"^[+-]?\d+$")
_SURROUNDING_QUOTE_RE = re.compile(r"^[\"']|[\"']$")


@dataclass(frozen=True)
class AcceptedQuestion:
    """Validated question fields (everything except the id) plus soft warnings."""
    fields: Dict[str, Any]
    warnings: Tuple[str, ...] = ()


@dataclass(frozen=True)
class RejectedQuestion:
    """A skipped unit of input. CSV rows carry an InvalidRow, JSON items a warning."""
    reason: str
    invalid_row: Optional[InvalidRow] = None
    warnings: Tuple[str, ...] = ()


RowOutcome = Union[AcceptedQuestion, RejectedQuestion]


@dataclass
class ParsedFile:
    """Output of a format processor, before outcomes are aggregated."""
    outcomes: List[RowOutcome] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    column_mappings: List[ColumnMapping] = field(default_factory=list)
    title: Optional[str] = None
    description: Optional[str] = None


def strip_quotes(value: Optional[str]) -> str:
    """Remove one leading and one trailing quote character, then trim."""
    if not value:
        return ""
    return _SURROUNDING_QUOTE_RE.sub("", value.strip()).strip()


def resolve_question_type(raw_type: Any) -> Tuple[QuestionType, bool]:
    """
    Resolve a raw type value against the closed question type set.

    Returns:
        Tuple of (question_type, recognized). Unrecognized values resolve
        to short text with recognized=False.
    """
    if raw_type is None:
        return QuestionType.TEXT, False
    candidate = str(raw_type).strip().lower()
    try:
        return QuestionType(candidate), True
    except ValueError:
        pass
    alias = QUESTION_TYPE_ALIASES.get(candidate)
    if alias is not None:
        return alias, True
    return QuestionType.TEXT, False


def parse_options(raw_value: Optional[str]) -> List[str]:
    """
    Parse a spreadsheet options cell.

    JSON array syntax (``["A", "B"]``) is tried first when the value starts
    with ``[``; anything else, including malformed JSON, is split on ``|``.
    """
    value = strip_quotes(raw_value)
    if not value:
        return []

    if value.startswith("["):
        try:
            parsed = json.loads(value)
        except ValueError:
            parsed = None
        if isinstance(parsed, list):
            return [str(item).strip() for item in parsed if item is not None and str(item).strip()]

    return [option.strip() for option in value.split("|") if option.strip()]


def finite_number(number: Number) -> Optional[Number]:
    """Return the number unless it is infinite, NaN or too large to hold as a float."""
    try:
        return number if math.isfinite(number) else None
    except OverflowError:
        return None


def coerce_number(raw_value: Any) -> Optional[Number]:
    """Convert a cell or JSON value to int/float, or None when it is not numeric."""
    if raw_value is None or isinstance(raw_value, bool):
        return None
    if isinstance(raw_value, (int, float)):
        return finite_number(raw_value)

    text = str(raw_value).strip()
    if not text:
        return None
    try:
        number = int(text) if _INTEGER_RE.match(text) else float(text)
    except ValueError:
        # Not a number, or an integer longer than the interpreter will convert
        return None
    return finite_number(number)


def coerce_points(raw_value: Any) -> Optional[int]:
    """Return a non-negative whole number of points, or None if the value cannot be one."""
    number = coerce_number(raw_value)
    if number is None or number < 0 or number != int(number):
        return None
    return int(number)


def check_choice_options(question_type: QuestionType, options: Sequence[str]) -> Optional[str]:
    """Return a rejection reason when a choice question has too few options."""
    if question_type in CHOICE_QUESTION_TYPES and len(options) < MIN_CHOICE_OPTIONS:
        return f'Type "{question_type.value}" requires at least {MIN_CHOICE_OPTIONS} options'
    return None


def check_rating_bounds(
    question_type: QuestionType,
    min_value: Optional[Number],
    max_value: Optional[Number],
) -> Optional[str]:
    if question_type != QuestionType.RATING or min_value is None or max_value is None:
        return None
    if min_value >= max_value:
        return f"Rating minValue ({min_value}) must be less than maxValue ({max_value})"
    return None


def _cell(values: Sequence[str], index: Optional[int]) -> Optional[str]:
    if index is None or index >= len(values):
        return None
    return values[index]


def build_question_from_row(
    row_number: int,
    values: Sequence[str],
    field_index: Dict[TargetField, int],
) -> RowOutcome:
    """
    Validate one tokenized spreadsheet row and build its question fields.

    Args:
        row_number: 1-based line number as the user sees it (header is row 1)
        values: Tokenized cell values for the row
        field_index: Target field -> column index, from the column mappings

    Returns:
        AcceptedQuestion or RejectedQuestion (with an InvalidRow)
    """
    raw_values = list(values)

    def reject(reason: str) -> RejectedQuestion:
        logger.debug(f"Row {row_number} rejected: {reason}")
        return RejectedQuestion(
            reason=reason,
            invalid_row=InvalidRow(row_index=row_number, reason=reason, raw_values=raw_values),
        )

    text = strip_quotes(_cell(values, field_index.get(TargetField.TEXT)))
    if not text:
        return reject("Empty question text")

    warnings: List[str] = []

    question_type = QuestionType.TEXT
    if TargetField.TYPE in field_index:
        raw_type = (_cell(values, field_index[TargetField.TYPE]) or "").strip().lower()
        question_type, recognized = resolve_question_type(raw_type)
        if not recognized:
            warnings.append(f'Row {row_number}: Invalid type "{raw_type}", using "text"')

    options: List[str] = []
    if TargetField.OPTIONS in field_index:
        options = parse_options(_cell(values, field_index[TargetField.OPTIONS]))

    reason = check_choice_options(question_type, options)
    if reason:
        return reject(reason)

    required_cell = _cell(values, field_index.get(TargetField.REQUIRED))
    required = (required_cell or "").strip().lower() == "true"

    min_value = max_value = None
    if question_type in RANGED_QUESTION_TYPES:
        min_value = coerce_number(_cell(values, field_index.get(TargetField.MIN_VALUE)))
        max_value = coerce_number(_cell(values, field_index.get(TargetField.MAX_VALUE)))
        bounds_warning = check_rating_bounds(question_type, min_value, max_value)
        if bounds_warning:
            warnings.append(f"Row {row_number}: {bounds_warning}")

    points = 0
    points_cell = _cell(values, field_index.get(TargetField.POINTS))
    if points_cell and points_cell.strip():
        coerced = coerce_points(points_cell)
        if coerced is None:
            warnings.append(
                f'Row {row_number}: Points "{points_cell.strip()}" is not a non-negative whole number, using 0'
            )
        else:
            points = coerced

    placeholder = strip_quotes(_cell(values, field_index.get(TargetField.PLACEHOLDER))) or None

    return AcceptedQuestion(
        fields={
            "text": text,
            "type": question_type,
            "options": options if question_type in CHOICE_QUESTION_TYPES else [],
            "required": required,
            "placeholder": placeholder,
            "min_value": min_value,
            "max_value": max_value,
            "points": points,
        },
        warnings=tuple(warnings),
    )
