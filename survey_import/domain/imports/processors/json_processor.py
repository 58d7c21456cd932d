"""
JSON survey documents: ``{"title", "description", "questions": [...]}``.

The whole document is parsed up front; each question item is then lifted on
its own so a bad item is skipped with a warning instead of failing the file.
"""
import json
import logging
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

from survey_import.api.schemas.shared import CHOICE_QUESTION_TYPES, RANGED_QUESTION_TYPES
from survey_import.domain.imports.processors.csv_processor import BYTE_ORDER_MARK
from survey_import.domain.imports.validators import (
    AcceptedQuestion,
    ParsedFile,
    RejectedQuestion,
    RowOutcome,
    check_choice_options,
    check_rating_bounds,
    coerce_points,
    finite_number,
    resolve_question_type,
)

logger = logging.getLogger(__name__)


class RawQuestionItem(BaseModel):
    """
    Untyped view of one element of the ``questions`` array.

    Fields are kept as raw JSON values; ``lift_question_item`` is the only
    place they are interpreted.
    """
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    text: Any = None
    type: Any = None
    options: Any = None
    required: Any = None
    placeholder: Any = None
    minValue: Any = None
    maxValue: Any = None
    points: Any = None


def _json_number(value: Any) -> Optional[Any]:
    """Only real JSON numbers pass through; strings and booleans do not."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return finite_number(value)


def lift_question_item(position: int, item: Any) -> RowOutcome:
    """
    Convert one raw JSON question into an outcome.

    Args:
        position: 1-based position of the item in the ``questions`` array
        item: Raw JSON value

    Returns:
        AcceptedQuestion, or RejectedQuestion whose reason is user-facing
    """
    if not isinstance(item, dict):
        return RejectedQuestion(reason=f"Question {position}: Not a JSON object, skipped")

    raw = RawQuestionItem.model_validate(item)
    text = str(raw.text).strip() if raw.text is not None else ""
    if not text:
        return RejectedQuestion(reason=f"Question {position}: Missing question text, skipped")

    warnings = []
    question_type, recognized = resolve_question_type(raw.type if raw.type is not None else "text")
    if not recognized:
        warnings.append(f'Question {position}: Invalid type "{raw.type}", defaulting to "text"')

    options = [str(option) for option in raw.options] if isinstance(raw.options, list) else []

    reason = check_choice_options(question_type, options)
    if reason:
        return RejectedQuestion(reason=f"Question {position}: {reason}, skipped", warnings=tuple(warnings))

    min_value = max_value = None
    if question_type in RANGED_QUESTION_TYPES:
        min_value = _json_number(raw.minValue)
        max_value = _json_number(raw.maxValue)
        bounds_warning = check_rating_bounds(question_type, min_value, max_value)
        if bounds_warning:
            warnings.append(f"Question {position}: {bounds_warning}")

    points = None
    if _json_number(raw.points) is not None:
        points = coerce_points(raw.points)
        if points is None:
            warnings.append(f"Question {position}: Points must be a non-negative whole number, ignored")

    return AcceptedQuestion(
        fields={
            "text": text,
            "type": question_type,
            "options": options if question_type in CHOICE_QUESTION_TYPES else [],
            "required": bool(raw.required),
            "placeholder": str(raw.placeholder) if raw.placeholder else None,
            "min_value": min_value,
            "max_value": max_value,
            "points": points,
        },
        warnings=tuple(warnings),
    )


def process_json(content: str, max_questions: int = 200) -> ParsedFile:
    """
    Parse a JSON survey document of the form ``{"title", "description", "questions": [...]}``.

    Syntax errors and a missing or non-array ``questions`` key are fatal;
    problems with individual questions become warnings and the question is
    skipped.
    """
    parsed = ParsedFile()

    if content.startswith(BYTE_ORDER_MARK):
        content = content[1:]

    try:
        document = json.loads(content)
    except json.JSONDecodeError as e:
        parsed.errors.append(f"Invalid JSON syntax: {e.msg} (line {e.lineno}, column {e.colno})")
        return parsed
    except (ValueError, RecursionError) as e:
        # Integer literals past the digit limit, or nesting past the recursion limit
        parsed.errors.append(f"Invalid JSON syntax: {e}")
        return parsed

    questions = document.get("questions") if isinstance(document, dict) else None
    if not isinstance(questions, list):
        parsed.errors.append(
            'Invalid JSON format: missing "questions" array. '
            'Expected { "title": "...", "questions": [...] }'
        )
        return parsed

    if len(questions) > max_questions:
        parsed.errors.append(f"File contains {len(questions)} questions. Maximum is {max_questions}.")
        return parsed

    title = document.get("title")
    description = document.get("description")
    parsed.title = str(title) if title not in (None, "") else None
    parsed.description = str(description) if description not in (None, "") else None

    logger.info(f"Processing {len(questions)} JSON question items")
    parsed.outcomes = [lift_question_item(position, item) for position, item in enumerate(questions, start=1)]
    return parsed
