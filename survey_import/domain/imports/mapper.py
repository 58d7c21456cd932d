"""
Column auto-mapping for spreadsheet question imports.

Maps free-text header cells ("Question Text", "Choices", "Pts" ...) onto the
fixed set of question target fields. Each header gets at most one target and
each target at most one header; the match strength is reported as a
confidence level so low-certainty guesses can be surfaced for review.
"""
import logging
import re
from difflib import SequenceMatcher
from typing import Dict, List, Optional, Sequence, Tuple

from survey_import.api.schemas.shared import ColumnMapping, ConfidenceLevel, TargetField
from survey_import.core.config import settings

logger = logging.getLogger(__name__)


# Target field -> known header spellings, already normalized (lowercase alphanumerics).
# Dict order is the tie-break order when several fields match equally well.
FIELD_ALIASES: Dict[TargetField, Tuple[str, ...]] = {
    TargetField.TEXT: (
        "text", "question", "questiontext", "prompt", "label", "title",
        "surveyquestion",
    ),
    TargetField.TYPE: (
        "type", "questiontype", "kind", "format", "inputtype", "fieldtype",
        "answertype",
    ),
    TargetField.OPTIONS: (
        "options", "choices", "answers", "answeroptions", "values",
        "optionlist",
    ),
    TargetField.REQUIRED: (
        "required", "mandatory", "isrequired", "mustanswer", "compulsory",
        "obligatory",
    ),
    TargetField.MIN_VALUE: (
        "minvalue", "min", "minimum", "lowerbound", "minrating", "rangemin",
    ),
    TargetField.MAX_VALUE: (
        "maxvalue", "max", "maximum", "upperbound", "maxrating", "rangemax",
    ),
    TargetField.POINTS: (
        "points", "score", "value", "point", "weight", "marks", "questionpoints",
    ),
    TargetField.PLACEHOLDER: (
        "placeholder", "hint", "helpertext", "helptext", "inputhint",
        "description",
    ),
}

# Shortened headers people actually type. They are guesses, so they only
# ever map at low confidence.
FIELD_ABBREVIATIONS: Dict[TargetField, Tuple[str, ...]] = {
    TargetField.TEXT: ("q",),
    TargetField.OPTIONS: ("opts",),
    TargetField.POINTS: ("pt", "pts"),
}

# Shorter side of a containment or fuzzy match must be at least this long
MIN_CONTAINMENT_LENGTH = 3

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")


def normalize_header(header: str) -> str:
    """
    Normalize a header for alias comparison.

    Examples:
        "Question Text" -> "questiontext"
        "min_value" -> "minvalue"
        "Is Required?" -> "isrequired"
    """
    return _NON_ALNUM_RE.sub("", header.lower())


def clean_header(header: str) -> str:
    """Strip surrounding quote characters and whitespace from a tokenized header cell."""
    return header.strip().strip("\"'").strip()


def _contains(normalized: str, alias: str) -> bool:
    if min(len(normalized), len(alias)) < MIN_CONTAINMENT_LENGTH:
        return False
    return alias in normalized or normalized in alias


def match_header(
    normalized: str,
    fuzzy_threshold: Optional[float] = None,
) -> Optional[Tuple[TargetField, ConfidenceLevel]]:
    """
    Find the best target field for one normalized header.

    Tiers are tried in order: exact alias (high), containment (medium),
    known abbreviation (low), fuzzy similarity (low).
    """
    if not normalized:
        return None

    for target, aliases in FIELD_ALIASES.items():
        if normalized in aliases:
            return target, ConfidenceLevel.HIGH

    # Longest contained alias is the most specific one
    contained_target: Optional[TargetField] = None
    contained_length = 0
    for target, aliases in FIELD_ALIASES.items():
        for alias in aliases:
            if _contains(normalized, alias) and len(alias) > contained_length:
                contained_target, contained_length = target, len(alias)
    if contained_target is not None:
        return contained_target, ConfidenceLevel.MEDIUM

    for target, abbreviations in FIELD_ABBREVIATIONS.items():
        if normalized in abbreviations:
            return target, ConfidenceLevel.LOW

    if len(normalized) < MIN_CONTAINMENT_LENGTH:
        return None

    threshold = settings.mapping_fuzzy_threshold if fuzzy_threshold is None else fuzzy_threshold
    best_target: Optional[TargetField] = None
    best_ratio = 0.0
    for target, aliases in FIELD_ALIASES.items():
        for alias in aliases:
            if len(alias) < MIN_CONTAINMENT_LENGTH:
                continue
            ratio = SequenceMatcher(None, normalized, alias).ratio()
            if ratio >= threshold and ratio > best_ratio:
                best_target, best_ratio = target, ratio

    if best_target is not None:
        return best_target, ConfidenceLevel.LOW
    return None


def auto_map_columns(
    headers: Sequence[str],
    fuzzy_threshold: Optional[float] = None,
) -> List[ColumnMapping]:
    """
    Map header cells to target fields.

    Candidates are assigned greedily, strongest confidence first and earlier
    columns first within a confidence level. A header that loses its target
    to a stronger or earlier header is left unmapped.

    Args:
        headers: Header cells in file order
        fuzzy_threshold: Optional override of the low-confidence similarity cutoff

    Returns:
        One ColumnMapping per header, in header order
    """
    candidates = [
        (index, header, match_header(normalize_header(header), fuzzy_threshold))
        for index, header in enumerate(headers)
    ]

    ranked = sorted(
        (candidate for candidate in candidates if candidate[2] is not None),
        key=lambda candidate: (-candidate[2][1].rank, candidate[0]),
    )

    assignments: Dict[int, Tuple[TargetField, ConfidenceLevel]] = {}
    claimed = set()
    for index, header, (target, confidence) in ranked:
        if target in claimed:
            logger.debug(
                "Header '%s' also matched '%s'; kept the earlier/stronger column",
                header,
                target.value,
            )
            continue
        claimed.add(target)
        assignments[index] = (target, confidence)

    mappings = []
    for index, header, _ in candidates:
        target, confidence = assignments.get(index, (None, None))
        mappings.append(
            ColumnMapping(
                header_index=index,
                header_text=header,
                target_field=target,
                confidence=confidence,
            )
        )
    return mappings


def field_index_from_mappings(mappings: Sequence[ColumnMapping]) -> Dict[TargetField, int]:
    """Build a target field -> column index lookup from mapped columns."""
    return {
        mapping.target_field: mapping.header_index
        for mapping in mappings
        if mapping.target_field is not None
    }


def has_missing_required_field(mappings: Sequence[ColumnMapping]) -> bool:
    """The question text column is the only one a spreadsheet must have."""
    return not any(mapping.target_field == TargetField.TEXT for mapping in mappings)


def get_columns_needing_review(mappings: Sequence[ColumnMapping]) -> List[ColumnMapping]:
    """Mapped columns whose confidence is below high."""
    return [
        mapping
        for mapping in mappings
        if mapping.target_field is not None and mapping.confidence != ConfidenceLevel.HIGH
    ]


def describe_confidence(confidence: Optional[ConfidenceLevel]) -> str:
    if confidence == ConfidenceLevel.HIGH:
        return "exact match"
    if confidence == ConfidenceLevel.MEDIUM:
        return "likely match"
    if confidence == ConfidenceLevel.LOW:
        return "possible match"
    return "not mapped"
