"""
Pydantic models shared by the import pipeline, the preview API and the client.

Every model serializes with the camelCase names the survey builder expects
(``minValue``, ``invalidRows`` ...) and accepts either spelling on input, so a
result produced by the remote preview service validates into exactly the same
objects as one produced locally.
"""
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


Number = Union[int, float]


class QuestionType(str, Enum):
    """Closed set of question types a survey can hold."""
    TEXT = "text"  # short text
    PARAGRAPH = "paragraph"
    RADIO = "radio"  # single choice
    CHECKBOX = "checkbox"  # multiple choice
    DROPDOWN = "dropdown"
    RATING = "rating"
    BOOLEAN = "boolean"
    DATE = "date"
    TIME = "time"
    NUMBER = "number"


CHOICE_QUESTION_TYPES = frozenset({QuestionType.RADIO, QuestionType.CHECKBOX, QuestionType.DROPDOWN})
RANGED_QUESTION_TYPES = frozenset({QuestionType.RATING, QuestionType.NUMBER})
MIN_CHOICE_OPTIONS = 2


class TargetField(str, Enum):
    """Semantic slots a spreadsheet column can be mapped to."""
    TEXT = "text"
    TYPE = "type"
    OPTIONS = "options"
    REQUIRED = "required"
    MIN_VALUE = "minValue"
    MAX_VALUE = "maxValue"
    POINTS = "points"
    PLACEHOLDER = "placeholder"


class ConfidenceLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Ordering key; higher means more trustworthy."""
        return {"high": 3, "medium": 2, "low": 1}[self.value]


class ImportFileType(str, Enum):
    JSON = "json"
    CSV = "csv"
    EXCEL = "excel"  # tab-separated export or CSV saved from a spreadsheet


class _WireModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class QuestionRecord(_WireModel):
    id: str
    text: str = Field(min_length=1)
    type: QuestionType = QuestionType.TEXT
    options: List[str] = Field(default_factory=list)
    required: bool = False
    placeholder: Optional[str] = None
    min_value: Optional[Number] = Field(default=None, alias="minValue")
    max_value: Optional[Number] = Field(default=None, alias="maxValue")
    points: Optional[int] = Field(default=None, ge=0)


class ColumnMapping(_WireModel):
    header_index: int = Field(alias="headerIndex", ge=0)
    header_text: str = Field(alias="headerText")
    target_field: Optional[TargetField] = Field(default=None, alias="targetField")
    confidence: Optional[ConfidenceLevel] = None


class InvalidRow(_WireModel):
    """A data row rejected during validation, kept so the user can fix and re-import it."""
    row_index: int = Field(alias="rowIndex", ge=1)
    reason: str
    raw_values: List[str] = Field(default_factory=list, alias="rawValues")


class ImportResult(_WireModel):
    title: Optional[str] = None
    description: Optional[str] = None
    questions: List[QuestionRecord] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)
    invalid_rows: List[InvalidRow] = Field(default_factory=list, alias="invalidRows")
    column_mappings: List[ColumnMapping] = Field(default_factory=list, alias="columnMappings")

    @property
    def is_fatal(self) -> bool:
        """True when nothing in the file can be imported."""
        return bool(self.errors)

    @property
    def status(self) -> str:
        return "fatal" if self.is_fatal else "previewable"


class PreviewResponse(ImportResult):
    """HTTP envelope returned by the preview endpoint."""
    success: bool

    @classmethod
    def from_result(cls, result: ImportResult) -> "PreviewResponse":
        return cls(success=not result.is_fatal, **result.model_dump())


class PreviewOutcome(BaseModel):
    """Result of a preview attempt plus which producer generated it."""
    model_config = ConfigDict(frozen=True)

    result: ImportResult
    source: str  # "server" or "local"

    @property
    def validated_by_server(self) -> bool:
        return self.source == "server"
