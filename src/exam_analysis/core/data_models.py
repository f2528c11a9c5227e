"""
Data models shared by the variant generator and the analysis engine.

This module defines:
- Question: an authored question as consumed by the generator
- AnalysisQuestion: an original-space question as consumed by the analyzer
- QuestionResponse / StudentResponse: graded answers for one student

All models are immutable. Field names are emitted in camelCase because the
serialized form is the contract with the surrounding application.
"""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from exam_analysis.core.utils import parse_options


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class QuestionType(StrEnum):
    MULTIPLE_CHOICE = "MULTIPLE_CHOICE"
    TRUE_FALSE = "TRUE_FALSE"


class Question(CamelModel):
    id: str
    text: str
    type: QuestionType
    options: list[str] = Field(default_factory=list)
    correct_answer: str = ""
    points: float = Field(default=1.0, gt=0)
    negative_points: float | None = Field(default=None, le=0)
    course_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("options", mode="before")
    @classmethod
    def _parse_options(cls, value: object) -> list[str]:
        return parse_options(value)


class AnalysisQuestion(CamelModel):
    """A question in original (unshuffled) space."""

    id: str
    question_text: str = ""
    question_type: QuestionType = QuestionType.MULTIPLE_CHOICE
    correct_answer: str = ""
    options: list[str] = Field(default_factory=list)
    points: float = 1.0

    @field_validator("options", mode="before")
    @classmethod
    def _parse_options(cls, value: object) -> list[str]:
        return parse_options(value)


class QuestionResponse(CamelModel):
    question_id: str
    student_answer: str = ""
    is_correct: bool = False
    points: float = 0.0
    max_points: float = 1.0
    response_time: float | None = None

    @field_validator("student_answer", mode="before")
    @classmethod
    def _none_to_blank(cls, value: object) -> object:
        return "" if value is None else value


class StudentResponse(CamelModel):
    student_id: str
    display_student_id: str | None = None
    name: str | None = None
    variant_code: str = ""
    question_responses: list[QuestionResponse] = Field(default_factory=list)
    total_score: float = 0.0
    max_possible_score: float = 0.0
    completion_time: float | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None


class AnswerKeyEntry(CamelModel):
    """One row of a variant's persisted answer key.

    Attributes:
        question_id: Original question id.
        question_number: 1-based position in the variant.
        correct_answer: Letter of the correct option in the variant.
        original_answer: Text of the correct option.
    """

    question_id: str
    question_number: int
    correct_answer: str
    original_answer: str
