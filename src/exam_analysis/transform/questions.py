"""
Question format conversion.

Two formats are supported:
- MCQLIST: items from a question-bank list. Options may arrive JSON-encoded
  and the type is free text.
- COURSE: the course `Question` model used by the variant generator.

The set of conversions is closed, so dispatch is an explicit check of the
(source, target) pair.
"""

import logging
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import Field, field_validator

from exam_analysis.core.data_models import CamelModel, Question, QuestionType
from exam_analysis.core.exceptions import InvalidInputError
from exam_analysis.core.utils import canonical_options, normalize, parse_options

logger = logging.getLogger(__name__)


class QuestionFormat(StrEnum):
    MCQLIST = "mcqlist"
    COURSE = "course"


class McqListQuestion(CamelModel):
    id: str
    text: str
    type: str
    options: list[str] = Field(default_factory=list)
    correct_answer: str = ""
    points: float = 1.0
    course_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("options", mode="before")
    @classmethod
    def _parse_options(cls, value: object) -> list[str]:
        try:
            return parse_options(value)
        except ValueError:
            logger.warning(f"Unparseable options {value!r}, using none")
            return []


def map_question_type(value: str) -> QuestionType:
    """Case-insensitive type lookup; unknown types become MULTIPLE_CHOICE."""
    try:
        return QuestionType(value.strip().upper())
    except ValueError:
        logger.warning(f"Unknown question type: {value}, defaulting to MULTIPLE_CHOICE")
        return QuestionType.MULTIPLE_CHOICE


def _true_false_answer(answer: str) -> str:
    key = normalize(answer)
    if key == "true":
        return "True"
    if key == "false":
        return "False"
    return answer


def mcqlist_to_course(item: McqListQuestion) -> Question:
    question_type = map_question_type(item.type)
    correct_answer = item.correct_answer
    options = list(item.options)
    if question_type == QuestionType.TRUE_FALSE:
        correct_answer = _true_false_answer(correct_answer)
        options = canonical_options(question_type, options)

    now = datetime.now(UTC)
    return Question(
        id=item.id,
        text=item.text,
        type=question_type,
        options=options,
        correct_answer=correct_answer,
        points=item.points,
        course_id=item.course_id,
        created_at=item.created_at or now,
        updated_at=item.updated_at or now,
    )


def course_to_mcqlist(question: Question) -> McqListQuestion:
    return McqListQuestion(
        id=question.id,
        text=question.text,
        type=question.type.value,
        options=list(question.options),
        correct_answer=question.correct_answer,
        points=question.points,
        course_id=question.course_id,
        created_at=question.created_at,
        updated_at=question.updated_at,
    )


def transform_questions(
    items: Sequence[Mapping[str, Any]],
    source: QuestionFormat,
    target: QuestionFormat,
) -> list[Question] | list[McqListQuestion]:
    """
    Convert raw question dicts from one format to the other.

    Args:
        items: Question dicts in the source format (camelCase or snake_case).
        source: Format of the items.
        target: Format to produce.

    Returns:
        The converted questions.

    Raises:
        InvalidInputError: If the pair is not a supported conversion.
        pydantic.ValidationError: If an item does not fit the source format.
    """
    if source == QuestionFormat.MCQLIST and target == QuestionFormat.COURSE:
        return [
            mcqlist_to_course(McqListQuestion.model_validate(item)) for item in items
        ]
    if source == QuestionFormat.COURSE and target == QuestionFormat.MCQLIST:
        return [course_to_mcqlist(Question.model_validate(item)) for item in items]
    raise InvalidInputError(f"Unsupported question conversion: {source} to {target}")
