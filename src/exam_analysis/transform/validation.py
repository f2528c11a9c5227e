"""
Authoring checks for course questions.

Unlike the generator's validation, which stops at the first bad question,
this collects every problem so an editor can show them all at once.
"""

from collections.abc import Sequence

from exam_analysis.core.data_models import CamelModel, Question, QuestionType
from exam_analysis.core.utils import normalize


class QuestionValidationReport(CamelModel):
    valid: bool
    errors: list[str]


def _answer_in_options(question: Question) -> bool:
    answer = normalize(question.correct_answer)
    return any(normalize(option) == answer for option in question.options)


def _missing_answer_message(label: str, question: Question) -> str:
    return (
        f'{label}: Correct answer "{question.correct_answer}" not found in '
        f"options [{', '.join(question.options)}]"
    )


def _multiple_choice_errors(label: str, question: Question) -> list[str]:
    errors: list[str] = []
    if not question.options:
        errors.append(f"{label}: Multiple choice question must have options")
    if not question.correct_answer:
        errors.append(f"{label}: Missing correct answer")
    elif question.options and not _answer_in_options(question):
        errors.append(_missing_answer_message(label, question))

    seen: set[str] = set()
    for option in question.options:
        key = normalize(option)
        if key in seen:
            errors.append(f'{label}: Duplicate option "{option}"')
        seen.add(key)
    return errors


def _true_false_errors(label: str, question: Question) -> list[str]:
    errors: list[str] = []
    if not question.correct_answer:
        errors.append(f"{label}: Missing correct answer")
    elif normalize(question.correct_answer) not in ("true", "false"):
        errors.append(
            f'{label}: True/False question must have "True" or "False" '
            "as the correct answer"
        )

    # Missing options are filled with the defaults later.
    if question.options:
        if len(question.options) != 2:
            errors.append(f"{label}: True/False question must have exactly 2 options")
        if question.correct_answer and not _answer_in_options(question):
            errors.append(_missing_answer_message(label, question))
    return errors


def validate_questions(questions: Sequence[Question]) -> QuestionValidationReport:
    errors: list[str] = []
    for index, question in enumerate(questions):
        label = f"Question {index + 1}"
        if not question.text.strip():
            errors.append(f"{label}: Missing text")
        if question.type == QuestionType.MULTIPLE_CHOICE:
            errors.extend(_multiple_choice_errors(label, question))
        elif question.type == QuestionType.TRUE_FALSE:
            errors.extend(_true_false_errors(label, question))

    return QuestionValidationReport(valid=not errors, errors=errors)
