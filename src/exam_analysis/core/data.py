"""
CSV loading utilities for scanned exam responses.
"""

from collections.abc import Mapping, Sequence
from pathlib import Path

import pandas as pd

from exam_analysis.core.constants import MISSING_CHAR
from exam_analysis.core.data_models import QuestionResponse, StudentResponse

REQUIRED_COLUMNS = ("student_id", "variant_code", "answer_string")


def _parse_answer_string(answer_string: str) -> list[str]:
    """Split an answer string into variant-local letters.

    A-Z are kept as letters, MISSING_CHAR becomes a blank answer.
    """
    answers: list[str] = []
    for char in answer_string:
        if char == MISSING_CHAR:
            answers.append("")
        elif "A" <= char <= "Z":
            answers.append(char)
        else:
            raise ValueError(f"Invalid character in answer string: '{char}'")
    return answers


def load_csv_to_student_responses(
    path: Path,
    question_ids_by_variant: Mapping[str, Sequence[str]],
    points_by_question: Mapping[str, float] | None = None,
) -> list[StudentResponse]:
    """Load a CSV of scanned answer strings into StudentResponse records.

    Expected CSV columns:
        - student_id: unique identifier for each student
        - variant_code: code of the variant the student sat
        - answer_string: one letter per question in variant order
          (e.g., "ABCD*A"), MISSING_CHAR for a blank

    The letters are variant-local; correctness is left unset and is
    recomputed when the responses are unmapped against their variant.

    Args:
        path: CSV file to read.
        question_ids_by_variant: Question ids in presentation order for
            each variant code.
        points_by_question: Maximum points per question id, 1.0 if absent.

    Returns:
        One StudentResponse per CSV row.

    Raises:
        ValueError: If CSV format is invalid or data is inconsistent.
    """
    df = pd.read_csv(path, dtype=str, keep_default_na=False)

    for column in REQUIRED_COLUMNS:
        if column not in df.columns:
            raise ValueError(f"CSV must have '{column}' column")

    points = points_by_question or {}
    responses: list[StudentResponse] = []
    for row in df.itertuples(index=False):
        student_id = str(row.student_id)
        variant_code = str(row.variant_code)
        if variant_code not in question_ids_by_variant:
            raise ValueError(
                f"Unknown variant code '{variant_code}' for student {student_id}"
            )
        question_ids = question_ids_by_variant[variant_code]
        answers = _parse_answer_string(str(row.answer_string).strip())
        if len(answers) != len(question_ids):
            raise ValueError(
                f"Student {student_id} answered {len(answers)} questions, "
                f"variant {variant_code} has {len(question_ids)}"
            )

        question_responses = [
            QuestionResponse(
                question_id=qid,
                student_answer=answer,
                max_points=points.get(qid, 1.0),
            )
            for qid, answer in zip(question_ids, answers)
        ]
        responses.append(
            StudentResponse(
                student_id=student_id,
                variant_code=variant_code,
                question_responses=question_responses,
                max_possible_score=sum(
                    qr.max_points for qr in question_responses
                ),
            )
        )

    return responses
