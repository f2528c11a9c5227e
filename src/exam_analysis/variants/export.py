"""
Delivery payloads and answer keys for generated variants.
"""

from collections.abc import Sequence

from exam_analysis.core.data_models import AnswerKeyEntry, Question
from exam_analysis.core.utils import find_option_index, index_to_letter
from exam_analysis.variants.data_models import (
    ExamVariant,
    ExportedExam,
    ExportedExamMetadata,
    ExportedQuestion,
)


def export_variant_for_exam(variant: ExamVariant) -> ExportedExam:
    """Numbered questions and totals, ready to present to students."""
    return ExportedExam(
        exam_id=variant.id,
        questions=[
            ExportedQuestion(
                id=q.id,
                text=q.text,
                type=q.type.value,
                options=q.options or None,
                points=q.points,
                question_number=number,
            )
            for number, q in enumerate(variant.questions, start=1)
        ],
        metadata=ExportedExamMetadata(
            variant_id=variant.id,
            question_count=len(variant.questions),
            total_points=sum(q.points for q in variant.questions),
            generated_at=variant.metadata.timestamp,
        ),
    )


def build_answer_key(
    variant: ExamVariant,
    original_questions: Sequence[Question] | None = None,
) -> list[AnswerKeyEntry]:
    """
    Answer key for a variant.

    The letter is the position of the correct option in the variant. The
    original answer is the original question's correct answer when
    `original_questions` is given, else the variant's answer text.
    """
    originals = {q.id: q for q in original_questions or []}
    entries: list[AnswerKeyEntry] = []
    for number, question in enumerate(variant.questions, start=1):
        index = find_option_index(question.options, question.correct_answer)
        letter = index_to_letter(index) if index is not None else ""
        original = originals.get(question.id)
        entries.append(
            AnswerKeyEntry(
                question_id=question.id,
                question_number=number,
                correct_answer=letter,
                original_answer=(
                    original.correct_answer
                    if original is not None
                    else question.correct_answer
                ),
            )
        )
    return entries
