"""
Conversion from generated variants to analysis input.
"""

from collections.abc import Sequence

from exam_analysis.analysis.data_models import (
    ExamVariantForAnalysis,
    VariantMetadata,
)
from exam_analysis.core.data_models import AnalysisQuestion, Question
from exam_analysis.core.utils import canonical_options
from exam_analysis.variants.data_models import ExamVariant
from exam_analysis.variants.export import build_answer_key


def to_analysis_question(question: Question) -> AnalysisQuestion:
    return AnalysisQuestion(
        id=question.id,
        question_text=question.text,
        question_type=question.type,
        correct_answer=question.correct_answer,
        options=canonical_options(question.type, question.options),
        points=question.points,
    )


def to_analysis_variant(
    variant: ExamVariant,
    original_questions: Sequence[Question],
    variant_code: str,
    exam_id: str | None = None,
    exam_title: str | None = None,
) -> ExamVariantForAnalysis:
    """
    Package a generated variant for the analyzer.

    Questions are given in original space, in the variant's presentation
    order, so answers can be unmapped through the stored permutations.
    """
    originals = {q.id: q for q in original_questions}
    questions = [
        to_analysis_question(originals[q.id])
        for q in variant.questions
        if q.id in originals
    ]
    return ExamVariantForAnalysis(
        id=variant.id,
        exam_id=exam_id,
        exam_title=exam_title,
        variant_code=variant_code,
        questions=questions,
        metadata=VariantMetadata(
            question_order=variant.metadata.question_order,
            option_permutations=variant.metadata.option_permutations,
            answer_key=build_answer_key(variant, original_questions),
        ),
    )
