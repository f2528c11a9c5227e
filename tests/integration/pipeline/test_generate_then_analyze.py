"""
End-to-end: generate variants, answer them in variant space, analyze in
original space.
"""

import pytest

from exam_analysis.analysis.adapter import to_analysis_variant
from exam_analysis.analysis.data_models import ExamVariantForAnalysis
from exam_analysis.analysis.engine import compute_exam_analysis
from exam_analysis.core.data_models import (
    Question,
    QuestionResponse,
    QuestionType,
    StudentResponse,
)
from exam_analysis.core.utils import index_to_letter, letter_to_index
from exam_analysis.integrity.similarity import analyze_integrity
from exam_analysis.variants.generator import generate_exam_variations

QUESTIONS = [
    Question(
        id=f"mc{i}",
        text=f"Multiple choice {i}",
        type=QuestionType.MULTIPLE_CHOICE,
        options=["alpha", "beta", "gamma", "delta"],
        correct_answer=["alpha", "beta", "gamma", "delta"][i % 4],
    )
    for i in range(6)
] + [
    Question(
        id="tf0",
        text="The sky is green.",
        type=QuestionType.TRUE_FALSE,
        correct_answer="False",
    ),
]

N_STUDENTS = 30


def _generate() -> list[ExamVariantForAnalysis]:
    result = generate_exam_variations(
        QUESTIONS,
        {
            "seed": "e2e",
            "maxVariations": 3,
            "enforceMaxVariations": True,
            "randomizeTrueFalseOptions": True,
        },
    )
    return [
        to_analysis_variant(v, QUESTIONS, variant_code=code, exam_id="exam-e2e")
        for v, code in zip(result.variants, "ABC")
    ]


def _wrong_letter(letter: str, n_options: int) -> str:
    return index_to_letter((letter_to_index(letter) + 1) % n_options)


def _responses(
    variants: list[ExamVariantForAnalysis], wrong_on: str | None = None
) -> list[StudentResponse]:
    """Students answer from the answer key; even students miss `wrong_on`."""
    responses: list[StudentResponse] = []
    for i in range(N_STUDENTS):
        variant = variants[i % len(variants)]
        assert variant.metadata is not None
        n_options = {q.id: len(q.options) for q in variant.questions}
        answers: list[QuestionResponse] = []
        for entry in variant.metadata.answer_key:
            letter = entry.correct_answer
            if entry.question_id == wrong_on and i % 2 == 0:
                letter = _wrong_letter(letter, n_options[entry.question_id])
            answers.append(
                QuestionResponse(question_id=entry.question_id, student_answer=letter)
            )
        responses.append(
            StudentResponse(
                student_id=f"s{i:02d}",
                variant_code=str(variant.variant_code),
                question_responses=answers,
            )
        )
    return responses


class TestGenerateThenAnalyze:
    def test_answer_key_scores_perfectly(self) -> None:
        variants = _generate()
        result = compute_exam_analysis(variants, _responses(variants))

        assert result.exam_id == "exam-e2e"
        assert result.metadata.total_variants == 3
        assert len(result.question_results) == len(QUESTIONS)
        for question in result.question_results:
            assert question.total_responses == N_STUDENTS
            assert question.difficulty_index == 1.0
        assert all(
            r.total_score == len(QUESTIONS) for r in result.metadata.student_responses
        )

    def test_wrong_answers_land_on_original_question(self) -> None:
        variants = _generate()
        result = compute_exam_analysis(variants, _responses(variants, wrong_on="mc3"))

        by_id = {q.question_id: q for q in result.question_results}
        assert by_id["mc3"].correct_responses == N_STUDENTS // 2
        assert by_id["mc3"].difficulty_index == pytest.approx(0.5)
        assert by_id["mc1"].difficulty_index == 1.0
        # Students who missed mc3 score lower, so the item discriminates
        assert by_id["mc3"].point_biserial_correlation is not None
        assert by_id["mc3"].point_biserial_correlation > 0

    def test_answer_key_copies_are_identical_after_unmapping(self) -> None:
        variants = _generate()
        report = analyze_integrity(variants, _responses(variants))

        # Every student answered correctly, whatever variant they sat
        assert report.student_similarity["s00"]["s01"] == 1.0
        assert set(report.variant_similarity) == {"A", "B", "C"}
