"""
Tests for mapping variant-local answers back to original questions.
"""

from exam_analysis.analysis.data_models import ExamVariantForAnalysis, VariantMetadata
from exam_analysis.analysis.unmapping import (
    resolve_answer,
    unmap_question_response,
    unmap_variant_responses,
)
from exam_analysis.core.data_models import (
    AnalysisQuestion,
    Question,
    QuestionResponse,
    QuestionType,
    StudentResponse,
)
from exam_analysis.core.utils import index_to_letter
from exam_analysis.variants.generator import randomize_question_options
from exam_analysis.variants.rng import SeededRandomizer

CAPITALS = AnalysisQuestion(
    id="q1",
    question_text="Capital of France?",
    correct_answer="Paris",
    options=["Paris", "Rome", "Berlin", "Madrid"],
)
STATEMENT = AnalysisQuestion(
    id="q2",
    question_text="The sky is blue.",
    question_type=QuestionType.TRUE_FALSE,
    correct_answer="True",
)
# Variant shows q1 as [Berlin, Paris, Rome, Madrid]
PERMUTATION = [2, 0, 1, 3]


def _variant(code: str = "A") -> ExamVariantForAnalysis:
    return ExamVariantForAnalysis(
        id=f"variant_{code}",
        variant_code=code,
        questions=[CAPITALS, STATEMENT],
        metadata=VariantMetadata(
            question_order=[0, 1],
            option_permutations={"q1": PERMUTATION, "q2": [1, 0]},
        ),
    )


def _response(answers: dict[str, str], code: str = "A") -> StudentResponse:
    return StudentResponse(
        student_id="s1",
        variant_code=code,
        question_responses=[
            QuestionResponse(question_id=qid, student_answer=a, is_correct=True, points=1)
            for qid, a in answers.items()
        ],
        total_score=99,
    )


class TestResolveAnswer:
    def test_letter_through_permutation(self) -> None:
        assert resolve_answer("B", CAPITALS.options, PERMUTATION) == "Paris"
        assert resolve_answer("A", CAPITALS.options, PERMUTATION) == "Berlin"

    def test_lowercase_letter_and_whitespace(self) -> None:
        assert resolve_answer(" b ", CAPITALS.options, PERMUTATION) == "Paris"

    def test_letter_without_permutation(self) -> None:
        assert resolve_answer("C", CAPITALS.options) == "Berlin"

    def test_text_answer(self) -> None:
        assert resolve_answer("rome", CAPITALS.options, PERMUTATION) == "Rome"

    def test_letter_out_of_range(self) -> None:
        assert resolve_answer("F", CAPITALS.options, PERMUTATION) == "F"

    def test_unknown_text(self) -> None:
        assert resolve_answer("Oslo", CAPITALS.options) == "Oslo"

    def test_blank(self) -> None:
        assert resolve_answer("  ", CAPITALS.options) == ""

    def test_generator_permutation_maps_position_to_original(self) -> None:
        question = Question(
            id="q1",
            text=CAPITALS.question_text,
            type=QuestionType.MULTIPLE_CHOICE,
            options=CAPITALS.options,
            correct_answer="Paris",
        )
        shown, perm = randomize_question_options(question, SeededRandomizer("layout"))
        for k, option in enumerate(shown.options):
            assert CAPITALS.options[perm[k]] == option
            assert resolve_answer(index_to_letter(k), CAPITALS.options, perm) == option


class TestUnmapQuestionResponse:
    def test_round_trip_every_position(self) -> None:
        variant_options = [CAPITALS.options[i] for i in PERMUTATION]
        for k, shown in enumerate(variant_options):
            response = QuestionResponse(
                question_id="q1", student_answer=chr(ord("A") + k)
            )
            unmapped = unmap_question_response(response, CAPITALS, PERMUTATION)
            assert unmapped.student_answer == shown
            assert unmapped.is_correct == (shown == CAPITALS.correct_answer)

    def test_points_awarded(self) -> None:
        response = QuestionResponse(question_id="q1", student_answer="B", max_points=2)
        assert unmap_question_response(response, CAPITALS, PERMUTATION).points == 2

    def test_blank_is_incorrect(self) -> None:
        response = QuestionResponse(question_id="q1", student_answer="", is_correct=True)
        unmapped = unmap_question_response(response, CAPITALS, PERMUTATION)
        assert not unmapped.is_correct
        assert unmapped.points == 0.0

    def test_true_false_default_options(self) -> None:
        # Variant shows [False, True]
        response = QuestionResponse(question_id="q2", student_answer="B")
        unmapped = unmap_question_response(response, STATEMENT, [1, 0])
        assert unmapped.student_answer == "True"
        assert unmapped.is_correct


class TestUnmapVariantResponses:
    def test_recomputes_correctness_and_total(self) -> None:
        [unmapped] = unmap_variant_responses(
            [_response({"q1": "A", "q2": "B"})], [_variant()]
        )
        answers = {qr.question_id: qr for qr in unmapped.question_responses}
        assert answers["q1"].student_answer == "Berlin"
        assert not answers["q1"].is_correct
        assert answers["q2"].student_answer == "True"
        assert answers["q2"].is_correct
        assert unmapped.total_score == 1.0

    def test_unknown_variant_passes_through(self) -> None:
        response = _response({"q1": "A"}, code="Z")
        [unmapped] = unmap_variant_responses([response], [_variant()])
        assert unmapped == response

    def test_variant_without_metadata_passes_through(self) -> None:
        variant = ExamVariantForAnalysis(
            id="v", variant_code="A", questions=[CAPITALS]
        )
        response = _response({"q1": "A"})
        assert unmap_variant_responses([response], [variant]) == [response]

    def test_unknown_question_passes_through(self) -> None:
        [unmapped] = unmap_variant_responses(
            [_response({"q1": "B", "q9": "C"})], [_variant()]
        )
        answers = {qr.question_id: qr for qr in unmapped.question_responses}
        assert answers["q9"].student_answer == "C"
        assert answers["q9"].is_correct
        assert unmapped.total_score == 2.0

    def test_input_not_modified(self) -> None:
        response = _response({"q1": "A"})
        unmap_variant_responses([response], [_variant()])
        assert response.question_responses[0].student_answer == "A"
        assert response.total_score == 99
