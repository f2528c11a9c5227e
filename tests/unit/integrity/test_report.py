from exam_analysis.core.data_models import Question, QuestionType
from exam_analysis.integrity.data_models import FlagSeverity, FlagType
from exam_analysis.integrity.report import (
    analyze_variant_randomization,
    option_order_similarity,
    question_position_similarity,
)
from exam_analysis.variants.generator import generate_exam_variations

QUESTIONS = [
    Question(
        id=f"q{i}",
        text=f"Question {i}",
        type=QuestionType.MULTIPLE_CHOICE,
        options=["w", "x", "y", "z"],
        correct_answer="x",
    )
    for i in range(5)
] + [
    Question(
        id="tf",
        text="A statement",
        type=QuestionType.TRUE_FALSE,
        correct_answer="True",
    )
]


class TestPositionSimilarity:
    def test_fixed_positions(self) -> None:
        result = generate_exam_variations(
            QUESTIONS,
            {
                "randomizeQuestionOrder": False,
                "maxVariations": 3,
                "enforceMaxVariations": True,
                "seed": "fixed",
            },
        )
        positions = question_position_similarity(QUESTIONS, result.variants)
        assert len(positions) == len(QUESTIONS)
        for p in positions:
            assert p.position_similarity == 1.0
            assert p.position_variance == 0.0
            assert len(p.positions) == 3

    def test_question_missing_from_variants_skipped(self) -> None:
        result = generate_exam_variations(
            QUESTIONS[:3], {"seed": "x", "maxVariations": 2}
        )
        positions = question_position_similarity(QUESTIONS, result.variants)
        assert {p.question_id for p in positions} == {"q0", "q1", "q2"}


class TestOptionOrderSimilarity:
    def test_includes_true_false(self) -> None:
        result = generate_exam_variations(
            QUESTIONS, {"seed": "opts", "maxVariations": 4, "enforceMaxVariations": True}
        )
        options = option_order_similarity(QUESTIONS, result.variants)
        ids = {o.question_id for o in options}
        assert "tf" in ids
        for o in options:
            assert 0.0 < o.option_similarity <= 1.0
            assert len(o.permutations) == 4


class TestAnalyzeVariantRandomization:
    def test_identical_variants_flagged(self) -> None:
        result = generate_exam_variations(
            QUESTIONS,
            {
                "randomizeQuestionOrder": False,
                "randomizeOptionOrder": False,
                "maxVariations": 3,
                "enforceMaxVariations": True,
                "seed": "same",
            },
        )
        report = analyze_variant_randomization(
            QUESTIONS, result.variants, exam_id="e1", exam_title="Quiz"
        )

        assert report.exam_id == "e1"
        assert report.total_variants == 3
        assert report.overall_similarity.question_order_similarity == 1.0
        flag_types = [f.type for f in report.flags]
        assert FlagType.HIGH_SIMILARITY in flag_types
        assert FlagType.LOW_RANDOMIZATION in flag_types
        identical = next(f for f in report.flags if f.type == FlagType.IDENTICAL_VARIANTS)
        assert identical.severity == FlagSeverity.ERROR
        assert "Variant 1 and Variant 2" in identical.details
        assert "Increase the number of possible variations" in report.recommendations

    def test_well_randomized(self) -> None:
        result = generate_exam_variations(
            QUESTIONS,
            {
                "randomizeTrueFalseOptions": True,
                "maxVariations": 20,
                "enforceMaxVariations": True,
                "seed": "spread",
            },
        )
        report = analyze_variant_randomization(QUESTIONS, result.variants)
        assert not any(f.type == FlagType.IDENTICAL_VARIANTS for f in report.flags)
        assert report.overall_similarity.question_order_similarity < 0.9

    def test_no_variants(self) -> None:
        report = analyze_variant_randomization(QUESTIONS, [])
        assert report.total_variants == 0
        assert report.overall_similarity.combined_similarity == 0.0
        assert report.flags == []
        assert report.recommendations == [
            "Exam variants show good randomization",
            "Continue with current randomization settings",
        ]
