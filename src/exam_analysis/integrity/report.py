"""
Randomization quality report for a batch of generated variants.

Measures how much question positions and option orders actually vary
across the variants and flags batches that give students little protection
against copying from a neighbour.
"""

from collections.abc import Sequence

import numpy as np

from exam_analysis.core.data_models import Question, QuestionType
from exam_analysis.core.utils import canonical_options
from exam_analysis.integrity.data_models import (
    FlagSeverity,
    FlagType,
    OptionOrderSimilarity,
    OverallSimilarity,
    QuestionPositionSimilarity,
    RandomizationFlag,
    VariantRandomizationReport,
)
from exam_analysis.variants.data_models import ExamVariant
from exam_analysis.variants.uniqueness import are_variants_identical

HIGH_SIMILARITY_THRESHOLD = 0.8
HIGH_QUESTION_SIMILARITY_THRESHOLD = 0.9
HIGH_OPTION_SIMILARITY_THRESHOLD = 0.9

QUESTION_TEXT_PREVIEW = 100


def _similarity_from_variance(variance: float) -> float:
    return 1.0 if variance == 0 else 1.0 / (1.0 + variance)


def question_position_similarity(
    questions: Sequence[Question], variants: Sequence[ExamVariant]
) -> list[QuestionPositionSimilarity]:
    """Position spread of each question over the variants that contain it."""
    results: list[QuestionPositionSimilarity] = []
    for question in questions:
        positions = [
            index
            for variant in variants
            for index, q in enumerate(variant.questions)
            if q.id == question.id
        ]
        if not positions:
            continue
        values = np.array(positions, dtype=np.float64)
        variance = float(np.var(values))
        results.append(
            QuestionPositionSimilarity(
                question_id=question.id,
                question_text=question.text[:QUESTION_TEXT_PREVIEW],
                position_similarity=_similarity_from_variance(variance),
                average_position=float(np.mean(values)),
                position_variance=variance,
                positions=positions,
            )
        )
    return results


def option_order_similarity(
    questions: Sequence[Question], variants: Sequence[ExamVariant]
) -> list[OptionOrderSimilarity]:
    """Option order spread for every question with more than one option.

    A permutation entry is the original index of the option shown at each
    position, -1 for an option not found in the original list.
    """
    results: list[OptionOrderSimilarity] = []
    for question in questions:
        if question.type != QuestionType.TRUE_FALSE and len(question.options) < 2:
            continue
        original = canonical_options(question.type, question.options)

        permutations: list[list[int]] = []
        for variant in variants:
            shown = next((q for q in variant.questions if q.id == question.id), None)
            if shown is None or not shown.options:
                continue
            permutations.append(
                [original.index(o) if o in original else -1 for o in shown.options]
            )
        if not permutations or len({len(p) for p in permutations}) != 1:
            continue

        matrix = np.array(permutations, dtype=np.float64)
        average = matrix.mean(axis=0)
        variance = float(np.mean((matrix - average) ** 2))
        results.append(
            OptionOrderSimilarity(
                question_id=question.id,
                question_text=question.text[:QUESTION_TEXT_PREVIEW],
                option_similarity=_similarity_from_variance(variance),
                average_permutation=[float(x) for x in average],
                permutation_variance=variance,
                permutations=permutations,
            )
        )
    return results


def analyze_variant_randomization(
    questions: Sequence[Question],
    variants: Sequence[ExamVariant],
    exam_id: str | None = None,
    exam_title: str | None = None,
) -> VariantRandomizationReport:
    """
    Score how differently the variants present the exam.

    Args:
        questions: The original questions, in original order.
        variants: The generated variants.
        exam_id: Optional identifier echoed in the report.
        exam_title: Optional title echoed in the report.

    Returns:
        Per-question similarities, overall scores, flags and recommendations.
    """
    positions = question_position_similarity(questions, variants)
    options = option_order_similarity(questions, variants)

    question_similarity = (
        float(np.mean([p.position_similarity for p in positions]))
        if positions
        else 0.0
    )
    option_similarity = (
        float(np.mean([o.option_similarity for o in options])) if options else 0.0
    )
    combined = (question_similarity + option_similarity) / 2.0

    flags: list[RandomizationFlag] = []
    recommendations: list[str] = []

    if combined > HIGH_SIMILARITY_THRESHOLD:
        flags.append(
            RandomizationFlag(
                type=FlagType.HIGH_SIMILARITY,
                severity=FlagSeverity.WARNING,
                message="High similarity detected between exam variants",
                details=f"Combined similarity score: {combined * 100:.1f}%",
            )
        )
        recommendations.append("Consider increasing randomization settings")
        recommendations.append("Review questions with high position similarity")

    if question_similarity > HIGH_QUESTION_SIMILARITY_THRESHOLD:
        flags.append(
            RandomizationFlag(
                type=FlagType.LOW_RANDOMIZATION,
                severity=FlagSeverity.WARNING,
                message="Questions appear in very similar positions across variants",
                details=f"Question order similarity: {question_similarity * 100:.1f}%",
            )
        )
        recommendations.append("Enable or increase question order randomization")

    if option_similarity > HIGH_OPTION_SIMILARITY_THRESHOLD:
        flags.append(
            RandomizationFlag(
                type=FlagType.LOW_RANDOMIZATION,
                severity=FlagSeverity.WARNING,
                message="Answer options appear in very similar orders across variants",
                details=f"Option order similarity: {option_similarity * 100:.1f}%",
            )
        )
        recommendations.append("Enable or increase answer option randomization")

    identical_pairs = [
        (i + 1, j + 1)
        for i in range(len(variants))
        for j in range(i + 1, len(variants))
        if are_variants_identical(variants[i], variants[j])
    ]
    if identical_pairs:
        described = ", ".join(
            f"Variant {a} and Variant {b}" for a, b in identical_pairs
        )
        flags.append(
            RandomizationFlag(
                type=FlagType.IDENTICAL_VARIANTS,
                severity=FlagSeverity.ERROR,
                message="Identical variants detected",
                details=(
                    f"The following variants are completely identical: {described}. "
                    "These variants have the same question order and answer "
                    "option arrangements."
                ),
            )
        )
        recommendations.append("Increase the number of possible variations")
        recommendations.append("Review randomization settings")
        recommendations.append(
            "Consider regenerating with different randomization options"
        )

    if not flags:
        recommendations.append("Exam variants show good randomization")
        recommendations.append("Continue with current randomization settings")

    return VariantRandomizationReport(
        exam_id=exam_id,
        exam_title=exam_title,
        total_variants=len(variants),
        question_similarity=positions,
        option_similarity=options,
        overall_similarity=OverallSimilarity(
            question_order_similarity=question_similarity,
            option_order_similarity=option_similarity,
            combined_similarity=combined,
        ),
        flags=flags,
        recommendations=recommendations,
    )
