"""
Item analysis pipeline.

compute_exam_analysis runs:
1. sample filtering (empty cohort, minimum sample size, incomplete data)
2. unmapping of variant-local answers to original questions
3. per-question statistics
4. exam-level summary

The computation is pure and synchronous; analyze_exam is an async wrapper
for hosts that expect a coroutine.
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime

import numpy as np
from numpy.typing import NDArray

from exam_analysis.analysis.config import AnalysisConfig
from exam_analysis.analysis.data_models import (
    AnalysisMetadata,
    BiPointAnalysisResult,
    ExamVariantForAnalysis,
    QuestionAnalysisResult,
)
from exam_analysis.analysis.item_statistics import (
    analyze_distractors,
    count_distinct_answers,
    difficulty_index,
    discrimination_index,
    item_reliability,
    point_biserial,
)
from exam_analysis.analysis.significance import (
    calculate_statistical_significance,
    z_for_confidence,
)
from exam_analysis.analysis.summary import calculate_summary
from exam_analysis.analysis.unmapping import unmap_variant_responses
from exam_analysis.core.data_models import (
    AnalysisQuestion,
    QuestionType,
    StudentResponse,
)
from exam_analysis.core.exceptions import InsufficientDataError
from exam_analysis.core.utils import canonical_options

logger = logging.getLogger(__name__)

NO_RESPONSES_MESSAGE = "No student responses found for analysis."
UNKNOWN_EXAM_ID = "unknown"
UNKNOWN_EXAM_TITLE = "Unknown Exam"


@dataclass(frozen=True)
class ResponseTable:
    """
    Cohort answers aligned by student.

    Attributes:
        question_ids: Question ids in first-seen order.
        answers: Per question, the answer of each student; None when the
            student has no response to that question.
        correct: Array of shape (n_questions, n_students).
        total_scores: Array of shape (n_students,).
    """

    question_ids: list[str]
    answers: dict[str, list[str | None]]
    correct: NDArray[np.bool_]
    total_scores: NDArray[np.float64]

    @property
    def n_students(self) -> int:
        return self.total_scores.shape[0]


def build_response_table(responses: Sequence[StudentResponse]) -> ResponseTable:
    """Tabulate responses; the first response to a question per student wins."""
    question_ids: list[str] = []
    for response in responses:
        for qr in response.question_responses:
            if qr.question_id not in question_ids:
                question_ids.append(qr.question_id)

    row = {qid: i for i, qid in enumerate(question_ids)}
    n = len(responses)
    answers: dict[str, list[str | None]] = {qid: [None] * n for qid in question_ids}
    correct = np.zeros((len(question_ids), n), dtype=np.bool_)

    for j, response in enumerate(responses):
        for qr in response.question_responses:
            if answers[qr.question_id][j] is not None:
                continue
            answers[qr.question_id][j] = qr.student_answer.strip()
            correct[row[qr.question_id], j] = qr.is_correct

    total_scores = np.array([r.total_score for r in responses], dtype=np.float64)
    return ResponseTable(
        question_ids=question_ids,
        answers=answers,
        correct=correct,
        total_scores=total_scores,
    )


def _resolve_config(
    config: AnalysisConfig | Mapping[str, object] | None,
) -> AnalysisConfig:
    if config is None:
        return AnalysisConfig()
    if isinstance(config, AnalysisConfig):
        return config
    return AnalysisConfig.from_mapping(config)


def _check_sample_size(n: int, config: AnalysisConfig) -> None:
    if n == 0:
        raise InsufficientDataError(NO_RESPONSES_MESSAGE, n_available=0)
    if config.min_sample_size is not None and config.min_sample_size > n:
        raise InsufficientDataError(
            f"Insufficient sample size: {n} responses available, "
            f"at least {config.min_sample_size} required.",
            n_available=n,
            n_required=config.min_sample_size,
        )


def filter_responses(
    responses: Sequence[StudentResponse], config: AnalysisConfig
) -> list[StudentResponse]:
    """
    Apply the sample checks and the incomplete-data filter.

    Raises:
        InsufficientDataError: No responses, or fewer than min_sample_size
            before or after filtering.
    """
    _check_sample_size(len(responses), config)

    filtered = list(responses)
    if config.exclude_incomplete_data:
        filtered = [
            r
            for r in responses
            if r.completed_at is not None and r.question_responses
        ]
        if len(filtered) < len(responses):
            logger.info(
                f"Excluded {len(responses) - len(filtered)} incomplete responses"
            )
        _check_sample_size(len(filtered), config)

    return filtered


def _question_lookup(
    variants: Sequence[ExamVariantForAnalysis],
) -> dict[str, AnalysisQuestion]:
    return {q.id: q for v in variants for q in v.questions}


def analyze_questions(
    table: ResponseTable,
    questions: Mapping[str, AnalysisQuestion],
    config: AnalysisConfig,
) -> list[QuestionAnalysisResult]:
    z = z_for_confidence(config.confidence_level)
    results: list[QuestionAnalysisResult] = []

    for i, question_id in enumerate(table.question_ids):
        question = questions.get(question_id)
        answers = table.answers[question_id]
        correct = table.correct[i]
        responded = np.array([a is not None for a in answers], dtype=np.bool_)
        total_responses = int(np.count_nonzero(responded))
        correct_responses = int(np.count_nonzero(correct & responded))

        question_text = (
            question.question_text
            if question and question.question_text
            else f"Question {question_id}"
        )
        question_type = (
            question.question_type if question else QuestionType.MULTIPLE_CHOICE
        )
        options = (
            canonical_options(question_type, question.options) if question else []
        )
        correct_answer = question.correct_answer if question else ""

        results.append(
            QuestionAnalysisResult(
                question_id=question_id,
                question_text=question_text,
                question_type=question_type,
                total_responses=total_responses,
                correct_responses=correct_responses,
                difficulty_index=(
                    difficulty_index(correct_responses, total_responses)
                    if config.include_difficulty_index
                    else None
                ),
                discrimination_index=(
                    discrimination_index(
                        table.total_scores,
                        correct,
                        config.high_group_percent,
                        config.low_group_percent,
                        config.min_group_fraction,
                        config.min_group_size,
                    )
                    if config.include_discrimination_index
                    else None
                ),
                point_biserial_correlation=(
                    point_biserial(correct, table.total_scores)
                    if config.include_point_biserial
                    else None
                ),
                distractor_analysis=(
                    analyze_distractors(
                        answers, table.total_scores, options, correct_answer
                    )
                    if config.include_distractor_analysis
                    else None
                ),
                statistical_significance=calculate_statistical_significance(
                    correct_responses,
                    total_responses,
                    number_of_options=max(2, count_distinct_answers(answers)),
                    confidence_level=config.confidence_level,
                ),
                reliability_metrics=item_reliability(
                    correct.astype(np.float64), table.total_scores, z
                ),
            )
        )

    return results


def _build_result(
    exam_id: str,
    exam_title: str,
    responses: Sequence[StudentResponse],
    questions: Mapping[str, AnalysisQuestion],
    config: AnalysisConfig,
    metadata: AnalysisMetadata,
) -> BiPointAnalysisResult:
    table = build_response_table(responses)
    question_results = analyze_questions(table, questions, config)
    summary = calculate_summary(
        question_results,
        table.correct.astype(np.float64),
        table.total_scores,
        group_by_question_type=config.group_by_question_type,
        z=z_for_confidence(config.confidence_level),
    )
    return BiPointAnalysisResult(
        exam_id=exam_id,
        exam_title=exam_title,
        analysis_config=config,
        question_results=question_results,
        summary=summary,
        metadata=metadata,
    )


def compute_exam_analysis(
    variants: Sequence[ExamVariantForAnalysis],
    responses: Sequence[StudentResponse],
    config: AnalysisConfig | Mapping[str, object] | None = None,
    exam_title: str | None = None,
) -> BiPointAnalysisResult:
    """
    Pooled item analysis over every variant.

    Args:
        variants: Variants with their questions in original space and the
            permutation metadata used to unmap answers.
        responses: Student responses with variant-local answers.
        config: Analysis settings; a mapping with camelCase or snake_case
            keys is accepted.
        exam_title: Overrides the title carried by the variants.

    Returns:
        BiPointAnalysisResult

    Raises:
        InsufficientDataError: See filter_responses.
    """
    cfg = _resolve_config(config)
    filtered = filter_responses(responses, cfg)

    logger.info(
        f"Analyzing {len(filtered)} responses across {len(variants)} variants"
    )
    unmapped = unmap_variant_responses(filtered, variants)

    first = variants[0] if variants else None
    result = _build_result(
        exam_id=(first.exam_id if first and first.exam_id else UNKNOWN_EXAM_ID),
        exam_title=(
            exam_title
            or (first.exam_title if first else None)
            or UNKNOWN_EXAM_TITLE
        ),
        responses=unmapped,
        questions=_question_lookup(variants),
        config=cfg,
        metadata=AnalysisMetadata(
            total_students=len(responses),
            total_variants=len({r.variant_code for r in responses}),
            analysis_date=datetime.now(UTC),
            sample_size=len(filtered),
            excluded_students=len(responses) - len(filtered),
            student_responses=unmapped,
        ),
    )
    logger.info(f"Analysis finished for {len(result.question_results)} questions")
    return result


async def analyze_exam(
    variants: Sequence[ExamVariantForAnalysis],
    responses: Sequence[StudentResponse],
    config: AnalysisConfig | Mapping[str, object] | None = None,
    exam_title: str | None = None,
) -> BiPointAnalysisResult:
    return compute_exam_analysis(variants, responses, config, exam_title)


def analyze_by_variant(
    variants: Sequence[ExamVariantForAnalysis],
    responses: Sequence[StudentResponse],
    config: AnalysisConfig | Mapping[str, object] | None = None,
    exam_title: str | None = None,
) -> list[BiPointAnalysisResult]:
    """
    One analysis per variant code, in first-seen order.

    Response groups whose code matches no variant are skipped.
    """
    cfg = _resolve_config(config)
    filtered = filter_responses(responses, cfg)

    groups: dict[str, list[StudentResponse]] = {}
    for response in filtered:
        groups.setdefault(response.variant_code, []).append(response)

    variants_by_code = {v.variant_code: v for v in variants if v.variant_code}
    results: list[BiPointAnalysisResult] = []
    for code, group in groups.items():
        variant = variants_by_code.get(code)
        if variant is None:
            logger.warning(f"No variant for code '{code}', skipping {len(group)} responses")
            continue

        unmapped = unmap_variant_responses(group, [variant])
        title = exam_title or variant.exam_title or UNKNOWN_EXAM_TITLE
        results.append(
            _build_result(
                exam_id=variant.exam_id or UNKNOWN_EXAM_ID,
                exam_title=f"{title} - Variant {code}",
                responses=unmapped,
                questions=_question_lookup([variant]),
                config=cfg,
                metadata=AnalysisMetadata(
                    total_students=len(group),
                    total_variants=1,
                    analysis_date=datetime.now(UTC),
                    sample_size=len(group),
                    excluded_students=0,
                    student_responses=unmapped,
                ),
            )
        )

    return results
