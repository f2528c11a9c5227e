"""
Exam-level summary statistics.
"""

import math
from collections.abc import Sequence

import numpy as np
from numpy.typing import NDArray
from scipy import stats

from exam_analysis.analysis.data_models import (
    AnalysisSummary,
    ConfidenceInterval,
    QuestionAnalysisResult,
    QuestionTypeBreakdown,
    ReliabilityMetrics,
    ScoreDistribution,
)

MIN_SKEWNESS_SAMPLE = 3
MIN_KURTOSIS_SAMPLE = 4
MIN_RELIABILITY_SAMPLE = 3


def _mean_or_none(values: Sequence[float | None]) -> float | None:
    present = [v for v in values if v is not None]
    return float(np.mean(present)) if present else None


def _finite_or_none(value: float) -> float | None:
    return value if math.isfinite(value) else None


def score_distribution(
    total_scores: NDArray[np.float64],
) -> ScoreDistribution | None:
    """
    Distribution of total scores.

    Standard deviation is the population value. Skewness and excess
    kurtosis are the bias-corrected sample estimates and are None when the
    sample is too small or the scores are constant.
    """
    n = len(total_scores)
    if n == 0:
        return None

    constant = bool(np.all(total_scores == total_scores[0]))
    skewness: float | None = None
    if n >= MIN_SKEWNESS_SAMPLE and not constant:
        skewness = _finite_or_none(float(stats.skew(total_scores, bias=False)))
    kurtosis: float | None = None
    if n >= MIN_KURTOSIS_SAMPLE and not constant:
        kurtosis = _finite_or_none(
            float(stats.kurtosis(total_scores, fisher=True, bias=False))
        )

    q1, q2, q3 = np.quantile(
        total_scores, [0.25, 0.5, 0.75], method="averaged_inverted_cdf"
    )
    return ScoreDistribution(
        mean=float(np.mean(total_scores)),
        median=float(np.median(total_scores)),
        standard_deviation=float(np.std(total_scores)),
        skewness=skewness,
        kurtosis=kurtosis,
        min=float(np.min(total_scores)),
        max=float(np.max(total_scores)),
        quartiles=(float(q1), float(q2), float(q3)),
    )


def cronbach_alpha(
    item_matrix: NDArray[np.float64],
    total_scores: NDArray[np.float64],
    z: float = 1.96,
) -> ReliabilityMetrics | None:
    """
    Cronbach's alpha over an (n_items, n_students) 0/1 matrix.

    alpha = k / (k - 1) * (1 - sum(var_i) / var_total), population
    variances, with standard error sqrt(var_total * (1 - alpha)).

    Returns None for fewer than 3 students, fewer than 2 items, zero total
    variance, or an undefined standard error.
    """
    n_items, n_students = item_matrix.shape
    if n_students < MIN_RELIABILITY_SAMPLE or n_items < 2:
        return None

    total_variance = float(np.var(total_scores))
    if total_variance == 0.0:
        return None

    sum_item_variances = float(np.sum(np.var(item_matrix, axis=1)))
    alpha = n_items / (n_items - 1) * (1.0 - sum_item_variances / total_variance)
    if not math.isfinite(alpha) or alpha > 1.0:
        return None

    standard_error = math.sqrt(total_variance * (1.0 - alpha))
    return ReliabilityMetrics(
        cronbachs_alpha=alpha,
        standard_error=standard_error,
        confidence_interval=ConfidenceInterval(
            lower=max(0.0, alpha - z * standard_error),
            upper=min(1.0, alpha + z * standard_error),
        ),
    )


def breakdown_by_question_type(
    results: Sequence[QuestionAnalysisResult],
) -> list[QuestionTypeBreakdown]:
    groups: dict[str, list[QuestionAnalysisResult]] = {}
    for result in results:
        groups.setdefault(result.question_type, []).append(result)

    return [
        QuestionTypeBreakdown(
            question_type=question_type,
            question_count=len(group),
            average_difficulty=_mean_or_none(
                [r.difficulty_index for r in group]
            ),
            average_discrimination=_mean_or_none(
                [r.discrimination_index for r in group]
            ),
            average_point_biserial=_mean_or_none(
                [r.point_biserial_correlation for r in group]
            ),
        )
        for question_type, group in groups.items()
    ]


def calculate_summary(
    results: Sequence[QuestionAnalysisResult],
    item_matrix: NDArray[np.float64],
    total_scores: NDArray[np.float64],
    group_by_question_type: bool = False,
    z: float = 1.96,
) -> AnalysisSummary:
    """Averages over the question results plus score and reliability statistics.

    Metrics that were not computed are left out of the averages.
    """
    return AnalysisSummary(
        average_difficulty=_mean_or_none([r.difficulty_index for r in results]),
        average_discrimination=_mean_or_none(
            [r.discrimination_index for r in results]
        ),
        average_point_biserial=_mean_or_none(
            [r.point_biserial_correlation for r in results]
        ),
        reliability_metrics=cronbach_alpha(item_matrix, total_scores, z),
        score_distribution=score_distribution(total_scores),
        by_question_type=(
            breakdown_by_question_type(results)
            if group_by_question_type
            else None
        ),
    )
