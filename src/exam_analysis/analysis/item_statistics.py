"""
Classical test theory statistics for a single question.

Every function takes per-student arrays aligned with the cohort: a total
score per student and, per question, whether each student answered
correctly or which option they chose. Students who did not answer a
question count as incorrect and as not having chosen any option.

Degenerate data (all correct, all incorrect, zero variance) returns 0 or
None on the affected metric and never raises.
"""

import math
from collections.abc import Sequence

import numpy as np
from numpy.typing import NDArray

from exam_analysis.analysis.data_models import (
    ConfidenceInterval,
    DistractorAnalysis,
    DistractorOption,
    ItemReliabilityMetrics,
)
from exam_analysis.core.utils import (
    find_option_index,
    is_option_letter,
    letter_to_index,
    normalize,
)


def difficulty_index(n_correct: int, n_total: int) -> float:
    """Proportion correct, p = R / N."""
    return n_correct / n_total if n_total > 0 else 0.0


def group_sizes(
    n: int,
    high_group_percent: float,
    low_group_percent: float,
    min_group_fraction: float = 0.10,
    min_group_size: int = 2,
) -> tuple[int, int]:
    """Sizes of the high and low groups, each capped at n.

    The minimum group size is applied before the cap, so for n < 4 the two
    groups overlap (n=3 gives 2 and 2 sharing the middle student).
    """
    min_group = max(min_group_size, math.floor(n * min_group_fraction))
    high = max(min_group, math.floor(n * high_group_percent))
    low = max(min_group, math.floor(n * low_group_percent))
    return min(high, n), min(low, n)


def discrimination_index(
    total_scores: NDArray[np.float64],
    correct: NDArray[np.bool_],
    high_group_percent: float = 0.27,
    low_group_percent: float = 0.27,
    min_group_fraction: float = 0.10,
    min_group_size: int = 2,
) -> float:
    """
    Upper-lower group discrimination index.

    Students are ranked by total score (descending, ties keep input order).
    D = proportion correct in the high group - proportion correct in the
    low group.
    """
    n = len(total_scores)
    if n == 0:
        return 0.0

    high, low = group_sizes(
        n,
        high_group_percent,
        low_group_percent,
        min_group_fraction,
        min_group_size,
    )
    order = np.argsort(-total_scores, kind="stable")
    high_proportion = float(np.mean(correct[order[:high]])) if high else 0.0
    low_proportion = float(np.mean(correct[order[n - low :]])) if low else 0.0
    return high_proportion - low_proportion


def point_biserial(
    indicator: NDArray[np.bool_], total_scores: NDArray[np.float64]
) -> float:
    """
    Point-biserial correlation between a 0/1 indicator and total scores.

    r_pb = ((M1 - M0) / s) * sqrt(n1 * n0 / n^2), where s is the
    population standard deviation of all total scores. Clamped to [-1, 1].
    """
    n = len(total_scores)
    if n < 2:
        return 0.0

    n1 = int(np.count_nonzero(indicator))
    n0 = n - n1
    if n1 == 0 or n0 == 0:
        return 0.0

    std = float(np.std(total_scores))
    if std == 0.0:
        return 0.0

    mean1 = float(np.mean(total_scores[indicator]))
    mean0 = float(np.mean(total_scores[~indicator]))
    r = (mean1 - mean0) / std * math.sqrt(n1 * n0 / (n * n))
    return max(-1.0, min(1.0, r))


def match_option(answer: str, options: Sequence[str]) -> str:
    """
    Resolve an answer to the option it selects.

    Exact option text wins, then case-insensitive text, then a position
    letter. Anything else is returned unchanged.
    """
    if answer in options:
        return answer
    index = find_option_index(options, answer)
    if index is not None:
        return options[index]
    if is_option_letter(answer):
        position = letter_to_index(answer)
        if position < len(options):
            return options[position]
    return answer


def analyze_distractors(
    answers: Sequence[str | None],
    total_scores: NDArray[np.float64],
    options: Sequence[str],
    correct_answer: str,
) -> DistractorAnalysis:
    """
    Selection statistics for every option of a question.

    Only the question's real options are reported, including options no one
    chose; free-text answers that match no option are not listed. Without
    option data the observed answers stand in for the options.

    Args:
        answers: Answer per student; None when the student has no response
            to this question, "" when the response was left blank.
        total_scores: Total score per student.
        options: The question's options in original order.
        correct_answer: The question's correct answer.
    """
    responded = [a for a in answers if a is not None]
    total = len(responded)
    omitted = sum(1 for a in responded if a == "")

    chosen = [
        match_option(a, options) if a else None for a in answers
    ]

    if options:
        all_options = list(options)
    else:
        all_options = list(dict.fromkeys(c for c in chosen if c))

    correct_index = find_option_index(all_options, correct_answer)
    correct_option = (
        all_options[correct_index] if correct_index is not None else None
    )

    analyzed: list[DistractorOption] = []
    for option in all_options:
        indicator = np.array([c == option for c in chosen], dtype=np.bool_)
        frequency = int(np.count_nonzero(indicator))
        share = frequency / total if total > 0 else 0.0
        analyzed.append(
            DistractorOption(
                option=option,
                frequency=frequency,
                percentage=share * 100.0,
                discrimination_index=share,
                point_biserial_correlation=point_biserial(
                    indicator, total_scores
                ),
            )
        )

    return DistractorAnalysis(
        distractors=[o for o in analyzed if o.option != correct_option],
        correct_option=next(
            (o for o in analyzed if o.option == correct_option), None
        ),
        omitted_responses=omitted,
        omitted_percentage=omitted / total * 100.0 if total > 0 else 0.0,
    )


def count_distinct_answers(answers: Sequence[str | None]) -> int:
    """Distinct non-blank answers, compared case-insensitively."""
    return len({normalize(a) for a in answers if a})


def item_reliability(
    item_scores: NDArray[np.float64],
    total_scores: NDArray[np.float64],
    z: float = 1.96,
) -> ItemReliabilityMetrics | None:
    """
    Simplified reliability contribution of one item.

    reliability = var(item) / var(total) * r(item, total), with standard
    error sqrt(var(item) * (1 - reliability)). Returns None for fewer than
    3 students or when any term is undefined.
    """
    if len(item_scores) < 3:
        return None

    item_variance = float(np.var(item_scores))
    total_variance = float(np.var(total_scores))
    if item_variance == 0.0 or total_variance == 0.0:
        return None

    correlation = float(np.corrcoef(item_scores, total_scores)[0, 1])
    reliability = item_variance / total_variance * correlation
    if not math.isfinite(reliability) or reliability > 1.0:
        return None

    standard_error = math.sqrt(item_variance * (1.0 - reliability))
    return ItemReliabilityMetrics(
        item_total_correlation=correlation,
        reliability=reliability,
        standard_error=standard_error,
        confidence_interval=ConfidenceInterval(
            lower=max(0.0, reliability - z * standard_error),
            upper=min(1.0, reliability + z * standard_error),
        ),
    )
