"""
Significance of item performance against random guessing.

For a question with k options the null hypothesis is that students are
correct with probability 1/k. A chi-square goodness-of-fit test with one
degree of freedom is used when every expected count is at least 5; below
that a normal approximation to the binomial test is used and a warning is
recorded on the result.
"""

import math

from scipy import stats

from exam_analysis.analysis.data_models import (
    ConfidenceInterval,
    StatisticalSignificance,
)
from exam_analysis.analysis.tables import (
    CHI_SQUARED_ALPHAS,
    MAX_TABLE_DF,
    chi_squared_table,
    cumulative_std_normal_probability,
)

# Critical value for df=1, alpha=0.05
FALLBACK_CRITICAL_VALUE = 3.841
MIN_EXPECTED_COUNT = 5
MIN_RELIABLE_SAMPLE_SIZE = 30

P_VALUE_FLOOR = 0.001
P_VALUE_CEILING = 0.999
P_VALUE_BELOW_TABLE = 0.99


def _table_df(degrees_of_freedom: int) -> int:
    return min(max(1, round(degrees_of_freedom)), MAX_TABLE_DF)


def find_closest_alpha(alpha: float) -> float:
    """Closest tabulated alpha; the first one wins on ties."""
    return min(CHI_SQUARED_ALPHAS, key=lambda a: abs(alpha - a))


def get_critical_value(degrees_of_freedom: int, alpha: float) -> float:
    df_table = chi_squared_table().get(_table_df(degrees_of_freedom))
    if not df_table:
        return FALLBACK_CRITICAL_VALUE
    return df_table.get(find_closest_alpha(alpha), FALLBACK_CRITICAL_VALUE)


def calculate_p_value(chi_square: float, degrees_of_freedom: int) -> float:
    """
    Approximate p-value by linear interpolation in the chi-square table.

    Statistics below the smallest tabulated value give 0.99, those above
    the largest give 0.001.
    """
    df_table = chi_squared_table()[_table_df(degrees_of_freedom)]
    critical_values = [df_table[a] for a in CHI_SQUARED_ALPHAS]

    for i in range(len(critical_values) - 1):
        v1, v2 = critical_values[i], critical_values[i + 1]
        if v1 <= chi_square < v2:
            p1, p2 = CHI_SQUARED_ALPHAS[i], CHI_SQUARED_ALPHAS[i + 1]
            return p1 + (chi_square - v1) / (v2 - v1) * (p2 - p1)

    if chi_square < critical_values[0]:
        return P_VALUE_BELOW_TABLE
    if chi_square > critical_values[-1]:
        return P_VALUE_FLOOR
    return CHI_SQUARED_ALPHAS[-1]


def z_for_confidence(confidence_level: float) -> float:
    """Two-sided critical z, e.g. 1.96 for 0.95."""
    return float(stats.norm.ppf(1.0 - (1.0 - confidence_level) / 2.0))


def wald_interval(
    proportion: float, n: int, z: float
) -> ConfidenceInterval:
    margin = z * math.sqrt(proportion * (1.0 - proportion) / n)
    return ConfidenceInterval(
        lower=max(0.0, proportion - margin),
        upper=min(1.0, proportion + margin),
    )


def calculate_statistical_significance(
    n_correct: int,
    n: int,
    number_of_options: int = 4,
    confidence_level: float = 0.95,
) -> StatisticalSignificance:
    """
    Test whether the correct rate differs from guessing.

    Args:
        n_correct: Number of correct responses.
        n: Number of responses.
        number_of_options: Options to guess from (at least 2).
        confidence_level: Confidence level for the critical value and the
            interval around the observed proportion.

    Returns:
        StatisticalSignificance with df fixed at 1.
    """
    if n < 1:
        raise ValueError(f"n must be >= 1, got {n}")

    warnings: list[str] = []
    if n < MIN_RELIABLE_SAMPLE_SIZE:
        warnings.append(
            f"Sample size ({n}) < {MIN_RELIABLE_SAMPLE_SIZE}: "
            "significance results are approximate"
        )

    expected_probability = 1.0 / max(2, number_of_options)
    expected_correct = n * expected_probability
    expected_incorrect = n * (1.0 - expected_probability)
    if expected_correct < MIN_EXPECTED_COUNT:
        warnings.append(
            f"Expected correct responses ({expected_correct:.1f}) "
            f"< {MIN_EXPECTED_COUNT}: Using binomial test"
        )
    if expected_incorrect < MIN_EXPECTED_COUNT:
        warnings.append(
            f"Expected incorrect responses ({expected_incorrect:.1f}) "
            f"< {MIN_EXPECTED_COUNT}: Using binomial test"
        )

    proportion = n_correct / n
    critical_value = get_critical_value(1, 1.0 - confidence_level)
    interval = wald_interval(
        proportion, n, z_for_confidence(confidence_level)
    )

    if (
        expected_correct < MIN_EXPECTED_COUNT
        or expected_incorrect < MIN_EXPECTED_COUNT
    ):
        standard_error = math.sqrt(
            expected_probability * (1.0 - expected_probability) / n
        )
        z = (proportion - expected_probability) / standard_error
        test_statistic = z**2
        p_value = 2.0 * (1.0 - cumulative_std_normal_probability(abs(z)))
        p_value = max(P_VALUE_FLOOR, min(P_VALUE_CEILING, p_value))
    else:
        n_incorrect = n - n_correct
        test_statistic = (
            (n_correct - expected_correct) ** 2 / expected_correct
            + (n_incorrect - expected_incorrect) ** 2 / expected_incorrect
        )
        p_value = calculate_p_value(test_statistic, 1)

    return StatisticalSignificance(
        is_significant=test_statistic > critical_value,
        p_value=p_value,
        critical_value=critical_value,
        degrees_of_freedom=1,
        test_statistic=test_statistic,
        confidence_interval=interval,
        warnings=warnings or None,
    )
