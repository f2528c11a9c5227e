"""
Printed statistical tables used for critical values and p-values.

Item significance is read from the same chi-square and standard normal
tables found in textbook appendices, so results agree with hand-computed
reports. The tables are generated once from scipy.stats at the printed
resolution.
"""

from functools import lru_cache

import numpy as np
from numpy.typing import NDArray
from scipy import stats

# Upper-tail probabilities, in the column order of a printed table
CHI_SQUARED_ALPHAS = (
    0.995, 0.99, 0.975, 0.95, 0.9, 0.5, 0.1, 0.05, 0.025, 0.01, 0.005
)
MAX_TABLE_DF = 100

NORMAL_TABLE_STEP = 0.01
NORMAL_TABLE_SIZE = 310


@lru_cache(maxsize=1)
def chi_squared_table() -> dict[int, dict[float, float]]:
    """Critical values table[df][alpha] for df in 1..MAX_TABLE_DF."""
    table: dict[int, dict[float, float]] = {}
    for df in range(1, MAX_TABLE_DF + 1):
        table[df] = {
            alpha: round(float(stats.chi2.isf(alpha, df)), 3)
            for alpha in CHI_SQUARED_ALPHAS
        }
    return table


@lru_cache(maxsize=1)
def standard_normal_table() -> NDArray[np.float64]:
    """Phi(z) for z = 0.00, 0.01, ..., 3.09, rounded to 4 decimals."""
    z = np.arange(NORMAL_TABLE_SIZE) * NORMAL_TABLE_STEP
    result: NDArray[np.float64] = np.round(stats.norm.cdf(z), 4)
    return result


def cumulative_std_normal_probability(z: float) -> float:
    """Table lookup of Phi(z) at 0.01 resolution."""
    table = standard_normal_table()
    index = min(int(round(abs(z) / NORMAL_TABLE_STEP)), len(table) - 1)
    value = float(table[index])
    return value if z >= 0 else 1.0 - value
