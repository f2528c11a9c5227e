"""
Configuration for item analysis.
"""

from collections.abc import Mapping
from dataclasses import dataclass, fields

from pydantic.alias_generators import to_snake

from exam_analysis.core.exceptions import InvalidInputError

DEFAULT_HIGH_GROUP_PERCENT = 0.27
DEFAULT_LOW_GROUP_PERCENT = 0.27
# Never fewer than max(2, 10% of n) students per discrimination group
DEFAULT_MIN_GROUP_FRACTION = 0.10
DEFAULT_MIN_GROUP_SIZE = 2
DEFAULT_CONFIDENCE_LEVEL = 0.95


@dataclass(frozen=True)
class AnalysisConfig:
    """
    Settings for one analysis call.

    Attributes:
        min_sample_size: Minimum number of responses; None for no minimum.
        include_discrimination_index: Compute the high/low group index.
        include_difficulty_index: Compute the proportion correct.
        include_point_biserial: Compute item-total point-biserial correlation.
        include_distractor_analysis: Compute per-option statistics.
        confidence_level: Confidence level for critical values and intervals.
        exclude_incomplete_data: Drop responses that were never completed
            or have no answers.
        group_by_question_type: Add per-type averages to the summary.
        high_group_percent: Fraction of students in the high group.
        low_group_percent: Fraction of students in the low group.
        min_group_fraction: Lower bound on group size as a fraction of n.
        min_group_size: Absolute lower bound on group size.
    """

    min_sample_size: int | None = None
    include_discrimination_index: bool = True
    include_difficulty_index: bool = True
    include_point_biserial: bool = True
    include_distractor_analysis: bool = True
    confidence_level: float = DEFAULT_CONFIDENCE_LEVEL
    exclude_incomplete_data: bool = False
    group_by_question_type: bool = False
    high_group_percent: float = DEFAULT_HIGH_GROUP_PERCENT
    low_group_percent: float = DEFAULT_LOW_GROUP_PERCENT
    min_group_fraction: float = DEFAULT_MIN_GROUP_FRACTION
    min_group_size: int = DEFAULT_MIN_GROUP_SIZE

    def __post_init__(self) -> None:
        if not (0.0 < self.confidence_level < 1.0):
            raise InvalidInputError(
                f"confidence_level must be in (0, 1), got {self.confidence_level}"
            )
        for name in ("high_group_percent", "low_group_percent"):
            value = getattr(self, name)
            if not (0.0 < value <= 0.5):
                raise InvalidInputError(f"{name} must be in (0, 0.5], got {value}")
        if self.min_sample_size is not None and self.min_sample_size < 0:
            raise InvalidInputError(
                f"min_sample_size must be >= 0, got {self.min_sample_size}"
            )

    @classmethod
    def from_mapping(
        cls, values: Mapping[str, object] | None = None
    ) -> "AnalysisConfig":
        """Build a config from camelCase or snake_case keys, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        kwargs = {
            to_snake(key): value
            for key, value in (values or {}).items()
            if to_snake(key) in known and value is not None
        }
        return cls(**kwargs)  # type: ignore[arg-type]
