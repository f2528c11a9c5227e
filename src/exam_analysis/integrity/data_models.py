from enum import StrEnum

from exam_analysis.core.data_models import CamelModel

SimilarityMatrix = dict[str, dict[str, float]]


class IntegrityReport(CamelModel):
    student_similarity: SimilarityMatrix
    variant_similarity: SimilarityMatrix


class FlagType(StrEnum):
    HIGH_SIMILARITY = "HIGH_SIMILARITY"
    LOW_RANDOMIZATION = "LOW_RANDOMIZATION"
    IDENTICAL_VARIANTS = "IDENTICAL_VARIANTS"


class FlagSeverity(StrEnum):
    WARNING = "WARNING"
    ERROR = "ERROR"


class RandomizationFlag(CamelModel):
    type: FlagType
    severity: FlagSeverity
    message: str
    details: str


class QuestionPositionSimilarity(CamelModel):
    """Where one question landed across variants.

    position_similarity is 1 / (1 + variance of positions), 1 when the
    question always sits at the same position.
    """

    question_id: str
    question_text: str
    position_similarity: float
    average_position: float
    position_variance: float
    positions: list[int]


class OptionOrderSimilarity(CamelModel):
    question_id: str
    question_text: str
    option_similarity: float
    average_permutation: list[float]
    permutation_variance: float
    permutations: list[list[int]]


class OverallSimilarity(CamelModel):
    question_order_similarity: float
    option_order_similarity: float
    combined_similarity: float


class VariantRandomizationReport(CamelModel):
    exam_id: str | None = None
    exam_title: str | None = None
    total_variants: int
    question_similarity: list[QuestionPositionSimilarity]
    option_similarity: list[OptionOrderSimilarity]
    overall_similarity: OverallSimilarity
    flags: list[RandomizationFlag]
    recommendations: list[str]
