"""
Data models for generated exam variants.

`ExamVariantMetadata.question_order` and `option_permutations` are the only
record of how a variant was shuffled; the analysis engine relies on them to
map student answers back to the original questions. Their serialized shape
must stay stable across releases.
"""

from datetime import datetime

from pydantic import Field

from exam_analysis.core.data_models import CamelModel, Question
from exam_analysis.variants.config import ExamVariationConfig


class ExamVariantMetadata(CamelModel):
    """
    Attributes:
        original_question_count: Size of the question bank the variant came from.
        variant_number: 1-based position of the variant in its batch.
        seed: The per-variant seed (not the base seed).
        timestamp: Generation time (UTC).
        question_order: question_order[i] is the original index of the
            question shown at position i.
        option_permutations: For each permuted question id, perm with
            variant_options[k] == original_options[perm[k]].
    """

    original_question_count: int
    variant_number: int
    seed: str
    timestamp: datetime
    question_order: list[int]
    option_permutations: dict[str, list[int]] = Field(default_factory=dict)


class ExamVariant(CamelModel):
    id: str
    questions: list[Question]
    metadata: ExamVariantMetadata


class VariationStatistics(CamelModel):
    unique_question_orders: int
    unique_option_combinations: int
    estimated_total_possible_variations: int


class ExamVariationResult(CamelModel):
    variants: list[ExamVariant]
    total_variations: int
    config: ExamVariationConfig
    statistics: VariationStatistics


class UniquenessReport(CamelModel):
    is_valid: bool
    duplicates: list[tuple[int, int]]
    uniqueness_score: float


class ExportedQuestion(CamelModel):
    id: str
    text: str
    type: str
    options: list[str] | None
    points: float
    question_number: int


class ExportedExamMetadata(CamelModel):
    variant_id: str
    question_count: int
    total_points: float
    generated_at: datetime


class ExportedExam(CamelModel):
    exam_id: str
    questions: list[ExportedQuestion]
    metadata: ExportedExamMetadata
