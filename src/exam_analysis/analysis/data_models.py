"""
Data models for item analysis input and output.

Inputs:
- VariantMetadata / ExamVariantForAnalysis: a variant with its shuffle record

Outputs:
- QuestionAnalysisResult: statistics for one question
- AnalysisSummary: exam-level statistics
- BiPointAnalysisResult: the full report
"""

import json
import logging
from datetime import datetime

from pydantic import Field, field_validator

from exam_analysis.analysis.config import AnalysisConfig
from exam_analysis.core.data_models import (
    AnalysisQuestion,
    AnswerKeyEntry,
    CamelModel,
    QuestionType,
    StudentResponse,
)

logger = logging.getLogger(__name__)


# --- Inputs ---


class VariantMetadata(CamelModel):
    question_order: list[int] = Field(default_factory=list)
    option_permutations: dict[str, list[int]] = Field(default_factory=dict)
    answer_key: list[AnswerKeyEntry] = Field(default_factory=list)

    @field_validator("answer_key", mode="before")
    @classmethod
    def _parse_answer_key(cls, value: object) -> object:
        # Stored answer keys arrive as a raw JSON string
        if value is None:
            return []
        if isinstance(value, str):
            try:
                return json.loads(value) if value.strip() else []
            except json.JSONDecodeError:
                logger.warning("Ignoring unparseable answer key")
                return []
        return value


class ExamVariantForAnalysis(CamelModel):
    """A variant together with its questions in original space."""

    id: str
    exam_id: str | None = None
    exam_title: str | None = None
    variant_code: str | None = None
    questions: list[AnalysisQuestion] = Field(default_factory=list)
    metadata: VariantMetadata | None = None


# --- Outputs ---


class ConfidenceInterval(CamelModel):
    lower: float
    upper: float


class DistractorOption(CamelModel):
    option: str
    frequency: int
    percentage: float
    discrimination_index: float
    point_biserial_correlation: float


class DistractorAnalysis(CamelModel):
    distractors: list[DistractorOption]
    correct_option: DistractorOption | None = None
    omitted_responses: int
    omitted_percentage: float


class StatisticalSignificance(CamelModel):
    is_significant: bool
    p_value: float
    critical_value: float
    degrees_of_freedom: int
    test_statistic: float
    confidence_interval: ConfidenceInterval | None = None
    warnings: list[str] | None = None


class ReliabilityMetrics(CamelModel):
    cronbachs_alpha: float | None = None
    standard_error: float | None = None
    confidence_interval: ConfidenceInterval | None = None


class ItemReliabilityMetrics(CamelModel):
    """Reliability contribution of one question.

    reliability is var(item) / var(total) * item_total_correlation.
    """

    item_total_correlation: float
    reliability: float
    standard_error: float
    confidence_interval: ConfidenceInterval


class ScoreDistribution(CamelModel):
    mean: float
    median: float
    standard_deviation: float
    skewness: float | None = None
    kurtosis: float | None = None
    min: float
    max: float
    quartiles: tuple[float, float, float]


class QuestionTypeBreakdown(CamelModel):
    question_type: QuestionType
    question_count: int
    average_difficulty: float | None = None
    average_discrimination: float | None = None
    average_point_biserial: float | None = None


class AnalysisSummary(CamelModel):
    average_difficulty: float | None = None
    average_discrimination: float | None = None
    average_point_biserial: float | None = None
    reliability_metrics: ReliabilityMetrics | None = None
    score_distribution: ScoreDistribution | None = None
    by_question_type: list[QuestionTypeBreakdown] | None = None


class QuestionAnalysisResult(CamelModel):
    question_id: str
    question_text: str
    question_type: QuestionType
    total_responses: int
    correct_responses: int
    difficulty_index: float | None = None
    discrimination_index: float | None = None
    point_biserial_correlation: float | None = None
    distractor_analysis: DistractorAnalysis | None = None
    statistical_significance: StatisticalSignificance
    reliability_metrics: ItemReliabilityMetrics | None = None


class AnalysisMetadata(CamelModel):
    total_students: int
    total_variants: int
    analysis_date: datetime
    sample_size: int
    excluded_students: int
    student_responses: list[StudentResponse]


class BiPointAnalysisResult(CamelModel):
    exam_id: str
    exam_title: str
    analysis_config: AnalysisConfig
    question_results: list[QuestionAnalysisResult]
    summary: AnalysisSummary
    metadata: AnalysisMetadata
