from typing import Any

from pydantic import BaseModel, Field

from exam_analysis.analysis.config import AnalysisConfig
from exam_analysis.analysis.data_models import ExamVariantForAnalysis
from exam_analysis.core.data_models import CamelModel, Question, StudentResponse
from exam_analysis.transform.questions import QuestionFormat
from exam_analysis.variants.config import ExamVariationConfig
from exam_analysis.variants.data_models import ExamVariant

# --- Config schemas ---


class VariationConfigSchema(CamelModel):
    randomize_question_order: bool | None = None
    randomize_option_order: bool | None = None
    randomize_true_false_options: bool | None = None
    randomize_question_subset: bool | None = None
    question_count: int | None = Field(default=None, ge=0)
    seed: str | None = None
    max_variations: int | None = Field(default=None, ge=0)
    enforce_max_variations: bool | None = None

    def to_domain(self) -> ExamVariationConfig:
        return ExamVariationConfig.from_mapping(self.model_dump(exclude_none=True))


class AnalysisConfigSchema(CamelModel):
    min_sample_size: int | None = Field(default=None, ge=0)
    include_discrimination_index: bool | None = None
    include_difficulty_index: bool | None = None
    include_point_biserial: bool | None = None
    include_distractor_analysis: bool | None = None
    confidence_level: float | None = Field(default=None, gt=0, lt=1)
    exclude_incomplete_data: bool | None = None
    group_by_question_type: bool | None = None
    high_group_percent: float | None = Field(default=None, gt=0, le=0.5)
    low_group_percent: float | None = Field(default=None, gt=0, le=0.5)

    def to_domain(self) -> AnalysisConfig:
        return AnalysisConfig.from_mapping(self.model_dump(exclude_none=True))


# --- Request schemas ---


class GenerateVariationsRequest(CamelModel):
    questions: list[Question]
    config: VariationConfigSchema | None = None


class RecreateVariantRequest(CamelModel):
    questions: list[Question]
    seed: str = Field(min_length=1)
    config: VariationConfigSchema | None = None


class RandomizationReportRequest(CamelModel):
    questions: list[Question]
    variants: list[ExamVariant]
    exam_id: str | None = None
    exam_title: str | None = None


class AnalysisRequest(CamelModel):
    variants: list[ExamVariantForAnalysis]
    responses: list[StudentResponse]
    config: AnalysisConfigSchema | None = None
    exam_title: str | None = None


class IntegrityRequest(CamelModel):
    variants: list[ExamVariantForAnalysis] = Field(default_factory=list)
    responses: list[StudentResponse]
    unmap: bool = True


class ValidateQuestionsRequest(CamelModel):
    questions: list[Question]


class TransformQuestionsRequest(CamelModel):
    items: list[dict[str, Any]]
    source: QuestionFormat
    target: QuestionFormat


# --- Response schemas ---


class ErrorDetail(BaseModel):
    code: str
    message: str
    request_id: str | None = None


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
