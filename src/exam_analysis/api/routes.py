from fastapi import APIRouter, Depends

from exam_analysis.analysis.data_models import BiPointAnalysisResult
from exam_analysis.analysis.engine import analyze_by_variant, analyze_exam
from exam_analysis.api.config import ApiSettings
from exam_analysis.api.dependencies import get_settings, get_version
from exam_analysis.api.errors import DataSizeExceededError
from exam_analysis.api.schemas import (
    AnalysisRequest,
    GenerateVariationsRequest,
    HealthResponse,
    IntegrityRequest,
    RandomizationReportRequest,
    RecreateVariantRequest,
    TransformQuestionsRequest,
    ValidateQuestionsRequest,
)
from exam_analysis.core.data_models import Question
from exam_analysis.integrity.data_models import (
    IntegrityReport,
    VariantRandomizationReport,
)
from exam_analysis.integrity.report import analyze_variant_randomization
from exam_analysis.integrity.similarity import analyze_integrity
from exam_analysis.transform.questions import McqListQuestion, transform_questions
from exam_analysis.transform.validation import (
    QuestionValidationReport,
    validate_questions,
)
from exam_analysis.variants.config import ExamVariationConfig
from exam_analysis.variants.data_models import ExamVariant, ExamVariationResult
from exam_analysis.variants.generator import (
    generate_exam_variations,
    recreate_variant,
)

router = APIRouter(prefix="/api/v1")


def _validate_data_size(
    settings: ApiSettings,
    n_questions: int = 0,
    n_students: int = 0,
    n_variations: int = 0,
) -> None:
    if n_questions > settings.max_questions:
        raise DataSizeExceededError(
            f"n_questions={n_questions} exceeds max={settings.max_questions}"
        )
    if n_students > settings.max_students:
        raise DataSizeExceededError(
            f"n_students={n_students} exceeds max={settings.max_students}"
        )
    if n_variations > settings.max_variations:
        raise DataSizeExceededError(
            f"n_variations={n_variations} exceeds max={settings.max_variations}"
        )


def _n_analysis_questions(request: AnalysisRequest | IntegrityRequest) -> int:
    return len({q.id for v in request.variants for q in v.questions})


@router.post("/variations")
async def create_variations(
    request: GenerateVariationsRequest,
    settings: ApiSettings = Depends(get_settings),
) -> ExamVariationResult:
    config = request.config.to_domain() if request.config else ExamVariationConfig()
    _validate_data_size(
        settings,
        n_questions=len(request.questions),
        n_variations=config.max_variations,
    )
    return generate_exam_variations(request.questions, config)


@router.post("/variations/recreate")
async def recreate_variation(
    request: RecreateVariantRequest,
    settings: ApiSettings = Depends(get_settings),
) -> ExamVariant:
    _validate_data_size(settings, n_questions=len(request.questions))
    config = request.config.to_domain() if request.config else None
    return recreate_variant(request.questions, request.seed, config)


@router.post("/variations/report")
async def report_variations(
    request: RandomizationReportRequest,
    settings: ApiSettings = Depends(get_settings),
) -> VariantRandomizationReport:
    _validate_data_size(
        settings,
        n_questions=len(request.questions),
        n_variations=len(request.variants),
    )
    return analyze_variant_randomization(
        request.questions,
        request.variants,
        exam_id=request.exam_id,
        exam_title=request.exam_title,
    )


@router.post("/analysis")
async def run_analysis(
    request: AnalysisRequest,
    settings: ApiSettings = Depends(get_settings),
) -> BiPointAnalysisResult:
    _validate_data_size(
        settings,
        n_questions=_n_analysis_questions(request),
        n_students=len(request.responses),
        n_variations=len(request.variants),
    )
    config = request.config.to_domain() if request.config else None
    return await analyze_exam(
        request.variants, request.responses, config, request.exam_title
    )


@router.post("/analysis/variants")
async def run_analysis_by_variant(
    request: AnalysisRequest,
    settings: ApiSettings = Depends(get_settings),
) -> list[BiPointAnalysisResult]:
    _validate_data_size(
        settings,
        n_questions=_n_analysis_questions(request),
        n_students=len(request.responses),
        n_variations=len(request.variants),
    )
    config = request.config.to_domain() if request.config else None
    return analyze_by_variant(
        request.variants, request.responses, config, request.exam_title
    )


@router.post("/analysis/integrity")
async def run_integrity_analysis(
    request: IntegrityRequest,
    settings: ApiSettings = Depends(get_settings),
) -> IntegrityReport:
    _validate_data_size(
        settings,
        n_questions=_n_analysis_questions(request),
        n_students=len(request.responses),
        n_variations=len(request.variants),
    )
    return analyze_integrity(
        request.variants,
        request.responses,
        unmap=request.unmap,
        max_cohort_size=settings.max_students,
    )


@router.post("/questions/validate")
async def validate_question_set(
    request: ValidateQuestionsRequest,
    settings: ApiSettings = Depends(get_settings),
) -> QuestionValidationReport:
    _validate_data_size(settings, n_questions=len(request.questions))
    return validate_questions(request.questions)


@router.post("/questions/transform")
async def transform_question_set(
    request: TransformQuestionsRequest,
    settings: ApiSettings = Depends(get_settings),
) -> list[Question] | list[McqListQuestion]:
    _validate_data_size(settings, n_questions=len(request.items))
    return transform_questions(request.items, request.source, request.target)


@router.get("/health")
async def health_check(
    version: str = Depends(get_version),
) -> HealthResponse:
    return HealthResponse(version=version)
