import pytest

from exam_analysis.analysis.config import AnalysisConfig
from exam_analysis.analysis.engine import compute_exam_analysis
from exam_analysis.core.data_models import QuestionResponse, StudentResponse
from exam_analysis.core.exceptions import InvalidInputError


class TestAnalysisConfig:
    def test_defaults(self) -> None:
        config = AnalysisConfig()
        assert config.min_sample_size is None
        assert config.confidence_level == 0.95
        assert config.high_group_percent == 0.27
        assert config.include_distractor_analysis
        assert not config.exclude_incomplete_data

    @pytest.mark.parametrize("level", [0.0, 1.0, 1.5])
    def test_invalid_confidence_level(self, level: float) -> None:
        with pytest.raises(InvalidInputError, match="confidence_level"):
            AnalysisConfig(confidence_level=level)

    def test_invalid_group_percent(self) -> None:
        with pytest.raises(InvalidInputError, match="high_group_percent"):
            AnalysisConfig(high_group_percent=0.6)

    def test_negative_min_sample_size(self) -> None:
        with pytest.raises(InvalidInputError, match="min_sample_size"):
            AnalysisConfig(min_sample_size=-1)

    def test_from_mapping(self) -> None:
        config = AnalysisConfig.from_mapping(
            {"minSampleSize": 5, "include_point_biserial": False, "unknown": 1}
        )
        assert config.min_sample_size == 5
        assert not config.include_point_biserial

    def test_bad_mapping_rejected_by_engine(self) -> None:
        responses = [
            StudentResponse(
                student_id="s1",
                question_responses=[QuestionResponse(question_id="q1", student_answer="A")],
            )
        ]
        with pytest.raises(InvalidInputError, match="confidence_level"):
            compute_exam_analysis([], responses, {"confidenceLevel": 1.5})
