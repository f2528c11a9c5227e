import pytest
from pydantic import ValidationError

from exam_analysis.core.data_models import (
    AnalysisQuestion,
    Question,
    QuestionResponse,
    QuestionType,
    StudentResponse,
)


class TestQuestion:
    def test_camel_case_input_and_output(self) -> None:
        q = Question.model_validate(
            {
                "id": "q1",
                "text": "Capital of France?",
                "type": "MULTIPLE_CHOICE",
                "options": ["Paris", "Rome"],
                "correctAnswer": "Paris",
                "negativePoints": -0.5,
            }
        )
        assert q.correct_answer == "Paris"
        dumped = q.model_dump(by_alias=True)
        assert dumped["correctAnswer"] == "Paris"
        assert dumped["negativePoints"] == -0.5

    def test_snake_case_input(self) -> None:
        q = Question(
            id="q1",
            text="t",
            type=QuestionType.TRUE_FALSE,
            correct_answer="True",
        )
        assert q.options == []

    def test_options_json_string(self) -> None:
        q = Question.model_validate(
            {"id": "q1", "text": "t", "type": "MULTIPLE_CHOICE", "options": '["a","b"]'}
        )
        assert q.options == ["a", "b"]

    def test_invalid_options_string(self) -> None:
        with pytest.raises(ValidationError):
            Question.model_validate(
                {"id": "q1", "text": "t", "type": "MULTIPLE_CHOICE", "options": "nope"}
            )

    def test_points_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            Question(id="q1", text="t", type=QuestionType.MULTIPLE_CHOICE, points=0)

    def test_negative_points_must_not_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            Question(
                id="q1",
                text="t",
                type=QuestionType.MULTIPLE_CHOICE,
                negative_points=1.0,
            )

    def test_frozen(self) -> None:
        q = Question(id="q1", text="t", type=QuestionType.MULTIPLE_CHOICE)
        with pytest.raises(ValidationError):
            q.text = "changed"  # type: ignore[misc]


class TestAnalysisQuestion:
    def test_defaults(self) -> None:
        q = AnalysisQuestion(id="q1")
        assert q.question_type == QuestionType.MULTIPLE_CHOICE
        assert q.options == []
        assert q.points == 1.0

    def test_options_none(self) -> None:
        q = AnalysisQuestion.model_validate({"id": "q1", "options": None})
        assert q.options == []


class TestResponses:
    def test_none_answer_becomes_blank(self) -> None:
        qr = QuestionResponse.model_validate(
            {"questionId": "q1", "studentAnswer": None}
        )
        assert qr.student_answer == ""

    def test_student_response_from_camel_case(self) -> None:
        r = StudentResponse.model_validate(
            {
                "studentId": "s1",
                "variantCode": "A",
                "questionResponses": [{"questionId": "q1", "studentAnswer": "B"}],
                "totalScore": 1,
                "completedAt": "2024-05-01T10:00:00Z",
            }
        )
        assert r.variant_code == "A"
        assert r.question_responses[0].student_answer == "B"
        assert r.completed_at is not None
