from exam_analysis.core.data_models import Question, QuestionType
from exam_analysis.transform.validation import validate_questions


def _mc(text: str = "Pick one", options: list[str] | None = None, answer: str = "a") -> Question:
    return Question(
        id="q",
        text=text,
        type=QuestionType.MULTIPLE_CHOICE,
        options=["a", "b", "c"] if options is None else options,
        correct_answer=answer,
    )


def _tf(answer: str = "True", options: list[str] | None = None) -> Question:
    return Question(
        id="t",
        text="A statement",
        type=QuestionType.TRUE_FALSE,
        options=options or [],
        correct_answer=answer,
    )


class TestValidateQuestions:
    def test_valid(self) -> None:
        report = validate_questions([_mc(), _tf(), _tf("false", ["True", "False"])])
        assert report.valid
        assert report.errors == []

    def test_empty_list_valid(self) -> None:
        assert validate_questions([]).valid

    def test_missing_text(self) -> None:
        report = validate_questions([_mc(text="  ")])
        assert report.errors == ["Question 1: Missing text"]

    def test_multiple_choice_without_options(self) -> None:
        report = validate_questions([_mc(options=[])])
        assert not report.valid
        assert "Question 1: Multiple choice question must have options" in report.errors

    def test_missing_answer(self) -> None:
        report = validate_questions([_mc(), _mc(answer="")])
        assert report.errors == ["Question 2: Missing correct answer"]

    def test_answer_not_in_options(self) -> None:
        report = validate_questions([_mc(answer="z")])
        assert report.errors == [
            'Question 1: Correct answer "z" not found in options [a, b, c]'
        ]

    def test_answer_matched_case_insensitively(self) -> None:
        assert validate_questions([_mc(answer="B")]).valid

    def test_duplicate_option(self) -> None:
        report = validate_questions([_mc(options=["a", "b", "A"])])
        assert report.errors == ['Question 1: Duplicate option "A"']

    def test_true_false_bad_answer(self) -> None:
        report = validate_questions([_tf("maybe")])
        assert report.errors == [
            'Question 1: True/False question must have "True" or "False" as the correct answer'
        ]

    def test_true_false_option_count(self) -> None:
        report = validate_questions([_tf("True", ["True", "False", "Unsure"])])
        assert report.errors == [
            "Question 1: True/False question must have exactly 2 options"
        ]

    def test_collects_every_error(self) -> None:
        report = validate_questions([_mc(text="", options=[], answer=""), _tf("")])
        assert len(report.errors) == 4
