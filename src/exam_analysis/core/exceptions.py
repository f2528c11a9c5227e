"""
Typed errors raised by the variant generator and the analysis engine.

Messages are written as user-facing sentences and are meant to be shown
verbatim by the caller.
"""


class ExamAnalysisError(Exception):
    """Base class for all domain errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidInputError(ExamAnalysisError):
    """Malformed configuration or an unusable question set."""


class InvalidQuestionError(ExamAnalysisError):
    """A single question failed structural validation."""

    def __init__(self, message: str, question_text: str) -> None:
        self.question_text = question_text
        super().__init__(message)


class InsufficientDataError(ExamAnalysisError):
    """Too few student responses to analyze."""

    def __init__(
        self,
        message: str,
        n_available: int = 0,
        n_required: int | None = None,
    ) -> None:
        self.n_available = n_available
        self.n_required = n_required
        super().__init__(message)
