"""
Conversion between question-bank list items and course questions.
"""

from exam_analysis.transform.questions import (
    McqListQuestion,
    QuestionFormat,
    transform_questions,
)
from exam_analysis.transform.validation import validate_questions
