"""
Map variant-local student answers back to the original questions.

Answers are canonicalized as follows:
1. surrounding whitespace is stripped; an empty answer is an omission
2. a single ASCII letter (either case) is a position in the variant's
   option list and is resolved through the stored option permutation
3. any other text is matched case-insensitively against the original options
4. an answer that resolves to no option keeps its stripped text

Stored permutations map variant position to original index: perm[k] is the
original option shown at position k (variant[k] == original[perm[k]]), the
form the generator records. Data persisted as an original-to-variant map
must be inverted before it is passed in.

Correctness is always recomputed against the original correct answer; the
flag recorded in variant space is ignored.
"""

import logging
from collections.abc import Sequence

from exam_analysis.analysis.data_models import ExamVariantForAnalysis
from exam_analysis.core.data_models import (
    AnalysisQuestion,
    QuestionResponse,
    StudentResponse,
)
from exam_analysis.core.utils import (
    canonical_options,
    find_option_index,
    is_option_letter,
    letter_to_index,
    normalize,
)

logger = logging.getLogger(__name__)


def resolve_answer(
    answer: str,
    options: Sequence[str],
    permutation: Sequence[int] | None = None,
) -> str:
    """Original option text selected by a variant-local answer."""
    answer = answer.strip()
    if not answer:
        return ""

    if is_option_letter(answer):
        position = letter_to_index(answer)
        if permutation:
            index = permutation[position] if position < len(permutation) else None
        else:
            index = position
        if index is not None and 0 <= index < len(options):
            return options[index]
        return answer

    index = find_option_index(options, answer)
    return options[index] if index is not None else answer


def unmap_question_response(
    response: QuestionResponse,
    question: AnalysisQuestion,
    permutation: Sequence[int] | None = None,
) -> QuestionResponse:
    options = canonical_options(question.question_type, question.options)
    answer = resolve_answer(response.student_answer, options, permutation)
    is_correct = bool(answer) and normalize(answer) == normalize(
        question.correct_answer
    )
    return response.model_copy(
        update={
            "student_answer": answer,
            "is_correct": is_correct,
            "points": response.max_points if is_correct else 0.0,
        }
    )


def unmap_variant_responses(
    responses: Sequence[StudentResponse],
    variants: Sequence[ExamVariantForAnalysis],
) -> list[StudentResponse]:
    """
    Project every response into original-question space.

    Responses whose variant code has no matching variant metadata, and
    answers to questions no variant knows, pass through unchanged.
    Total scores are recomputed from the awarded points.
    """
    variants_by_code = {
        v.variant_code: v for v in variants if v.variant_code is not None
    }
    all_questions = {q.id: q for v in variants for q in v.questions}

    unmapped: list[StudentResponse] = []
    for response in responses:
        variant = variants_by_code.get(response.variant_code)
        if variant is None or variant.metadata is None:
            logger.warning(
                f"No variant metadata for code '{response.variant_code}', "
                f"passing response of {response.student_id} through"
            )
            unmapped.append(response)
            continue

        questions = all_questions | {q.id: q for q in variant.questions}
        permutations = variant.metadata.option_permutations

        question_responses: list[QuestionResponse] = []
        for qr in response.question_responses:
            question = questions.get(qr.question_id)
            if question is None:
                logger.warning(
                    f"Unknown question {qr.question_id} in response of "
                    f"{response.student_id}, passing through"
                )
                question_responses.append(qr)
                continue
            question_responses.append(
                unmap_question_response(
                    qr, question, permutations.get(question.id)
                )
            )

        unmapped.append(
            response.model_copy(
                update={
                    "question_responses": question_responses,
                    "total_score": sum(qr.points for qr in question_responses),
                }
            )
        )

    return unmapped
