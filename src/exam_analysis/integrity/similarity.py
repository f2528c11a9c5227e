"""
Pairwise similarity between students and between variants.

Student similarity is the share of matching answers over the questions both
students answered. Computing it is O(n^2 * q) in the cohort size n, so the
pairwise loop runs compiled under numba and callers can cap the cohort.
"""

import logging
from collections.abc import Sequence

import numpy as np
from numba import njit  # type: ignore
from numpy.typing import NDArray

from exam_analysis.analysis.data_models import ExamVariantForAnalysis
from exam_analysis.analysis.unmapping import unmap_variant_responses
from exam_analysis.core.constants import MISSING_VALUE
from exam_analysis.core.data_models import StudentResponse
from exam_analysis.core.exceptions import InvalidInputError
from exam_analysis.core.utils import normalize
from exam_analysis.integrity.data_models import IntegrityReport, SimilarityMatrix

logger = logging.getLogger(__name__)


@njit  # type: ignore
def count_shared_and_matching(
    a: NDArray[np.int32], b: NDArray[np.int32]
) -> tuple[int, int]:
    """
    Count questions answered by both students and, of those, identical answers.

    Positions where either student has `MISSING_VALUE` are ignored.
    """
    valid_mask = (a != MISSING_VALUE) & (b != MISSING_VALUE)
    shared = np.count_nonzero(valid_mask)
    matches = np.count_nonzero((a == b) & valid_mask)
    return shared, matches


@njit  # type: ignore
def pairwise_agreement(responses: NDArray[np.int32]) -> NDArray[np.float64]:
    """
    Agreement matrix for an (n_students, n_questions) answer-code matrix.

    Entry (i, j) is matches / shared, 0 when the pair shares no answered
    question. The diagonal is 1.
    """
    n = responses.shape[0]
    similarity = np.eye(n)

    for i in range(n):
        for j in range(i):
            shared, matches = count_shared_and_matching(
                responses[i, :], responses[j, :]
            )
            value = matches / shared if shared > 0 else 0.0
            similarity[i, j] = value
            similarity[j, i] = value

    return similarity


def encode_answers(
    responses: Sequence[StudentResponse],
) -> tuple[list[str], NDArray[np.int32]]:
    """
    Encode answers as per-question integer codes.

    Each distinct answer to a question (compared with `normalize`) gets its
    own code. Blank and absent answers are `MISSING_VALUE`. Responses that
    share a student id are merged, later answers overwriting earlier ones.

    Returns:
        Tuple of (student_ids, codes) with codes of shape
        (n_students, n_questions).
    """
    answers_by_student: dict[str, dict[str, str]] = {}
    question_ids: dict[str, int] = {}
    for response in responses:
        answers = answers_by_student.setdefault(response.student_id, {})
        for qr in response.question_responses:
            question_ids.setdefault(qr.question_id, len(question_ids))
            answers[qr.question_id] = normalize(qr.student_answer)

    student_ids = list(answers_by_student)
    codes = np.full(
        (len(student_ids), len(question_ids)), MISSING_VALUE, dtype=np.int32
    )
    categories: list[dict[str, int]] = [{} for _ in question_ids]
    for i, student_id in enumerate(student_ids):
        for question_id, answer in answers_by_student[student_id].items():
            if not answer:
                continue
            col = question_ids[question_id]
            codes[i, col] = categories[col].setdefault(
                answer, len(categories[col])
            )

    return student_ids, codes


def calculate_student_similarity_matrix(
    responses: Sequence[StudentResponse],
    max_cohort_size: int | None = None,
) -> SimilarityMatrix:
    """
    Raises:
        InvalidInputError: If the cohort is larger than max_cohort_size.
    """
    student_ids, codes = encode_answers(responses)
    if max_cohort_size is not None and len(student_ids) > max_cohort_size:
        raise InvalidInputError(
            f"Cohort of {len(student_ids)} students exceeds the similarity "
            f"limit of {max_cohort_size}"
        )

    logger.debug(
        f"Computing student similarity for {len(student_ids)} students "
        f"over {codes.shape[1]} questions"
    )
    matrix = pairwise_agreement(codes) if student_ids else np.eye(0)
    return {
        a: {b: float(matrix[i, j]) for j, b in enumerate(student_ids)}
        for i, a in enumerate(student_ids)
    }


def question_order_similarity(
    a: ExamVariantForAnalysis, b: ExamVariantForAnalysis
) -> float:
    """Share of positions holding the same original question."""
    order_a = a.metadata.question_order if a.metadata else []
    order_b = b.metadata.question_order if b.metadata else []
    if not order_a or not order_b or len(order_a) != len(order_b):
        return 0.0
    matching = sum(1 for x, y in zip(order_a, order_b) if x == y)
    return matching / len(order_a)


def option_permutation_similarity(
    a: ExamVariantForAnalysis, b: ExamVariantForAnalysis
) -> float:
    """Share of questions permuted in both variants with identical permutations."""
    perms_a = a.metadata.option_permutations if a.metadata else {}
    perms_b = b.metadata.option_permutations if b.metadata else {}
    if not perms_a or not perms_b:
        return 0.0

    shared = [qid for qid in perms_a if qid in perms_b]
    if not shared:
        return 0.0
    matching = sum(1 for qid in shared if perms_a[qid] == perms_b[qid])
    return matching / len(shared)


def calculate_variant_similarity_matrix(
    variants: Sequence[ExamVariantForAnalysis],
) -> SimilarityMatrix:
    """Mean of question-order and option-permutation similarity per pair.

    Variants without a variant code are left out.
    """
    coded = [v for v in variants if v.variant_code]
    matrix: SimilarityMatrix = {}
    for a in coded:
        row = matrix.setdefault(str(a.variant_code), {})
        for b in coded:
            if a.variant_code == b.variant_code:
                row[str(b.variant_code)] = 1.0
                continue
            row[str(b.variant_code)] = (
                question_order_similarity(a, b)
                + option_permutation_similarity(a, b)
            ) / 2.0
    return matrix


def analyze_integrity(
    variants: Sequence[ExamVariantForAnalysis],
    responses: Sequence[StudentResponse],
    unmap: bool = True,
    max_cohort_size: int | None = None,
) -> IntegrityReport:
    """
    Student and variant similarity for integrity review.

    With `unmap`, answers are first mapped to original questions so that
    students who sat different variants are compared on the same options.
    """
    if unmap:
        responses = unmap_variant_responses(responses, variants)
    return IntegrityReport(
        student_similarity=calculate_student_similarity_matrix(
            responses, max_cohort_size
        ),
        variant_similarity=calculate_variant_similarity_matrix(variants),
    )
