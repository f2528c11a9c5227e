"""
Uniqueness checks over a batch of generated variants.
"""

from collections.abc import Sequence

from exam_analysis.variants.data_models import ExamVariant, UniquenessReport


def are_variants_identical(a: ExamVariant, b: ExamVariant) -> bool:
    """Same question order and same option permutation for every question."""
    if a.metadata.question_order != b.metadata.question_order:
        return False

    perms_a = a.metadata.option_permutations
    perms_b = b.metadata.option_permutations
    for question_id in perms_a.keys() | perms_b.keys():
        if perms_a.get(question_id, []) != perms_b.get(question_id, []):
            return False
    return True


def validate_variation_uniqueness(
    variants: Sequence[ExamVariant],
) -> UniquenessReport:
    """
    Compare every pair of variants.

    The uniqueness score is (n - duplicate pairs) / n, 0 for an empty batch.
    """
    duplicates: list[tuple[int, int]] = []
    for i in range(len(variants)):
        for j in range(i + 1, len(variants)):
            if are_variants_identical(variants[i], variants[j]):
                duplicates.append((i, j))

    n = len(variants)
    score = (n - len(duplicates)) / n if n > 0 else 0.0
    return UniquenessReport(
        is_valid=not duplicates,
        duplicates=duplicates,
        uniqueness_score=max(0.0, score),
    )
