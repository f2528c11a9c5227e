"""
Deterministic exam variant generation.

Each variant is built from its own seed (`{base_seed}_v{i}`) with a fresh
SeededRandomizer, in three steps:
1. optionally draw a subset of questions
2. optionally shuffle the question order
3. shuffle the options of each question, in variant order

The resulting `question_order` always holds original question indices and
`option_permutations[qid][k]` is the original index of the option shown at
position k, so every variant can be mapped back to the original exam.
"""

import logging
import math
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime

from exam_analysis.core.data_models import Question, QuestionType
from exam_analysis.core.exceptions import InvalidInputError, InvalidQuestionError
from exam_analysis.core.utils import (
    canonical_options,
    find_option_index,
    hash_code,
)
from exam_analysis.variants.config import ExamVariationConfig
from exam_analysis.variants.data_models import (
    ExamVariant,
    ExamVariantMetadata,
    ExamVariationResult,
    VariationStatistics,
)
from exam_analysis.variants.rng import SeededRandomizer

logger = logging.getLogger(__name__)

VariantKey = tuple[tuple[int, ...], tuple[tuple[str, tuple[int, ...]], ...]]


def resolve_config(
    config: ExamVariationConfig | Mapping[str, object] | None,
) -> ExamVariationConfig:
    if config is None:
        return ExamVariationConfig()
    if isinstance(config, ExamVariationConfig):
        return config
    return ExamVariationConfig.from_mapping(config)


def _validate_question_set(
    questions: Sequence[Question], config: ExamVariationConfig
) -> None:
    if not questions:
        raise InvalidInputError("Questions array cannot be empty")
    if config.randomize_question_subset and config.question_count > len(
        questions
    ):
        raise InvalidInputError(
            "Question count cannot exceed total available questions"
        )


def _validate_question(question: Question) -> None:
    if question.type == QuestionType.MULTIPLE_CHOICE:
        if not question.options:
            raise InvalidQuestionError(
                f'Multiple choice question "{question.text}" must have options',
                question.text,
            )
        if not question.correct_answer:
            raise InvalidQuestionError(
                f'Multiple choice question "{question.text}" must have a correct answer',
                question.text,
            )
        if question.correct_answer not in question.options:
            raise InvalidQuestionError(
                f'Correct answer "{question.correct_answer}" not found in '
                f'options for question "{question.text}"',
                question.text,
            )
    elif question.type == QuestionType.TRUE_FALSE:
        options = canonical_options(question.type, question.options)
        if find_option_index(options, question.correct_answer) is None:
            raise InvalidQuestionError(
                f'True/False question "{question.text}" must have a correct '
                f"answer of {' or '.join(options)}",
                question.text,
            )


def derive_base_seed(questions: Sequence[Question]) -> str:
    """Seed derived from question content; stable for an unchanged bank."""
    content = "|".join(
        f"{q.id}_{q.text}_{q.correct_answer}" for q in questions
    )
    return f"exam_{abs(hash_code(content))}"


def variant_seed(base_seed: str, variation_number: int) -> str:
    return f"{base_seed}_v{variation_number}"


def randomize_question_options(
    question: Question,
    rng: SeededRandomizer,
    randomize_true_false: bool = False,
    randomize_options: bool = True,
) -> tuple[Question, list[int]]:
    """
    Shuffle the options of one question.

    True/False questions always come back with the canonical option pair
    and a correct answer spelled like the matching option. Multiple-choice
    options are shuffled only when `randomize_options` is set.

    Returns:
        The new question and its permutation (empty when not shuffled).
    """
    if question.type == QuestionType.TRUE_FALSE:
        original = canonical_options(question.type, question.options)
        correct_index = find_option_index(original, question.correct_answer)

        if randomize_true_false:
            permutation = rng.shuffle(range(len(original)))
            return (
                _with_options(question, original, permutation, correct_index),
                permutation,
            )

        correct_answer = (
            original[correct_index]
            if correct_index is not None
            else question.correct_answer
        )
        return (
            question.model_copy(
                update={"options": original, "correct_answer": correct_answer}
            ),
            [],
        )

    if (
        question.type == QuestionType.MULTIPLE_CHOICE
        and randomize_options
        and question.options
    ):
        original = list(question.options)
        correct_index = find_option_index(original, question.correct_answer)
        permutation = rng.shuffle(range(len(original)))
        return (
            _with_options(question, original, permutation, correct_index),
            permutation,
        )

    return question.model_copy(), []


def _with_options(
    question: Question,
    original: list[str],
    permutation: list[int],
    correct_index: int | None,
) -> Question:
    options = [original[i] for i in permutation]
    if correct_index is None:
        correct_answer = question.correct_answer
    else:
        correct_answer = options[permutation.index(correct_index)]
    return question.model_copy(
        update={"options": options, "correct_answer": correct_answer}
    )


def calculate_max_possible_variations(
    questions: Sequence[Question], config: ExamVariationConfig
) -> int:
    """
    Estimate the number of distinct variants, capped at config.variation_cap.

    Question orders: n! with order randomization, P(n, k) with a subset and
    order randomization, C(n, k) with a subset only. Each shuffled
    multiple-choice question contributes len(options)! and each shuffled
    True/False question contributes 2.
    """
    n = len(questions)
    k = min(config.question_count, n) if config.uses_subset else n

    variations = 1
    if config.randomize_question_order:
        variations *= math.perm(n, k) if config.uses_subset else math.factorial(n)
    elif config.uses_subset:
        variations *= math.comb(n, k)

    for question in questions:
        if config.randomize_option_order and (
            question.type == QuestionType.MULTIPLE_CHOICE and question.options
        ):
            variations *= math.factorial(len(question.options))
        elif (
            config.randomize_true_false_options
            and question.type == QuestionType.TRUE_FALSE
        ):
            variations *= 2

        # Stop multiplying once past the cap
        if variations >= config.variation_cap:
            return config.variation_cap

    return min(variations, config.variation_cap)


def _build_variant(
    questions: Sequence[Question],
    seed: str,
    config: ExamVariationConfig,
) -> tuple[list[Question], list[int], dict[str, list[int]]]:
    rng = SeededRandomizer(seed)

    order = list(range(len(questions)))
    if config.uses_subset:
        order = rng.sample(order, config.question_count)

    if config.randomize_question_order:
        shuffled = rng.shuffle(range(len(order)))
        order = [order[i] for i in shuffled]

    final_questions: list[Question] = []
    option_permutations: dict[str, list[int]] = {}
    for original_index in order:
        question = questions[original_index]
        randomized, permutation = randomize_question_options(
            question,
            rng,
            randomize_true_false=config.randomize_true_false_options,
            randomize_options=config.randomize_option_order,
        )
        final_questions.append(randomized)
        if permutation:
            option_permutations[question.id] = permutation

    return final_questions, order, option_permutations


def _variant_key(variant: ExamVariant) -> VariantKey:
    perms = variant.metadata.option_permutations
    return (
        tuple(variant.metadata.question_order),
        tuple(sorted((qid, tuple(p)) for qid, p in perms.items())),
    )


def generate_exam_variations(
    questions: Sequence[Question],
    config: ExamVariationConfig | Mapping[str, object] | None = None,
) -> ExamVariationResult:
    """
    Generate shuffled variants of an exam.

    Args:
        questions: The question bank, in original order.
        config: Generation settings; a mapping with camelCase or snake_case
            keys is accepted.

    Returns:
        The variants, the effective config and variation statistics.

    Raises:
        InvalidInputError: Empty question set, oversized subset, or a single
            question with order randomization.
        InvalidQuestionError: A question fails structural validation.
    """
    cfg = resolve_config(config)

    _validate_question_set(questions, cfg)
    for question in questions:
        _validate_question(question)
    if len(questions) == 1 and cfg.randomize_question_order:
        raise InvalidInputError(
            "Cannot randomize questions with only one question."
        )

    base_seed = cfg.seed or derive_base_seed(questions)
    max_possible = calculate_max_possible_variations(questions, cfg)

    if cfg.enforce_max_variations:
        target = min(cfg.max_variations, cfg.variation_cap)
        check_uniqueness = False
    else:
        target = min(cfg.max_variations, max_possible)
        check_uniqueness = target < cfg.variation_cap

    logger.info(
        f"Generating {target} variants from {len(questions)} questions "
        f"(seed={base_seed}, max possible={max_possible})"
    )

    variants: list[ExamVariant] = []
    seen: set[VariantKey] = set()
    for i in range(target):
        seed = variant_seed(base_seed, i)
        final_questions, order, option_permutations = _build_variant(
            questions, seed, cfg
        )
        variant = ExamVariant(
            id=f"variant_{i + 1}_{seed[-8:]}",
            questions=final_questions,
            metadata=ExamVariantMetadata(
                original_question_count=len(questions),
                variant_number=i + 1,
                seed=seed,
                timestamp=datetime.now(UTC),
                question_order=order,
                option_permutations=option_permutations,
            ),
        )

        if check_uniqueness:
            key = _variant_key(variant)
            if key in seen:
                logger.debug(f"Rejected duplicate variant {variant.id}")
                continue
            seen.add(key)
        variants.append(variant)

    unique_orders = {tuple(v.metadata.question_order) for v in variants}
    unique_option_combinations = {
        "|".join(
            ",".join(str(i) for i in perm)
            for perm in v.metadata.option_permutations.values()
        )
        for v in variants
    }

    logger.info(f"Generated {len(variants)} of {target} requested variants")

    return ExamVariationResult(
        variants=variants,
        total_variations=len(variants),
        config=cfg,
        statistics=VariationStatistics(
            unique_question_orders=len(unique_orders),
            unique_option_combinations=len(unique_option_combinations),
            estimated_total_possible_variations=max_possible,
        ),
    )


def recreate_variant(
    questions: Sequence[Question],
    seed: str,
    config: ExamVariationConfig | Mapping[str, object] | None = None,
) -> ExamVariant:
    """Rebuild a single variant from its exact per-variant seed.

    Passing `variant.metadata.seed` and the generation config reproduces the
    variant's questions, order and permutations.
    """
    cfg = resolve_config(config)
    _validate_question_set(questions, cfg)

    final_questions, order, option_permutations = _build_variant(
        questions, seed, cfg
    )
    return ExamVariant(
        id=f"recreated_{seed[-8:]}",
        questions=final_questions,
        metadata=ExamVariantMetadata(
            original_question_count=len(questions),
            variant_number=1,
            seed=seed,
            timestamp=datetime.now(UTC),
            question_order=order,
            option_permutations=option_permutations,
        ),
    )

