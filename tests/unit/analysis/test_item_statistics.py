"""
Tests for per-question classical test theory statistics.
"""

import math

import numpy as np
import pytest

from exam_analysis.analysis.item_statistics import (
    analyze_distractors,
    count_distinct_answers,
    difficulty_index,
    discrimination_index,
    group_sizes,
    item_reliability,
    match_option,
    point_biserial,
)


class TestDifficultyIndex:
    def test_proportion(self) -> None:
        assert difficulty_index(3, 4) == 0.75

    def test_no_responses(self) -> None:
        assert difficulty_index(0, 0) == 0.0


class TestGroupSizes:
    def test_default_27_percent(self) -> None:
        assert group_sizes(100, 0.27, 0.27) == (27, 27)

    def test_minimum_group_at_small_n(self) -> None:
        # floor(0.27 * 5) = 1 is raised to the minimum of 2
        assert group_sizes(5, 0.27, 0.27) == (2, 2)

    def test_ten_percent_floor(self) -> None:
        assert group_sizes(100, 0.05, 0.05) == (10, 10)

    def test_capped_at_n(self) -> None:
        assert group_sizes(1, 0.27, 0.27) == (1, 1)

    def test_groups_overlap_below_four_students(self) -> None:
        high, low = group_sizes(3, 0.27, 0.27)
        assert (high, low) == (2, 2)
        assert high + low > 3


class TestDiscriminationIndex:
    def test_perfect_discrimination(self) -> None:
        scores = np.array([4.0, 3.0, 2.0, 1.0])
        correct = np.array([True, True, False, False])
        assert discrimination_index(scores, correct) == 1.0

    def test_negative_discrimination(self) -> None:
        scores = np.array([4.0, 3.0, 2.0, 1.0])
        correct = np.array([False, False, True, True])
        assert discrimination_index(scores, correct) == -1.0

    def test_unsorted_input(self) -> None:
        scores = np.array([1.0, 4.0, 2.0, 3.0])
        correct = np.array([False, True, False, True])
        assert discrimination_index(scores, correct) == 1.0

    def test_empty(self) -> None:
        assert discrimination_index(np.array([]), np.array([], dtype=bool)) == 0.0


class TestPointBiserial:
    def test_known_value(self) -> None:
        scores = np.array([4.0, 3.0, 2.0, 1.0])
        indicator = np.array([True, True, False, False])
        assert point_biserial(indicator, scores) == pytest.approx(0.894427, abs=1e-6)

    def test_all_correct(self) -> None:
        scores = np.array([4.0, 3.0, 2.0])
        assert point_biserial(np.array([True, True, True]), scores) == 0.0

    def test_constant_scores(self) -> None:
        scores = np.array([2.0, 2.0, 2.0])
        assert point_biserial(np.array([True, False, True]), scores) == 0.0

    def test_single_student(self) -> None:
        assert point_biserial(np.array([True]), np.array([1.0])) == 0.0

    def test_bounded(self) -> None:
        rng = np.random.default_rng(42)
        for _ in range(50):
            scores = rng.integers(0, 20, size=30).astype(np.float64)
            indicator = rng.random(30) < 0.5
            assert -1.0 <= point_biserial(indicator, scores) <= 1.0


class TestMatchOption:
    def test_exact(self) -> None:
        assert match_option("Rome", ["Paris", "Rome"]) == "Rome"

    def test_case_insensitive(self) -> None:
        assert match_option("rome", ["Paris", "Rome"]) == "Rome"

    def test_letter(self) -> None:
        assert match_option("B", ["Paris", "Rome"]) == "Rome"

    def test_text_option_named_like_a_letter(self) -> None:
        # "A" is an option text here, not a position
        assert match_option("A", ["B", "A"]) == "A"

    def test_unmatched(self) -> None:
        assert match_option("Oslo", ["Paris", "Rome"]) == "Oslo"


class TestAnalyzeDistractors:
    def test_counts_every_real_option(self) -> None:
        answers = ["Rome", "Rome", "Paris", "", None, "Oslo"]
        scores = np.array([5.0, 4.0, 2.0, 1.0, 0.0, 1.0])
        result = analyze_distractors(
            answers, scores, ["Paris", "Rome", "Berlin"], "Rome"
        )

        assert result.correct_option is not None
        assert result.correct_option.option == "Rome"
        assert result.correct_option.frequency == 2
        assert [d.option for d in result.distractors] == ["Paris", "Berlin"]
        assert result.distractors[0].frequency == 1
        assert result.distractors[1].frequency == 0
        # 5 students responded, one left the answer blank
        assert result.omitted_responses == 1
        assert result.omitted_percentage == pytest.approx(20.0)
        assert result.correct_option.percentage == pytest.approx(40.0)
        assert result.correct_option.discrimination_index == 0.4

    def test_without_options_uses_observed_answers(self) -> None:
        answers = ["x", "y", "x"]
        scores = np.array([2.0, 1.0, 2.0])
        result = analyze_distractors(answers, scores, [], "x")
        assert result.correct_option is not None
        assert result.correct_option.frequency == 2
        assert [d.option for d in result.distractors] == ["y"]

    def test_no_responses(self) -> None:
        result = analyze_distractors([None, None], np.array([0.0, 0.0]), ["a", "b"], "a")
        assert result.omitted_percentage == 0.0
        assert all(d.percentage == 0.0 for d in result.distractors)


class TestCountDistinctAnswers:
    def test_case_insensitive_and_blank(self) -> None:
        assert count_distinct_answers(["A", "a", "", None, "B"]) == 2


class TestItemReliability:
    def test_too_few_students(self) -> None:
        assert item_reliability(np.array([1.0, 0.0]), np.array([2.0, 1.0])) is None

    def test_zero_item_variance(self) -> None:
        assert (
            item_reliability(np.array([1.0, 1.0, 1.0]), np.array([3.0, 2.0, 1.0]))
            is None
        )

    def test_value(self) -> None:
        items = np.array([1.0, 1.0, 0.0, 0.0])
        totals = np.array([4.0, 3.0, 2.0, 1.0])
        result = item_reliability(items, totals)
        assert result is not None

        expected_correlation = float(np.corrcoef(items, totals)[0, 1])
        expected = 0.25 / 1.25 * expected_correlation
        assert result.item_total_correlation == pytest.approx(expected_correlation)
        assert result.reliability == pytest.approx(expected)
        assert result.standard_error == pytest.approx(
            math.sqrt(0.25 * (1.0 - expected))
        )
        assert 0.0 <= result.confidence_interval.lower <= result.confidence_interval.upper <= 1.0
