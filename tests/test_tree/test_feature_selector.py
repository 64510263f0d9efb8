"""Tests for the greedy feature selector and its partitioning helper."""

from __future__ import annotations

import numpy as np
import pytest
from pytest_check import check

from runetree.feature_selector import FeatureSelector, GreedyFeatureSelector, SplitResult, split_by_value
from runetree.measures import GiniSelectionMeasure


class RecordingMeasure:
    """Selection measure that records every call and scores from a fixed list."""

    def __init__(self, scores: list[float]) -> None:
        self.scores = list(scores)
        self.calls: list[tuple[list[int], list[int]]] = []

    def score(self, labels: np.ndarray, left_indices: np.ndarray, right_indices: np.ndarray) -> float:
        self.calls.append((left_indices.tolist(), right_indices.tolist()))
        return self.scores[len(self.calls) - 1]


class TestSplitByValue:
    """Tests for `split_by_value`: strict less-than partitioning."""

    def test_rows_below_threshold_go_left(self) -> None:
        """Rows strictly below the threshold should go left, others right."""
        # Arrange
        column = np.array([4.0, 1.0, 7.0, 3.0])

        # Act
        left, right = split_by_value(column, 4.0)

        # Assert
        with check:
            assert left.tolist() == [1, 3]
        with check:
            assert right.tolist() == [0, 2]

    def test_ties_with_threshold_go_right(self) -> None:
        """Rows equal to the threshold should go right."""
        # Arrange
        column = np.array([2.0, 2.0, 2.0])

        # Act
        left, right = split_by_value(column, 2.0)

        # Assert
        with check:
            assert left.tolist() == []
        with check:
            assert right.tolist() == [0, 1, 2]


class TestGreedyFeatureSelector:
    """Tests for `GreedyFeatureSelector.select`: exhaustive split search."""

    def test_worked_example_splits_at_five(self) -> None:
        """The two-cluster example should split on feature 0 at threshold 5 with gain 1."""
        # Arrange
        x = np.array([[1.0], [1.0], [1.0], [1.0], [5.0], [5.0], [5.0], [5.0]])
        y = np.array(["A", "A", "A", "A", "B", "B", "B", "B"])

        # Act
        split = GreedyFeatureSelector().select(x, y)

        # Assert
        with check:
            assert split.feature_index == 0
        with check:
            assert split.threshold == 5.0
        with check:
            assert split.score == 1.0
        with check:
            assert split.left_indices.tolist() == [0, 1, 2, 3]
        with check:
            assert split.right_indices.tolist() == [4, 5, 6, 7]

    def test_picks_the_informative_feature(self) -> None:
        """The selector should ignore a noise column in favour of a separating one."""
        # Arrange
        x = np.array([
            [0.3, 10.0],
            [0.9, 12.0],
            [0.1, 30.0],
            [0.7, 35.0],
        ])
        y = np.array([False, False, True, True])

        # Act
        split = GreedyFeatureSelector().select(x, y)

        # Assert
        with check:
            assert split.feature_index == 1
        with check:
            assert split.threshold == 30.0

    def test_partition_covers_every_row_exactly_once(self) -> None:
        """Left and right indices should be disjoint and cover all rows."""
        # Arrange
        rng = np.random.default_rng(5)
        x = rng.uniform(0, 1, size=(25, 3))
        y = rng.integers(0, 2, 25)

        # Act
        split = GreedyFeatureSelector().select(x, y)

        # Assert
        left, right = set(split.left_indices.tolist()), set(split.right_indices.tolist())
        with check:
            assert left.isdisjoint(right)
        with check:
            assert left | right == set(range(25))

    def test_ties_keep_the_first_candidate(self) -> None:
        """Equal scores should keep the first candidate in column-then-row order."""
        # Arrange - every candidate scores the same
        x = np.array([[1.0, 10.0], [2.0, 20.0]])
        y = np.array([0, 1])
        measure = RecordingMeasure([0.5, 0.5, 0.5, 0.5])

        # Act
        split = GreedyFeatureSelector(measure).select(x, y)

        # Assert
        with check:
            assert split.feature_index == 0
        with check:
            assert split.threshold == 1.0
        with check:
            assert len(measure.calls) == 4

    def test_strictly_better_later_candidate_wins(self) -> None:
        """A later candidate should replace the running best only when strictly better."""
        # Arrange
        x = np.array([[1.0, 10.0], [2.0, 20.0]])
        y = np.array([0, 1])
        measure = RecordingMeasure([0.1, 0.2, 0.7, 0.7])

        # Act
        split = GreedyFeatureSelector(measure).select(x, y)

        # Assert
        with check:
            assert split.feature_index == 1
        with check:
            assert split.threshold == 10.0
        with check:
            assert split.score == 0.7

    def test_candidates_are_scored_column_major(self) -> None:
        """Every column should be exhausted over all rows before the next column."""
        # Arrange
        x = np.array([[3.0, 1.0], [1.0, 2.0]])
        y = np.array([0, 1])
        measure = RecordingMeasure([0.0, 0.0, 0.0, 0.0])

        # Act
        GreedyFeatureSelector(measure).select(x, y)

        # Assert - thresholds 3.0, 1.0 on column 0, then 1.0, 2.0 on column 1
        assert measure.calls == [([1], [0]), ([], [0, 1]), ([], [0, 1]), ([0], [1])]

    def test_identical_rows_return_zero_gain_degenerate_split(self) -> None:
        """Identical feature vectors should yield a zero-gain all-right split."""
        # Arrange
        x = np.full((6, 2), 3.5)
        y = np.array(["a", "b", "a", "b", "a", "b"])

        # Act
        split = GreedyFeatureSelector().select(x, y)

        # Assert
        with check:
            assert split.score == 0.0
        with check:
            assert split.is_degenerate
        with check:
            assert split.right_indices.tolist() == list(range(6))

    def test_no_feature_columns_sends_every_row_right(self) -> None:
        """A matrix without columns should produce the initial all-right partition."""
        # Arrange
        x = np.empty((3, 0))
        y = np.array([1, 2, 3])

        # Act
        split = GreedyFeatureSelector().select(x, y)

        # Assert
        with check:
            assert split.left_indices.tolist() == []
        with check:
            assert split.right_indices.tolist() == [0, 1, 2]
        with check:
            assert split.score < 0.0

    def test_accepts_an_alternative_measure(self) -> None:
        """Injecting a Gini measure should still find the separating split."""
        # Arrange
        x = np.array([[1.0], [2.0], [8.0], [9.0]])
        y = np.array(["low", "low", "high", "high"])

        # Act
        split = GreedyFeatureSelector(GiniSelectionMeasure()).select(x, y)

        # Assert
        with check:
            assert split.threshold == 8.0
        with check:
            assert split.score == pytest.approx(0.5)

    def test_satisfies_feature_selector_protocol(self) -> None:
        """The selector should be recognised as a `FeatureSelector`."""
        assert isinstance(GreedyFeatureSelector(), FeatureSelector)


class TestSplitResult:
    """Tests for `SplitResult.is_degenerate`."""

    @pytest.mark.parametrize(
        ("left", "right", "expected"),
        [
            ([], [0, 1], True),
            ([0, 1], [], True),
            ([0], [1], False),
        ],
    )
    def test_is_degenerate(self, left: list[int], right: list[int], expected: bool) -> None:
        """A split is degenerate exactly when one side is empty.

        Args:
            left (list[int]): Left indices.
            right (list[int]): Right indices.
            expected (bool): Expected degeneracy.
        """
        # Arrange
        split = SplitResult(np.array(left, dtype=np.intp), np.array(right, dtype=np.intp), 0.0, 0, 0.0)

        # Act / Assert
        assert split.is_degenerate is expected
