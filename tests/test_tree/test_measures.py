"""Tests for impurity functions and selection measures."""

from __future__ import annotations

import math

import numpy as np
import pytest
from pytest_check import check

from runetree.measures import (
    EntropySelectionMeasure,
    GiniSelectionMeasure,
    SelectionMeasure,
    entropy,
    gini,
    histogram,
)


class TestHistogram:
    """Tests for `histogram`: label frequency counting."""

    def test_counts_each_label(self) -> None:
        """Every distinct label should map to its number of occurrences."""
        # Arrange
        labels = np.array(["setosa", "virginica", "setosa", "versicolor", "setosa"])

        # Act
        counts = histogram(labels)

        # Assert
        assert counts == {"setosa": 3, "virginica": 1, "versicolor": 1}

    def test_keys_follow_first_seen_order(self) -> None:
        """Keys should appear in the order each label is first encountered."""
        # Arrange
        labels = np.array([3, 1, 3, 2, 1])

        # Act
        counts = histogram(labels)

        # Assert
        assert list(counts) == [3, 1, 2]

    def test_boolean_labels_are_native_bools(self) -> None:
        """Numpy booleans should be grouped under plain Python `bool` keys."""
        # Arrange
        labels = np.array([True, False, True])

        # Act
        counts = histogram(labels)

        # Assert
        with check:
            assert counts[True] == 2
        with check:
            assert all(type(key) is bool for key in counts)


class TestEntropy:
    """Tests for `entropy`: Shannon entropy in bits."""

    def test_single_class_has_zero_entropy(self) -> None:
        """A vector holding one label should have entropy 0."""
        # Arrange
        labels = np.array(["spam"] * 7)

        # Act / Assert
        assert entropy(labels) == 0.0

    def test_empty_vector_has_zero_entropy(self) -> None:
        """An empty vector should have entropy 0 by convention."""
        # Arrange
        labels = np.array([], dtype=np.int64)

        # Act / Assert
        assert entropy(labels) == 0.0

    @pytest.mark.parametrize("n_classes", [2, 3, 4, 5, 8])
    def test_equiprobable_classes_have_log2_k_entropy(self, n_classes: int) -> None:
        """`k` equally frequent classes should have entropy `log2(k)`.

        Args:
            n_classes (int): Number of distinct, equally frequent labels.
        """
        # Arrange
        labels = np.repeat(np.arange(n_classes), 3)

        # Act
        result = entropy(labels)

        # Assert
        assert result == pytest.approx(math.log2(n_classes))

    def test_balanced_two_class_vector_has_entropy_one(self) -> None:
        """Four `A` and four `B` labels should have entropy exactly 1.0."""
        # Arrange
        labels = np.array(["A", "A", "A", "A", "B", "B", "B", "B"])

        # Act / Assert
        assert entropy(labels) == 1.0

    def test_skewed_distribution(self) -> None:
        """A 3:1 split should match the closed-form entropy."""
        # Arrange
        labels = np.array([True, True, True, False])
        expected = -(0.75 * math.log2(0.75) + 0.25 * math.log2(0.25))

        # Act / Assert
        assert entropy(labels) == pytest.approx(expected)


class TestGini:
    """Tests for `gini`: Gini impurity."""

    def test_single_class_has_zero_gini(self) -> None:
        """A pure vector should have Gini impurity 0."""
        assert gini(np.array([1, 1, 1])) == 0.0

    def test_balanced_two_class_vector(self) -> None:
        """Two equally frequent classes should have Gini impurity 0.5."""
        assert gini(np.array([0, 1, 0, 1])) == pytest.approx(0.5)

    def test_empty_vector_has_zero_gini(self) -> None:
        """An empty vector should have Gini impurity 0."""
        assert gini(np.array([], dtype=np.int64)) == 0.0


class TestEntropySelectionMeasure:
    """Tests for `EntropySelectionMeasure.score`: information gain."""

    def test_perfect_split_gains_full_entropy(self) -> None:
        """Separating two balanced classes should gain 1.0 bit."""
        # Arrange
        labels = np.array(["A", "A", "A", "A", "B", "B", "B", "B"])
        left_indices = np.array([0, 1, 2, 3])
        right_indices = np.array([4, 5, 6, 7])

        # Act
        gain = EntropySelectionMeasure().score(labels, left_indices, right_indices)

        # Assert
        assert gain == 1.0

    def test_everything_on_one_side_gains_nothing(self) -> None:
        """Routing every row to one side is legal and should score 0."""
        # Arrange
        labels = np.array([0, 1, 1, 0, 1])
        left_indices = np.array([], dtype=np.intp)
        right_indices = np.arange(5)

        # Act
        gain = EntropySelectionMeasure().score(labels, left_indices, right_indices)

        # Assert
        assert gain == 0.0

    def test_proportional_split_gains_nothing(self) -> None:
        """Children with the parent's class proportions should score 0."""
        # Arrange
        labels = np.array(["x", "y", "x", "y"])
        left_indices = np.array([0, 1])
        right_indices = np.array([2, 3])

        # Act
        gain = EntropySelectionMeasure().score(labels, left_indices, right_indices)

        # Assert
        assert gain == pytest.approx(0.0)

    def test_partial_split_matches_weighted_formula(self) -> None:
        """A partially pure split should equal parent minus weighted child entropy."""
        # Arrange
        labels = np.array([0, 0, 0, 1, 1, 1])
        left_indices = np.array([0, 1])
        right_indices = np.array([2, 3, 4, 5])
        right_entropy = -(0.25 * math.log2(0.25) + 0.75 * math.log2(0.75))
        expected = 1.0 - (4 / 6) * right_entropy

        # Act
        gain = EntropySelectionMeasure().score(labels, left_indices, right_indices)

        # Assert
        assert gain == pytest.approx(expected)

    def test_gain_is_never_negative(self) -> None:
        """Information gain should be non-negative for every possible threshold."""
        # Arrange
        rng = np.random.default_rng(11)
        labels = rng.integers(0, 3, 30)
        column = rng.uniform(0, 1, 30)
        measure = EntropySelectionMeasure()

        # Act
        gains = [
            measure.score(labels, np.flatnonzero(column < value), np.flatnonzero(column >= value)) for value in column
        ]

        # Assert
        assert min(gains) >= -1e-12

    def test_satisfies_selection_measure_protocol(self) -> None:
        """The measure should be recognised as a `SelectionMeasure`."""
        assert isinstance(EntropySelectionMeasure(), SelectionMeasure)


class TestGiniSelectionMeasure:
    """Tests for `GiniSelectionMeasure.score`: Gini impurity decrease."""

    def test_perfect_split_removes_all_impurity(self) -> None:
        """Separating two balanced classes should decrease Gini by 0.5."""
        # Arrange
        labels = np.array([True, True, False, False])

        # Act
        decrease = GiniSelectionMeasure().score(labels, np.array([0, 1]), np.array([2, 3]))

        # Assert
        assert decrease == pytest.approx(0.5)

    def test_satisfies_selection_measure_protocol(self) -> None:
        """The measure should be recognised as a `SelectionMeasure`."""
        assert isinstance(GiniSelectionMeasure(), SelectionMeasure)
