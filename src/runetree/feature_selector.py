"""Split search strategies used by `DecisionTreeClassifier`."""

from __future__ import annotations

from typing import NamedTuple, Protocol, runtime_checkable

import numpy as np
from loguru import logger

from runetree.logging import SPLIT_LEVEL
from runetree.measures import EntropySelectionMeasure, SelectionMeasure

_INITIAL_BEST_SCORE: float = -1.0  # Below any attainable impurity decrease, so the first candidate always wins.


class SplitResult(NamedTuple):
    """The partition chosen for one node.

    Attributes:
        left_indices (np.ndarray): Row positions with `x[row, feature_index] < threshold`.
        right_indices (np.ndarray): All remaining row positions.
        threshold (float): Observed feature value used as the split point.
        feature_index (int): Column the split tests.
        score (float): Selection-measure score of the partition.
    """

    left_indices: np.ndarray
    right_indices: np.ndarray
    threshold: float
    feature_index: int
    score: float

    @property
    def is_degenerate(self) -> bool:
        """Whether every row landed on the same side."""
        return len(self.left_indices) == 0 or len(self.right_indices) == 0


@runtime_checkable
class FeatureSelector(Protocol):
    """Strategy that picks the split for a node's rows."""

    def select(self, x: np.ndarray, y: np.ndarray) -> SplitResult:
        """Choose a partition of the rows of `x`.

        Args:
            x (np.ndarray): The node's feature matrix, shape `(n_rows, n_features)`.
            y (np.ndarray): The node's labels, shape `(n_rows,)`.

        Returns:
            SplitResult: Disjoint left/right row positions covering every row.
        """
        ...


def split_by_value(column: np.ndarray, value: float) -> tuple[np.ndarray, np.ndarray]:
    """Partition row positions on `column < value`.

    Args:
        column (np.ndarray): One feature column.
        value (float): Split threshold; rows equal to it go right.

    Returns:
        tuple[np.ndarray, np.ndarray]: `(left_indices, right_indices)`, each in
            ascending row order.

    Examples:
        >>> left, right = split_by_value(np.array([3.0, 1.0, 2.0]), 2.0)
        >>> left.tolist(), right.tolist()
        ([1], [0, 2])
    """
    goes_left = column < value
    return np.flatnonzero(goes_left), np.flatnonzero(~goes_left)


class GreedyFeatureSelector:
    """Exhaustive search over every (feature, observed value) pair.

    Each observed value of each column is tried as a threshold and scored with
    the selection measure. The measure recomputes child impurities from
    scratch for every candidate, so a node costs `O(n_rows**2 * n_features)`.

    On equal scores the earliest candidate wins, iterating columns first and
    rows second, so the result is fully determined by the input order.

    Attributes:
        selection_measure (SelectionMeasure): Scores each candidate partition.

    Examples:
        >>> selector = GreedyFeatureSelector()
        >>> split = selector.select(np.array([[1.0], [1.0], [5.0], [5.0]]), np.array(["A", "A", "B", "B"]))
        >>> split.feature_index, split.threshold, split.score
        (0, 5.0, 1.0)
    """

    def __init__(self, selection_measure: SelectionMeasure | None = None) -> None:
        """Initialize the selector.

        Args:
            selection_measure (SelectionMeasure | None): Measure used to score
                candidates. Defaults to `EntropySelectionMeasure`.
        """
        self.selection_measure: SelectionMeasure = (
            selection_measure if selection_measure is not None else EntropySelectionMeasure()
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(selection_measure={self.selection_measure!r})"

    def select(self, x: np.ndarray, y: np.ndarray) -> SplitResult:
        """Return the best-scoring split of the rows of `x`.

        When `x` has no columns no candidate exists and the result sends every
        row right with the sentinel score.

        Args:
            x (np.ndarray): The node's feature matrix, shape `(n_rows, n_features)`.
            y (np.ndarray): The node's labels, shape `(n_rows,)`.

        Returns:
            SplitResult: The winning partition. Its score is never below 0 when
                at least one candidate was scored.
        """
        n_rows, n_features = x.shape
        best = SplitResult(
            left_indices=np.empty(0, dtype=np.intp),
            right_indices=np.arange(n_rows, dtype=np.intp),
            threshold=0.0,
            feature_index=0,
            score=_INITIAL_BEST_SCORE,
        )

        for feature_index in range(n_features):
            column = x[:, feature_index]
            for row_index in range(n_rows):
                threshold = float(column[row_index])
                left_indices, right_indices = split_by_value(column, threshold)
                score = self.selection_measure.score(y, left_indices, right_indices)

                logger.log(
                    SPLIT_LEVEL,
                    "Scored candidate split",
                    feature=feature_index,
                    threshold=threshold,
                    score=score,
                )

                if score > best.score:
                    best = SplitResult(left_indices, right_indices, threshold, feature_index, score)

        logger.debug(
            "Found best split",
            feature=best.feature_index,
            threshold=best.threshold,
            score=best.score,
            left=len(best.left_indices),
            right=len(best.right_indices),
        )
        return best
