"""Impurity functions and selection measures for scoring candidate splits.

A selection measure scores a binary partition of a node's labels. The greedy
feature selector keeps the partition with the highest score, so every measure
here returns an impurity *decrease*: 0 for a split that changes nothing and
larger values for purer children.
"""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Callable
from typing import Protocol, runtime_checkable

import numpy as np


def histogram(labels: np.ndarray) -> Counter:
    """Count how often each label occurs.

    Keys appear in first-seen order, which is what makes the majority vote in
    `runetree.tree` deterministic on ties.

    Args:
        labels (np.ndarray): 1-D label vector.

    Returns:
        Counter: Mapping of label value to occurrence count.

    Examples:
        >>> histogram(np.array(["b", "a", "b"]))
        Counter({'b': 2, 'a': 1})
    """
    return Counter(labels.tolist())


def entropy(labels: np.ndarray) -> float:
    """Shannon entropy, in bits, of a label vector.

    Args:
        labels (np.ndarray): 1-D label vector.

    Returns:
        float: `-sum(p * log2(p))` over the label distribution; `0.0` for an
            empty vector or a single class.

    Examples:
        >>> entropy(np.array([0, 0, 1, 1]))
        1.0
    """
    total = len(labels)
    if total == 0:
        return 0.0
    weighted = sum((count / total) * math.log2(count / total) for count in histogram(labels).values())
    return -weighted if weighted else 0.0


def gini(labels: np.ndarray) -> float:
    """Gini impurity of a label vector.

    Args:
        labels (np.ndarray): 1-D label vector.

    Returns:
        float: `1 - sum(p ** 2)`; `0.0` for an empty vector or a single class.
    """
    total = len(labels)
    if total == 0:
        return 0.0
    return 1.0 - sum((count / total) ** 2 for count in histogram(labels).values())


@runtime_checkable
class SelectionMeasure(Protocol):
    """Strategy that scores a binary partition of a node's labels."""

    def score(self, labels: np.ndarray, left_indices: np.ndarray, right_indices: np.ndarray) -> float:
        """Score a partition of `labels` into `left_indices` and `right_indices`.

        Args:
            labels (np.ndarray): The node's own label vector.
            left_indices (np.ndarray): Positions in `labels` routed left.
            right_indices (np.ndarray): Positions in `labels` routed right.

        Returns:
            float: Impurity decrease; higher is better.
        """
        ...


def _impurity_decrease(
    impurity: Callable[[np.ndarray], float],
    labels: np.ndarray,
    left_indices: np.ndarray,
    right_indices: np.ndarray,
) -> float:
    total = len(labels)
    if total == 0:
        return 0.0
    left_weight = len(left_indices) / total
    right_weight = len(right_indices) / total
    children = left_weight * impurity(labels[left_indices]) + right_weight * impurity(labels[right_indices])
    return impurity(labels) - children


class EntropySelectionMeasure:
    """Information gain: parent entropy minus the size-weighted child entropies.

    Examples:
        >>> labels = np.array(["A", "A", "B", "B"])
        >>> EntropySelectionMeasure().score(labels, np.array([0, 1]), np.array([2, 3]))
        1.0
    """

    def score(self, labels: np.ndarray, left_indices: np.ndarray, right_indices: np.ndarray) -> float:
        """Return the information gain of the partition.

        Args:
            labels (np.ndarray): The node's own label vector.
            left_indices (np.ndarray): Positions in `labels` routed left.
            right_indices (np.ndarray): Positions in `labels` routed right.

        Returns:
            float: Information gain in bits. `0.0` when every row lands on one
                side.
        """
        return _impurity_decrease(entropy, labels, left_indices, right_indices)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class GiniSelectionMeasure:
    """Gini impurity decrease: parent Gini minus the size-weighted child Gini."""

    def score(self, labels: np.ndarray, left_indices: np.ndarray, right_indices: np.ndarray) -> float:
        """Return the Gini impurity decrease of the partition.

        Args:
            labels (np.ndarray): The node's own label vector.
            left_indices (np.ndarray): Positions in `labels` routed left.
            right_indices (np.ndarray): Positions in `labels` routed right.

        Returns:
            float: Gini impurity decrease.
        """
        return _impurity_decrease(gini, labels, left_indices, right_indices)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
