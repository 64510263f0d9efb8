"""Random train/test partitioning of a dataset."""

from __future__ import annotations

from typing import Any

import numpy as np

from runetree.exceptions import ShapeMismatchError
from runetree.validation import as_label_vector


def train_test_split(
    x: Any,
    y: Any,
    ratio: float,
    *,
    seed: int | None = None,
) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """Randomly partition rows into a training and a test set.

    Rows are shuffled, then each row independently goes to the training set
    with probability `ratio`, so the realised split size varies around
    `ratio * n_rows`.

    Args:
        x (Any): 2-D feature array-like.
        y (Any): 1-D label array-like with one label per row of `x`.
        ratio (float): Probability of a row landing in the training set, in `(0, 1)`.
        seed (int | None): Seed for `numpy.random.default_rng`. `None` means
            non-deterministic.

    Returns:
        tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
            `(x_train, x_test, y_train, y_test)`.

    Raises:
        ValueError: If `ratio` is not strictly between 0 and 1.
        ShapeMismatchError: If `x` and `y` have different row counts.
        UnsupportedLabelTypeError: If `y` is not a 1-D vector of hashable labels.
    """
    if not 0.0 < ratio < 1.0:
        raise ValueError(f"ratio must be strictly between 0 and 1, got {ratio}")
    features = np.asarray(x)
    labels = as_label_vector(y)
    if features.shape[0] != labels.shape[0]:
        raise ShapeMismatchError("rows", expected=labels.shape[0], actual=features.shape[0])

    rng = np.random.default_rng(seed)
    order = rng.permutation(features.shape[0])
    goes_to_train = rng.random(order.shape[0]) < ratio
    train_indices = order[goes_to_train]
    test_indices = order[~goes_to_train]
    return features[train_indices], features[test_indices], labels[train_indices], labels[test_indices]
