"""Conversion and validation of feature matrices and label vectors."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import numpy as np

from runetree.exceptions import (
    EmptyDatasetError,
    FeatureMatrixError,
    ShapeMismatchError,
    UnsupportedLabelTypeError,
)


def as_feature_matrix(x: Any, *, require_finite: bool = True) -> np.ndarray:
    """Convert an array-like to a 2-D `float64` feature matrix.

    Args:
        x (Any): Array-like of shape `(n_rows, n_features)`.
        require_finite (bool): When True, NaN and infinite values are rejected.

    Returns:
        np.ndarray: A `float64` array with `ndim == 2`.

    Raises:
        FeatureMatrixError: If `x` is not 2-D, not numeric, or holds
            non-finite values while `require_finite` is set.
    """
    try:
        matrix = np.asarray(x, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise FeatureMatrixError(f"Feature matrix must contain real numbers: {exc}") from exc
    if matrix.ndim != 2:
        raise FeatureMatrixError(f"Feature matrix must be 2-D, got {matrix.ndim} dimension(s)")
    if require_finite and not np.isfinite(matrix).all():
        raise FeatureMatrixError("Feature matrix contains NaN or infinite values")
    return matrix


def as_label_vector(y: Any) -> np.ndarray:
    """Convert an array-like to a 1-D label vector of groupable values.

    Arrays are taken as they are. Other sequences keep numpy's inferred dtype
    only when it preserves every label: tuple labels (which numpy would turn
    into a 2-D array) and mixed-type labels (which numpy would coerce to a
    common type, e.g. `[1, "b"]` to strings) are stored in an object vector.

    Args:
        y (Any): Sequence of labels (bool, int, str or any hashable value).

    Returns:
        np.ndarray: A 1-D array of labels.

    Raises:
        UnsupportedLabelTypeError: If `y` is not 1-D or holds unhashable labels.
    """
    if isinstance(y, (np.ndarray, str)) or not isinstance(y, Iterable):
        labels = np.asarray(y)
    else:
        labels = _labels_from_sequence(list(y))
    if labels.ndim != 1:
        raise UnsupportedLabelTypeError(f"Label vector must be 1-D, got {labels.ndim} dimension(s)")
    if labels.dtype == object:
        for label in labels:
            try:
                hash(label)
            except TypeError as exc:
                raise UnsupportedLabelTypeError(
                    f"Labels must be hashable, got {type(label).__name__}", label=label
                ) from exc
    return labels


def object_label_vector(values: list[Any]) -> np.ndarray:
    """Store `values` one per slot in a 1-D object array.

    Element-wise assignment keeps tuples and other sequences as single labels.

    Args:
        values (list[Any]): Labels.

    Returns:
        np.ndarray: Object array with `len(values)` elements.
    """
    labels = np.empty(len(values), dtype=object)
    for position, value in enumerate(values):
        labels[position] = value
    return labels


def _labels_from_sequence(values: list[Any]) -> np.ndarray:
    try:
        inferred = np.asarray(values)
    except ValueError:
        # Ragged input, e.g. tuples of different lengths
        return object_label_vector(values)
    if inferred.ndim > 1:
        # Rows that are themselves hashable (tuples) are labels; list rows are a label matrix.
        return object_label_vector(values) if all(_is_hashable(value) for value in values) else inferred
    if len({type(value) for value in values}) > 1:
        return object_label_vector(values)
    return inferred


def _is_hashable(value: Any) -> bool:
    try:
        hash(value)
    except TypeError:
        return False
    return True


def validate_training_data(x: Any, y: Any) -> tuple[np.ndarray, np.ndarray]:
    """Validate a training pair and return it as arrays.

    Args:
        x (Any): Feature matrix array-like.
        y (Any): Label vector array-like.

    Returns:
        tuple[np.ndarray, np.ndarray]: `(feature_matrix, labels)`.

    Raises:
        EmptyDatasetError: If there are zero rows.
        ShapeMismatchError: If the row count differs from the label count.
    """
    labels = as_label_vector(y)
    if len(labels) == 0:
        raise EmptyDatasetError()
    feature_matrix = as_feature_matrix(x)
    if feature_matrix.shape[0] != len(labels):
        raise ShapeMismatchError("rows", expected=len(labels), actual=feature_matrix.shape[0])
    return feature_matrix, labels
