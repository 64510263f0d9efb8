"""Confusion-matrix metrics for comparing predicted and true labels."""

from __future__ import annotations

from typing import Any

import numpy as np
from pydantic import BaseModel, Field
from sklearn.metrics import accuracy_score, confusion_matrix, precision_recall_fscore_support

from runetree.exceptions import ShapeMismatchError
from runetree.validation import as_label_vector


class ConfusionMatrix(BaseModel):
    """Per-class counts and scores for a set of predictions.

    `matrix[i][j]` counts rows whose true label is `labels[i]` and whose
    predicted label is `labels[j]`. Every per-class list is parallel to
    `labels`. Scores whose denominator is zero are reported as 0.0.

    Attributes:
        labels (list[Any]): Class labels, in row/column order.
        matrix (list[list[int]]): Square count matrix.
        true_positive (list[int]): Diagonal of `matrix`.
        false_positive (list[int]): Column sums minus the diagonal.
        false_negative (list[int]): Row sums minus the diagonal.
        recall (list[float]): `tp / (tp + fn)` per class.
        precision (list[float]): `tp / (tp + fp)` per class.
        f1 (list[float]): Harmonic mean of precision and recall per class.
        accuracy (float): Fraction of rows predicted correctly.

    Examples:
        >>> cm = ConfusionMatrix.from_predictions([True, True, False], [True, False, False])
        >>> cm.labels, cm.matrix
        ([False, True], [[1, 0], [1, 1]])
    """

    labels: list[Any] = Field(description="Class labels, in row/column order.")
    matrix: list[list[int]] = Field(description="Counts of (true label, predicted label) pairs.")
    true_positive: list[int] = Field(description="Correct predictions per class.")
    false_positive: list[int] = Field(description="Rows wrongly predicted as each class.")
    false_negative: list[int] = Field(description="Rows of each class predicted as another class.")
    recall: list[float] = Field(description="tp / (tp + fn) per class.")
    precision: list[float] = Field(description="tp / (tp + fp) per class.")
    f1: list[float] = Field(description="Harmonic mean of precision and recall per class.")
    accuracy: float = Field(ge=0.0, le=1.0, description="Fraction of rows predicted correctly.")

    @classmethod
    def from_predictions(cls, y_true: Any, y_pred: Any, labels: list[Any] | None = None) -> ConfusionMatrix:
        """Build the matrix from aligned true and predicted label vectors.

        Args:
            y_true (Any): True labels.
            y_pred (Any): Predicted labels, aligned index-for-index with `y_true`.
            labels (list[Any] | None): Class order. Defaults to the sorted
                union of labels present in either vector.

        Returns:
            ConfusionMatrix: The computed metrics.

        Raises:
            ShapeMismatchError: If the two vectors differ in length.
            ValueError: If both vectors are empty.
        """
        true_labels = as_label_vector(y_true)
        predicted_labels = as_label_vector(y_pred)
        if len(true_labels) != len(predicted_labels):
            raise ShapeMismatchError("labels", expected=len(true_labels), actual=len(predicted_labels))
        if len(true_labels) == 0:
            raise ValueError("Cannot compute a confusion matrix from zero predictions")

        class_labels = labels if labels is not None else np.unique(np.concatenate([true_labels, predicted_labels]))
        counts = confusion_matrix(true_labels, predicted_labels, labels=class_labels)
        precision, recall, f1, _ = precision_recall_fscore_support(
            true_labels,
            predicted_labels,
            labels=class_labels,
            average=None,
            zero_division=0.0,
        )
        diagonal = np.diag(counts)
        return cls(
            labels=np.asarray(class_labels).tolist(),
            matrix=counts.tolist(),
            true_positive=diagonal.tolist(),
            false_positive=(counts.sum(axis=0) - diagonal).tolist(),
            false_negative=(counts.sum(axis=1) - diagonal).tolist(),
            recall=[float(value) for value in recall],
            precision=[float(value) for value in precision],
            f1=[float(value) for value in f1],
            accuracy=float(accuracy_score(true_labels, predicted_labels)),
        )
