"""Decision tree nodes, recursive tree induction, and the fitted model."""

from __future__ import annotations

from collections.abc import Hashable, Iterator
from dataclasses import dataclass
from typing import Any

import numpy as np
from loguru import logger

from runetree.config import DecisionTreeConfig, TreeSettings
from runetree.exceptions import ShapeMismatchError
from runetree.feature_selector import FeatureSelector, GreedyFeatureSelector, SplitResult
from runetree.measures import EntropySelectionMeasure, GiniSelectionMeasure, SelectionMeasure, entropy, histogram
from runetree.validation import as_feature_matrix, object_label_vector, validate_training_data

type Label = Hashable

# ---------------------------------------------------------------------------
# Tree nodes
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Leaf:
    """Terminal node predicting a single label.

    Attributes:
        label (Label): Majority label of the training rows routed here.
        samples (int): Number of training rows routed here.
        confidence (float): Fraction of those rows carrying `label`.
    """

    label: Label
    samples: int
    confidence: float


@dataclass(frozen=True, slots=True)
class Interior:
    """Non-terminal node routing a row on `row[feature] < threshold`.

    Attributes:
        feature (int): Column index the node tests.
        threshold (float): Rows strictly below it go `left`, all others `right`.
        left (DecisionTreeNode): Subtree for rows below the threshold.
        right (DecisionTreeNode): Subtree for all other rows.
        samples (int): Number of training rows that reached this node.
        gain (float): Selection-measure score of the split.
    """

    feature: int
    threshold: float
    left: DecisionTreeNode
    right: DecisionTreeNode
    samples: int
    gain: float


type DecisionTreeNode = Leaf | Interior


def majority_label(labels: np.ndarray) -> tuple[Label, int]:
    """Return the most frequent label and its count.

    Ties go to the label that occurs first in `labels`.

    Args:
        labels (np.ndarray): Non-empty 1-D label vector.

    Returns:
        tuple[Label, int]: `(label, count)`.

    Examples:
        >>> majority_label(np.array(["b", "a", "a", "b"]))
        ('b', 2)
    """
    ((label, count),) = histogram(labels).most_common(1)
    return label, count


def make_leaf(labels: np.ndarray) -> Leaf:
    """Build a leaf predicting the majority of `labels`.

    Args:
        labels (np.ndarray): Non-empty 1-D label vector.

    Returns:
        Leaf: The leaf node.
    """
    label, count = majority_label(labels)
    return Leaf(label=label, samples=len(labels), confidence=count / len(labels))


def route(node: DecisionTreeNode, row: np.ndarray) -> Leaf:
    """Follow `row` from `node` down to the leaf that predicts it.

    Args:
        node (DecisionTreeNode): Subtree root.
        row (np.ndarray): 1-D feature vector.

    Returns:
        Leaf: The leaf reached.
    """
    while isinstance(node, Interior):
        node = node.left if row[node.feature] < node.threshold else node.right
    return node


def iter_leaves(node: DecisionTreeNode) -> Iterator[Leaf]:
    """Yield the leaves under `node` from left to right."""
    stack = [node]
    while stack:
        current = stack.pop()
        if isinstance(current, Leaf):
            yield current
        else:
            stack.append(current.right)
            stack.append(current.left)


def node_depth(node: DecisionTreeNode) -> int:
    """Number of split levels under `node`; 0 for a leaf."""
    deepest = 0
    stack = [(node, 0)]
    while stack:
        current, depth = stack.pop()
        if isinstance(current, Interior):
            stack.append((current.left, depth + 1))
            stack.append((current.right, depth + 1))
        else:
            deepest = max(deepest, depth)
    return deepest


# ---------------------------------------------------------------------------
# Fitted model
# ---------------------------------------------------------------------------


class DecisionTreeModel:
    """An immutable fitted decision tree.

    Attributes:
        root (DecisionTreeNode): Root of the fitted tree.
        n_features (int): Number of feature columns seen during fitting.
        label_dtype (np.dtype): Dtype of the training labels; predictions use it.
    """

    __slots__ = ("label_dtype", "n_features", "root")

    def __init__(self, root: DecisionTreeNode, *, n_features: int, label_dtype: np.dtype) -> None:
        """Initialize the model.

        Args:
            root (DecisionTreeNode): Root of the fitted tree.
            n_features (int): Number of feature columns the tree was fitted on.
            label_dtype (np.dtype): Dtype of the training labels.
        """
        self.root = root
        self.n_features = n_features
        self.label_dtype = label_dtype

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(n_features={self.n_features}, "
            f"depth={self.depth}, leaf_count={self.leaf_count})"
        )

    @property
    def depth(self) -> int:
        """Number of split levels in the tree; 0 for a single leaf."""
        return node_depth(self.root)

    @property
    def leaf_count(self) -> int:
        """Number of leaves in the tree."""
        return sum(1 for _ in iter_leaves(self.root))

    def leaves(self) -> list[Leaf]:
        """Return the leaves from left to right.

        Returns:
            list[Leaf]: Every leaf of the tree.
        """
        return list(iter_leaves(self.root))

    def predict_one(self, row: Any) -> Label:
        """Predict the label of a single feature vector.

        Args:
            row (Any): 1-D array-like with `n_features` values.

        Returns:
            Label: The label of the leaf the row reaches.

        Raises:
            ShapeMismatchError: If `row` does not have `n_features` values.
        """
        matrix = self._as_prediction_matrix(np.atleast_2d(np.asarray(row, dtype=np.float64)))
        return route(self.root, matrix[0]).label

    def predict(self, x: Any) -> np.ndarray:
        """Predict one label per row of `x`.

        Args:
            x (Any): 2-D array-like of shape `(n_rows, n_features)`.

        Returns:
            np.ndarray: Labels aligned index-for-index with the rows of `x`,
                using the training label dtype.

        Raises:
            FeatureMatrixError: If `x` is not a 2-D numeric array.
            ShapeMismatchError: If `x` does not have `n_features` columns.
        """
        matrix = self._as_prediction_matrix(x)
        predictions = [route(self.root, row).label for row in matrix]
        if self.label_dtype == object:
            return object_label_vector(predictions)
        return np.array(predictions, dtype=self.label_dtype)

    def _as_prediction_matrix(self, x: Any) -> np.ndarray:
        matrix = as_feature_matrix(x, require_finite=False)
        if matrix.shape[1] != self.n_features:
            raise ShapeMismatchError("feature columns", expected=self.n_features, actual=matrix.shape[1])
        return matrix


# ---------------------------------------------------------------------------
# Classifier
# ---------------------------------------------------------------------------

_MEASURES: dict[str, type[SelectionMeasure]] = {
    "entropy": EntropySelectionMeasure,
    "gini": GiniSelectionMeasure,
}


@dataclass(slots=True)
class _PendingSplit:
    """A node that will become an `Interior` once both children are grown.

    `left` and `right` are the children's positions in pre-order.
    """

    split: SplitResult
    samples: int
    left: int = -1
    right: int = -1


class DecisionTreeClassifier:
    """Greedy, top-down decision tree induction.

    A node becomes a leaf when it holds `min_size` rows or fewer, when it sits
    `max_depth` split levels below the root, or when its labels are already
    pure. Otherwise the feature selector picks a split and both sides are
    grown. A split that sends every row to one side is turned into a leaf.
    A tree fitted with `max_depth=k` has at most `k` split levels, so
    `max_depth=0` always yields a single leaf.

    The classifier holds configuration only, so one instance can fit any
    number of independent models. Nodes are grown from an explicit stack
    rather than by recursion, so deep trees are not limited by Python's
    recursion limit.

    Attributes:
        config (DecisionTreeConfig): Validated `max_depth` and `min_size`.
        feature_selector (FeatureSelector): Split search strategy.

    Examples:
        >>> classifier = DecisionTreeClassifier(max_depth=1, min_size=1)
        >>> model = classifier.fit([[1], [1], [5], [5]], ["A", "A", "B", "B"])
        >>> model.predict([[1], [5]]).tolist()
        ['A', 'B']
    """

    __slots__ = ("config", "feature_selector")

    def __init__(
        self,
        max_depth: int = 4,
        min_size: int = 3,
        feature_selector: FeatureSelector | None = None,
    ) -> None:
        """Initialize the classifier.

        Args:
            max_depth (int): Number of split levels allowed below the root.
            min_size (int): Nodes with this many rows or fewer become leaves.
            feature_selector (FeatureSelector | None): Split search strategy.
                Defaults to a `GreedyFeatureSelector` scoring information gain.

        Raises:
            pydantic.ValidationError: If `max_depth < 0` or `min_size < 1`.
        """
        self.config = DecisionTreeConfig(max_depth=max_depth, min_size=min_size)
        self.feature_selector: FeatureSelector = (
            feature_selector if feature_selector is not None else GreedyFeatureSelector()
        )

    @classmethod
    def from_settings(cls, settings: TreeSettings | None = None) -> DecisionTreeClassifier:
        """Build a classifier from `TreeSettings`.

        Args:
            settings (TreeSettings | None): Settings to use. When `None`, they
                are read from `RUNETREE_*` environment variables.

        Returns:
            DecisionTreeClassifier: A classifier using a `GreedyFeatureSelector`
                with the configured selection measure.
        """
        settings = settings if settings is not None else TreeSettings()
        selector = GreedyFeatureSelector(_MEASURES[settings.measure]())
        return cls(max_depth=settings.max_depth, min_size=settings.min_size, feature_selector=selector)

    @property
    def max_depth(self) -> int:
        """Number of split levels allowed below the root."""
        return self.config.max_depth

    @property
    def min_size(self) -> int:
        """Nodes with this many rows or fewer become leaves."""
        return self.config.min_size

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(max_depth={self.max_depth}, min_size={self.min_size}, "
            f"feature_selector={self.feature_selector!r})"
        )

    def fit(self, x: Any, y: Any) -> DecisionTreeModel:
        """Grow a tree on `x` and `y`.

        Args:
            x (Any): 2-D array-like of reals, shape `(n_rows, n_features)`.
            y (Any): 1-D array-like of hashable labels, length `n_rows`.

        Returns:
            DecisionTreeModel: The fitted model.

        Raises:
            EmptyDatasetError: If there are zero rows.
            ShapeMismatchError: If `x` and `y` disagree on the row count.
            FeatureMatrixError: If `x` is not a finite 2-D numeric array.
            UnsupportedLabelTypeError: If `y` is not 1-D or holds unhashable labels.
        """
        feature_matrix, labels = validate_training_data(x, y)
        logger.info(
            "Fitting decision tree",
            rows=feature_matrix.shape[0],
            features=feature_matrix.shape[1],
            max_depth=self.max_depth,
            min_size=self.min_size,
        )
        root = self._build(feature_matrix, labels)
        model = DecisionTreeModel(root, n_features=feature_matrix.shape[1], label_dtype=labels.dtype)
        logger.info("Decision tree fitted", depth=model.depth, leaves=model.leaf_count)
        return model

    def _build(self, x: np.ndarray, y: np.ndarray) -> DecisionTreeNode:
        # Grow nodes depth-first, left before right, recording them in pre-order.
        # Children always come after their parent, so assembling in reverse
        # order builds every child before the Interior that holds it.
        grown: list[Leaf | _PendingSplit] = []
        stack: list[tuple[np.ndarray, np.ndarray, int, _PendingSplit | None, bool]] = [(x, y, 0, None, True)]
        while stack:
            node_x, node_y, depth, parent, is_left = stack.pop()
            if parent is not None:
                if is_left:
                    parent.left = len(grown)
                else:
                    parent.right = len(grown)
            node = self._grow(node_x, node_y, depth)
            grown.append(node)
            if isinstance(node, _PendingSplit):
                left_indices, right_indices = node.split.left_indices, node.split.right_indices
                stack.append((node_x[right_indices], node_y[right_indices], depth + 1, node, False))
                stack.append((node_x[left_indices], node_y[left_indices], depth + 1, node, True))

        built: dict[int, DecisionTreeNode] = {}
        for position in reversed(range(len(grown))):
            node = grown[position]
            if isinstance(node, Leaf):
                built[position] = node
                continue
            built[position] = Interior(
                feature=node.split.feature_index,
                threshold=node.split.threshold,
                left=built.pop(node.left),
                right=built.pop(node.right),
                samples=node.samples,
                gain=node.split.score,
            )
        return built[0]

    def _grow(self, x: np.ndarray, y: np.ndarray, depth: int) -> Leaf | _PendingSplit:
        current_entropy = entropy(y)
        stop_reason = self._stop_reason(len(y), depth, current_entropy)
        if stop_reason is not None:
            leaf = make_leaf(y)
            logger.debug("Terminating branch with a leaf", depth=depth, reason=stop_reason, label=leaf.label)
            return leaf

        split = self.feature_selector.select(x, y)
        if split.is_degenerate:
            # Every row went to one side, so that side is the whole node.
            leaf = make_leaf(y)
            logger.debug("Degenerate split replaced by a leaf", depth=depth, score=split.score, label=leaf.label)
            return leaf

        logger.debug(
            "Splitting node",
            depth=depth,
            entropy=current_entropy,
            feature=split.feature_index,
            threshold=split.threshold,
            gain=split.score,
        )
        return _PendingSplit(split=split, samples=len(y))

    def _stop_reason(self, n_rows: int, depth: int, current_entropy: float) -> str | None:
        if n_rows <= self.min_size:
            return "min_size"
        if depth >= self.max_depth:
            return "max_depth"
        if current_entropy == 0.0:
            return "pure"
        return None
