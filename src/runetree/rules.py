"""Pydantic models and helpers describing a fitted tree as human-readable rules."""

from __future__ import annotations

import math
import operator
from collections import defaultdict
from collections.abc import Callable, Hashable
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from runetree.tree import DecisionTreeModel, DecisionTreeNode, Leaf

# ---------------------------------------------------------------------------
# Public type aliases
# ---------------------------------------------------------------------------

type PredicateOp = Literal["<", ">="]

_IMPORTANCE_DECIMAL_PLACES: int = 4

# ---------------------------------------------------------------------------
# Public models
# ---------------------------------------------------------------------------


class Predicate(BaseModel):
    """A single threshold condition on one feature column.

    Every interior node contributes one predicate to each path through it:
    `x[feature] < threshold` towards the left child and
    `x[feature] >= threshold` towards the right child.

    Attributes:
        feature (int): Column index the condition applies to.
        operator (PredicateOp): `"<"` for the left branch, `">="` for the right.
        threshold (float): Split value.

    Examples:
        >>> p = Predicate(feature=0, operator="<", threshold=5.0)
        >>> str(p)
        'x[0] < 5.0'
        >>> p.eval(1.0)
        True
    """

    feature: int = Field(ge=0, description="Column index the condition applies to.")
    operator: PredicateOp = Field(description="'<' for the left branch, '>=' for the right branch.")
    threshold: float = Field(description="Split value compared against the feature.")

    def __str__(self) -> str:
        """Return the predicate as `"x[<feature>] <operator> <threshold>"`."""
        return f"x[{self.feature}] {self.operator} {self.threshold}"

    def eval(self, x: float) -> bool:
        """Evaluate this predicate against a feature value.

        Args:
            x (float): The feature value to test.

        Returns:
            bool: `True` if the predicate holds for `x`, `False` otherwise.
        """
        return _SCALAR_OPS[self.operator](x, self.threshold)


class DecisionRule(BaseModel):
    """The path from the root to one leaf, with the leaf's prediction.

    Attributes:
        predicates (list[Predicate]): Conditions along the path. Empty when
            the tree is a single leaf.
        prediction (Any): Label predicted for rows satisfying every predicate.
        samples (int): Number of training rows that reached the leaf.
        confidence (float): Fraction of those rows carrying `prediction`.
    """

    predicates: list[Predicate] = Field(description="Conditions along the root-to-leaf path.")
    prediction: Any = Field(description="Label predicted at the leaf.")
    samples: int = Field(ge=1, description="Number of training rows that reached the leaf.")
    confidence: float = Field(ge=0.0, le=1.0, description="Fraction of leaf rows carrying the prediction.")

    def __str__(self) -> str:
        """Return the rule as `"if <p1> and <p2> then <prediction>"`."""
        if not self.predicates:
            return f"always {self.prediction!r}"
        conditions = " and ".join(str(predicate) for predicate in self.predicates)
        return f"if {conditions} then {self.prediction!r}"

    def matches(self, row: list[float]) -> bool:
        """Whether every predicate holds for `row`.

        Args:
            row (list[float]): A feature vector.

        Returns:
            bool: True when the row reaches this rule's leaf.
        """
        return all(predicate.eval(row[predicate.feature]) for predicate in self.predicates)


class TreeSummary(BaseModel):
    """Structural description of a fitted tree.

    Attributes:
        n_features (int): Feature columns the tree was fitted on.
        depth (int): Number of split levels.
        leaf_count (int): Number of leaves.
        sample_count (int): Training rows at the root.
        rules (list[DecisionRule]): One rule per leaf, left to right.
        feature_importance (dict[int, float]): Column index to share of the
            total weighted gain, sorted descending. Empty for a single leaf.
    """

    n_features: int = Field(ge=0, description="Feature columns the tree was fitted on.")
    depth: int = Field(ge=0, description="Number of split levels.")
    leaf_count: int = Field(ge=1, description="Number of leaves.")
    sample_count: int = Field(ge=1, description="Training rows at the root.")
    rules: list[DecisionRule] = Field(description="One rule per leaf, left to right.")
    feature_importance: dict[int, float] = Field(
        description="Column index to share of the total weighted gain, sorted descending.",
    )

    @field_validator("feature_importance", mode="after")
    @classmethod
    def _validate_feature_importance_sums_to_one(cls, value: dict[int, float]) -> dict[int, float]:
        """Validate that feature importance scores sum to 1.0 unless empty.

        Raises:
            ValueError: If the scores are non-empty and do not sum to 1.0.
        """
        if not value:
            return value
        total = sum(value.values())
        if not math.isclose(total, 1.0, abs_tol=1e-6):
            raise ValueError(f"feature_importance scores must sum to 1.0, got {total:.8f}")
        return value

    @model_validator(mode="after")
    def _validate_rules_count_matches_leaf_count(self) -> TreeSummary:
        """Validate that the number of rules equals the number of leaves.

        Raises:
            ValueError: If `len(rules)` does not equal `leaf_count`.
        """
        if len(self.rules) != self.leaf_count:
            raise ValueError(f"rules length ({len(self.rules)}) must equal leaf_count ({self.leaf_count})")
        return self


# ---------------------------------------------------------------------------
# Public interface
# ---------------------------------------------------------------------------


def extract_rules(model: DecisionTreeModel) -> list[DecisionRule]:
    """Extract one rule per leaf from a fitted model.

    Args:
        model (DecisionTreeModel): A fitted model.

    Returns:
        list[DecisionRule]: Rules ordered left to right.
    """
    rules: list[DecisionRule] = []
    _walk_tree(model.root, path_predicates=[], rules=rules)
    return rules


def compute_feature_importance(model: DecisionTreeModel) -> dict[int, float]:
    """Compute each feature's share of the gain achieved by the tree's splits.

    A split contributes `gain * samples / root_samples`. Features that never
    split, or whose splits gained nothing, are omitted. Scores are rounded and
    the last one absorbs the rounding error so the total is exactly 1.0.

    Args:
        model (DecisionTreeModel): A fitted model.

    Returns:
        dict[int, float]: Column index to importance, sorted descending.
    """
    root_samples = model.root.samples
    totals: defaultdict[int, float] = defaultdict(float)
    _accumulate_gain(model.root, root_samples, totals)

    overall = sum(totals.values())
    if overall <= 0.0:
        return {}
    paired = [(feature, round(gain / overall, _IMPORTANCE_DECIMAL_PLACES)) for feature, gain in totals.items()]
    filtered = [(feature, importance) for feature, importance in paired if importance > 0.0]
    filtered.sort(key=lambda item: item[1], reverse=True)
    if filtered:
        others_sum = sum(importance for _, importance in filtered[:-1])
        last_feature = filtered[-1][0]
        filtered[-1] = (last_feature, round(1.0 - others_sum, _IMPORTANCE_DECIMAL_PLACES))
    return dict(filtered)


def summarize(model: DecisionTreeModel) -> TreeSummary:
    """Describe a fitted model.

    Args:
        model (DecisionTreeModel): A fitted model.

    Returns:
        TreeSummary: Depth, leaf count, rules and feature importance.
    """
    rules = extract_rules(model)
    return TreeSummary(
        n_features=model.n_features,
        depth=model.depth,
        leaf_count=len(rules),
        sample_count=model.root.samples,
        rules=rules,
        feature_importance=compute_feature_importance(model),
    )


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------

_SCALAR_OPS: dict[str, Callable[[Any, Any], bool]] = {
    "<": operator.lt,
    ">=": operator.ge,
}


def _walk_tree(
    node: DecisionTreeNode,
    *,
    path_predicates: list[Predicate],
    rules: list[DecisionRule],
) -> None:
    stack: list[tuple[DecisionTreeNode, list[Predicate]]] = [(node, path_predicates)]
    while stack:
        current, predicates = stack.pop()
        if isinstance(current, Leaf):
            rules.append(_build_leaf_rule(current, predicates))
            continue
        left_predicate = Predicate(feature=current.feature, operator="<", threshold=current.threshold)
        right_predicate = Predicate(feature=current.feature, operator=">=", threshold=current.threshold)
        stack.append((current.right, [*predicates, right_predicate]))
        stack.append((current.left, [*predicates, left_predicate]))


def _build_leaf_rule(leaf: Leaf, path_predicates: list[Predicate]) -> DecisionRule:
    prediction: Hashable = leaf.label
    return DecisionRule(
        predicates=path_predicates,
        prediction=prediction,
        samples=leaf.samples,
        confidence=round(leaf.confidence, _IMPORTANCE_DECIMAL_PLACES),
    )


def _accumulate_gain(node: DecisionTreeNode, root_samples: int, totals: defaultdict[int, float]) -> None:
    stack = [node]
    while stack:
        current = stack.pop()
        if isinstance(current, Leaf):
            continue
        totals[current.feature] += current.gain * current.samples / root_samples
        stack.extend((current.left, current.right))
