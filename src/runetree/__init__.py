"""runetree: greedy decision-tree classification over numeric features."""

from loguru import logger

from runetree.config import DecisionTreeConfig, TreeSettings
from runetree.exceptions import (
    EmptyDatasetError,
    FeatureMatrixError,
    InvalidInputError,
    ShapeMismatchError,
    UnsupportedLabelTypeError,
)
from runetree.feature_selector import FeatureSelector, GreedyFeatureSelector, SplitResult
from runetree.logging import PACKAGE_NAME, enable_logging
from runetree.measures import EntropySelectionMeasure, GiniSelectionMeasure, SelectionMeasure, entropy, gini
from runetree.tree import DecisionTreeClassifier, DecisionTreeModel, DecisionTreeNode, Interior, Leaf

logger.disable(PACKAGE_NAME)  # noqa: RUF067 - Disable logging for the runetree package by default

__all__ = [
    "DecisionTreeClassifier",
    "DecisionTreeConfig",
    "DecisionTreeModel",
    "DecisionTreeNode",
    "EmptyDatasetError",
    "EntropySelectionMeasure",
    "FeatureMatrixError",
    "FeatureSelector",
    "GiniSelectionMeasure",
    "GreedyFeatureSelector",
    "Interior",
    "InvalidInputError",
    "Leaf",
    "SelectionMeasure",
    "ShapeMismatchError",
    "SplitResult",
    "TreeSettings",
    "UnsupportedLabelTypeError",
    "enable_logging",
    "entropy",
    "gini",
]
