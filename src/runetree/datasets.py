"""Dataset loaders and small synthetic datasets.

Loaders return `(x, y)` where `x` is a `float64` feature matrix and `y` a 1-D
label vector, ready for `DecisionTreeClassifier.fit`.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import polars as pl

from runetree.exceptions import FeatureMatrixError, InvalidInputError

_BANKNOTE_COLUMNS: list[str] = ["variance", "skewness", "curtosis", "entropy", "class"]


def read_csv_dataset(
    path: str | Path,
    *,
    target: str | int,
    separator: str = ",",
    has_header: bool = True,
) -> tuple[np.ndarray, np.ndarray]:
    """Read a delimited file into a feature matrix and a label vector.

    Every column except `target` becomes a feature column.

    Args:
        path (str | Path): Path to the delimited file.
        target (str | int): Name or position of the label column. Headerless
            files get polars' default names (`column_1`, ...), so positions
            are the convenient choice there.
        separator (str): Field delimiter. Defaults to `","`.
        has_header (bool): Whether the first line holds column names.

    Returns:
        tuple[np.ndarray, np.ndarray]: `(x, y)`.

    Raises:
        InvalidInputError: If the target column does not exist.
        FeatureMatrixError: If a feature column is not numeric.
    """
    df = pl.read_csv(path, separator=separator, has_header=has_header)
    target_name = _resolve_column(df, target)
    return _split_features_and_target(df, target_name)


def read_banknote_authentication_dataset(path: str | Path) -> tuple[np.ndarray, np.ndarray]:
    """Read the UCI banknote authentication dataset.

    The file is headerless with four real-valued features followed by a
    `0`/`1` class column; the class is returned as `bool`.

    Args:
        path (str | Path): Path to `data_banknote_authentication.csv`.

    Returns:
        tuple[np.ndarray, np.ndarray]: `(x, y)` with `x.shape == (n_rows, 4)`.
    """
    df = pl.read_csv(path, has_header=False, new_columns=_BANKNOTE_COLUMNS)
    df = df.with_columns(pl.col("class").cast(pl.Float64) == 1.0)
    return _split_features_and_target(df, "class")


def load_static_dataset() -> tuple[np.ndarray, np.ndarray]:
    """Return a fixed nine-row, two-feature boolean dataset for demos.

    Returns:
        tuple[np.ndarray, np.ndarray]: `(x, y)`.
    """
    x = np.array(
        [
            [80.0, 20.0],
            [66.0, 32.0],
            [43.0, 12.0],
            [82.0, 28.0],
            [65.0, 32.0],
            [42.0, 35.0],
            [70.0, 39.0],
            [81.0, 45.0],
            [69.0, 12.0],
        ]
    )
    y = np.array([False, True, True, True, False, False, True, False, True])
    return x, y


def make_xor_dataset(count: int, *, seed: int = 42) -> tuple[np.ndarray, np.ndarray]:
    """Generate points in the unit square labelled by an XOR of two thresholds.

    A point is `True` when both coordinates are above 0.5 or both are below it.

    Args:
        count (int): Number of rows.
        seed (int): Seed for `numpy.random.default_rng`.

    Returns:
        tuple[np.ndarray, np.ndarray]: `(x, y)` with `x.shape == (count, 2)`.
    """
    rng = np.random.default_rng(seed)
    x = rng.uniform(0.0, 1.0, size=(count, 2))
    both_high = (x[:, 0] > 0.5) & (x[:, 1] > 0.5)
    both_low = (x[:, 0] < 0.5) & (x[:, 1] < 0.5)
    return x, both_high | both_low


def _resolve_column(df: pl.DataFrame, target: str | int) -> str:
    if isinstance(target, int):
        if not 0 <= target < df.width:
            raise InvalidInputError(f"Target column position {target} out of range for {df.width} columns")
        return df.columns[target]
    if target not in df.columns:
        raise InvalidInputError(f"Target column '{target}' not found in dataset. Available: {df.columns}")
    return target


def _split_features_and_target(df: pl.DataFrame, target: str) -> tuple[np.ndarray, np.ndarray]:
    feature_df = df.drop(target)
    non_numeric = [name for name, dtype in feature_df.schema.items() if not dtype.is_numeric()]
    if non_numeric:
        raise FeatureMatrixError(f"Feature columns must be numeric, got non-numeric columns: {non_numeric}")
    x = feature_df.cast(pl.Float64).to_numpy()
    y = df[target].to_numpy()
    return x, y
