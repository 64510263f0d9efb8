"""Custom exceptions for runetree.

Input validation exceptions (subclass ValueError):
- InvalidInputError: Base class for malformed fit/predict input. Catch this to
  handle any input failure.
- EmptyDatasetError: Raised when fitting on zero rows.
- ShapeMismatchError: Raised when row or column counts disagree.
- FeatureMatrixError: Raised when the feature matrix is not a finite 2-D
  numeric array.

Label exceptions (subclass TypeError):
- UnsupportedLabelTypeError: Raised when labels cannot be grouped.
"""

from __future__ import annotations


class InvalidInputError(ValueError):
    """Base exception for malformed input to fit or predict."""


class EmptyDatasetError(InvalidInputError):
    """Raised when a tree is fitted on a dataset with zero rows.

    Examples:
        >>> str(EmptyDatasetError())
        'Cannot fit a decision tree on zero rows'
    """

    def __init__(self) -> None:
        """Initialize EmptyDatasetError."""
        super().__init__("Cannot fit a decision tree on zero rows")


class ShapeMismatchError(InvalidInputError):
    """Raised when two inputs disagree on a dimension.

    Used both for feature-matrix rows vs. label count at fit time and for
    feature columns vs. the fitted feature count at predict time.

    Attributes:
        dimension (str): Name of the mismatched dimension, e.g. `"rows"`.
        expected (int): The size the other input requires.
        actual (int): The size that was supplied.

    Examples:
        >>> err = ShapeMismatchError("rows", expected=8, actual=7)
        >>> err.expected, err.actual
        (8, 7)
    """

    dimension: str
    expected: int
    actual: int

    def __init__(self, dimension: str, *, expected: int, actual: int) -> None:
        """Initialize ShapeMismatchError.

        Args:
            dimension (str): Name of the mismatched dimension.
            expected (int): The required size.
            actual (int): The supplied size.
        """
        super().__init__(f"Mismatched {dimension}: expected {expected}, got {actual}")
        self.dimension = dimension
        self.expected = expected
        self.actual = actual

    def __repr__(self) -> str:
        """Return detailed representation for debugging.

        Returns:
            str: Representation including dimension, expected and actual sizes.
        """
        return (
            f"{self.__class__.__name__}("
            f"dimension={self.dimension!r}, expected={self.expected!r}, actual={self.actual!r})"
        )


class FeatureMatrixError(InvalidInputError):
    """Raised when the feature matrix is not a finite 2-D array of reals."""


class UnsupportedLabelTypeError(TypeError):
    """Raised when a label vector cannot be grouped into a histogram.

    Attributes:
        label (object): The first offending label, when one was identified.
    """

    label: object

    def __init__(self, message: str, *, label: object = None) -> None:
        """Initialize UnsupportedLabelTypeError.

        Args:
            message (str): Description of the problem.
            label (object): The offending label, if any.
        """
        super().__init__(message)
        self.label = label
