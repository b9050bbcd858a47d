"""
Validation utilities for msformula.

Provides common validation functions for the arrays and tables handed to
the compiler by its collaborators.
"""

import numpy as np
from typing import Tuple, Optional, Any
from ..core.exceptions import ValidationError


def validate_array_dimensions(
    array: Any,
    expected_shape: Optional[Tuple[Optional[int], ...]] = None,
    min_dims: Optional[int] = None,
    max_dims: Optional[int] = None,
    name: str = "array"
) -> None:
    """
    Validate array dimensions.

    Args:
        array: Array to validate
        expected_shape: Expected exact shape (None values are ignored)
        min_dims: Minimum number of dimensions
        max_dims: Maximum number of dimensions
        name: Name for error messages

    Raises:
        ValidationError: If validation fails
    """
    if not hasattr(array, 'shape'):
        raise ValidationError(
            f"{name} must be an array-like object with shape attribute",
            suggestions=[
                "Ensure input is a numpy array or pandas DataFrame",
                "Convert lists to arrays using np.asarray()",
            ]
        )

    shape = array.shape
    ndims = len(shape)

    if min_dims is not None and ndims < min_dims:
        raise ValidationError(
            f"{name} has {ndims} dimensions, expected at least {min_dims}",
            suggestions=[f"Check that {name} has correct structure"]
        )

    if max_dims is not None and ndims > max_dims:
        raise ValidationError(
            f"{name} has {ndims} dimensions, expected at most {max_dims}",
            suggestions=[f"Check that {name} has correct structure"]
        )

    if expected_shape is not None:
        if len(expected_shape) != ndims:
            raise ValidationError(
                f"{name} has {ndims} dimensions, expected {len(expected_shape)}",
                suggestions=[
                    f"Expected shape: {expected_shape}",
                    f"Actual shape: {shape}",
                ]
            )

        for i, (actual, expected) in enumerate(zip(shape, expected_shape)):
            if expected is not None and actual != expected:
                raise ValidationError(
                    f"{name} dimension {i} has size {actual}, expected {expected}",
                    suggestions=[
                        f"Expected shape: {expected_shape}",
                        f"Actual shape: {shape}",
                    ]
                )


def validate_transition_counts(counts: np.ndarray, name: str = "transitions") -> None:
    """
    Validate an observed transition count matrix.

    Counts must form a 2-D array of finite, non-negative integers.

    Raises:
        ValidationError: If validation fails
    """
    validate_array_dimensions(counts, min_dims=2, max_dims=2, name=name)

    values = np.asarray(counts, dtype=float)
    if not np.all(np.isfinite(values)):
        raise ValidationError(
            f"{name} contains missing or infinite values",
            suggestions=["Replace missing counts with 0"]
        )
    if np.any(values < 0):
        raise ValidationError(
            f"{name} contains negative counts (min: {values.min()})",
            suggestions=["Transition counts must be >= 0"]
        )
    if np.any(values != np.round(values)):
        raise ValidationError(
            f"{name} contains non-integer counts",
            suggestions=["Pass the raw number of observed transitions per cell"]
        )
