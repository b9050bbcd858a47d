"""Core functionality for msformula."""

from .exceptions import (
    MsFormulaError,
    FormulaShapeError,
    ExpressionSyntaxError,
    UnknownOptionError,
    TermMissingColonError,
    NonIntegerStateError,
    StateIndexOutOfRangeError,
    AttributeNotFoundError,
    AttributeValueNotFoundError,
    StateNameNotFoundError,
    MissingStateColumnError,
    IncompleteStateTableError,
    TermMatchFailureError,
    DesignLayoutError,
    InitValueError,
    ConfigurationError,
    ValidationError,
)

__all__ = [
    "MsFormulaError",
    "FormulaShapeError",
    "ExpressionSyntaxError",
    "UnknownOptionError",
    "TermMissingColonError",
    "NonIntegerStateError",
    "StateIndexOutOfRangeError",
    "AttributeNotFoundError",
    "AttributeValueNotFoundError",
    "StateNameNotFoundError",
    "MissingStateColumnError",
    "IncompleteStateTableError",
    "TermMatchFailureError",
    "DesignLayoutError",
    "InitValueError",
    "ConfigurationError",
    "ValidationError",
]
