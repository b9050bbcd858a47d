"""Utility functions and classes for msformula."""

from .logging import get_logger, setup_logging, log_performance
from .validation import validate_array_dimensions, validate_transition_counts

__all__ = [
    "get_logger",
    "setup_logging",
    "log_performance",
    "validate_array_dimensions",
    "validate_transition_counts",
]
