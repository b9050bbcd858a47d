"""Transition maps: full grid, compaction and coefficient numbering."""

from .tmap import CovariateLine, InitSpec, TransitionMapBuilder
from .tabulate import tabulate_transitions
from .compact import CompactMap, TransitionCompactor
from .cmap import CoefficientMap, CoefficientMapBuilder, resolve_initial_values

__all__ = [
    "CovariateLine",
    "InitSpec",
    "TransitionMapBuilder",
    "tabulate_transitions",
    "CompactMap",
    "TransitionCompactor",
    "CoefficientMap",
    "CoefficientMapBuilder",
    "resolve_initial_values",
]
