"""State tables and transition selectors."""

from .table import State, StateTable
from .selector import LeftSideResolver, StatePairSet, StateSelection

__all__ = [
    "State",
    "StateTable",
    "LeftSideResolver",
    "StatePairSet",
    "StateSelection",
]
