"""
Transition selectors.

The left side of a covariate line says which transitions the line applies
to. It is a ``+``-joined list of ``from:to`` terms, and each side of a colon
may be:

    0                    every state
    2, c(1, 3)           states by 1-based position
    healthy, "ill"       states by name
    c(healthy, ill)      several states by name
    severity(3, 4)       states whose ``severity`` attribute is 3 or 4
    severity()           every state (any attribute called with no values)
    state(healthy)       same as a bare name

Each term expands to every (from, to) combination; the terms of one line
are concatenated.
"""

import functools
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

import numpy as np

from ..formulas.nodes import Node, Call, Literal, Operator, Symbol, is_operator, split_plus
from ..core.exceptions import (
    AttributeNotFoundError,
    AttributeValueNotFoundError,
    FormulaShapeError,
    NonIntegerStateError,
    StateIndexOutOfRangeError,
    StateNameNotFoundError,
    TermMissingColonError,
)
from ..utils.logging import get_logger
from .table import StateTable, values_match


logger = get_logger(__name__)


@dataclass(frozen=True)
class StateSelection:
    """Values requested for one state attribute, e.g. ``severity(3, 4)``."""

    attribute: str
    values: Tuple[Any, ...] = ()


@dataclass
class StatePairSet:
    """1-based (from, to) pairs selected by one covariate line. Duplicates are kept."""

    pairs: List[Tuple[int, int]] = field(default_factory=list)

    @property
    def state1(self) -> List[int]:
        return [p[0] for p in self.pairs]

    @property
    def state2(self) -> List[int]:
        return [p[1] for p in self.pairs]

    def extend(self, other: "StatePairSet") -> None:
        self.pairs.extend(other.pairs)

    def __iter__(self) -> Iterator[Tuple[int, int]]:
        return iter(self.pairs)

    def __len__(self) -> int:
        return len(self.pairs)

    def __getitem__(self, index: int) -> Tuple[int, int]:
        return self.pairs[index]


def _numeric_values(node: Node) -> Optional[List[float]]:
    """Numbers in ``node`` if it is purely numeric, else None."""
    if isinstance(node, Literal):
        return [node.value] if node.is_number else None
    if isinstance(node, Operator) and node.name == "(":
        return _numeric_values(node.children[0])
    if isinstance(node, Operator) and not node.is_binary and node.name in ("-", "+"):
        inner = _numeric_values(node.children[0])
        if inner is None:
            return None
        return [-v for v in inner] if node.name == "-" else inner
    if isinstance(node, Call) and node.name == "c" and node.args:
        values: List[float] = []
        for arg in node.args:
            part = _numeric_values(arg)
            if part is None:
                return None
            values.extend(part)
        return values
    return None


def _plain_values(node: Node) -> List[Any]:
    """Selector values given as names, strings, numbers or c(...) of those."""
    numbers = _numeric_values(node)
    if numbers is not None:
        return numbers
    if isinstance(node, Symbol):
        return [node.name]
    if isinstance(node, Literal):
        return [node.value]
    if isinstance(node, Operator) and node.name == "(":
        return _plain_values(node.children[0])
    if isinstance(node, Call) and node.name == "c":
        values: List[Any] = []
        for arg in node.args:
            values.extend(_plain_values(arg))
        return values
    raise FormulaShapeError(formula=str(node), issue="invalid value in a transition selector")


class LeftSideResolver:
    """
    Resolve transition selectors against a state table.

    The attribute builders are a lookup table built once from the table's
    attribute names; each maps a call like ``severity(3, 4)`` to a
    :class:`StateSelection`.
    """

    def __init__(self, table: StateTable):
        self.table = table
        self.logger = get_logger(self.__class__.__name__)
        self._builders: Dict[str, Callable[..., StateSelection]] = {
            name: functools.partial(self._selection, name) for name in table.attributes
        }

    @staticmethod
    def _selection(attribute: str, *values: Any) -> StateSelection:
        return StateSelection(attribute=attribute, values=tuple(values))

    @property
    def all_states(self) -> List[int]:
        return list(range(1, self.table.n_states + 1))

    def resolve(self, lhs: Node) -> StatePairSet:
        """
        Expand a whole left side into its (from, to) pairs.

        Raises:
            TermMissingColonError: for a term that is not ``from:to``
        """
        result = StatePairSet()
        for term in split_plus(lhs):
            if not is_operator(term, ":"):
                raise TermMissingColonError(str(term))
            from_states = self.resolve_side(term.left)
            to_states = self.resolve_side(term.right)
            # from-state varies fastest
            result.extend(StatePairSet([(f, t) for t in to_states for f in from_states]))

        self.logger.debug(f"Resolved selector {lhs}", n_pairs=len(result))
        return result

    def resolve_side(self, node: Node) -> List[int]:
        """1-based state indices selected by one side of a colon."""
        numbers = _numeric_values(node)
        if numbers is not None:
            return self._by_number(numbers)

        if isinstance(node, Operator) and node.name == "(":
            return self.resolve_side(node.children[0])

        if isinstance(node, Call) and node.name != "c":
            builder = self._builders.get(node.name)
            if builder is None:
                raise AttributeNotFoundError(node.name, available=self.table.attributes)
            values: List[Any] = []
            for arg in node.args:
                values.extend(_plain_values(arg))
            return self._by_selection(builder(*values))

        return self._by_name(_plain_values(node))

    def _by_number(self, numbers: List[float]) -> List[int]:
        if len(numbers) == 1 and numbers[0] == 0:
            return self.all_states

        infinite = [v for v in numbers if not np.isfinite(v)]
        if infinite:
            raise StateIndexOutOfRangeError(infinite, self.table.n_states)

        fractional = [v for v in numbers if float(v) != int(v)]
        if fractional:
            raise NonIntegerStateError(fractional)

        indices = [int(v) for v in numbers]
        n_states = self.table.n_states
        out_of_range = [i for i in indices if i < 1 or i > n_states]
        if out_of_range:
            raise StateIndexOutOfRangeError(out_of_range, n_states)
        return indices

    def _by_selection(self, selection: StateSelection) -> List[int]:
        if not selection.values:
            return self.all_states

        column = self.table.column(selection.attribute)
        unmatched = [
            v for v in selection.values
            if not any(values_match(cell, v) for cell in column)
        ]
        if unmatched:
            raise AttributeValueNotFoundError(selection.attribute, unmatched)

        return [
            i for i, cell in enumerate(column, 1)
            if any(values_match(cell, v) for v in selection.values)
        ]

    def _by_name(self, names: List[Any]) -> List[int]:
        indices = [self.table.index_of(n) for n in names]
        missing = [n for n, i in zip(names, indices) if i is None]
        if missing:
            raise StateNameNotFoundError(missing, available=self.table.names)
        return indices
