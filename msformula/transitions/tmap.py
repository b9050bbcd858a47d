"""
Term x from-state x to-state map.

``tmap[k, i, j]`` holds the coefficient group of term ``k`` (0 = baseline
hazard) for the transition from state ``i`` to state ``j``; 0 means the
term does not apply. Fresh group ids come from ``dmap``, an arena holding a
distinct id for every cell, so two cells only share an id when a line ties
them with ``common``. A negative baseline id marks a transition whose
baseline is proportional to the one carrying the positive id (``shared``).

Memory is O((nterm + 1) * nstate**2) before compaction.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..formulas.options import OptionSpec
from ..formulas.terms import ExpandedFormula, TermCatalog, expand_terms
from ..states.selector import StatePairSet
from ..utils.logging import get_logger


logger = get_logger(__name__)


@dataclass
class InitSpec:
    """
    Initial values requested by one covariate line.

    They are checked only once the design columns are known, see
    :func:`msformula.transitions.cmap.resolve_initial_values`.
    """

    terms: List[int]
    state1: List[int]
    state2: List[int]
    values: Tuple[float, ...]


@dataclass
class CovariateLine:
    """A covariate line after option splitting and selector resolution."""

    pairs: StatePairSet
    options: OptionSpec
    source: str = ""
    expanded: Optional[ExpandedFormula] = field(default=None, repr=False)

    def __post_init__(self):
        if self.expanded is None:
            self.expanded = expand_terms(self.options.formula)


class TransitionMapBuilder:
    """
    Fill the term x state x state map line by line.

    Args:
        catalog: Pooled terms of the default formula and every line
        n_states: Number of states in the model
    """

    def __init__(self, catalog: TermCatalog, n_states: int):
        self.catalog = catalog
        self.n_states = n_states
        shape = (len(catalog) + 1, n_states, n_states)
        self.tmap = np.zeros(shape, dtype=np.int64)
        self.dmap = np.arange(1, int(np.prod(shape)) + 1, dtype=np.int64).reshape(shape)
        self.inits: List[InitSpec] = []
        self.logger = get_logger(self.__class__.__name__)

    def fill_default(self, default: ExpandedFormula) -> None:
        """Give the baseline and every default term its own group at every cell."""
        rows = [0] + self.catalog.match(default.terms)
        self.tmap[rows] = self.dmap[rows]
        self.logger.debug("Filled default formula", terms=default.labels)

    def apply_line(self, line: CovariateLine) -> None:
        """Overlay one covariate line on the map."""
        pairs = line.pairs
        if len(pairs) == 0:
            return

        options = line.options
        expanded = line.expanded
        terms = self.catalog.match(expanded.terms)

        state1 = np.array(pairs.state1, dtype=np.intp) - 1
        state2 = np.array(pairs.state2, dtype=np.intp) - 1

        dropped = [
            i for i in (self.catalog.index_of(t) for t in expanded.removed)
            if i is not None
        ]
        for k in dropped:
            self.tmap[k, state1, state2] = 0

        rows = ([0] if expanded.has_intercept else []) + terms
        for k in rows:
            if options.common:
                self.tmap[k, state1, state2] = self.dmap[k, state1[0], state2[0]]
            else:
                self.tmap[k, state1, state2] = self.dmap[k, state1, state2]

        if options.shared and len(pairs) > 1:
            reference = abs(int(self.tmap[0, state1[0], state2[0]]))
            if reference:
                others = (state1 != state1[0]) | (state2 != state2[0])
                self.tmap[0, state1[others], state2[others]] = -reference

        if options.init is not None:
            self.inits.append(InitSpec(
                terms=terms,
                state1=list(pairs.state1),
                state2=list(pairs.state2),
                values=options.init,
            ))

        self.logger.debug(
            f"Applied covariate line {line.source}",
            n_pairs=len(pairs),
            terms=expanded.labels,
            dropped=[self.catalog[k].label for k in dropped],
            common=options.common,
            shared=options.shared,
        )

    def build(
        self,
        default: ExpandedFormula,
        lines: Sequence[CovariateLine],
    ) -> Tuple[np.ndarray, List[InitSpec]]:
        """Run the default fill and every line in order; return (tmap, inits)."""
        self.fill_default(default)
        for line in lines:
            self.apply_line(line)
        return self.tmap, self.inits
