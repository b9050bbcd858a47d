"""
Coefficient x realized-transition map.

Each row of ``cmap`` is one design column (or one proportional-hazards
ratio); each cell holds the 1-based index of the regression coefficient
that applies to that column for that transition, or 0.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from .compact import CompactMap, _renumber
from .tmap import InitSpec
from ..core.exceptions import InitValueError, ValidationError
from ..design.layout import DesignLayout
from ..utils.logging import get_logger


logger = get_logger(__name__)


@dataclass
class CoefficientMap:
    """
    Attributes:
        cmap: Coefficient ids, rows x transitions, numbered 1..K
        row_labels: Design column names, then ``ph(<transition>)`` rows
        column_labels: ``"from:to"`` of each transition
        row_terms: Catalog term of each row; 0 for proportional-hazards rows
    """

    cmap: np.ndarray
    row_labels: List[str]
    column_labels: List[str]
    row_terms: np.ndarray

    @property
    def n_coefficients(self) -> int:
        return int(self.cmap.max()) if self.cmap.size else 0

    def rows_for(self, term: int) -> List[int]:
        return [int(i) for i in np.flatnonzero(self.row_terms == term)]

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(self.cmap, index=self.row_labels, columns=self.column_labels)


class CoefficientMapBuilder:
    """Expand the compact term map into design columns and number the coefficients."""

    def __init__(self):
        self.logger = get_logger(self.__class__.__name__)

    def build(self, compact: CompactMap, layout: DesignLayout) -> CoefficientMap:
        """
        Args:
            compact: Term x transition map from the compactor
            layout: Design columns and their term assignment; an intercept
                column (term 0) is ignored
        """
        tmap = compact.tmap
        n_terms = tmap.shape[0] - 1
        n_transitions = tmap.shape[1]

        terms = layout.terms
        too_large = [t for t in terms if t > n_terms]
        if too_large:
            raise ValidationError(
                f"Design columns assigned to unknown term(s) {too_large}; the map has {n_terms} terms",
                suggestions=["Build the layout from the same term catalog as the map"],
            )

        counts = {t: layout.column_count(t) for t in terms}
        mult = 1 + max(counts.values(), default=0)

        blocks: List[np.ndarray] = []
        labels: List[str] = []
        row_terms: List[int] = []
        offset = 0
        for term in terms:
            groups = tmap[term]
            for k in range(1, counts[term] + 1):
                blocks.append(np.where(groups != 0, (offset + groups) * mult + k, 0))
            offset += int(groups.max()) if groups.size else 0
            labels.extend(layout.column_names[c] for c in layout.columns_for(term))
            row_terms.extend([term] * counts[term])

        top = max((int(b.max()) for b in blocks if b.size), default=0)
        references = list(dict.fromkeys(int(r) for r in compact.phbaseline if r > 0))
        for reference in references:
            columns = np.flatnonzero(compact.phbaseline == reference)
            row = np.zeros(n_transitions, dtype=np.int64)
            # one log hazard ratio per proportional transition
            row[columns] = top + np.arange(1, columns.size + 1)
            top += columns.size
            blocks.append(row)
            labels.append(f"ph({compact.column_labels[reference - 1]})")
            row_terms.append(0)

        if blocks:
            cmap = np.vstack(blocks).astype(np.int64)
        else:
            cmap = np.zeros((0, n_transitions), dtype=np.int64)
        cmap = _renumber(cmap.ravel()).reshape(cmap.shape)

        self.logger.debug(
            "Built coefficient map",
            n_rows=cmap.shape[0],
            n_coefficients=int(cmap.max()) if cmap.size else 0,
            ph_rows=len(references),
        )
        return CoefficientMap(
            cmap=cmap,
            row_labels=labels,
            column_labels=list(compact.column_labels),
            row_terms=np.asarray(row_terms, dtype=np.int64),
        )


def resolve_initial_values(
    inits: Sequence[InitSpec],
    coefficients: CoefficientMap,
    compact: CompactMap,
    term_labels: Optional[Sequence[str]] = None,
) -> np.ndarray:
    """
    Turn pending ``init(...)`` requests into an initial coefficient vector.

    Values apply to the design columns of the line's terms, in design order,
    at every observed transition of the line; a single value is recycled.
    Unobserved transitions are skipped. Later lines override earlier ones.

    Raises:
        InitValueError: when the number of values does not fit the columns
    """
    beta = np.zeros(coefficients.n_coefficients)

    for spec in inits:
        rows = [r for term in spec.terms for r in coefficients.rows_for(term)]
        names = [term_labels[t - 1] if term_labels else str(t) for t in spec.terms]
        values = np.asarray(spec.values, dtype=float)
        if values.size == 1:
            values = np.full(len(rows), values[0])
        elif values.size != len(rows):
            raise InitValueError(names, expected=len(rows), received=int(values.size))

        columns = dict.fromkeys(
            c for c in (compact.column_of(s1, s2) for s1, s2 in zip(spec.state1, spec.state2))
            if c is not None
        )
        if not columns:
            logger.warning("init() applies to no observed transition", terms=names)

        for column in columns:
            for row, value in zip(rows, values):
                coefficient = coefficients.cmap[row, column]
                if coefficient:
                    beta[coefficient - 1] = value

    return beta
