"""
Compaction of the full state grid to the transitions seen in the data.

Only transitions with at least one observed event get a column in the
compact map. A transition that is shared with others but never observed is
dropped along with its column; this is a known simplification.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Union

import numpy as np
import pandas as pd

from .tmap import InitSpec
from ..core.exceptions import StateNameNotFoundError, ValidationError
from ..states.table import StateTable
from ..utils.logging import get_logger
from ..utils.validation import validate_transition_counts


logger = get_logger(__name__)


@dataclass
class CompactMap:
    """
    Term x realized-transition map.

    Attributes:
        tmap: Row 0 holds the baseline stratum of each transition (1, 2, ...);
            row k holds the coefficient group of term k, numbered 1, 2, ...
            within the row, 0 where the term does not apply
        phbaseline: For each transition, the 1-based column whose baseline it
            is proportional to, or 0
        mapid: 1-based (from, to) state indices of each column
        row_labels: Baseline label followed by the term labels
        column_labels: ``"from:to"`` for each column
        inits: Pending initial values, carried through unchanged
    """

    tmap: np.ndarray
    phbaseline: np.ndarray
    mapid: np.ndarray
    row_labels: List[str]
    column_labels: List[str]
    inits: List[InitSpec] = field(default_factory=list)

    @property
    def n_transitions(self) -> int:
        return self.tmap.shape[1]

    @property
    def n_strata(self) -> int:
        return int(self.tmap[0].max()) if self.n_transitions else 0

    def column_of(self, from_state: int, to_state: int) -> Optional[int]:
        """0-based column of the 1-based (from, to) transition, or None if unobserved."""
        hits = np.flatnonzero((self.mapid[:, 0] == from_state) & (self.mapid[:, 1] == to_state))
        return int(hits[0]) if hits.size else None

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(self.tmap, index=self.row_labels, columns=self.column_labels)


def _renumber(values: np.ndarray) -> np.ndarray:
    """Map nonzero values to 1, 2, ... in order of first appearance; 0 stays 0."""
    lookup: Dict[int, int] = {}
    result = np.zeros_like(values)
    for i, v in enumerate(values):
        if v != 0:
            result[i] = lookup.setdefault(int(v), len(lookup) + 1)
    return result


class TransitionCompactor:
    """
    Restrict a full term x state x state map to observed transitions.

    Args:
        table: The model's states, in the order used by the map
        censor_label: Column of the count matrix holding censored intervals
        baseline_label: Row label of the baseline row
    """

    def __init__(
        self,
        table: StateTable,
        censor_label: str = "(censored)",
        baseline_label: str = "(Baseline)",
    ):
        self.table = table
        self.censor_label = censor_label
        self.baseline_label = baseline_label
        self.logger = get_logger(self.__class__.__name__)

    def observed_counts(self, transitions: Union[pd.DataFrame, np.ndarray]) -> pd.DataFrame:
        """
        Normalize a count matrix to a states x states DataFrame in model order.

        A bare array must be nstate x nstate, or nstate x (nstate + 1) with the
        censored column last. Rows that are entirely zero and the censored
        column are dropped before the remaining cells are read.
        """
        names = self.table.names
        n_states = len(names)

        if isinstance(transitions, pd.DataFrame):
            counts = transitions.copy()
            counts.index = [str(i) for i in counts.index]
            counts.columns = [str(c) for c in counts.columns]
        else:
            array = np.asarray(transitions)
            validate_transition_counts(array)
            if array.shape == (n_states, n_states):
                columns = names
            elif array.shape == (n_states, n_states + 1):
                columns = names + [self.censor_label]
            else:
                raise ValidationError(
                    f"Transition matrix has shape {array.shape}, expected "
                    f"({n_states}, {n_states}) or ({n_states}, {n_states + 1})",
                    suggestions=["Pass a DataFrame labelled by state names instead"],
                )
            counts = pd.DataFrame(array, index=names, columns=columns)

        if self.censor_label in counts.columns:
            counts = counts.drop(columns=self.censor_label)
        validate_transition_counts(counts.to_numpy(dtype=float))

        unknown = [s for s in dict.fromkeys(list(counts.index) + list(counts.columns)) if s not in set(names)]
        if unknown:
            raise StateNameNotFoundError(unknown, available=names)

        counts = counts.loc[(counts != 0).any(axis=1)]
        return counts.reindex(index=names, columns=names, fill_value=0).astype(int)

    def compact(
        self,
        tmap: np.ndarray,
        transitions: Union[pd.DataFrame, np.ndarray],
        term_labels: Sequence[str],
        inits: Optional[List[InitSpec]] = None,
    ) -> CompactMap:
        """Build the compact map from the full map and the observed counts."""
        counts = self.observed_counts(transitions).to_numpy()
        rows, cols = np.nonzero(counts)  # row-major order

        tmap2 = tmap[:, rows, cols].astype(np.int64)
        phbaseline = self._resolve_baseline(tmap2)

        for k in range(1, tmap2.shape[0]):
            tmap2[k] = _renumber(tmap2[k])

        mapid = np.column_stack([rows + 1, cols + 1]).astype(np.int64)
        column_labels = [f"{f}:{t}" for f, t in mapid]

        self.logger.debug(
            "Compacted transition map",
            n_transitions=len(column_labels),
            n_strata=int(tmap2[0].max()) if len(column_labels) else 0,
            proportional=int(np.count_nonzero(phbaseline)),
        )

        return CompactMap(
            tmap=tmap2,
            phbaseline=phbaseline,
            mapid=mapid.reshape(-1, 2),
            row_labels=[self.baseline_label] + list(term_labels),
            column_labels=column_labels,
            inits=list(inits or []),
        )

    def _resolve_baseline(self, tmap2: np.ndarray) -> np.ndarray:
        """
        Turn the sign-encoded baseline row into strata; return phbaseline.

        A column with a negative baseline id -m is proportional to the first
        column whose id is +m, and joins that column's stratum. When no such
        column was observed the first column marked -m takes its place.
        """
        baseline = tmap2[0].copy()
        n = baseline.size
        first_seen: Dict[int, int] = {}
        for j, v in enumerate(baseline):
            first_seen.setdefault(int(v), j)

        reference = np.arange(n)
        phbaseline = np.zeros(n, dtype=np.int64)
        warned = set()
        for j, v in enumerate(baseline):
            v = int(v)
            if v > 0:
                reference[j] = first_seen[v]
            elif v < 0:
                if -v in first_seen:
                    reference[j] = first_seen[-v]
                else:
                    reference[j] = first_seen[v]
                    if v not in warned:
                        warned.add(v)
                        self.logger.warning(
                            "Reference transition of a shared baseline was not observed; "
                            "using the first observed member instead",
                            column=int(reference[j]) + 1,
                        )
                if reference[j] != j:
                    phbaseline[j] = reference[j] + 1

        tmap2[0] = _renumber(reference + 1)
        return phbaseline
