"""
State table for multi-state models.

The state table lists every state in model order together with optional
per-state attributes (for instance ``severity`` or ``stage``) that covariate
lines can use to select groups of transitions.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from ..core.exceptions import (
    IncompleteStateTableError,
    MissingStateColumnError,
    ValidationError,
)
from ..utils.logging import get_logger


logger = get_logger(__name__)


@dataclass(frozen=True)
class State:
    """One state and its attributes."""

    name: str
    attributes: Mapping[str, Any]


def values_match(cell: Any, value: Any) -> bool:
    """Compare a state-table cell with a selector value, tolerating str/number mixes."""
    if cell is None or (isinstance(cell, float) and np.isnan(cell)):
        return False
    if cell == value:
        return True
    return str(cell) == str(value)


class StateTable:
    """
    Ordered states plus their attributes, backed by a pandas DataFrame.

    Args:
        states: State names in model order (the order of the transition
            matrix and of numeric state references)
        statedata: Optional DataFrame with one row per state; must contain
            ``state_column``. Rows for states outside ``states`` are ignored
            and the remaining rows are put in model order.
        state_column: Column of ``statedata`` holding state names
    """

    def __init__(
        self,
        states: Sequence[Any],
        statedata: Optional[pd.DataFrame] = None,
        state_column: str = "state",
    ):
        names = [str(s) for s in states]
        if not names:
            raise ValidationError("A multi-state model needs at least one state")
        duplicated = sorted({n for n in names if names.count(n) > 1})
        if duplicated:
            raise ValidationError(
                f"State names must be unique, duplicated: {', '.join(duplicated)}",
                suggestions=["Give every state a distinct name"],
            )

        self.state_column = state_column

        if statedata is None:
            frame = pd.DataFrame({state_column: names})
        else:
            if state_column not in statedata.columns:
                raise MissingStateColumnError(state_column)
            keyed = statedata.assign(**{state_column: statedata[state_column].astype(str)})
            keyed = keyed.drop_duplicates(subset=state_column, keep="first")
            known = set(keyed[state_column])
            missing = [n for n in names if n not in known]
            if missing:
                raise IncompleteStateTableError(missing)
            frame = keyed.set_index(state_column).loc[names].reset_index()

        self._frame = frame.reset_index(drop=True)
        logger.debug(
            "Built state table",
            n_states=len(names),
            attributes=self.attributes,
        )

    @property
    def frame(self) -> pd.DataFrame:
        return self._frame.copy()

    @property
    def names(self) -> List[str]:
        return list(self._frame[self.state_column])

    @property
    def n_states(self) -> int:
        return len(self._frame)

    @property
    def attributes(self) -> List[str]:
        """Attribute names usable in selectors; the state column comes first."""
        others = [str(c) for c in self._frame.columns if c != self.state_column]
        return [self.state_column] + others

    def column(self, attribute: str) -> List[Any]:
        return list(self._frame[attribute])

    def state(self, index: int) -> State:
        """State at 1-based ``index``."""
        row = self._frame.iloc[index - 1]
        attributes: Dict[str, Any] = {
            str(k): v for k, v in row.items() if k != self.state_column
        }
        return State(name=str(row[self.state_column]), attributes=attributes)

    def index_of(self, name: Any) -> Optional[int]:
        """1-based index of state ``name`` or None."""
        for i, candidate in enumerate(self.names, 1):
            if values_match(candidate, name):
                return i
        return None

    def __len__(self) -> int:
        return self.n_states

    def __repr__(self) -> str:
        return f"StateTable({self.names})"
