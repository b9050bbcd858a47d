"""
Observed transition counts.

Tabulates per-interval (from, to) records into the from x to count matrix
that decides which transitions appear in the compact map.
"""

from typing import Any, Optional, Sequence

import pandas as pd

from ..core.exceptions import StateNameNotFoundError, ValidationError
from ..utils.logging import get_logger


logger = get_logger(__name__)


def tabulate_transitions(
    from_state: Sequence[Any],
    to_state: Sequence[Any],
    states: Optional[Sequence[Any]] = None,
    censor_label: str = "(censored)",
) -> pd.DataFrame:
    """
    Count observed transitions.

    Args:
        from_state: State occupied at the start of each interval
        to_state: State entered at the end of each interval; missing values
            or ``censor_label`` mark a censored interval
        states: All states in model order; defaults to the states seen in the
            data in order of first appearance
        censor_label: Name of the extra column counting censored intervals

    Returns:
        DataFrame with one row per state, one column per state and a final
        ``censor_label`` column
    """
    source = pd.Series(list(from_state), dtype=object)
    target = pd.Series(list(to_state), dtype=object)
    if len(source) != len(target):
        raise ValidationError(
            f"from_state and to_state differ in length: {len(source)} vs {len(target)}",
            suggestions=["Pass one (from, to) record per interval"],
        )
    if source.isna().any():
        raise ValidationError(
            "from_state contains missing values",
            suggestions=["Every interval must start in a known state"],
        )

    source = source.astype(str)
    censored = target.isna() | (target.astype(str) == censor_label)
    target = target.where(~censored, censor_label).astype(str)

    if states is None:
        observed = list(source) + [t for t in target if t != censor_label]
        names = list(dict.fromkeys(observed))
    else:
        names = [str(s) for s in states]

    known = set(names)
    unknown = [s for s in dict.fromkeys(list(source) + list(target[~censored])) if s not in known]
    if unknown:
        raise StateNameNotFoundError(unknown, available=names)

    columns = names + [censor_label]
    if len(source) == 0:
        counts = pd.DataFrame(0, index=names, columns=columns)
    else:
        counts = pd.crosstab(source, target).reindex(index=names, columns=columns, fill_value=0)
    counts = counts.astype(int)
    counts.index.name = "from"
    counts.columns.name = "to"

    logger.debug(
        "Tabulated transitions",
        n_records=len(source),
        n_censored=int(censored.sum()),
    )
    return counts
