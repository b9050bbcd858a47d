"""
Design matrix layout for the pooled formula.

Converts catalog terms into design matrix columns and records which term
each column belongs to (the ``assign`` vector). The coefficient map only
needs the names and the assignment; the numeric matrix is built alongside
for callers that want it.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from ..formulas.nodes import Node, Call, Literal, Operator, Symbol
from ..formulas.terms import FormulaTerm, TermCatalog
from ..core.exceptions import DesignLayoutError, ValidationError
from ..utils.logging import get_logger


logger = get_logger(__name__)

INTERCEPT_NAME = "(Intercept)"

_MATH_FUNCTIONS: Dict[str, Callable[[np.ndarray], np.ndarray]] = {
    "log": np.log,
    "exp": np.exp,
    "sqrt": np.sqrt,
    "abs": np.abs,
}

_ARITHMETIC: Dict[str, Callable[[np.ndarray, np.ndarray], np.ndarray]] = {
    "+": np.add,
    "-": np.subtract,
    "*": np.multiply,
    "/": np.divide,
    "^": np.power,
}


@dataclass
class DesignLayout:
    """
    Design matrix columns and their term assignment.

    Attributes:
        column_names: Column names in design order
        assign: Term index of each column; 0 is the intercept column
        matrix: Optional numeric design matrix (rows x columns)
    """

    column_names: List[str]
    assign: np.ndarray
    matrix: Optional[np.ndarray] = None

    def __post_init__(self):
        self.assign = np.asarray(self.assign, dtype=np.int64)
        if len(self.column_names) != self.assign.size:
            raise ValidationError(
                f"{len(self.column_names)} column names but {self.assign.size} assignments",
                suggestions=["Give one term index per design column"],
            )
        if np.any(self.assign < 0):
            raise ValidationError("Term assignments must be >= 0")
        if self.matrix is not None and self.matrix.shape[1] != len(self.column_names):
            raise ValidationError(
                f"Design matrix has {self.matrix.shape[1]} columns, expected {len(self.column_names)}"
            )

    @classmethod
    def from_columns(cls, column_names: Sequence[str], assign: Sequence[int]) -> "DesignLayout":
        """Layout supplied directly by an external design-matrix builder."""
        return cls(column_names=list(column_names), assign=np.asarray(assign))

    @property
    def has_intercept(self) -> bool:
        return self.assign.size > 0 and self.assign[0] == 0

    def columns_for(self, term: int) -> List[int]:
        """Positions of the columns assigned to catalog term ``term``."""
        return [int(i) for i in np.flatnonzero(self.assign == term)]

    def column_count(self, term: int) -> int:
        return int(np.count_nonzero(self.assign == term))

    @property
    def terms(self) -> List[int]:
        """Terms that own at least one column, in design order."""
        return [int(t) for t in dict.fromkeys(self.assign.tolist()) if t != 0]

    def to_frame(self) -> pd.DataFrame:
        if self.matrix is None:
            raise ValidationError("This layout carries no numeric design matrix")
        return pd.DataFrame(self.matrix, columns=self.column_names)


class DesignLayoutBuilder:
    """
    Builds design matrix columns from catalog terms and a data frame.

    Numeric variables give one column; categorical variables (object,
    category or bool dtype) use treatment contrasts with the first level
    dropped; interactions take every product of their members' columns.
    """

    def __init__(self):
        self.logger = get_logger(self.__class__.__name__)

    def build(
        self,
        catalog: TermCatalog,
        data: pd.DataFrame,
        intercept: bool = True,
    ) -> DesignLayout:
        """
        Build the layout for every catalog term.

        Args:
            catalog: Pooled terms
            data: One row per observation
            intercept: Prepend an intercept column assigned to term 0
        """
        n_rows = len(data)
        columns: List[np.ndarray] = []
        names: List[str] = []
        assign: List[int] = []

        if intercept:
            columns.append(np.ones(n_rows))
            names.append(INTERCEPT_NAME)
            assign.append(0)

        for index, term in enumerate(catalog, 1):
            term_columns, term_names = self._build_term_columns(term, data)
            columns.extend(term_columns)
            names.extend(term_names)
            assign.extend([index] * len(term_names))

        matrix = np.column_stack(columns) if columns else np.empty((n_rows, 0))

        self.logger.debug(
            f"Built design layout: {matrix.shape}",
            columns=names,
        )
        return DesignLayout(column_names=names, assign=np.asarray(assign), matrix=matrix)

    def _build_term_columns(
        self, term: FormulaTerm, data: pd.DataFrame
    ) -> Tuple[List[np.ndarray], List[str]]:
        columns: List[np.ndarray] = [np.ones(len(data))]
        names: List[str] = [""]
        for factor in term.factors:
            factor_columns, factor_names = self._build_factor_columns(factor, data)
            columns = [a * b for a in columns for b in factor_columns]
            names = [f"{a}:{b}" if a else b for a in names for b in factor_names]
        return columns, names

    def _build_factor_columns(
        self, factor: Node, data: pd.DataFrame
    ) -> Tuple[List[np.ndarray], List[str]]:
        label = str(factor)

        if isinstance(factor, Symbol):
            return self._build_variable_columns(factor.name, data)

        if label in data.columns:
            return self._build_variable_columns(label, data)

        if isinstance(factor, Call):
            return [self._evaluate(factor, data, label)], [label]

        raise DesignLayoutError(label, "not a variable or a supported function call")

    def _build_variable_columns(
        self, name: str, data: pd.DataFrame
    ) -> Tuple[List[np.ndarray], List[str]]:
        if name not in data.columns:
            raise DesignLayoutError(
                name,
                "variable not found in data",
                suggestions=[f"Available columns: {', '.join(map(str, data.columns))}"],
            )

        series = data[name]
        categorical = (
            isinstance(series.dtype, pd.CategoricalDtype)
            or pd.api.types.is_bool_dtype(series)
            or not pd.api.types.is_numeric_dtype(series)
        )
        if categorical:
            if isinstance(series.dtype, pd.CategoricalDtype):
                levels = list(series.cat.categories)
            else:
                levels = sorted(series.dropna().unique(), key=str)
            if len(levels) <= 1:
                raise DesignLayoutError(name, "categorical variable has fewer than two levels")
            columns = [(series == level).to_numpy(dtype=float) for level in levels[1:]]
            return columns, [f"{name}_{level}" for level in levels[1:]]

        return [series.to_numpy(dtype=float)], [name]

    def _evaluate(self, node: Node, data: pd.DataFrame, label: str) -> np.ndarray:
        """Numerically evaluate function calls and arithmetic inside them."""
        if isinstance(node, Literal) and node.is_number:
            return np.full(len(data), float(node.value))
        if isinstance(node, Symbol):
            columns, _ = self._build_variable_columns(node.name, data)
            if len(columns) != 1:
                raise DesignLayoutError(label, f"'{node.name}' is categorical")
            return columns[0]
        if isinstance(node, Operator):
            if node.name == "(":
                return self._evaluate(node.children[0], data, label)
            if not node.is_binary and node.name in ("-", "+"):
                value = self._evaluate(node.children[0], data, label)
                return -value if node.name == "-" else value
            if node.is_binary and node.name in _ARITHMETIC:
                return _ARITHMETIC[node.name](
                    self._evaluate(node.left, data, label),
                    self._evaluate(node.right, data, label),
                )
        if isinstance(node, Call) and len(node.args) == 1:
            value = self._evaluate(node.args[0], data, label)
            if node.name == "I":
                return value
            if node.name in _MATH_FUNCTIONS:
                with np.errstate(all="ignore"):
                    result = _MATH_FUNCTIONS[node.name](value)
                if not np.all(np.isfinite(result)):
                    self.logger.warning(f"{label} produced non-finite values")
                return result
        raise DesignLayoutError(label, f"cannot evaluate '{node}'")


def build_design_layout(
    catalog: TermCatalog,
    data: pd.DataFrame,
    intercept: bool = True,
) -> DesignLayout:
    """Convenience wrapper around :class:`DesignLayoutBuilder`."""
    return DesignLayoutBuilder().build(catalog, data, intercept=intercept)
