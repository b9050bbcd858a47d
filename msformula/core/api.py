"""
Main API functions for msformula.

High-level entry point running the whole covariate compilation pipeline.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

import numpy as np
import pandas as pd

from ..config.settings import MsFormulaConfig, get_default_config
from ..design.layout import DesignLayout, build_design_layout
from ..formulas.nodes import Node, is_operator
from ..formulas.options import parse_line_options
from ..formulas.parser import as_expression, split_sides
from ..formulas.terms import TermCatalog, expand_terms
from ..states.selector import LeftSideResolver
from ..states.table import StateTable
from ..transitions.cmap import CoefficientMap, CoefficientMapBuilder, resolve_initial_values
from ..transitions.compact import CompactMap, TransitionCompactor
from ..transitions.tmap import CovariateLine, InitSpec, TransitionMapBuilder
from ..utils.logging import get_logger, log_performance
from .exceptions import FormulaShapeError

logger = get_logger(__name__)

Formula = Union[str, Node]


@dataclass
class CompiledCovariates:
    """
    Result of compiling a set of covariate lines.

    Attributes:
        compact: Term x realized-transition map with phbaseline and mapid
        catalog: Pooled terms; catalog index k is row k of ``compact.tmap``
        inits: Pending initial values as written in the lines
        coefficients: Coefficient map, present when a design layout was given
        initial_values: Initial coefficient vector, present with ``coefficients``
    """

    compact: CompactMap
    catalog: TermCatalog
    inits: List[InitSpec] = field(default_factory=list)
    coefficients: Optional[CoefficientMap] = None
    initial_values: Optional[np.ndarray] = None

    @property
    def n_coefficients(self) -> Optional[int]:
        return self.coefficients.n_coefficients if self.coefficients is not None else None

    def to_frames(self) -> Dict[str, pd.DataFrame]:
        """Labelled DataFrames for ``tmap`` and, when available, ``cmap``."""
        frames = {"tmap": self.compact.to_frame()}
        if self.coefficients is not None:
            frames["cmap"] = self.coefficients.to_frame()
        return frames


class CovariateCompiler:
    """
    Compile covariate lines into transition and coefficient maps.

    Args:
        config: Configuration; defaults to the global configuration

    Examples:
        >>> compiler = CovariateCompiler()
        >>> result = compiler.compile(
        ...     ["1:3 + 2:3 ~ age / shared"],
        ...     default_formula="~ age",
        ...     states=["a", "b", "c"],
        ...     transitions=counts,
        ... )
        >>> result.compact.phbaseline
    """

    def __init__(self, config: Optional[MsFormulaConfig] = None):
        self.config = config or get_default_config()
        self.logger = get_logger(self.__class__.__name__)

    @log_performance
    def compile(
        self,
        covariates: Sequence[Formula],
        default_formula: Formula,
        states: Sequence[Any],
        transitions: Union[pd.DataFrame, np.ndarray],
        statedata: Optional[pd.DataFrame] = None,
        layout: Optional[Union[DesignLayout, pd.DataFrame]] = None,
    ) -> CompiledCovariates:
        """
        Run the pipeline.

        Args:
            covariates: Covariate lines such as ``"1:2 ~ age / common"``
            default_formula: Formula applied to every transition; a left side,
                if present, is ignored
            states: State names in model order
            transitions: Observed from x to counts, see
                :meth:`TransitionCompactor.observed_counts`
            statedata: Optional state attributes, one row per state
            layout: Design layout, or a data frame to build one from; when
                omitted no coefficient map is produced

        Returns:
            CompiledCovariates

        Raises:
            FormulaShapeError: for a covariate line without transitions on
                the left of ``~``
            MsFormulaError: any error raised by a pipeline stage
        """
        settings = self.config.compiler

        table = StateTable(states, statedata, state_column=settings.state_column)
        resolver = LeftSideResolver(table)

        default_rhs = self._right_side(default_formula)
        lines = [self._parse_line(line, resolver) for line in covariates]

        catalog = TermCatalog.from_formulas(
            [default_rhs] + [line.options.formula for line in lines],
            order=settings.term_order,
        )

        builder = TransitionMapBuilder(catalog, table.n_states)
        tmap, inits = builder.build(expand_terms(default_rhs), lines)

        compactor = TransitionCompactor(
            table,
            censor_label=settings.censor_label,
            baseline_label=settings.baseline_label,
        )
        compact = compactor.compact(tmap, transitions, catalog.labels, inits)

        result = CompiledCovariates(compact=compact, catalog=catalog, inits=inits)

        if layout is not None:
            if isinstance(layout, pd.DataFrame):
                layout = build_design_layout(catalog, layout)
            result.coefficients = CoefficientMapBuilder().build(compact, layout)
            result.initial_values = resolve_initial_values(
                inits, result.coefficients, compact, catalog.labels
            )

        self.logger.info(
            "Compiled covariates",
            n_lines=len(lines),
            n_terms=len(catalog),
            n_transitions=compact.n_transitions,
            n_coefficients=result.n_coefficients,
        )
        return result

    @staticmethod
    def _right_side(formula: Formula) -> Node:
        node = as_expression(formula)
        if is_operator(node, "~", binary=True):
            return node.right
        if is_operator(node, "~", binary=False):
            return node.children[0]
        return node

    def _parse_line(self, line: Formula, resolver: LeftSideResolver) -> CovariateLine:
        source = line if isinstance(line, str) else str(line)
        lhs, rhs = split_sides(line)
        if lhs is None:
            raise FormulaShapeError(
                formula=source,
                issue="a covariate line needs transitions on the left of '~'",
                suggestions=["Write the line as 'from:to ~ terms', e.g. '1:2 ~ age'"],
            )
        options = parse_line_options(rhs)
        pairs = resolver.resolve(lhs)
        return CovariateLine(pairs=pairs, options=options, source=source)


def compile_covariates(
    covariates: Sequence[Formula],
    default_formula: Formula,
    states: Sequence[Any],
    transitions: Union[pd.DataFrame, np.ndarray],
    statedata: Optional[pd.DataFrame] = None,
    layout: Optional[Union[DesignLayout, pd.DataFrame]] = None,
    config: Optional[MsFormulaConfig] = None,
) -> CompiledCovariates:
    """Convenience wrapper around :meth:`CovariateCompiler.compile`."""
    return CovariateCompiler(config).compile(
        covariates,
        default_formula,
        states,
        transitions,
        statedata=statedata,
        layout=layout,
    )
