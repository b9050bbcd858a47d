"""
msformula: covariate formulas for multi-state hazard models

Compiles per-transition covariate lines such as ``"1:2 + 1:3 ~ age / common"``
into the term x transition and coefficient x transition maps used to fit a
multi-state proportional hazards model.
"""

__version__ = "0.3.0"

# Formula system
from .formulas import (
    ExpressionParser,
    parse_expression,
    split_sides,
    split_options,
    parse_options,
    OptionSpec,
    TermCatalog,
    expand_terms,
)

# States and transitions
from .states import StateTable, LeftSideResolver, StatePairSet
from .transitions import (
    TransitionMapBuilder,
    TransitionCompactor,
    CompactMap,
    CoefficientMapBuilder,
    CoefficientMap,
    tabulate_transitions,
    resolve_initial_values,
)
from .design import DesignLayout, build_design_layout

# High-level API
from .core.api import CovariateCompiler, CompiledCovariates, compile_covariates

# Configuration
from .config.settings import MsFormulaConfig, get_default_config

# Import key exception classes
from .core.exceptions import (
    MsFormulaError,
    FormulaShapeError,
    UnknownOptionError,
    TermMissingColonError,
    NonIntegerStateError,
    StateIndexOutOfRangeError,
    AttributeNotFoundError,
    AttributeValueNotFoundError,
    StateNameNotFoundError,
    MissingStateColumnError,
    IncompleteStateTableError,
    TermMatchFailureError,
    InitValueError,
)

__all__ = [
    # Version info
    "__version__",

    # Formula system
    "ExpressionParser",
    "parse_expression",
    "split_sides",
    "split_options",
    "parse_options",
    "OptionSpec",
    "TermCatalog",
    "expand_terms",

    # States and transitions
    "StateTable",
    "LeftSideResolver",
    "StatePairSet",
    "TransitionMapBuilder",
    "TransitionCompactor",
    "CompactMap",
    "CoefficientMapBuilder",
    "CoefficientMap",
    "tabulate_transitions",
    "resolve_initial_values",
    "DesignLayout",
    "build_design_layout",

    # High-level API
    "CovariateCompiler",
    "CompiledCovariates",
    "compile_covariates",

    # Configuration
    "MsFormulaConfig",
    "get_config",
    "configure",

    # Exceptions
    "MsFormulaError",
    "FormulaShapeError",
    "UnknownOptionError",
    "TermMissingColonError",
    "NonIntegerStateError",
    "StateIndexOutOfRangeError",
    "AttributeNotFoundError",
    "AttributeValueNotFoundError",
    "StateNameNotFoundError",
    "MissingStateColumnError",
    "IncompleteStateTableError",
    "TermMatchFailureError",
    "InitValueError",
]


def get_config() -> MsFormulaConfig:
    """Get the global configuration instance."""
    return get_default_config()


def configure(**kwargs) -> None:
    """
    Update global configuration.

    Examples:
        >>> configure(**{"compiler.censor_label": "cens", "logging.level": "DEBUG"})
    """
    get_config().update(**kwargs)
