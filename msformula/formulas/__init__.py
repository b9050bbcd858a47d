"""
Formula system for msformula.

Parses covariate lines, splits off their options and expands their
right-hand sides into canonical terms.
"""

from .nodes import Node, Operator, Symbol, Call, Literal
from .parser import ExpressionParser, parse_expression, split_sides
from .splitter import split_options
from .options import OptionSpec, parse_options, parse_line_options, OPTION_KEYWORDS
from .terms import FormulaTerm, ExpandedFormula, TermCatalog, expand_terms

__all__ = [
    # Expression tree
    "Node",
    "Operator",
    "Symbol",
    "Call",
    "Literal",
    # Parsing
    "ExpressionParser",
    "parse_expression",
    "split_sides",
    # Options
    "split_options",
    "OptionSpec",
    "parse_options",
    "parse_line_options",
    "OPTION_KEYWORDS",
    # Terms
    "FormulaTerm",
    "ExpandedFormula",
    "TermCatalog",
    "expand_terms",
]
