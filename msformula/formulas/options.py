"""
Option clause interpretation for covariate lines.

Options follow the slash of a covariate line and are joined with ``+``:

    common      one coefficient per term shared by every transition of the line
    shared      one baseline hazard shared by the transitions of the line
    init(...)   initial coefficient values for the line's terms
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .nodes import Node, Call, Literal, Operator, Symbol, split_plus
from .splitter import split_options
from ..core.exceptions import FormulaShapeError, UnknownOptionError

OPTION_KEYWORDS = ("common", "shared", "init")


@dataclass(frozen=True)
class OptionSpec:
    """Core formula of a covariate line together with its parsed options."""

    formula: Node
    common: bool = False
    shared: bool = False
    init: Optional[Tuple[float, ...]] = None


def _option_name(term: Node) -> Optional[str]:
    if isinstance(term, Symbol):
        return term.name
    if isinstance(term, Call):
        return term.name
    return None


def _numbers(node: Node, clause: Node) -> List[float]:
    """Flatten an init() argument into numbers."""
    if isinstance(node, Literal) and node.is_number:
        return [float(node.value)]
    if isinstance(node, Operator) and not node.is_binary and node.name in ("-", "+"):
        values = _numbers(node.children[0], clause)
        return [-v for v in values] if node.name == "-" else values
    if isinstance(node, Operator) and node.name == "(":
        return _numbers(node.children[0], clause)
    if isinstance(node, Call) and node.name in ("c", "list"):
        values: List[float] = []
        for arg in node.args:
            values.extend(_numbers(arg, clause))
        return values
    raise FormulaShapeError(
        formula=str(clause),
        issue=f"init() values must be numeric, found '{node}'",
    )


def parse_options(options: Optional[Node], formula: Node) -> OptionSpec:
    """
    Interpret an option clause.

    Args:
        options: The clause to the right of the slash, or None
        formula: The core formula the options belong to

    Raises:
        UnknownOptionError: naming every term that is not an option keyword
        FormulaShapeError: for ``init`` without a numeric argument list
    """
    if options is None:
        return OptionSpec(formula=formula)

    terms = split_plus(options)
    unknown = [str(t) for t in terms if _option_name(t) not in OPTION_KEYWORDS]
    if unknown:
        raise UnknownOptionError(unknown)

    common = any(_option_name(t) == "common" for t in terms)
    shared = any(_option_name(t) == "shared" for t in terms)

    init: Optional[List[float]] = None
    for term in terms:
        if _option_name(term) != "init":
            continue
        if not isinstance(term, Call) or not term.args:
            raise FormulaShapeError(
                formula=str(options),
                issue="init must be given a list of values, e.g. init(0.1, 0.2)",
            )
        if init is None:
            init = []
        for arg in term.args:
            init.extend(_numbers(arg, options))

    return OptionSpec(
        formula=formula,
        common=common,
        shared=shared,
        init=tuple(init) if init is not None else None,
    )


def parse_line_options(rhs: Node) -> OptionSpec:
    """Split the right-hand side of a covariate line and parse its options."""
    core, options = split_options(rhs)
    return parse_options(options, core)
