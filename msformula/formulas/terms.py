"""
Formula term algebra and the pooled term catalog.

A formula's right-hand side expands into a set of terms following the usual
model-formula rules:

    a + b        both terms
    a - b        a, with b explicitly removed
    a * b        a + b + a:b
    a : b        the interaction of every term of a with every term of b
    a %in% b     same as a:b
    a / b        a + b %in% a
    (a + b)^2    all interactions up to second order
    0, -1        intercept removed;  1 intercept requested

A term is identified by its *signature*, the set of variables that take
part in it. ``a:b`` and ``b:a`` are one term even though they print
differently, which is why terms are never matched by label.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Sequence, Tuple

from .nodes import Node, Operator, Symbol, Call, Literal, is_number
from ..core.exceptions import FormulaShapeError, TermMatchFailureError
from ..utils.logging import get_logger


logger = get_logger(__name__)


@dataclass(frozen=True)
class FormulaTerm:
    """One model term: a main effect or an interaction of several variables."""

    signature: FrozenSet[str]
    factors: Tuple[Node, ...] = field(compare=False, default=())

    @classmethod
    def single(cls, node: Node) -> "FormulaTerm":
        return cls(frozenset({str(node)}), (node,))

    @property
    def variables(self) -> Tuple[str, ...]:
        return tuple(str(f) for f in self.factors)

    @property
    def label(self) -> str:
        return ":".join(self.variables)

    @property
    def order(self) -> int:
        return len(self.signature)

    def interact(self, other: "FormulaTerm") -> "FormulaTerm":
        factors = list(self.factors)
        for factor in other.factors:
            if str(factor) not in self.signature:
                factors.append(factor)
        return FormulaTerm(self.signature | other.signature, tuple(factors))

    def __str__(self) -> str:
        return self.label


def _unique(terms: Iterable[FormulaTerm]) -> List[FormulaTerm]:
    seen = set()
    result = []
    for term in terms:
        if term.signature not in seen:
            seen.add(term.signature)
            result.append(term)
    return result


@dataclass
class ExpandedFormula:
    """
    Result of expanding one right-hand side.

    ``intercept`` is True or False when the formula says so explicitly
    (``+1``, ``-1``, ``0``) and None when it is silent.
    """

    terms: List[FormulaTerm] = field(default_factory=list)
    removed: List[FormulaTerm] = field(default_factory=list)
    intercept: Optional[bool] = None

    @property
    def has_intercept(self) -> bool:
        return self.intercept is not False

    @property
    def labels(self) -> List[str]:
        return [t.label for t in self.terms]

    def combine(self, other: "ExpandedFormula") -> "ExpandedFormula":
        """``self + other`` with removals in ``other`` applied to ``self``."""
        dropped = {t.signature for t in other.removed}
        kept = {t.signature for t in other.terms}
        return ExpandedFormula(
            terms=_unique([t for t in self.terms if t.signature not in dropped] + other.terms),
            removed=_unique([t for t in self.removed if t.signature not in kept] + other.removed),
            intercept=other.intercept if other.intercept is not None else self.intercept,
        )

    def negate(self) -> "ExpandedFormula":
        return ExpandedFormula(
            terms=[],
            removed=list(self.terms),
            intercept=None if self.intercept is None else not self.intercept,
        )


def _interaction(left: ExpandedFormula, right: ExpandedFormula) -> ExpandedFormula:
    return ExpandedFormula(
        terms=_unique(a.interact(b) for a in left.terms for b in right.terms)
    )


def expand_terms(node: Node) -> ExpandedFormula:
    """
    Expand a right-hand side expression into its terms.

    Raises:
        FormulaShapeError: for constructs that are not valid model terms
    """
    if isinstance(node, Symbol) or isinstance(node, Call):
        return ExpandedFormula(terms=[FormulaTerm.single(node)])

    if isinstance(node, Literal):
        if is_number(node, 1):
            return ExpandedFormula(intercept=True)
        if is_number(node, 0):
            return ExpandedFormula(intercept=False)
        raise FormulaShapeError(formula=str(node), issue="invalid model term")

    if not isinstance(node, Operator):
        raise FormulaShapeError(formula=str(node), issue="unrecognized expression")

    if not node.is_binary:
        inner = expand_terms(node.children[0])
        if node.name in ("(", "+"):
            return inner
        if node.name == "-":
            return inner.negate()
        raise FormulaShapeError(formula=str(node), issue=f"unexpected operator '{node.name}'")

    name = node.name
    if name == "~":
        raise FormulaShapeError(formula=str(node), issue="nested '~' in a covariate formula")

    left = expand_terms(node.left)

    if name == "^":
        if not (is_number(node.right) and float(node.right.value).is_integer() and node.right.value >= 1):
            raise FormulaShapeError(formula=str(node), issue="power must be a positive integer")
        result = ExpandedFormula(terms=list(left.terms))
        for _ in range(int(node.right.value) - 1):
            result = result.combine(_interaction(result, left))
        return result

    right = expand_terms(node.right)

    if name == "+":
        return left.combine(right)
    if name == "-":
        return left.combine(right.negate())
    if name in (":", "%in%"):
        return _interaction(left, right)
    if name == "*":
        return left.combine(right).combine(_interaction(left, right))
    if name == "/":
        if not left.terms:
            return left.combine(right)
        nest = left.terms[0]
        for term in left.terms[1:]:
            nest = nest.interact(term)
        return left.combine(_interaction(ExpandedFormula(terms=[nest]), right))

    raise FormulaShapeError(formula=str(node), issue=f"operator '{name}' is not allowed in a covariate formula")


class TermCatalog:
    """
    Ordered, de-duplicated terms pooled over the default formula and every
    covariate line. Catalog indices run 1..nterm; index 0 is the baseline.
    """

    def __init__(self, terms: Sequence[FormulaTerm]):
        self._terms = _unique(terms)
        self._index: Dict[FrozenSet[str], int] = {
            t.signature: i for i, t in enumerate(self._terms, 1)
        }

    @classmethod
    def from_formulas(
        cls,
        formulas: Iterable[Node],
        order: str = "degree",
    ) -> "TermCatalog":
        """
        Pool the terms of several right-hand sides.

        Args:
            formulas: Core formulas (options already removed)
            order: "degree" sorts main effects before interactions, keeping
                first-appearance order within a degree; "appearance" keeps
                first-appearance order throughout
        """
        pooled: List[FormulaTerm] = []
        for formula in formulas:
            pooled.extend(expand_terms(formula).terms)
        pooled = _unique(pooled)
        if order == "degree":
            pooled = sorted(pooled, key=lambda t: t.order)
        elif order != "appearance":
            raise ValueError(f"unknown term order: {order}")
        logger.debug("Built term catalog", n_terms=len(pooled), terms=[t.label for t in pooled])
        return cls(pooled)

    def __len__(self) -> int:
        return len(self._terms)

    def __iter__(self) -> Iterator[FormulaTerm]:
        return iter(self._terms)

    def __getitem__(self, index: int) -> FormulaTerm:
        """Term at catalog index ``index`` (1-based)."""
        if index < 1 or index > len(self._terms):
            raise IndexError(f"term index {index} out of range 1..{len(self._terms)}")
        return self._terms[index - 1]

    @property
    def labels(self) -> List[str]:
        return [t.label for t in self._terms]

    def index_of(self, term: FormulaTerm) -> Optional[int]:
        return self._index.get(term.signature)

    def match(self, terms: Iterable[FormulaTerm]) -> List[int]:
        """
        Catalog indices of ``terms``.

        Raises:
            TermMatchFailureError: naming every term the catalog lacks
        """
        terms = list(terms)
        indices = [self.index_of(t) for t in terms]
        missing = [t.label for t, i in zip(terms, indices) if i is None]
        if missing:
            raise TermMatchFailureError(missing)
        return indices

    def __repr__(self) -> str:
        return f"TermCatalog({self.labels})"
