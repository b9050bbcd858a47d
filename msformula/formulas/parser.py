"""
Formula parser for msformula.

Turns R-style covariate formula text into an expression tree made of
:mod:`msformula.formulas.nodes`. Precedence, lowest first:

    ~          formula
    + -        binary
    * /
    unary - +  (covers %in% and :, so ``-a:b`` removes ``a:b``)
    %in%       and other %op% operators
    :
    ^          right associative
"""

import re
from typing import List, Optional, Tuple, Union
from dataclasses import dataclass

from .nodes import Node, Operator, Symbol, Call, Literal, is_operator
from ..core.exceptions import ExpressionSyntaxError, FormulaShapeError
from ..utils.logging import get_logger


logger = get_logger(__name__)


_TOKEN_PATTERN = re.compile(
    r"""
    (?P<ws>\s+)
  | (?P<number>(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)
  | (?P<string>"(?:[^"\\]|\\.)*"|'(?:[^'\\]|\\.)*')
  | (?P<backtick>`[^`]+`)
  | (?P<name>[A-Za-z_.][A-Za-z0-9_.]*)
  | (?P<special>%[^%]*%)
  | (?P<op>[~+\-*/:^(),])
    """,
    re.VERBOSE,
)

# binary operator -> (precedence, right associative)
_BINARY = {
    "~": (1, False),
    "+": (2, False),
    "-": (2, False),
    "*": (4, False),
    "/": (4, False),
    "%": (5, False),   # any %op%
    ":": (6, False),
    "^": (8, True),
}
_UNARY_OPERAND_PREC = 5


@dataclass
class Token:
    kind: str
    text: str
    position: int


def tokenize(text: str) -> List[Token]:
    """Split formula text into tokens, dropping whitespace."""
    tokens = []
    position = 0
    while position < len(text):
        match = _TOKEN_PATTERN.match(text, position)
        if match is None:
            raise ExpressionSyntaxError(text, position, f"unexpected character {text[position]!r}")
        kind = match.lastgroup
        if kind != "ws":
            tokens.append(Token(kind, match.group(), position))
        position = match.end()
    return tokens


class ExpressionParser:
    """
    Recursive-descent parser for covariate formulas.

    Examples:
        "1:2 ~ age"             -> Operator("~", (1:2, age))
        "0:death ~ sex / common" -> slash kept as an operator for the splitter
        "~ age * sex"           -> one-sided formula
    """

    def __init__(self):
        self.logger = get_logger(self.__class__.__name__)
        self._text = ""
        self._tokens: List[Token] = []
        self._index = 0

    def parse(self, text: str) -> Node:
        """
        Parse formula text into an expression tree.

        Raises:
            ExpressionSyntaxError: on malformed input
        """
        if not text or not text.strip():
            raise ExpressionSyntaxError(text or "", 0, "empty formula")

        self._text = text
        self._tokens = tokenize(text)
        self._index = 0

        node = self._expression(0)
        if self._peek() is not None:
            token = self._peek()
            raise ExpressionSyntaxError(text, token.position, f"unexpected {token.text!r}")

        self.logger.debug(f"Parsed formula: {text.strip()}", tree=node)
        return node

    # token helpers

    def _peek(self) -> Optional[Token]:
        if self._index < len(self._tokens):
            return self._tokens[self._index]
        return None

    def _next(self) -> Token:
        token = self._peek()
        if token is None:
            raise ExpressionSyntaxError(self._text, len(self._text), "unexpected end of formula")
        self._index += 1
        return token

    def _expect(self, text: str) -> Token:
        token = self._next()
        if token.text != text:
            raise ExpressionSyntaxError(self._text, token.position, f"expected {text!r}, found {token.text!r}")
        return token

    def _binary_info(self, token: Optional[Token]) -> Optional[Tuple[int, bool]]:
        if token is None:
            return None
        if token.kind == "special":
            return _BINARY["%"]
        if token.kind == "op":
            return _BINARY.get(token.text)
        return None

    # grammar

    def _expression(self, min_prec: int) -> Node:
        left = self._prefix()
        while True:
            token = self._peek()
            info = self._binary_info(token)
            if info is None or info[0] < min_prec:
                return left
            prec, right_assoc = info
            self._next()
            right = self._expression(prec if right_assoc else prec + 1)
            left = Operator(token.text, (left, right))

    def _prefix(self) -> Node:
        token = self._next()

        if token.kind == "op" and token.text == "~":
            return Operator("~", (self._expression(_BINARY["~"][0] + 1),))
        if token.kind == "op" and token.text in ("-", "+"):
            return Operator(token.text, (self._expression(_UNARY_OPERAND_PREC),))
        if token.kind == "op" and token.text == "(":
            inner = self._expression(0)
            self._expect(")")
            return Operator("(", (inner,))
        if token.kind == "number":
            text = token.text
            if re.fullmatch(r"\d+", text):
                return Literal(int(text))
            return Literal(float(text))
        if token.kind == "string":
            body = token.text[1:-1]
            return Literal(re.sub(r"\\(.)", r"\1", body))
        if token.kind == "backtick":
            return Symbol(token.text[1:-1])
        if token.kind == "name":
            following = self._peek()
            if following is not None and following.text == "(":
                self._next()
                return Call(token.text, tuple(self._arguments()))
            return Symbol(token.text)

        raise ExpressionSyntaxError(self._text, token.position, f"unexpected {token.text!r}")

    def _arguments(self) -> List[Node]:
        args: List[Node] = []
        token = self._peek()
        if token is not None and token.text == ")":
            self._next()
            return args
        while True:
            args.append(self._expression(0))
            token = self._next()
            if token.text == ")":
                return args
            if token.text != ",":
                raise ExpressionSyntaxError(self._text, token.position, f"expected ',' or ')', found {token.text!r}")


def parse_expression(text: str) -> Node:
    """Parse a single formula string."""
    return ExpressionParser().parse(text)


def as_expression(formula: Union[str, Node]) -> Node:
    """Accept either formula text or an already parsed tree."""
    if isinstance(formula, str):
        return parse_expression(formula)
    return formula


def split_sides(formula: Union[str, Node]) -> Tuple[Optional[Node], Node]:
    """
    Split a formula into (left side, right side).

    A one-sided formula returns ``None`` as its left side.

    Raises:
        FormulaShapeError: if the top-level node is not ``~``
    """
    node = as_expression(formula)
    if is_operator(node, "~", binary=True):
        return node.left, node.right
    if is_operator(node, "~", binary=False):
        return None, node.children[0]
    raise FormulaShapeError(formula=str(node), issue="a formula with '~' is required")
