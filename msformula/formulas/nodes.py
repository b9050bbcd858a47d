"""
Expression tree for covariate formulas.

A parsed formula is a tree of four node kinds: operators (with one or two
children), symbols, function calls and literals. Parentheses are kept as a
one-child ``"("`` operator so that later passes can tell ``(a / b)`` from
``a / b``.
"""

from dataclasses import dataclass
from typing import Tuple, Union


@dataclass(frozen=True)
class Operator:
    """An operator applied to one (unary) or two (binary) operands."""

    name: str
    children: Tuple["Node", ...]

    def __post_init__(self):
        object.__setattr__(self, "children", tuple(self.children))

    @property
    def is_binary(self) -> bool:
        return len(self.children) == 2

    @property
    def left(self) -> "Node":
        return self.children[0]

    @property
    def right(self) -> "Node":
        return self.children[-1]

    def replace(self, index: int, child: "Node") -> "Operator":
        """Return a copy with child ``index`` swapped for ``child``."""
        children = list(self.children)
        children[index] = child
        return Operator(self.name, tuple(children))

    def __str__(self) -> str:
        if self.name == "(":
            return f"({self.children[0]})"
        if not self.is_binary:
            return f"{self.name}{self.children[0]}"
        if self.name in (":", "^"):
            return f"{self.left}{self.name}{self.right}"
        return f"{self.left} {self.name} {self.right}"


@dataclass(frozen=True)
class Symbol:
    """A bare identifier such as ``age`` or a backquoted name."""

    name: str

    def __str__(self) -> str:
        if self.name.isidentifier():
            return self.name
        return f"`{self.name}`"


@dataclass(frozen=True)
class Call:
    """A function call such as ``log(age)`` or ``init(0.1, 0.2)``."""

    name: str
    args: Tuple["Node", ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "args", tuple(self.args))

    def __str__(self) -> str:
        return f"{self.name}({', '.join(str(a) for a in self.args)})"


@dataclass(frozen=True)
class Literal:
    """A number or a quoted string."""

    value: Union[int, float, str]

    @property
    def is_number(self) -> bool:
        return isinstance(self.value, (int, float)) and not isinstance(self.value, bool)

    def __str__(self) -> str:
        if isinstance(self.value, str):
            return f'"{self.value}"'
        if isinstance(self.value, float) and self.value.is_integer():
            return str(int(self.value))
        return str(self.value)


Node = Union[Operator, Symbol, Call, Literal]


def is_operator(node: Node, name: str, binary: bool = True) -> bool:
    """True when ``node`` is operator ``name`` with the requested arity."""
    return (
        isinstance(node, Operator)
        and node.name == name
        and node.is_binary == binary
    )


def is_number(node: Node, value=None) -> bool:
    """True for a numeric literal, optionally equal to ``value``."""
    if not (isinstance(node, Literal) and node.is_number):
        return False
    return value is None or node.value == value


def split_plus(node: Node):
    """Flatten a left-nested chain of binary ``+`` into its operands."""
    if is_operator(node, "+"):
        return split_plus(node.left) + split_plus(node.right)
    return [node]
