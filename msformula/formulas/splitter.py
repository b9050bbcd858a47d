"""
Option clause extraction.

A covariate line may end in ``/ options``, for instance
``age + sex / common + init(0.1, 0.2)``. Because ``/`` binds tighter than
``+`` the slash is usually buried in the tree: the text above parses as
``(age + (sex / common)) + init(...)``. The splitter walks the tree looking
for the slash; everything to its left is the core formula and everything to
its right is the option clause.
"""

from typing import Optional, Tuple

from .nodes import Node, Operator

# Binary operators the splitter descends through. Calls, parentheses and
# unary operators are opaque, which lets users write ``(common)`` for a
# variable that happens to be named like an option.
_TRANSPARENT = frozenset({"+", "-", "*", ":", "%in%"})


def _split(node: Node) -> Optional[Tuple[Node, Node]]:
    if not isinstance(node, Operator) or not node.is_binary:
        return None

    if node.name == "/":
        return node.left, node.right

    if node.name not in _TRANSPARENT:
        return None

    found = _split(node.right)
    if found is not None:
        core, options = found
        return node.replace(1, core), options

    found = _split(node.left)
    if found is not None:
        # slash sits in the left operand: the right operand trails the slash
        core, options = found
        return core, node.replace(0, options)

    return None


def split_options(node: Node) -> Tuple[Node, Optional[Node]]:
    """
    Split a right-hand side into (core formula, option clause).

    The option clause is ``None`` when the line has no top-level slash.

    Examples:
        age + sex / common            -> (age + sex, common)
        age / common + init(0.5)      -> (age, common + init(0.5))
        age + sex / shared + common   -> (age + sex, shared + common)
        log(a / b)                    -> (log(a / b), None)
    """
    found = _split(node)
    if found is None:
        return node, None
    return found
