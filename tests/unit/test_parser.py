"""
Tests for the formula expression parser.
"""

import pytest

from msformula.formulas.nodes import Call, Literal, Operator, Symbol
from msformula.formulas.parser import parse_expression, split_sides, tokenize
from msformula.core.exceptions import ExpressionSyntaxError, FormulaShapeError


def op(name, *children):
    return Operator(name, children)


a, b, c = Symbol("a"), Symbol("b"), Symbol("c")


class TestExpressionParser:
    """Test parsing of covariate formula text."""

    def test_two_sided_formula(self):
        node = parse_expression("1:2 ~ age")
        assert node == op("~", op(":", Literal(1), Literal(2)), Symbol("age"))

    def test_one_sided_formula(self):
        assert parse_expression("~ a + b") == op("~", op("+", a, b))

    def test_tilde_binds_loosest(self):
        node = parse_expression("1:2 + 1:3 ~ a + b")
        lhs, rhs = node.children
        assert lhs == op("+", op(":", Literal(1), Literal(2)), op(":", Literal(1), Literal(3)))
        assert rhs == op("+", a, b)

    def test_slash_binds_tighter_than_plus(self):
        assert parse_expression("a + b / common") == op("+", a, op("/", b, Symbol("common")))

    def test_unary_minus_covers_interaction(self):
        assert parse_expression("-a:b") == op("-", op(":", a, b))

    def test_unary_minus_stops_at_plus(self):
        assert parse_expression("-1 + a") == op("+", op("-", Literal(1)), a)

    def test_unary_minus_binds_tighter_than_slash(self):
        assert parse_expression("-1 / shared") == op("/", op("-", Literal(1)), Symbol("shared"))
        assert parse_expression("-a * b") == op("*", op("-", a), b)

    def test_power_is_right_associative(self):
        assert parse_expression("a^2^3") == op("^", a, op("^", Literal(2), Literal(3)))

    def test_special_operator(self):
        assert parse_expression("a %in% b") == op("%in%", a, b)

    def test_parentheses_are_kept(self):
        assert parse_expression("(a + b)") == op("(", op("+", a, b))

    def test_calls(self):
        assert parse_expression("log(a)") == Call("log", (a,))
        assert parse_expression("severity()") == Call("severity", ())
        assert parse_expression("c(1, 2)") == Call("c", (Literal(1), Literal(2)))

    def test_literals(self):
        assert parse_expression("2") == Literal(2)
        assert isinstance(parse_expression("2").value, int)
        assert parse_expression("1.5") == Literal(1.5)
        assert parse_expression('"ill"') == Literal("ill")
        assert parse_expression("'ill'") == Literal("ill")

    def test_backquoted_name(self):
        node = parse_expression("`my var`")
        assert node == Symbol("my var")
        assert str(node) == "`my var`"

    def test_deparse(self):
        assert str(parse_expression("a + b:c")) == "a + b:c"
        assert str(parse_expression("I(age^2)")) == "I(age^2)"
        assert str(parse_expression("1:2 ~ x / shared")) == "1:2 ~ x / shared"

    @pytest.mark.parametrize("text", ["a +", "(a + b", "a b", "", "   ", "f(a b)"])
    def test_malformed_text(self, text):
        with pytest.raises(ExpressionSyntaxError):
            parse_expression(text)

    def test_bad_character_position(self):
        with pytest.raises(ExpressionSyntaxError) as exc_info:
            parse_expression("a $ b")
        assert exc_info.value.position == 2

    def test_syntax_error_is_shape_error(self):
        with pytest.raises(FormulaShapeError):
            parse_expression("a +")

    def test_tokenize_drops_whitespace(self):
        tokens = tokenize("a + b")
        assert [t.text for t in tokens] == ["a", "+", "b"]
        assert [t.kind for t in tokens] == ["name", "op", "name"]


class TestSplitSides:
    """Test splitting formulas at the tilde."""

    def test_two_sided(self):
        lhs, rhs = split_sides("1:2 ~ age")
        assert lhs == op(":", Literal(1), Literal(2))
        assert rhs == Symbol("age")

    def test_one_sided(self):
        lhs, rhs = split_sides("~ age")
        assert lhs is None
        assert rhs == Symbol("age")

    def test_accepts_parsed_node(self):
        node = parse_expression("a:b ~ c")
        assert split_sides(node) == (op(":", a, b), c)

    def test_missing_tilde(self):
        with pytest.raises(FormulaShapeError):
            split_sides("age + sex")
