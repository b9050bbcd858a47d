"""
Tests for the exception hierarchy.
"""

import pytest

from msformula.core.exceptions import (
    MsFormulaError,
    FormulaShapeError,
    ExpressionSyntaxError,
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
    DesignLayoutError,
    InitValueError,
    ConfigurationError,
    ValidationError,
)


class TestMsFormulaError:
    """Test message formatting."""

    def test_plain_message(self):
        error = MsFormulaError("something broke")
        assert str(error) == "something broke"
        assert error.suggestions == []
        assert error.context == {}

    def test_code_and_suggestions(self):
        error = MsFormulaError("bad", suggestions=["first", "second"], error_code="X")
        text = str(error)
        assert text.startswith("[X] bad")
        assert "Suggestions:" in text
        assert "1. first" in text
        assert "2. second" in text


@pytest.mark.parametrize("error,expected", [
    (UnknownOptionError(["foo"]), "foo"),
    (TermMissingColonError("3"), "3"),
    (NonIntegerStateError([1.5]), "1.5"),
    (StateIndexOutOfRangeError([7], 4), "7"),
    (AttributeNotFoundError("colour", available=["state"]), "colour"),
    (AttributeValueNotFoundError("severity", [9]), "9"),
    (StateNameNotFoundError(["zombie"], available=["A"]), "zombie"),
    (MissingStateColumnError("state"), "state"),
    (IncompleteStateTableError(["ghost"]), "ghost"),
    (TermMatchFailureError(["z"]), "z"),
    (DesignLayoutError("weight", "variable not found in data"), "weight"),
    (InitValueError(["sex"], expected=2, received=3), "sex"),
    (ConfigurationError("compiler.colour"), "compiler.colour"),
    (FormulaShapeError(formula="1:2", issue="needs covariates"), "1:2"),
])
def test_errors_name_the_offender(error, expected):
    assert isinstance(error, MsFormulaError)
    assert expected in str(error)
    assert error.error_code
    assert error.suggestions


def test_syntax_error_hierarchy():
    error = ExpressionSyntaxError("a $ b", 2, "unexpected character '$'")
    assert isinstance(error, FormulaShapeError)
    assert error.position == 2
    assert error.error_code == "SYNTAX"
    assert "position 2" in str(error)


def test_shape_error_custom_suggestions():
    error = FormulaShapeError(formula="x", issue="bad", suggestions=["do this"])
    assert error.suggestions == ["do this"]
    assert error.context == {"formula": "x", "issue": "bad"}


def test_validation_error():
    error = ValidationError("counts must be 2-D", suggestions=["reshape"])
    assert error.error_code == "VALIDATION"
    assert "counts must be 2-D" in str(error)
