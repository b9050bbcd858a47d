"""
Tests for design matrix layout construction.
"""

import numpy as np
import pandas as pd
import pytest

from msformula.design.layout import DesignLayout, DesignLayoutBuilder, build_design_layout
from msformula.formulas.parser import parse_expression
from msformula.formulas.terms import TermCatalog
from msformula.core.exceptions import DesignLayoutError, ValidationError


def catalog_for(*formulas):
    return TermCatalog.from_formulas([parse_expression(f) for f in formulas])


class TestDesignLayout:
    """Test the column/term assignment container."""

    def test_from_columns(self):
        layout = DesignLayout.from_columns(["(Intercept)", "a", "b_1", "b_2", "a:c"], [0, 1, 2, 2, 3])
        assert layout.has_intercept
        assert layout.terms == [1, 2, 3]
        assert layout.columns_for(2) == [2, 3]
        assert layout.column_count(2) == 2
        assert layout.column_count(7) == 0

    def test_without_intercept(self):
        layout = DesignLayout.from_columns(["a"], [1])
        assert not layout.has_intercept

    def test_length_mismatch(self):
        with pytest.raises(ValidationError):
            DesignLayout.from_columns(["a", "b"], [1])

    def test_negative_assignment(self):
        with pytest.raises(ValidationError):
            DesignLayout.from_columns(["a"], [-1])

    def test_matrix_width_checked(self):
        with pytest.raises(ValidationError):
            DesignLayout(column_names=["a"], assign=np.array([1]), matrix=np.ones((3, 2)))

    def test_to_frame_requires_matrix(self):
        with pytest.raises(ValidationError):
            DesignLayout.from_columns(["a"], [1]).to_frame()


class TestDesignLayoutBuilder:
    """Test building columns from data."""

    def setup_method(self):
        self.data = pd.DataFrame({
            "age": [30.0, 40.0, 50.0],
            "sex": ["F", "M", "F"],
            "grp": pd.Categorical(["x", "y", "z"], categories=["x", "y", "z"]),
            "flag": [True, False, True],
            "one": ["a", "a", "a"],
        })
        self.builder = DesignLayoutBuilder()

    def test_numeric_and_treatment_coded(self):
        layout = self.builder.build(catalog_for("age + sex"), self.data)
        assert layout.column_names == ["(Intercept)", "age", "sex_M"]
        assert layout.assign.tolist() == [0, 1, 2]
        assert layout.matrix[:, 2].tolist() == [0.0, 1.0, 0.0]
        assert layout.matrix[:, 0].tolist() == [1.0, 1.0, 1.0]

    def test_interaction_columns(self):
        layout = self.builder.build(catalog_for("age * sex"), self.data)
        assert layout.column_names == ["(Intercept)", "age", "sex_M", "age:sex_M"]
        assert layout.assign.tolist() == [0, 1, 2, 3]
        assert layout.matrix[:, 3].tolist() == [0.0, 40.0, 0.0]

    def test_categorical_levels(self):
        layout = self.builder.build(catalog_for("grp"), self.data, intercept=False)
        assert layout.column_names == ["grp_y", "grp_z"]
        assert layout.assign.tolist() == [1, 1]
        assert not layout.has_intercept

    def test_bool_is_categorical(self):
        layout = self.builder.build(catalog_for("flag"), self.data, intercept=False)
        assert layout.column_names == ["flag_True"]
        assert layout.matrix[:, 0].tolist() == [1.0, 0.0, 1.0]

    def test_function_calls(self):
        layout = self.builder.build(catalog_for("log(age) + I(age^2)"), self.data, intercept=False)
        assert layout.column_names == ["log(age)", "I(age^2)"]
        np.testing.assert_allclose(layout.matrix[:, 0], np.log([30.0, 40.0, 50.0]))
        np.testing.assert_allclose(layout.matrix[:, 1], [900.0, 1600.0, 2500.0])

    def test_arithmetic_inside_call(self):
        layout = self.builder.build(catalog_for("I(age / 10 - 1)"), self.data, intercept=False)
        np.testing.assert_allclose(layout.matrix[:, 0], [2.0, 3.0, 4.0])

    def test_missing_variable(self):
        with pytest.raises(DesignLayoutError) as exc_info:
            self.builder.build(catalog_for("weight"), self.data)
        assert exc_info.value.term == "weight"

    def test_single_level_factor(self):
        with pytest.raises(DesignLayoutError):
            self.builder.build(catalog_for("one"), self.data)

    def test_unsupported_function(self):
        with pytest.raises(DesignLayoutError):
            self.builder.build(catalog_for("poly(age, 2)"), self.data)

    def test_convenience_wrapper(self):
        layout = build_design_layout(catalog_for("age"), self.data)
        assert layout.column_names == ["(Intercept)", "age"]
        assert layout.to_frame().shape == (3, 2)
