"""
Tests for state tables and transition selector resolution.
"""

import pytest
import pandas as pd

from msformula.formulas.parser import parse_expression
from msformula.states.table import StateTable, values_match
from msformula.states.selector import LeftSideResolver, StatePairSet
from msformula.core.exceptions import (
    AttributeNotFoundError,
    AttributeValueNotFoundError,
    IncompleteStateTableError,
    MissingStateColumnError,
    NonIntegerStateError,
    StateIndexOutOfRangeError,
    StateNameNotFoundError,
    TermMissingColonError,
    ValidationError,
)


class TestStateTable:
    """Test state table construction."""

    def test_names_only(self, three_states):
        table = StateTable(three_states)
        assert table.names == ["A", "B", "death"]
        assert table.n_states == 3
        assert len(table) == 3
        assert table.attributes == ["state"]

    def test_names_are_strings(self):
        table = StateTable([1, 2, 3])
        assert table.names == ["1", "2", "3"]

    def test_statedata_reordered_to_model_order(self):
        statedata = pd.DataFrame({
            "state": ["dead", "healthy", "ill"],
            "severity": [2, 0, 1],
        })
        table = StateTable(["healthy", "ill", "dead"], statedata)
        assert table.names == ["healthy", "ill", "dead"]
        assert table.column("severity") == [0, 1, 2]
        assert table.attributes == ["state", "severity"]

    def test_extra_statedata_rows_ignored(self, severity_statedata):
        table = StateTable(["healthy", "dead"], severity_statedata)
        assert table.names == ["healthy", "dead"]
        assert table.column("group") == ["alive", "dead"]

    def test_state_lookup(self, severity_statedata, severity_states):
        table = StateTable(severity_states, severity_statedata)
        state = table.state(2)
        assert state.name == "mild"
        assert state.attributes["severity"] == 1
        assert state.attributes["group"] == "alive"
        assert table.index_of("severe") == 3
        assert table.index_of("zombie") is None

    def test_custom_state_column(self):
        statedata = pd.DataFrame({"name": ["a", "b"], "kind": ["x", "y"]})
        table = StateTable(["a", "b"], statedata, state_column="name")
        assert table.attributes == ["name", "kind"]

    def test_missing_state_column(self):
        with pytest.raises(MissingStateColumnError) as exc_info:
            StateTable(["a"], pd.DataFrame({"name": ["a"]}))
        assert exc_info.value.column == "state"

    def test_incomplete_state_table(self, severity_statedata):
        with pytest.raises(IncompleteStateTableError) as exc_info:
            StateTable(["healthy", "zombie", "ghost"], severity_statedata)
        assert exc_info.value.missing == ["zombie", "ghost"]

    def test_duplicate_names(self):
        with pytest.raises(ValidationError):
            StateTable(["a", "b", "a"])

    def test_empty(self):
        with pytest.raises(ValidationError):
            StateTable([])

    def test_values_match(self):
        assert values_match(1, 1.0)
        assert values_match("3", 3)
        assert not values_match(float("nan"), "nan")
        assert not values_match("a", "b")


class TestLeftSideResolver:
    """Test resolution of transition selectors."""

    def setup_method(self):
        statedata = pd.DataFrame({
            "state": ["healthy", "mild", "severe", "dead"],
            "severity": [0, 1, 2, 3],
            "group": ["alive", "alive", "alive", "dead"],
        })
        self.resolver = LeftSideResolver(StateTable(list(statedata["state"]), statedata))

    def resolve(self, text):
        return self.resolver.resolve(parse_expression(text)).pairs

    @pytest.mark.parametrize("text,pairs", [
        ("1:2", [(1, 2)]),
        ("1:2 + 1:3", [(1, 2), (1, 3)]),
        ("1:c(2, 3)", [(1, 2), (1, 3)]),
        ("c(1, 2):4", [(1, 4), (2, 4)]),
        ("c(1, 2):c(3, 4)", [(1, 3), (2, 3), (1, 4), (2, 4)]),
        ("0:dead", [(1, 4), (2, 4), (3, 4), (4, 4)]),
        ("healthy:dead", [(1, 4)]),
        ('"mild":"dead"', [(2, 4)]),
        ("c(healthy, mild):dead", [(1, 4), (2, 4)]),
        ("severity(1, 2):dead", [(2, 4), (3, 4)]),
        ("group(alive):group(dead)", [(1, 4), (2, 4), (3, 4)]),
        ("severity():4", [(1, 4), (2, 4), (3, 4), (4, 4)]),
        ("state(healthy):dead", [(1, 4)]),
        ("(1):2", [(1, 2)]),
    ])
    def test_selectors(self, text, pairs):
        assert self.resolve(text) == pairs

    def test_duplicates_kept(self):
        pairs = self.resolver.resolve(parse_expression("1:2 + 1:2"))
        assert len(pairs) == 2
        assert pairs.state1 == [1, 1]
        assert pairs.state2 == [2, 2]

    def test_missing_colon(self):
        with pytest.raises(TermMissingColonError) as exc_info:
            self.resolve("1:2 + 3")
        assert exc_info.value.term == "3"

    def test_non_integer_state(self):
        with pytest.raises(NonIntegerStateError) as exc_info:
            self.resolve("1.5:2")
        assert exc_info.value.values == [1.5]

    def test_state_out_of_range(self):
        with pytest.raises(StateIndexOutOfRangeError) as exc_info:
            self.resolve("1:c(2, 7)")
        assert exc_info.value.values == [7]
        assert exc_info.value.n_states == 4

    def test_infinite_state_number(self):
        with pytest.raises(StateIndexOutOfRangeError) as exc_info:
            self.resolve("1e999:3")
        assert exc_info.value.values == [float("inf")]
        assert "inf" in str(exc_info.value)

    def test_unknown_attribute(self):
        with pytest.raises(AttributeNotFoundError) as exc_info:
            self.resolve("colour(red):1")
        assert exc_info.value.attribute == "colour"
        assert "colour" in str(exc_info.value)

    def test_unknown_attribute_value(self):
        with pytest.raises(AttributeValueNotFoundError) as exc_info:
            self.resolve("severity(1, 9):dead")
        assert exc_info.value.attribute == "severity"
        assert exc_info.value.values == [9]

    def test_unknown_state_name(self):
        with pytest.raises(StateNameNotFoundError) as exc_info:
            self.resolve("healthy:zombie")
        assert exc_info.value.names == ["zombie"]
        assert "zombie" in str(exc_info.value)


class TestStatePairSet:
    """Test the pair container."""

    def test_extend_and_iterate(self):
        pairs = StatePairSet([(1, 2)])
        pairs.extend(StatePairSet([(2, 3)]))
        assert list(pairs) == [(1, 2), (2, 3)]
        assert pairs[1] == (2, 3)
