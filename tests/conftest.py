"""
Shared pytest configuration and fixtures for msformula tests.

This module provides common state tables, count matrices and design data
used across the test suite.
"""

import pytest
import numpy as np
import pandas as pd

from msformula.config.settings import reset_default_config


ENV_VARS = [
    "MSFORMULA_LOG_LEVEL",
    "MSFORMULA_LOG_FILE",
    "MSFORMULA_CENSOR_LABEL",
    "MSFORMULA_STATE_COLUMN",
    "MSFORMULA_TERM_ORDER",
]


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Start every test from the default configuration."""
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    reset_default_config()
    yield
    reset_default_config()


@pytest.fixture
def three_states():
    """Illness-death style model: A, B and an absorbing death state."""
    return ["A", "B", "death"]


@pytest.fixture
def three_state_counts():
    """
    Observed counts for ``three_states`` with a trailing censored column.

    Realized transitions: A->B, A->death, B->death.
    """
    return np.array([
        [0, 5, 3, 7],
        [0, 0, 2, 4],
        [0, 0, 0, 0],
    ])


@pytest.fixture
def severity_statedata():
    """State table with a numeric and a text attribute."""
    return pd.DataFrame({
        "state": ["healthy", "mild", "severe", "dead"],
        "severity": [0, 1, 2, 3],
        "group": ["alive", "alive", "alive", "dead"],
    })


@pytest.fixture
def severity_states(severity_statedata):
    return list(severity_statedata["state"])


@pytest.fixture
def subject_data():
    """Covariates for a handful of subjects."""
    return pd.DataFrame({
        "age": [30.0, 40.0, 50.0, 60.0],
        "sex": ["F", "M", "F", "M"],
    })


# Markers for different test types
def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test (fast)"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
