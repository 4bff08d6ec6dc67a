"""Configuration for tests.

This module provides shared fixtures for the shiftmi test suite: the
reference signals used by the regression and symmetry tests.
"""

import numpy as np
import pytest


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')")
    config.addinivalue_line("markers", "integration: marks tests as integration tests")


@pytest.fixture
def sinusoid():
    """1000-sample sinusoid sin(0.01 * i)."""
    return np.sin(0.01 * np.arange(1000))


@pytest.fixture
def triangle():
    """Triangle wave 0, 1, ..., 10, 9, ..., 0 (21 samples)."""
    return np.concatenate([np.arange(11), np.arange(9, -1, -1)]).astype(np.float64)


@pytest.fixture
def triangle_mi():
    """Mutual information of the triangle wave with itself, 5x5 bins on [0, 10], shifts -5..5."""
    return np.array([
        0.954434, 1.309858, 0.684977, 1.381380, 1.085475, 2.315668,
        1.085475, 1.381380, 0.684977, 1.309858, 0.954434,
    ])


@pytest.fixture
def noisy_pair():
    """Two coupled noisy series where y lags x by 7 samples."""
    rng = np.random.default_rng(42)
    x = rng.normal(size=2000)
    y = np.roll(x, 7) + 0.3 * rng.normal(size=2000)
    return x, y
