"""Tests for the conditional JIT switch."""

import importlib

import numpy as np
import pytest

import shiftmi.utils.jit as jit_module
from shiftmi.utils.jit import conditional_njit, jit_info


@pytest.fixture
def reload_jit(monkeypatch):
    """Reload the jit module after the test to restore the environment setting."""
    yield monkeypatch
    monkeypatch.undo()
    importlib.reload(jit_module)


class TestConditionalNjit:

    def test_decorator_with_arguments(self):
        @conditional_njit(nogil=True)
        def add(a, b):
            return a + b

        assert add(2, 3) == 5

    def test_bare_decorator(self):
        @conditional_njit
        def total(x):
            s = 0.0
            for v in x:
                s += v
            return s

        assert total(np.arange(4.0)) == 6.0

    @pytest.mark.parametrize("value", ["1", "true", "YES"])
    def test_disabled_by_environment(self, reload_jit, value):
        reload_jit.setenv("SHIFTMI_DISABLE_NUMBA", value)
        module = importlib.reload(jit_module)
        assert not module.is_jit_enabled()

        def plain(x):
            return x + 1

        assert module.conditional_njit(nogil=True)(plain) is plain
        assert module.conditional_njit(plain) is plain

    def test_enabled_by_default(self, reload_jit):
        reload_jit.delenv("SHIFTMI_DISABLE_NUMBA", raising=False)
        module = importlib.reload(jit_module)
        assert module.is_jit_enabled()


def test_jit_info(capsys):
    jit_info()
    out = capsys.readouterr().out
    assert "JIT enabled" in out
    assert "Numba version" in out


def test_kernels_agree_with_numpy():
    from shiftmi.information.hist_jit import fill_histogram_2d, mutual_information_kernel

    rng = np.random.default_rng(0)
    ix = rng.integers(-1, 5, 500)
    iy = rng.integers(0, 4, 500)
    counts = np.zeros((4, 4), dtype=np.int64)
    added = fill_histogram_2d(ix, iy, counts)

    valid = (ix >= 0) & (ix < 4)
    expected, _, _ = np.histogram2d(ix[valid], iy[valid], bins=[np.arange(5), np.arange(5)])
    np.testing.assert_array_equal(counts, expected.astype(np.int64))
    assert added == valid.sum()

    p = counts / counts.sum()
    px = p.sum(axis=1, keepdims=True)
    py = p.sum(axis=0, keepdims=True)
    nz = p > 0
    expected_mi = np.sum(p[nz] * np.log2(p[nz] / (px @ py)[nz]))
    mi = mutual_information_kernel(counts, counts.sum(axis=1), counts.sum(axis=0), counts.sum())
    assert mi == pytest.approx(expected_mi)
