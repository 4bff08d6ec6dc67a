"""
Utility functions for shiftmi.

This module provides JIT compilation switches and parallel execution helpers
shared by the histogram kernels and the shift-scan drivers.
"""

# JIT compilation
from .jit import (
    conditional_njit,
    is_jit_enabled,
    jit_info,
)

# Parallel execution
from .parallel import (
    parallel_executor,
    get_parallel_backend,
    resolve_n_jobs,
)

__all__ = [
    # JIT
    "conditional_njit",
    "is_jit_enabled",
    "jit_info",
    # Parallel
    "parallel_executor",
    "get_parallel_backend",
    "resolve_n_jobs",
]
