# gppredictive_jax/core/errors.py
"""
Error kinds raised by the predictive core.

All of them are detected eagerly, on concrete values, before any O(N^3)
work starts. Nothing in the core recovers from them; retry policies (e.g.
increasing the diagonal jitter) live with the caller.
"""
from __future__ import annotations


class GPError(ValueError):
    """Base class for all errors raised by gppredictive_jax."""


class InvalidParameter(GPError):
    """A kernel hyperparameter or the jitter is outside its support."""


class DimensionMismatch(GPError):
    """Array lengths or ranks do not line up."""


class NonPositiveDefiniteMatrix(GPError):
    """Cholesky factorisation produced a non-finite factor."""


__all__ = [
    "GPError",
    "InvalidParameter",
    "DimensionMismatch",
    "NonPositiveDefiniteMatrix",
]
