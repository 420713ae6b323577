# gppredictive_jax/gp/utils.py
"""
Numerical helpers for GP computations.
"""
from __future__ import annotations

import jax.numpy as jnp

from ..core.errors import DimensionMismatch, NonPositiveDefiniteMatrix
from ..kernels.utils import mirror_upper


def symmetrise(A: jnp.ndarray) -> jnp.ndarray:
    """Force exact symmetry by mirroring the upper triangle onto the lower one."""
    if A.ndim != 2 or A.shape[0] != A.shape[1]:
        raise DimensionMismatch(f"Expected a square matrix, got shape {A.shape}")
    return mirror_upper(A)


def checked_cholesky(A: jnp.ndarray, what: str = "matrix") -> jnp.ndarray:
    """
    Lower Cholesky factor of A, raising if the factorisation breaks down.

    jnp.linalg.cholesky signals failure with NaNs rather than an exception,
    so the factor is checked for finiteness here. No jitter is added: the
    caller decides whether and how to retry.
    """
    if A.ndim != 2 or A.shape[0] != A.shape[1]:
        raise DimensionMismatch(f"Expected a square {what}, got shape {A.shape}")
    if A.shape[0] == 0:
        return A
    L = jnp.linalg.cholesky(A)
    if not bool(jnp.all(jnp.isfinite(L))):
        raise NonPositiveDefiniteMatrix(
            f"Cholesky factorisation of the {what} ({A.shape[0]}x{A.shape[0]}) failed; "
            "it is not numerically positive-definite"
        )
    return L
