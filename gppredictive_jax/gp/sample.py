# gppredictive_jax/gp/sample.py
"""
Sampling from Gaussians given a Cholesky factor.

All draws use the reparameterisation x = mean + L z with z ~ N(0, I), so
x ~ N(mean, L L^T). Independent draws use independent PRNG subkeys.
"""
from __future__ import annotations

import jax
import jax.numpy as jnp

from ..core.data import as_points
from ..core.errors import DimensionMismatch
from ..kernels.params import SEParams
from ..kernels.squared_exponential import DEFAULT_JITTER, build_covariance
from .utils import checked_cholesky


def _check_factor(mean, chol):
    M = mean.shape[0]
    if chol.shape != (M, M):
        raise DimensionMismatch(f"Cholesky factor must have shape {(M, M)}, got {chol.shape}")


def sample(key: jax.Array, mean: jnp.ndarray, chol: jnp.ndarray) -> jnp.ndarray:
    """One draw from N(mean, chol @ chol.T), shape (M,)."""
    mean = as_points(mean, "mean")
    chol = jnp.asarray(chol)
    _check_factor(mean, chol)
    z = jax.random.normal(key, mean.shape, dtype=mean.dtype)
    return mean + chol @ z


def sample_n(key: jax.Array, mean: jnp.ndarray, chol: jnp.ndarray, n: int) -> jnp.ndarray:
    """n independent draws from N(mean, chol @ chol.T), shape (n, M)."""
    if n < 0:
        raise ValueError(f"n must be non-negative, got {n}")
    mean = as_points(mean, "mean")
    chol = jnp.asarray(chol)
    _check_factor(mean, chol)
    if n == 0:
        return jnp.zeros((0, mean.shape[0]), dtype=mean.dtype)
    z = jax.vmap(lambda k: jax.random.normal(k, mean.shape, dtype=mean.dtype))(
        jax.random.split(key, n)
    )  # (n, M)
    return mean[None, :] + z @ chol.T


def sample_prior(
    key: jax.Array,
    x,
    params: SEParams,
    n: int = 1,
    jitter: float = DEFAULT_JITTER,
) -> jnp.ndarray:
    """
    Draws from the zero-mean GP prior at inputs x, shape (n, len(x)).

    The covariance is the noisy one from `build_covariance`, so the draws are
    prior-predictive responses rather than noise-free latent functions.
    """
    x = as_points(x, "x")
    cov = build_covariance(x, params, jitter)
    chol = checked_cholesky(cov, "prior covariance")
    return sample_n(key, jnp.zeros_like(x), chol, n)
