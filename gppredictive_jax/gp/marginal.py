# gppredictive_jax/gp/marginal.py
from __future__ import annotations

import jax.numpy as jnp
from jax.scipy.linalg import cho_solve

from ..kernels.params import SEParams
from ..kernels.squared_exponential import DEFAULT_JITTER, _covariance


def log_marginal_likelihood(
    train_x: jnp.ndarray,
    train_y: jnp.ndarray,
    params: SEParams,
    jitter: float = DEFAULT_JITTER,
) -> jnp.ndarray:
    """
    log N(y | 0, Sigma) with Sigma the noisy squared-exponential covariance.

        log p(y) = -0.5 y^T Sigma^{-1} y - sum(log diag L) - 0.5 N log(2 pi)

    Pure and traceable (no validation), so it can sit inside a log-density
    handed to a sampler. A failed factorisation shows up as NaN.

    Args:
        train_x: (N,) covariates
        train_y: (N,) responses
        params: kernel hyperparameters
        jitter: diagonal jitter

    Returns:
        Scalar log marginal likelihood
    """
    N = train_x.shape[0]
    Sigma = _covariance(train_x, params, jitter)
    L = jnp.linalg.cholesky(Sigma)
    alpha = cho_solve((L, True), train_y)
    return (
        -0.5 * jnp.dot(train_y, alpha)
        - jnp.sum(jnp.log(jnp.diagonal(L)))
        - 0.5 * N * jnp.log(2.0 * jnp.pi)
    )
