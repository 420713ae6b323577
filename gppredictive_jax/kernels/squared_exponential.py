# gppredictive_jax/kernels/squared_exponential.py
"""
Squared-exponential covariance builders.

The public builders validate their inputs and are meant to be called
eagerly. The underscored variants are pure and safe under jit/vmap/grad;
they are what the marginal likelihood and the HMC adapter trace through.
"""
from __future__ import annotations

import jax.numpy as jnp
from loguru import logger

from ..core.data import as_points
from .params import SEParams, check_jitter
from .utils import sqdist, mirror_upper

# Sized for float64; below machine epsilon on a unit diagonal under float32
DEFAULT_JITTER = 1e-8


def se_kernel(a, b, params: SEParams):
    """k(a, b) = eta_sq * exp(-rho_sq * (a - b)^2) over all pairs."""
    return params.eta_sq * jnp.exp(-params.rho_sq * sqdist(a, b))


def _covariance(points, params: SEParams, jitter):
    n = points.shape[0]
    K = mirror_upper(se_kernel(points, points, params))
    diag = params.eta_sq + params.sigma_sq + jitter
    return K.at[jnp.arange(n), jnp.arange(n)].set(diag)


def _cross_covariance(train_points, test_points, params: SEParams):
    return se_kernel(train_points, test_points, params)


def build_covariance(points, params: SEParams, jitter: float = DEFAULT_JITTER) -> jnp.ndarray:
    """
    Noisy covariance over one point set.

    Off-diagonal entries are the squared-exponential kernel, computed on the
    upper triangle and mirrored so the matrix equals its transpose exactly.
    The diagonal is eta_sq + sigma_sq + jitter.

    Args:
        points: (N,) inputs; an empty set gives a 0 x 0 matrix
        params: kernel hyperparameters, all > 0
        jitter: non-negative diagonal constant for numerical definiteness

    Returns:
        (N, N) symmetric matrix
    """
    points = as_points(points)
    params.validate()
    check_jitter(jitter)
    logger.debug(f"Building {points.shape[0]}x{points.shape[0]} covariance")
    return _covariance(points, params, jitter)


def build_cross_covariance(train_points, test_points, params: SEParams) -> jnp.ndarray:
    """
    Latent cross-covariance between training and test inputs, shape (N, M).

    Observation noise is excluded: the test points are not observed.
    """
    train_points = as_points(train_points, "train_points")
    test_points = as_points(test_points, "test_points")
    params.validate()
    return _cross_covariance(train_points, test_points, params)
