# gppredictive_jax/gp/predict.py
"""
Exact posterior-predictive distribution for scalar GP regression.

Given observations (x, y), test inputs x* and one hyperparameter triple,
the predictive over the (noisy) responses at x* is Gaussian with

    mean = K^T Sigma^{-1} y
    cov  = Omega - K^T Sigma^{-1} K

where Sigma is the noisy training covariance, K the latent cross-covariance
and Omega the noisy test covariance. Sigma^{-1} is never formed; the
projection W = K^T Sigma^{-1} comes from a Cholesky solve.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

import jax
import jax.numpy as jnp
from jax.scipy.linalg import cho_solve
from loguru import logger

from ..core.data import as_points
from ..core.errors import DimensionMismatch
from ..kernels.params import SEParams, check_jitter
from ..kernels.squared_exponential import DEFAULT_JITTER, _covariance, _cross_covariance
from .sample import sample, sample_n
from .utils import checked_cholesky, symmetrise


@dataclass(frozen=True)
class PredictCFG:
    """
    Configuration for the predictive step.

    train_cov_params / test_cov_params override the hyperparameters used for
    the training covariance Sigma and the test covariance Omega. Left as None
    they follow the hyperparameters passed to `predict`. Setting them to
    SEParams(1.0, 1.0, sigma_sq) mimics workflows that hardcode unit kernel
    constants in the predictive step. With keep_sampled_noise=True the
    overrides only fix eta_sq and rho_sq; sigma_sq is taken from the
    hyperparameters passed to `predict`, so one config serves every draw of
    a sampler run.

    An override of Sigma alone (or of Omega alone) can make
    Omega - K^T Sigma^{-1} K indefinite; `predict` then raises
    NonPositiveDefiniteMatrix.
    """
    jitter: float = DEFAULT_JITTER
    train_cov_params: Optional[SEParams] = None
    test_cov_params: Optional[SEParams] = None
    keep_sampled_noise: bool = False

    def with_jitter(self, jitter: float) -> PredictCFG:
        return replace(self, jitter=jitter)


@dataclass(frozen=True)
class Predictive:
    """Posterior-predictive N(mean, cov) over the test inputs, with cov = chol @ chol.T."""
    mean: jnp.ndarray  # (M,)
    cov: jnp.ndarray  # (M, M)
    chol: jnp.ndarray  # (M, M) lower triangular

    @property
    def variance(self) -> jnp.ndarray:
        return jnp.diagonal(self.cov)

    def sample(self, key: jax.Array, n: Optional[int] = None) -> jnp.ndarray:
        """One draw of shape (M,), or n draws of shape (n, M)."""
        if n is None:
            return sample(key, self.mean, self.chol)
        return sample_n(key, self.mean, self.chol, n)


# Roles already warned about; the override warning is logged once per process
_warned_roles = set()


def _resolve(
    override: Optional[SEParams],
    params: SEParams,
    role: str,
    keep_sampled_noise: bool = False,
) -> SEParams:
    if override is None:
        return params
    if keep_sampled_noise:
        override = replace(override, sigma_sq=params.sigma_sq)
    override.validate()
    if not override.allclose(params) and role not in _warned_roles:
        _warned_roles.add(role)
        logger.warning(
            f"{role} covariance uses {override} instead of the supplied "
            f"hyperparameters {params}; the predictive is then not the "
            "posterior under a single set of hyperparameters. "
            "Further overrides of this covariance are not reported"
        )
    return override


def predict(
    train_x,
    train_y,
    test_x,
    params: SEParams,
    cfg: PredictCFG = PredictCFG(),
) -> Predictive:
    """
    Posterior-predictive mean, covariance and Cholesky factor at `test_x`.

    Args:
        train_x: (N,) observed covariates, N >= 1
        train_y: (N,) observed responses
        test_x: (M,) test covariates, M >= 0
        params: hyperparameters (eta_sq, rho_sq, sigma_sq), all > 0
        cfg: jitter and optional covariance overrides

    Returns:
        Predictive with mean (M,), symmetrised cov (M, M) and its lower
        Cholesky factor (M, M)

    Raises:
        InvalidParameter: non-positive hyperparameter or negative jitter
        DimensionMismatch: len(train_x) != len(train_y), or N == 0
        NonPositiveDefiniteMatrix: Sigma or the predictive covariance could
            not be factorised
    """
    train_x = as_points(train_x, "train_x")
    train_y = as_points(train_y, "train_y")
    test_x = as_points(test_x, "test_x")
    if train_x.shape[0] != train_y.shape[0]:
        raise DimensionMismatch(
            f"train_x and train_y must have the same length, "
            f"got {train_x.shape[0]} and {train_y.shape[0]}"
        )
    if train_x.shape[0] == 0:
        raise DimensionMismatch("predict needs at least one training observation")

    params.validate()
    jitter = check_jitter(cfg.jitter)
    train_params = _resolve(cfg.train_cov_params, params, "Training", cfg.keep_sampled_noise)
    test_params = _resolve(cfg.test_cov_params, params, "Test", cfg.keep_sampled_noise)

    N, M = train_x.shape[0], test_x.shape[0]
    logger.debug(f"Predicting at {M} test inputs from {N} observations")

    Sigma = _covariance(train_x, train_params, jitter)  # (N, N)
    K = _cross_covariance(train_x, test_x, params)  # (N, M)
    Omega = _covariance(test_x, test_params, jitter)  # (M, M)

    L_sigma = checked_cholesky(Sigma, "training covariance")
    # Solve Sigma @ W^T = K, so W = K^T Sigma^{-1}
    W = cho_solve((L_sigma, True), K).T  # (M, N)

    mean = W @ train_y
    cov = symmetrise(Omega - W @ K)
    chol = checked_cholesky(cov, "predictive covariance")
    return Predictive(mean=mean, cov=cov, chol=chol)
