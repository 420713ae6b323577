# gppredictive_jax/gp/__init__.py
"""
Gaussian Process regression components.

This package provides:
  - predict: exact posterior-predictive mean / covariance / Cholesky factor
  - sample: draws from the predictive and from the prior
  - marginal: log marginal likelihood of the observations
  - utils: symmetrisation and checked Cholesky factorisation
"""
from .marginal import log_marginal_likelihood
from .predict import PredictCFG, Predictive, predict
from .sample import sample, sample_n, sample_prior
from .utils import checked_cholesky, symmetrise

__all__ = [
    "log_marginal_likelihood",
    "PredictCFG",
    "Predictive",
    "predict",
    "sample",
    "sample_n",
    "sample_prior",
    "checked_cholesky",
    "symmetrise",
]
