# gppredictive_jax/__init__.py
"""
Exact Gaussian Process regression with the squared-exponential kernel.

Covariance construction, posterior-predictive conditioning, Gaussian
sampling, and the glue to evaluate them over hyperparameter samples drawn by
an external HMC sampler.
"""
from .core import (
    ObservationSet,
    make_synthetic,
    GPError,
    InvalidParameter,
    DimensionMismatch,
    NonPositiveDefiniteMatrix,
)
from .kernels import SEParams, build_covariance, build_cross_covariance
from .gp import PredictCFG, Predictive, predict, sample, sample_n, sample_prior
from .gp import log_marginal_likelihood
from .inference import SampleSet, as_sample_set, HMCCFG, HMCRun, run_chains
from .runner import RunCFG, PredictiveRun, predict_samples, predict_with_retry

__version__ = "0.1.0"

__all__ = [
    "ObservationSet",
    "make_synthetic",
    "GPError",
    "InvalidParameter",
    "DimensionMismatch",
    "NonPositiveDefiniteMatrix",
    "SEParams",
    "build_covariance",
    "build_cross_covariance",
    "PredictCFG",
    "Predictive",
    "predict",
    "sample",
    "sample_n",
    "sample_prior",
    "log_marginal_likelihood",
    "SampleSet",
    "as_sample_set",
    "HMCCFG",
    "HMCRun",
    "run_chains",
    "RunCFG",
    "PredictiveRun",
    "predict_samples",
    "predict_with_retry",
]
