from __future__ import annotations

"""
Hyperparameter inference layer.

The predictive core only needs an iterable of positive (eta_sq, rho_sq,
sigma_sq) triples. This package defines that boundary (HyperparameterSource,
SampleSet) and an adapter onto an external HMC sampler.
"""

from .base import HyperparameterSource, SampleSet, as_sample_set
from .sampling import HMCCFG, HMCRun, run_chains

__all__ = [
    "HyperparameterSource", "SampleSet", "as_sample_set",
    "HMCCFG", "HMCRun", "run_chains",
]
