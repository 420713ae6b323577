# gppredictive_jax/inference/sampling/__init__.py
"""
Hyperparameter samplers.

Transition kernels come from blackjax; this package only wires the GP
log-density into them and returns draws as SEParams stacks.
"""
from .hmc import HMCCFG, HMCRun, run_chains

__all__ = [
    "HMCCFG", "HMCRun", "run_chains",
]
