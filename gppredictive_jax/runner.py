# gppredictive_jax/runner.py
"""
Orchestration layer: (observations + hyperparameter samples) -> predictives.

Each hyperparameter sample gives an independent run of the pure pipeline
(covariances -> solve -> Cholesky -> draws). Runs share no mutable state, so
they are fanned out over a fixed-size thread pool and joined before the
results are stacked.

Retrying a failed factorisation with more jitter is a caller policy; it is
offered here as `predict_with_retry` and never happens inside `gp.predict`.
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Literal, Tuple

import jax
import jax.numpy as jnp
from loguru import logger

from .core.data import ObservationSet, as_points
from .core.errors import NonPositiveDefiniteMatrix
from .gp.predict import PredictCFG, Predictive, predict
from .gp.sample import sample_n
from .inference.base import SampleSet, as_sample_set
from .kernels.params import SEParams

_MIN_RETRY_JITTER = 1e-10


@dataclass(frozen=True)
class RunCFG:
    """
    Runner configuration.

    n_draws: predictive draws per hyperparameter sample
    max_workers: size of the thread pool
    on_failure: "raise" propagates NonPositiveDefiniteMatrix, "skip" drops
        the offending sample and records its index
    """
    predict: PredictCFG = field(default_factory=PredictCFG)
    n_draws: int = 1
    max_workers: int = 4
    on_failure: Literal["raise", "skip"] = "raise"


@dataclass
class PredictiveRun:
    """Stacked predictive outputs over the hyperparameter samples that succeeded."""
    samples: SampleSet  # S successful samples
    means: jnp.ndarray  # (S, M)
    variances: jnp.ndarray  # (S, M)
    draws: jnp.ndarray  # (S, n_draws, M)
    failed: Tuple[int, ...] = ()

    def mean(self) -> jnp.ndarray:
        """Predictive mean averaged over hyperparameter samples, shape (M,)."""
        return jnp.mean(self.means, axis=0)

    def interval(self, level: float = 0.9) -> Tuple[jnp.ndarray, jnp.ndarray]:
        """Central `level` interval of the pooled draws, each bound of shape (M,)."""
        if not 0.0 < level < 1.0:
            raise ValueError(f"level must lie in (0, 1), got {level}")
        pooled = self.draws.reshape(-1, self.draws.shape[-1])
        lo = jnp.quantile(pooled, 0.5 * (1.0 - level), axis=0)
        hi = jnp.quantile(pooled, 0.5 * (1.0 + level), axis=0)
        return lo, hi


def predict_samples(
    key: jax.Array,
    data: ObservationSet,
    test_x,
    source,
    cfg: RunCFG = RunCFG(),
) -> PredictiveRun:
    """
    Posterior-predictive means, variances and draws for every hyperparameter sample.

    Args:
        key: PRNG key; split into one subkey per sample
        data: observations
        test_x: (M,) test inputs
        source: HyperparameterSource, SampleSet, stacked SEParams or an
            iterable of (eta_sq, rho_sq, sigma_sq) triples
        cfg: runner configuration

    Returns:
        PredictiveRun over the samples that factorised
    """
    if cfg.on_failure not in ("raise", "skip"):
        raise ValueError(f"Unknown on_failure policy: {cfg.on_failure}")
    if cfg.n_draws < 0 or cfg.max_workers < 1:
        raise ValueError("n_draws must be >= 0 and max_workers >= 1")

    samples = as_sample_set(source)
    test_x = as_points(test_x, "test_x")
    S, M = len(samples), test_x.shape[0]
    keys = jax.random.split(key, S) if S > 0 else []
    logger.debug(f"Evaluating the predictive for {S} hyperparameter samples on {cfg.max_workers} workers")

    def task(i: int) -> Tuple[Predictive, jnp.ndarray]:
        pred = predict(data.X, data.Y, test_x, samples[i], cfg.predict)
        return pred, sample_n(keys[i], pred.mean, pred.chol, cfg.n_draws)

    ok, means, variances, draws, failed = [], [], [], [], []
    with ThreadPoolExecutor(max_workers=cfg.max_workers) as pool:
        futures = [pool.submit(task, i) for i in range(S)]
        for i, future in enumerate(futures):
            try:
                pred, d = future.result()
            except NonPositiveDefiniteMatrix as err:
                if cfg.on_failure == "raise":
                    raise
                logger.warning(f"Skipping hyperparameter sample {i}: {err}")
                failed.append(i)
                continue
            ok.append(i)
            means.append(pred.mean)
            variances.append(pred.variance)
            draws.append(d)

    if ok:
        means, variances, draws = jnp.stack(means), jnp.stack(variances), jnp.stack(draws)
    else:
        means = jnp.zeros((0, M), dtype=test_x.dtype)
        variances = jnp.zeros((0, M), dtype=test_x.dtype)
        draws = jnp.zeros((0, cfg.n_draws, M), dtype=test_x.dtype)

    kept = SEParams.stack([samples[i] for i in ok])
    return PredictiveRun(
        samples=SampleSet(kept),
        means=means,
        variances=variances,
        draws=draws,
        failed=tuple(failed),
    )


def predict_with_retry(
    train_x,
    train_y,
    test_x,
    params: SEParams,
    cfg: PredictCFG = PredictCFG(),
    max_jitter: float = 1e-2,
    factor: float = 10.0,
) -> Predictive:
    """
    `predict`, retried with `factor` times more jitter after each failed
    factorisation, up to `max_jitter`. The last failure is re-raised.
    """
    if factor <= 1.0:
        raise ValueError(f"factor must be > 1, got {factor}")
    jitter = cfg.jitter
    while True:
        try:
            return predict(train_x, train_y, test_x, params, cfg.with_jitter(jitter))
        except NonPositiveDefiniteMatrix:
            if jitter >= max_jitter:
                raise
            jitter = min(max(jitter * factor, _MIN_RETRY_JITTER), max_jitter)
            logger.debug(f"Factorisation failed, retrying with jitter={jitter:.1e}")
