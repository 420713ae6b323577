# examples/gp_regression_demo.py
"""
GP regression end to end.

  1. Noisy observations of sin(x)
  2. Draws from the squared-exponential prior
  3. HMC over (eta_sq, rho_sq, sigma_sq) with blackjax, several chains
  4. Posterior-predictive mean / draws at new inputs for every HMC draw

Plotting is left out; the script prints summaries of what a plot would show.
"""
from __future__ import annotations

import jax

jax.config.update("jax_enable_x64", True)

import jax.numpy as jnp
from loguru import logger

from gppredictive_jax import (
    HMCCFG,
    RunCFG,
    SEParams,
    make_synthetic,
    predict_samples,
    run_chains,
    sample_prior,
)


def main(seed: int = 0):
    key = jax.random.PRNGKey(seed)
    data_key, prior_key, hmc_key, pred_key = jax.random.split(key, 4)

    # 1. Data
    data = make_synthetic(data_key, jnp.sin, jnp.linspace(-5.0, 5.0, 20), noise_std=0.1)
    logger.info(f"Generated {len(data)} noisy observations of sin(x)")

    # 2. Prior draws
    grid = jnp.linspace(-5.0, 5.0, 100)
    prior = sample_prior(prior_key, grid, SEParams(jnp.array(1.0), jnp.array(1.0), jnp.array(0.1)), n=5)
    logger.info(f"Prior draws: shape {prior.shape}, pointwise std {float(jnp.std(prior)):.3f}")

    # 3. Hyperparameters
    run = run_chains(hmc_key, data, HMCCFG(n_chains=4, n_warmup=500, n_samples=250))
    samples = run.sample_set()
    for name in ("eta_sq", "rho_sq", "sigma_sq"):
        v = getattr(samples.params, name)
        logger.info(f"{name}: posterior mean {float(jnp.mean(v)):.4f}, sd {float(jnp.std(v)):.4f}")

    # 4. Predictive at new inputs, one draw per hyperparameter sample
    test_x = jnp.linspace(-7.0, 7.0, 29)
    out = predict_samples(pred_key, data, test_x, samples, RunCFG(n_draws=1, max_workers=8, on_failure="skip"))
    lo, hi = out.interval(0.9)
    for x, m, a, b in zip(test_x[::4], out.mean()[::4], lo[::4], hi[::4]):
        logger.info(f"x={float(x):+.2f}  mean={float(m):+.3f}  90% [{float(a):+.3f}, {float(b):+.3f}]")
    if out.failed:
        logger.warning(f"{len(out.failed)} hyperparameter samples failed to factorise")


if __name__ == "__main__":
    main()
