import importlib

import jax.numpy as jnp
import numpy as np
import pytest
from loguru import logger

from gppredictive_jax.core.errors import DimensionMismatch, InvalidParameter, NonPositiveDefiniteMatrix
from gppredictive_jax.gp import PredictCFG, predict
from gppredictive_jax.gp.utils import checked_cholesky
from gppredictive_jax.kernels import SEParams, build_covariance, build_cross_covariance

predict_module = importlib.import_module("gppredictive_jax.gp.predict")


def test_single_point_closed_form():
    params = SEParams(eta_sq=jnp.array(1.5), rho_sq=jnp.array(0.8), sigma_sq=jnp.array(0.2))
    jitter = 1e-8
    out = predict(jnp.array([0.3]), jnp.array([0.7]), jnp.array([1.1]), params, PredictCFG(jitter=jitter))

    k = 1.5 * jnp.exp(-0.8 * 0.8**2)
    expected = k / (1.5 + 0.2 + jitter) * 0.7
    assert out.mean.shape == (1,)
    assert abs(float(out.mean[0]) - float(expected)) < 1e-9


def test_matches_dense_reference(sine_data, unit_params):
    X, Y = sine_data
    Xs = jnp.array([-1.5, 0.25, 3.0])
    out = predict(X, Y, Xs, unit_params)

    Sigma = np.asarray(build_covariance(X, unit_params))
    K = np.asarray(build_cross_covariance(X, Xs, unit_params))
    Omega = np.asarray(build_covariance(Xs, unit_params))
    mean_ref = K.T @ np.linalg.solve(Sigma, np.asarray(Y))
    cov_ref = Omega - K.T @ np.linalg.solve(Sigma, K)

    assert np.allclose(out.mean, mean_ref, atol=1e-10)
    assert np.allclose(out.cov, cov_ref, atol=1e-10)


def test_cholesky_reconstructs_covariance(sine_data, unit_params):
    X, Y = sine_data
    out = predict(X, Y, jnp.linspace(-3.0, 3.0, 9), unit_params)

    assert bool(jnp.array_equal(out.cov, out.cov.T))
    assert jnp.allclose(out.chol, jnp.tril(out.chol))
    assert jnp.allclose(out.chol @ out.chol.T, out.cov, atol=1e-10)


def test_huge_noise_reverts_to_prior(sine_data):
    X, Y = sine_data
    params = SEParams(eta_sq=jnp.array(1.0), rho_sq=jnp.array(1.0), sigma_sq=jnp.array(1e6))
    Xs = jnp.array([-1.0, 0.5, 1.5])
    out = predict(X, Y, Xs, params)

    # zero-mean prior, Omega's diagonal as the variance
    assert jnp.allclose(out.mean, 0.0, atol=1e-4)
    assert jnp.allclose(out.variance, 1.0 + 1e6, rtol=1e-6)


def test_self_consistency_at_training_points(sine_data, unit_params):
    X, Y = sine_data
    out = predict(X, Y, X, unit_params)

    assert jnp.allclose(out.mean, Y, atol=0.1)
    assert bool(jnp.all(out.variance < 0.05))
    assert bool(jnp.all(out.variance > 0.01))


def test_far_from_data_is_prior_like(sine_data, unit_params):
    X, Y = sine_data
    near = predict(X, Y, X, unit_params)
    far = predict(X, Y, jnp.array([10.0]), unit_params)

    assert abs(float(far.variance[0]) - (1.0 + 0.01)) < 1e-6
    assert abs(float(far.mean[0])) < 1e-6
    assert float(far.variance[0]) > 10 * float(jnp.max(near.variance))


def test_no_test_points(sine_data, unit_params):
    X, Y = sine_data
    out = predict(X, Y, jnp.zeros((0,)), unit_params)
    assert out.mean.shape == (0,)
    assert out.cov.shape == (0, 0)
    assert out.chol.shape == (0, 0)


def test_zero_amplitude_rejected(sine_data):
    X, Y = sine_data
    params = SEParams(eta_sq=jnp.array(0.0), rho_sq=jnp.array(1.0), sigma_sq=jnp.array(0.01))
    with pytest.raises(InvalidParameter):
        predict(X, Y, X, params)


def test_mismatched_training_lengths_rejected(sine_data, unit_params):
    X, Y = sine_data
    with pytest.raises(DimensionMismatch):
        predict(X, Y[:-1], X, unit_params)


def test_empty_training_set_rejected(unit_params):
    with pytest.raises(DimensionMismatch):
        predict(jnp.zeros(0), jnp.zeros(0), jnp.array([0.0]), unit_params)


def test_invalid_override_rejected(sine_data, unit_params):
    X, Y = sine_data
    bad = SEParams(eta_sq=jnp.array(1.0), rho_sq=jnp.array(-1.0), sigma_sq=jnp.array(0.01))
    with pytest.raises(InvalidParameter):
        predict(X, Y, X, unit_params, PredictCFG(test_cov_params=bad))


def test_test_covariance_override(sine_data):
    X, Y = sine_data
    params = SEParams(eta_sq=jnp.array(2.0), rho_sq=jnp.array(0.5), sigma_sq=jnp.array(0.1))
    unit = SEParams(eta_sq=jnp.array(1.0), rho_sq=jnp.array(1.0), sigma_sq=jnp.array(0.1))
    Xs = jnp.array([20.0])

    default = predict(X, Y, Xs, params)
    overridden = predict(X, Y, Xs, params, PredictCFG(test_cov_params=unit))

    assert abs(float(default.variance[0]) - 2.1) < 1e-6
    assert abs(float(overridden.variance[0]) - 1.1) < 1e-6


def test_training_covariance_override_changes_mean(sine_data):
    X, Y = sine_data
    params = SEParams(eta_sq=jnp.array(1.0), rho_sq=jnp.array(1.0), sigma_sq=jnp.array(0.1))
    # more noise in Sigma only shrinks W K, so the predictive stays positive-definite
    noisier = SEParams(eta_sq=jnp.array(1.0), rho_sq=jnp.array(1.0), sigma_sq=jnp.array(0.5))
    Xs = jnp.array([0.5])

    default = predict(X, Y, Xs, params)
    overridden = predict(X, Y, Xs, params, PredictCFG(train_cov_params=noisier))
    same = predict(X, Y, Xs, params, PredictCFG(train_cov_params=params))

    assert not jnp.allclose(default.mean, overridden.mean)
    assert float(overridden.variance[0]) > float(default.variance[0])
    assert jnp.array_equal(default.mean, same.mean)


def test_mixed_override_can_be_indefinite(sine_data):
    X, Y = sine_data
    params = SEParams(eta_sq=jnp.array(2.0), rho_sq=jnp.array(0.5), sigma_sq=jnp.array(0.1))
    unit = SEParams(eta_sq=jnp.array(1.0), rho_sq=jnp.array(1.0), sigma_sq=jnp.array(0.1))

    with pytest.raises(NonPositiveDefiniteMatrix, match="predictive covariance"):
        predict(X, Y, jnp.array([0.5]), params, PredictCFG(train_cov_params=unit))


def test_override_keeps_sampled_noise(sine_data):
    X, Y = sine_data
    params = SEParams(eta_sq=jnp.array(2.0), rho_sq=jnp.array(0.5), sigma_sq=jnp.array(0.3))
    unit = SEParams(eta_sq=jnp.array(1.0), rho_sq=jnp.array(1.0), sigma_sq=jnp.array(0.01))
    explicit = SEParams(eta_sq=jnp.array(1.0), rho_sq=jnp.array(1.0), sigma_sq=jnp.array(0.3))
    Xs = jnp.array([20.0])

    kept = predict(X, Y, Xs, params, PredictCFG(train_cov_params=unit, test_cov_params=unit, keep_sampled_noise=True))
    ref = predict(X, Y, Xs, params, PredictCFG(train_cov_params=explicit, test_cov_params=explicit))

    assert jnp.allclose(kept.mean, ref.mean)
    assert jnp.allclose(kept.cov, ref.cov)
    assert abs(float(kept.variance[0]) - 1.3) < 1e-6


def test_override_warning_logged_once(sine_data, unit_params, monkeypatch):
    monkeypatch.setattr(predict_module, "_warned_roles", set())
    X, Y = sine_data
    other = SEParams(eta_sq=jnp.array(1.0), rho_sq=jnp.array(1.0), sigma_sq=jnp.array(0.02))
    cfg = PredictCFG(test_cov_params=other)

    messages = []
    handler = logger.add(messages.append, level="WARNING", format="{message}")
    try:
        for _ in range(3):
            predict(X, Y, jnp.array([10.0]), unit_params, cfg)
        predict(X, Y, jnp.array([10.0]), unit_params, PredictCFG(test_cov_params=unit_params))
    finally:
        logger.remove(handler)

    assert len(messages) == 1
    assert "Test covariance" in messages[0]


def test_checked_cholesky_rejects_indefinite_matrix():
    with pytest.raises(NonPositiveDefiniteMatrix, match="2x2"):
        checked_cholesky(jnp.array([[1.0, 2.0], [2.0, 1.0]]))


def test_duplicated_inputs_without_jitter_fail():
    params = SEParams(eta_sq=jnp.array(1.0), rho_sq=jnp.array(1.0), sigma_sq=jnp.array(1e-300))
    X = jnp.zeros(3)
    with pytest.raises(NonPositiveDefiniteMatrix, match="training covariance"):
        predict(X, jnp.ones(3), jnp.array([0.0]), params, PredictCFG(jitter=0.0))


def test_predictive_sample_shapes(sine_data, unit_params, key):
    X, Y = sine_data
    out = predict(X, Y, jnp.linspace(-2.0, 2.0, 7), unit_params)
    assert out.sample(key).shape == (7,)
    assert out.sample(key, n=5).shape == (5, 7)
