import jax

jax.config.update("jax_enable_x64", True)

import jax.numpy as jnp
import pytest

from gppredictive_jax.kernels.params import SEParams


@pytest.fixture
def key():
    return jax.random.PRNGKey(0)


@pytest.fixture
def sine_data():
    X = jnp.array([-2.0, -1.0, 0.0, 1.0, 2.0])
    noise = jnp.array([0.01, -0.02, 0.015, 0.0, -0.01])
    return X, jnp.sin(X) + noise


@pytest.fixture
def unit_params():
    return SEParams(eta_sq=jnp.array(1.0), rho_sq=jnp.array(1.0), sigma_sq=jnp.array(0.01))
