# gppredictive_jax/core/data.py
"""
Data view layer.

Observations are plain 1-D covariate / response arrays. The containers here
only validate shapes; they hold no model assumptions.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Union

import jax
import jax.numpy as jnp

from .errors import DimensionMismatch


def as_points(x, name: str = "points") -> jnp.ndarray:
    """
    Coerce `x` to a 1-D floating array.

    Column vectors of shape (N, 1) are flattened; anything else that is not
    1-D raises DimensionMismatch.
    """
    x = jnp.asarray(x)
    if x.ndim == 2 and x.shape[1] == 1:
        x = x[:, 0]
    if x.ndim != 1:
        raise DimensionMismatch(f"{name} must be 1-D (or a column vector), got shape {x.shape}")
    if not jnp.issubdtype(x.dtype, jnp.floating):
        x = x.astype(jnp.result_type(float))
    return x


@dataclass(frozen=True)
class ObservationSet:
    """
    Ordered (x_i, y_i) pairs for scalar GP regression.

    - X: covariates (N,)
    - Y: responses (N,)

    N >= 1 and len(X) == len(Y) are checked on construction.
    """
    X: jnp.ndarray
    Y: jnp.ndarray

    def __post_init__(self):
        X = as_points(self.X, "X")
        Y = as_points(self.Y, "Y")
        if X.shape[0] != Y.shape[0]:
            raise DimensionMismatch(
                f"X and Y must have the same length, got {X.shape[0]} and {Y.shape[0]}"
            )
        if X.shape[0] == 0:
            raise DimensionMismatch("An observation set needs at least one (x, y) pair")
        object.__setattr__(self, "X", X)
        object.__setattr__(self, "Y", Y)

    def batch(self, idx: Union[jnp.ndarray, slice]) -> ObservationSet:
        """Select a subset of the observations."""
        return ObservationSet(self.X[idx], self.Y[idx])

    def __len__(self) -> int:
        return self.X.shape[0]


def make_synthetic(
    key: jax.Array,
    fn: Callable[[jnp.ndarray], jnp.ndarray],
    x,
    noise_std: float = 0.1,
) -> ObservationSet:
    """
    Noisy observations of a known function: y = fn(x) + noise_std * eps.

    Args:
        key: PRNG key for the noise
        fn: latent function, applied elementwise to `x`
        x: covariates (N,)
        noise_std: standard deviation of the additive Gaussian noise

    Returns:
        ObservationSet with the noisy responses
    """
    if noise_std < 0.0:
        raise ValueError(f"noise_std must be non-negative, got {noise_std}")
    x = as_points(x, "x")
    eps = jax.random.normal(key, x.shape, dtype=x.dtype)
    return ObservationSet(x, fn(x) + noise_std * eps)


__all__ = [
    "ObservationSet",
    "as_points",
    "make_synthetic",
]
