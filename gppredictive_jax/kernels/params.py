# gppredictive_jax/kernels/params.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

import jax.numpy as jnp
from jax.tree_util import register_pytree_node_class, tree_map

from ..core.errors import InvalidParameter


@register_pytree_node_class
@dataclass(frozen=True)
class SEParams:
    """
    Squared-exponential kernel hyperparameters as a pytree.

        k(a, b) = eta_sq * exp(-rho_sq * (a - b)^2)

    eta_sq: amplitude (signal variance)
    rho_sq: inverse squared length-scale
    sigma_sq: observation noise variance

    Leaves may carry leading axes, in which case the object stands for a
    stack of hyperparameter samples (e.g. shape (n_chains, n_draws)).
    """

    eta_sq: jnp.ndarray = field(default_factory=lambda: jnp.array(1.0))
    rho_sq: jnp.ndarray = field(default_factory=lambda: jnp.array(1.0))
    sigma_sq: jnp.ndarray = field(default_factory=lambda: jnp.array(0.1))

    # ---- pytree protocol ----
    def tree_flatten(self):
        return (self.eta_sq, self.rho_sq, self.sigma_sq), None

    @classmethod
    def tree_unflatten(cls, aux_data, children):
        return cls(eta_sq=children[0], rho_sq=children[1], sigma_sq=children[2])

    @classmethod
    def stack(cls, samples: Iterable[SEParams]) -> SEParams:
        """Stack individual samples along a new leading axis."""
        samples = list(samples)
        if not samples:
            empty = jnp.zeros((0,))
            return cls(eta_sq=empty, rho_sq=empty, sigma_sq=empty)
        return tree_map(lambda *xs: jnp.stack([jnp.asarray(x) for x in xs]), *samples)

    @property
    def shape(self) -> tuple:
        return jnp.shape(self.eta_sq)

    def as_arrays(self) -> SEParams:
        return tree_map(jnp.asarray, self)

    def validate(self) -> SEParams:
        """
        Check every hyperparameter is finite and strictly positive.

        Works on concrete values only; call it before entering jit/vmap.
        """
        for name in ("eta_sq", "rho_sq", "sigma_sq"):
            value = jnp.asarray(getattr(self, name))
            if value.size == 0:
                continue
            if not bool(jnp.all(jnp.isfinite(value))):
                raise InvalidParameter(f"{name} must be finite, got {value}")
            if not bool(jnp.all(value > 0.0)):
                raise InvalidParameter(f"{name} must be strictly positive, got {value}")
        return self

    def allclose(self, other: SEParams, rtol: float = 1e-12) -> bool:
        return all(
            bool(jnp.allclose(jnp.asarray(a), jnp.asarray(b), rtol=rtol, atol=0.0))
            for a, b in zip(self.tree_flatten()[0], other.tree_flatten()[0])
        )


def check_jitter(jitter: float) -> float:
    if not jnp.isfinite(jitter) or jitter < 0.0:
        raise InvalidParameter(f"jitter must be finite and non-negative, got {jitter}")
    return jitter
