# gppredictive_jax/kernels/utils.py
import jax.numpy as jnp


def sqdist(a, b):
    """Pairwise squared distances between 1-D point sets, shape (len(a), len(b))."""
    d = a[:, None] - b[None, :]
    return d * d


def mirror_upper(A):
    """Copy the strict upper triangle of A onto its lower triangle."""
    upper = jnp.triu(A, k=1)
    return upper + upper.T + jnp.diag(jnp.diagonal(A))
