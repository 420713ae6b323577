# gppredictive_jax/inference/base.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Protocol, Union, runtime_checkable

import jax.numpy as jnp
from jax.tree_util import tree_map

from ..kernels.params import SEParams


@runtime_checkable
class HyperparameterSource(Protocol):
    """
    Anything that yields hyperparameter samples.

    Design principles
    -----------------
    - The predictive core treats hyperparameter inference as a black box.
    - The only contract is: iterating yields SEParams with positive scalars.
    - Posterior draws from an external sampler, a fixed grid, or a single
      point estimate are all valid sources.
    """

    def __iter__(self) -> Iterator[SEParams]:
        ...


@dataclass(frozen=True)
class SampleSet:
    """
    A flat stack of S hyperparameter samples.

    `params` leaves have shape (S,). Leading axes such as (n_chains, n_draws)
    are flattened on construction, chain-major. Every sample is validated.
    """
    params: SEParams

    def __post_init__(self):
        params = self.params.as_arrays()
        params = tree_map(lambda x: jnp.reshape(x, (-1,)), params)
        sizes = {leaf.shape[0] for leaf in params.tree_flatten()[0]}
        if len(sizes) != 1:
            raise ValueError(f"Hyperparameter stacks have mismatched sizes: {sorted(sizes)}")
        params.validate()
        object.__setattr__(self, "params", params)

    def __len__(self) -> int:
        return self.params.eta_sq.shape[0]

    def __getitem__(self, i: int) -> SEParams:
        return tree_map(lambda x: x[i], self.params)

    def __iter__(self) -> Iterator[SEParams]:
        for i in range(len(self)):
            yield self[i]


def as_sample_set(source: Union[HyperparameterSource, SEParams, Iterable]) -> SampleSet:
    """
    Normalise a hyperparameter source into a SampleSet.

    Accepts a SampleSet, a (possibly stacked) SEParams, or any iterable of
    SEParams / (eta_sq, rho_sq, sigma_sq) triples.
    """
    if isinstance(source, SampleSet):
        return source
    if isinstance(source, SEParams):
        return SampleSet(source)
    samples = []
    for item in source:
        if isinstance(item, SEParams):
            samples.append(item)
        else:
            eta_sq, rho_sq, sigma_sq = item
            samples.append(SEParams(eta_sq=eta_sq, rho_sq=rho_sq, sigma_sq=sigma_sq))
    return SampleSet(SEParams.stack(samples))
