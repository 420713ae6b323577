from .params import SEParams, check_jitter
from .squared_exponential import (
    DEFAULT_JITTER,
    se_kernel,
    build_covariance,
    build_cross_covariance,
)
from .utils import sqdist, mirror_upper

__all__ = [
    "SEParams",
    "check_jitter",
    "DEFAULT_JITTER",
    "se_kernel",
    "build_covariance",
    "build_cross_covariance",
    "sqdist",
    "mirror_upper",
]
