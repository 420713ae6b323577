from .data import ObservationSet, as_points, make_synthetic
from .errors import GPError, InvalidParameter, DimensionMismatch, NonPositiveDefiniteMatrix

__all__ = [
    "ObservationSet",
    "as_points",
    "make_synthetic",
    "GPError",
    "InvalidParameter",
    "DimensionMismatch",
    "NonPositiveDefiniteMatrix",
]
