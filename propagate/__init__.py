"""Propagation utilities built on top of SGP4."""

from .frames import (
    Frame,
    GeodeticPosition,
    StateVector,
    eci_to_geodetic,
    geodetic_to_eci,
    gmst,
    transform_state,
)
from .service import (
    PropagationError,
    PropagationResult,
    PropagationSample,
    PropagationTrack,
    propagate,
    propagate_at,
)

__all__ = [
    "Frame",
    "GeodeticPosition",
    "StateVector",
    "eci_to_geodetic",
    "geodetic_to_eci",
    "gmst",
    "transform_state",
    "PropagationError",
    "PropagationResult",
    "PropagationSample",
    "PropagationTrack",
    "propagate",
    "propagate_at",
]
