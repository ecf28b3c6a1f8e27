"""Coarse, randomized visibility heuristic.

This is not a line-of-sight calculation. A satellite counts as visible when
its sub-point lies within a flat "degree distance" of the observer and a
uniform draw falls below an altitude-dependent probability, so repeated calls
with identical inputs may disagree. Pass a deterministic ``rng`` to pin it.
"""
from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Callable

RandomSource = Callable[[], float]


@dataclass(frozen=True)
class VisibilitySettings:
    max_distance_deg: float = 40.0
    high_altitude_km: float = 500.0
    high_altitude_probability: float = 0.7
    low_altitude_probability: float = 0.3

    def probability_for(self, altitude_km: float) -> float:
        if altitude_km > self.high_altitude_km:
            return self.high_altitude_probability
        return self.low_altitude_probability


DEFAULT_VISIBILITY = VisibilitySettings()


def coordinate_distance(observer_lat: float, observer_lon: float,
                        satellite_lat: float, satellite_lon: float) -> float:
    """Euclidean distance between two lat/lon pairs, treating degrees as flat."""

    return math.sqrt((observer_lat - satellite_lat) ** 2 + (observer_lon - satellite_lon) ** 2)


def estimate_visibility(
    observer_lat: float,
    observer_lon: float,
    satellite_lat: float,
    satellite_lon: float,
    satellite_altitude_km: float,
    *,
    rng: RandomSource = random.random,
    settings: VisibilitySettings = DEFAULT_VISIBILITY,
) -> bool:
    distance = coordinate_distance(observer_lat, observer_lon, satellite_lat, satellite_lon)
    draw = rng()
    return distance < settings.max_distance_deg and draw < settings.probability_for(satellite_altitude_km)


__all__ = [
    "DEFAULT_VISIBILITY",
    "RandomSource",
    "VisibilitySettings",
    "coordinate_distance",
    "estimate_visibility",
]
