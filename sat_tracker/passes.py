"""Pass prediction: when does a satellite climb above the observer's horizon."""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from propagate import service as propagation
from propagate.frames import Frame, GeodeticPosition, Position, geodetic_to_ecef

from .tle import OrbitalElementSet

DEFAULT_STEP = timedelta(seconds=60)


@dataclass(frozen=True)
class SatellitePass:
    start: datetime
    end: datetime
    max_elevation: float

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def as_dict(self) -> dict:
        return {
            "startTime": self.start.isoformat(),
            "endTime": self.end.isoformat(),
            "maxElevation": round(self.max_elevation, 1),
        }


@dataclass(frozen=True)
class PassPrediction:
    norad_id: str
    passes: Tuple[SatellitePass, ...]

    def as_dict(self) -> dict:
        return {"noradId": self.norad_id, "passes": [p.as_dict() for p in self.passes]}


def elevation_deg(observer: GeodeticPosition, observer_ecef: Position, target_ecef: Position) -> float:
    """Elevation of ``target_ecef`` above the observer's geodetic horizon."""

    rx = target_ecef[0] - observer_ecef[0]
    ry = target_ecef[1] - observer_ecef[1]
    rz = target_ecef[2] - observer_ecef[2]
    rng = math.sqrt(rx * rx + ry * ry + rz * rz)
    if rng == 0.0:
        return 90.0
    cos_lat = math.cos(observer.latitude)
    up = (
        cos_lat * math.cos(observer.longitude),
        cos_lat * math.sin(observer.longitude),
        math.sin(observer.latitude),
    )
    sin_el = (rx * up[0] + ry * up[1] + rz * up[2]) / rng
    return math.degrees(math.asin(max(-1.0, min(1.0, sin_el))))


def predict_passes(
    element_set: OrbitalElementSet,
    observer_lat: float,
    observer_lon: float,
    *,
    start: datetime,
    days: float = 7,
    step: timedelta = DEFAULT_STEP,
    min_elevation_deg: float = 0.0,
) -> PassPrediction:
    """Scan ``days`` from ``start`` and group samples above the horizon.

    Pass boundaries are resolved to ``step``: a pass starts at its first
    sample at or above ``min_elevation_deg`` and ends at its last such sample,
    so a single-sample pass has zero duration. A pass already in progress at
    ``start`` or still in progress at the window end is clipped to the window.
    """

    if days <= 0:
        raise ValueError("days must be positive")
    observer = GeodeticPosition(math.radians(observer_lat), math.radians(observer_lon), 0.0)
    observer_ecef = geodetic_to_ecef(observer)

    track = propagation.propagate(
        element_set,
        start=start,
        end=start + timedelta(days=days),
        step=step,
        frame=Frame.ECEF,
    )

    passes: List[SatellitePass] = []
    pass_start: Optional[datetime] = None
    last_above: Optional[datetime] = None
    peak = -90.0
    for sample in track.samples:
        elevation = elevation_deg(observer, observer_ecef, sample.state.position_km)
        if elevation >= min_elevation_deg:
            if pass_start is None:
                pass_start = sample.timestamp
                peak = elevation
            peak = max(peak, elevation)
            last_above = sample.timestamp
        elif pass_start is not None:
            passes.append(SatellitePass(pass_start, last_above, peak))
            pass_start = None
    if pass_start is not None:
        passes.append(SatellitePass(pass_start, last_above, peak))

    return PassPrediction(norad_id=element_set.norad_id, passes=tuple(passes))


__all__ = ["DEFAULT_STEP", "PassPrediction", "SatellitePass", "elevation_deg", "predict_passes"]
