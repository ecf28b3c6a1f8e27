"""Reference frame and geodetic transformations for propagation outputs."""
from __future__ import annotations

import enum
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Tuple

from sgp4.api import jday

EARTH_ROT_RATE_RAD_PER_SEC = 7.2921150e-5

# WGS84 ellipsoid, kilometres.
WGS84_A_KM = 6378.137
WGS84_F = 1.0 / 298.257223563
WGS84_E2 = WGS84_F * (2.0 - WGS84_F)

_TWO_PI = 2.0 * math.pi
_MAX_LATITUDE_ITERATIONS = 20


class Frame(str, enum.Enum):
    """Supported coordinate frames."""

    TEME = "teme"
    ECI = "eci"  # SGP4 output frame, same as TEME
    ECEF = "ecef"

    @classmethod
    def from_string(cls, value: str) -> "Frame":
        try:
            return cls(value.lower())
        except ValueError as exc:
            raise ValueError(f"Unsupported frame '{value}'") from exc


Position = Tuple[float, float, float]
Velocity = Tuple[float, float, float]


@dataclass(frozen=True)
class StateVector:
    """Position and velocity state vector (kilometres / kilometres per second)."""

    position_km: Position
    velocity_km_s: Velocity

    @property
    def radius_km(self) -> float:
        return math.sqrt(sum(c * c for c in self.position_km))

    @property
    def speed_km_s(self) -> float:
        return math.sqrt(sum(c * c for c in self.velocity_km_s))

    def is_finite(self) -> bool:
        return all(math.isfinite(c) for c in self.position_km + self.velocity_km_s)


@dataclass(frozen=True)
class GeodeticPosition:
    """Latitude/longitude in radians, height in kilometres above WGS84."""

    latitude: float
    longitude: float
    height_km: float

    @property
    def latitude_deg(self) -> float:
        return math.degrees(self.latitude)

    @property
    def longitude_deg(self) -> float:
        return wrap_degrees(math.degrees(self.longitude))

    def is_finite(self) -> bool:
        return all(math.isfinite(v) for v in (self.latitude, self.longitude, self.height_km))


def wrap_radians(angle: float) -> float:
    """Normalize ``angle`` to ``[-pi, pi)``."""

    wrapped = (angle + math.pi) % _TWO_PI - math.pi
    if wrapped >= math.pi:
        wrapped -= _TWO_PI
    return wrapped


def wrap_degrees(angle: float) -> float:
    """Normalize ``angle`` to ``[-180, 180)``."""

    wrapped = (angle + 180.0) % 360.0 - 180.0
    if wrapped >= 180.0:
        wrapped -= 360.0
    return wrapped


def julian_date(dt: datetime) -> Tuple[float, float]:
    """Split ``dt`` into the (whole, fraction) Julian date pair SGP4 expects."""

    if dt.tzinfo is None:
        raise ValueError("datetime must be timezone-aware")
    return jday(dt.year, dt.month, dt.day, dt.hour, dt.minute,
                dt.second + dt.microsecond / 1_000_000)


def gmst(dt: datetime) -> float:
    """Greenwich mean sidereal time of ``dt`` in radians, within ``[0, 2*pi)``."""

    jd, fr = julian_date(dt)
    jd_ut1 = jd + fr
    t = (jd_ut1 - 2451545.0) / 36525.0
    gmst_sec = (
        67310.54841
        + (876600.0 * 3600 + 8640184.812866) * t
        + 0.093104 * t * t
        - 6.2e-6 * t * t * t
    )
    gmst_sec = gmst_sec % 86400.0
    if gmst_sec < 0:
        gmst_sec += 86400.0
    theta = math.radians(gmst_sec / 240.0)
    return theta if theta < _TWO_PI else 0.0


def eci_to_geodetic(position_km: Position, gmst_rad: float) -> GeodeticPosition:
    """Convert an inertial position to WGS84 geodetic coordinates.

    The position is rotated by ``-gmst_rad`` into the Earth-fixed frame and
    the latitude is found by fixed-point iteration on the ellipsoid. Any NaN
    component yields a NaN result rather than an exception.
    """

    x, y, z = position_km
    r_xy = math.sqrt(x * x + y * y)
    longitude = math.atan2(y, x) - gmst_rad
    if math.isfinite(longitude):
        longitude = wrap_radians(longitude)

    latitude = math.atan2(z, r_xy)
    c = 1.0
    for _ in range(_MAX_LATITUDE_ITERATIONS):
        sin_lat = math.sin(latitude)
        c = 1.0 / math.sqrt(1.0 - WGS84_E2 * sin_lat * sin_lat)
        updated = math.atan2(z + WGS84_A_KM * c * WGS84_E2 * sin_lat, r_xy)
        converged = abs(updated - latitude) < 1e-14
        latitude = updated
        if converged:
            break

    sin_lat = math.sin(latitude)
    cos_lat = math.cos(latitude)
    c = 1.0 / math.sqrt(1.0 - WGS84_E2 * sin_lat * sin_lat)
    if abs(cos_lat) > 1e-10:
        height = r_xy / cos_lat - WGS84_A_KM * c
    else:
        height = abs(z) - WGS84_A_KM * c * (1.0 - WGS84_E2)
    return GeodeticPosition(latitude=latitude, longitude=longitude, height_km=height)


def geodetic_to_ecef(geodetic: GeodeticPosition) -> Position:
    sin_lat = math.sin(geodetic.latitude)
    cos_lat = math.cos(geodetic.latitude)
    n = WGS84_A_KM / math.sqrt(1.0 - WGS84_E2 * sin_lat * sin_lat)
    h = geodetic.height_km
    return (
        (n + h) * cos_lat * math.cos(geodetic.longitude),
        (n + h) * cos_lat * math.sin(geodetic.longitude),
        (n * (1.0 - WGS84_E2) + h) * sin_lat,
    )


def geodetic_to_eci(geodetic: GeodeticPosition, gmst_rad: float) -> Position:
    x, y, z = geodetic_to_ecef(geodetic)
    cos_t = math.cos(gmst_rad)
    sin_t = math.sin(gmst_rad)
    return (cos_t * x - sin_t * y, sin_t * x + cos_t * y, z)


def teme_to_ecef(state: StateVector, when: datetime) -> StateVector:
    theta = gmst(when)
    cos_t = math.cos(theta)
    sin_t = math.sin(theta)

    x, y, z = state.position_km
    vx, vy, vz = state.velocity_km_s

    x_ecef = cos_t * x + sin_t * y
    y_ecef = -sin_t * x + cos_t * y
    z_ecef = z

    vx_rot = cos_t * vx + sin_t * vy
    vy_rot = -sin_t * vx + cos_t * vy
    vz_rot = vz

    omega = EARTH_ROT_RATE_RAD_PER_SEC
    vx_ecef = vx_rot + omega * y_ecef
    vy_ecef = vy_rot - omega * x_ecef
    vz_ecef = vz_rot

    return StateVector((x_ecef, y_ecef, z_ecef), (vx_ecef, vy_ecef, vz_ecef))


def ecef_to_teme(state: StateVector, when: datetime) -> StateVector:
    theta = gmst(when)
    cos_t = math.cos(theta)
    sin_t = math.sin(theta)

    x, y, z = state.position_km
    vx, vy, vz = state.velocity_km_s

    x_teme = cos_t * x - sin_t * y
    y_teme = sin_t * x + cos_t * y
    z_teme = z

    omega = EARTH_ROT_RATE_RAD_PER_SEC
    vx_adj = vx - omega * y
    vy_adj = vy + omega * x

    vx_teme = cos_t * vx_adj - sin_t * vy_adj
    vy_teme = sin_t * vx_adj + cos_t * vy_adj

    return StateVector((x_teme, y_teme, z_teme), (vx_teme, vy_teme, vz))


def transform_state(state: StateVector, when: datetime, source: Frame, target: Frame) -> StateVector:
    inertial = {Frame.TEME, Frame.ECI}
    if source == target or (source in inertial and target in inertial):
        return state
    if source in inertial and target == Frame.ECEF:
        return teme_to_ecef(state, when)
    if source == Frame.ECEF and target in inertial:
        return ecef_to_teme(state, when)
    raise ValueError(f"Unsupported transformation from {source.value} to {target.value}")


__all__ = [
    "Frame",
    "GeodeticPosition",
    "Position",
    "Velocity",
    "StateVector",
    "WGS84_A_KM",
    "WGS84_F",
    "eci_to_geodetic",
    "ecef_to_teme",
    "geodetic_to_ecef",
    "geodetic_to_eci",
    "gmst",
    "julian_date",
    "teme_to_ecef",
    "transform_state",
    "wrap_degrees",
    "wrap_radians",
]
