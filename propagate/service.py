"""Satellite propagation services built on top of SGP4."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional, Tuple

from sgp4.api import SGP4_ERRORS, Satrec

from propagate.frames import Frame, StateVector, julian_date, transform_state
from sat_tracker.tle import ElementSetError, OrbitalElementSet, validate


class PropagationError(RuntimeError):
    pass


@dataclass(frozen=True)
class PropagationResult:
    """Outcome of propagating one element set to one instant.

    Exactly one of ``state`` and ``reason`` is set.
    """

    element_set: OrbitalElementSet
    timestamp: datetime
    state: Optional[StateVector] = None
    reason: Optional[str] = None

    @classmethod
    def success(cls, element_set: OrbitalElementSet, timestamp: datetime,
                state: StateVector) -> "PropagationResult":
        return cls(element_set=element_set, timestamp=timestamp, state=state)

    @classmethod
    def failure(cls, element_set: OrbitalElementSet, timestamp: datetime,
                reason: str) -> "PropagationResult":
        return cls(element_set=element_set, timestamp=timestamp, reason=reason)

    @property
    def ok(self) -> bool:
        return self.state is not None


@dataclass(frozen=True)
class PropagationSample:
    timestamp: datetime
    state: StateVector

    def as_dict(self) -> dict:
        return {
            "timestamp": self.timestamp.isoformat(),
            "position_km": list(self.state.position_km),
            "velocity_km_s": list(self.state.velocity_km_s),
        }


@dataclass(frozen=True)
class PropagationTrack:
    element_set: OrbitalElementSet
    frame: Frame
    samples: Tuple[PropagationSample, ...]

    @property
    def start(self) -> datetime:
        return self.samples[0].timestamp

    @property
    def end(self) -> datetime:
        return self.samples[-1].timestamp

    @property
    def step(self) -> timedelta:
        if len(self.samples) < 2:
            return timedelta(0)
        return self.samples[1].timestamp - self.samples[0].timestamp

    def as_dict(self) -> dict:
        return {
            "norad_id": self.element_set.norad_id,
            "frame": self.frame.value,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "step_seconds": self.step.total_seconds(),
            "samples": [sample.as_dict() for sample in self.samples],
        }


def _ensure_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        raise ValueError("datetime must be timezone-aware")
    return dt.astimezone(timezone.utc)


def _iter_times(start: datetime, end: datetime, step: timedelta) -> Iterable[datetime]:
    current = start
    while current <= end + timedelta(microseconds=1):
        yield current
        current += step


def _build_satrec(element_set: OrbitalElementSet) -> Satrec:
    validate(element_set)
    sat = Satrec.twoline2rv(element_set.line1.rstrip(), element_set.line2.rstrip())
    if sat.error != 0:
        raise ElementSetError(SGP4_ERRORS.get(sat.error, f"SGP4 error code {sat.error}"))
    return sat


def _sgp4(sat: Satrec, when: datetime) -> StateVector:
    jd, fr = julian_date(when)
    error, position, velocity = sat.sgp4(jd, fr)
    if error != 0:
        message = SGP4_ERRORS.get(error, f"SGP4 error code {error}")
        raise PropagationError(message)
    state = StateVector(tuple(position), tuple(velocity))
    if not state.is_finite():
        raise PropagationError("non-finite state vector")
    return state


def propagate_at(element_set: OrbitalElementSet, when: datetime) -> PropagationResult:
    """Propagate ``element_set`` to ``when`` without raising on bad data.

    Malformed lines, decayed orbits and numerically degenerate elements all
    come back as a failed :class:`PropagationResult` carrying the reason.
    """

    when_utc = _ensure_utc(when)
    try:
        sat = _build_satrec(element_set)
    except ValueError as exc:
        return PropagationResult.failure(element_set, when_utc, f"invalid element set: {exc}")
    try:
        state = _sgp4(sat, when_utc)
    except PropagationError as exc:
        return PropagationResult.failure(element_set, when_utc, str(exc))
    return PropagationResult.success(element_set, when_utc, state)


def propagate(
    element_set: OrbitalElementSet,
    *,
    start: datetime,
    end: datetime,
    step: timedelta,
    frame: Frame = Frame.ECI,
) -> PropagationTrack:
    """Sample ``element_set`` from ``start`` to ``end`` inclusive.

    Raises :class:`PropagationError` when the element set is invalid or any
    sample fails.
    """

    start_utc = _ensure_utc(start)
    end_utc = _ensure_utc(end)
    if end_utc < start_utc:
        raise ValueError("end must not be before start")
    if step.total_seconds() <= 0:
        raise ValueError("step must be positive")

    try:
        sat = _build_satrec(element_set)
    except ValueError as exc:
        raise PropagationError(f"invalid element set: {exc}") from exc

    samples: List[PropagationSample] = []
    for ts in _iter_times(start_utc, end_utc, step):
        state = _sgp4(sat, ts)
        converted = transform_state(state, ts, Frame.TEME, frame)
        samples.append(PropagationSample(ts, converted))

    return PropagationTrack(element_set=element_set, frame=frame, samples=tuple(samples))


__all__ = [
    "PropagationError",
    "PropagationResult",
    "PropagationSample",
    "PropagationTrack",
    "propagate",
    "propagate_at",
]
