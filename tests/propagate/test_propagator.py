from __future__ import annotations

import dataclasses
import math
from datetime import datetime, timedelta, timezone

import pytest
from hypothesis import given, settings, strategies as st
from sgp4.api import SGP4_ERRORS

import propagate.service as service_module
from propagate.frames import Frame, eci_to_geodetic, gmst
from propagate.service import PropagationError, propagate, propagate_at
from sat_tracker.catalog import DEFAULT_CATALOG

ISS = DEFAULT_CATALOG.get("25544")
NEAR_EPOCH = datetime(2023, 5, 15, 14, 0, 0, tzinfo=timezone.utc)


def test_iss_near_epoch_is_in_low_earth_orbit():
    result = propagate_at(ISS, NEAR_EPOCH)
    assert result.ok
    assert result.reason is None
    assert result.state.is_finite()
    geo = eci_to_geodetic(result.state.position_km, gmst(NEAR_EPOCH))
    assert 380.0 < geo.height_km < 440.0
    assert 7.5 < result.state.speed_km_s < 7.9


def test_result_timestamp_is_utc():
    eastern = timezone(timedelta(hours=-4))
    result = propagate_at(ISS, NEAR_EPOCH.astimezone(eastern))
    assert result.timestamp == NEAR_EPOCH
    assert result.timestamp.tzinfo is timezone.utc


@settings(max_examples=25, deadline=None)
@given(st.floats(min_value=0.0, max_value=30.0))
def test_catalog_propagates_within_thirty_days_of_epoch(offset_days):
    for entry in DEFAULT_CATALOG:
        when = entry.epoch + timedelta(days=offset_days)
        result = propagate_at(entry, when)
        assert result.ok, f"{entry.name}: {result.reason}"
        assert 6_400.0 < result.state.radius_km < 45_000.0
        assert all(math.isfinite(c) for c in result.state.velocity_km_s)


def test_geostationary_entry_sits_near_geo_radius():
    goes = DEFAULT_CATALOG.get("41866")
    result = propagate_at(goes, NEAR_EPOCH)
    assert result.state.radius_km == pytest.approx(42_164.0, rel=0.01)


def test_bad_checksum_is_a_failed_result():
    broken = dataclasses.replace(ISS, line1=ISS.line1[:-1] + "0")
    result = propagate_at(broken, NEAR_EPOCH)
    assert not result.ok
    assert result.state is None
    assert "checksum" in result.reason


def test_truncated_line_is_a_failed_result():
    broken = dataclasses.replace(ISS, line2=ISS.line2[:40])
    result = propagate_at(broken, NEAR_EPOCH)
    assert not result.ok
    assert "invalid element set" in result.reason


class _FakeSatrec:
    outcome = (0, (7000.0, 0.0, 0.0), (0.0, 7.5, 0.0))
    error = 0

    @classmethod
    def twoline2rv(cls, line1, line2):
        return cls()

    def sgp4(self, jd, fr):
        return self.outcome


def test_sgp4_error_code_is_a_failed_result(monkeypatch):
    class Decayed(_FakeSatrec):
        outcome = (6, (float("nan"),) * 3, (float("nan"),) * 3)

    monkeypatch.setattr(service_module, "Satrec", Decayed)
    result = propagate_at(ISS, NEAR_EPOCH)
    assert not result.ok
    assert result.reason == SGP4_ERRORS[6]


def test_non_finite_state_is_a_failed_result(monkeypatch):
    class Diverged(_FakeSatrec):
        outcome = (0, (float("nan"), 0.0, 0.0), (0.0, 7.5, 0.0))

    monkeypatch.setattr(service_module, "Satrec", Diverged)
    result = propagate_at(ISS, NEAR_EPOCH)
    assert not result.ok
    assert result.reason == "non-finite state vector"


def test_initialisation_error_is_a_failed_result(monkeypatch):
    class Degenerate(_FakeSatrec):
        error = 1

    monkeypatch.setattr(service_module, "Satrec", Degenerate)
    result = propagate_at(ISS, NEAR_EPOCH)
    assert not result.ok
    assert SGP4_ERRORS[1] in result.reason


def test_naive_datetime_is_rejected():
    with pytest.raises(ValueError):
        propagate_at(ISS, NEAR_EPOCH.replace(tzinfo=None))


def test_track_samples_window_inclusively():
    track = propagate(
        ISS,
        start=NEAR_EPOCH,
        end=NEAR_EPOCH + timedelta(minutes=10),
        step=timedelta(seconds=60),
        frame=Frame.ECEF,
    )
    assert len(track.samples) == 11
    assert track.start == NEAR_EPOCH
    assert track.end == NEAR_EPOCH + timedelta(minutes=10)
    assert track.step == timedelta(seconds=60)
    payload = track.as_dict()
    assert payload["frame"] == "ecef"
    assert payload["norad_id"] == "25544"
    assert len(payload["samples"]) == 11


def test_track_frames_agree_on_radius():
    kwargs = dict(start=NEAR_EPOCH, end=NEAR_EPOCH + timedelta(minutes=2), step=timedelta(minutes=1))
    eci = propagate(ISS, frame=Frame.ECI, **kwargs)
    ecef = propagate(ISS, frame=Frame.ECEF, **kwargs)
    for a, b in zip(eci.samples, ecef.samples):
        assert a.state.radius_km == pytest.approx(b.state.radius_km, rel=1e-12)


def test_track_rejects_invalid_input():
    broken = dataclasses.replace(ISS, line1=ISS.line1[:-1] + "0")
    with pytest.raises(PropagationError):
        propagate(broken, start=NEAR_EPOCH, end=NEAR_EPOCH, step=timedelta(minutes=1))
    with pytest.raises(ValueError):
        propagate(ISS, start=NEAR_EPOCH, end=NEAR_EPOCH - timedelta(minutes=1), step=timedelta(minutes=1))
    with pytest.raises(ValueError):
        propagate(ISS, start=NEAR_EPOCH, end=NEAR_EPOCH, step=timedelta(0))
