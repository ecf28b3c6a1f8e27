from __future__ import annotations

import dataclasses
import io
import json
import math
import random
from datetime import datetime, timezone

import pytest

from sat_tracker import get_satellite_positions
from sat_tracker.catalog import DEFAULT_CATALOG, Catalog
from sat_tracker.config import AppConfig
from sat_tracker.logging import configure_logging
from sat_tracker.service import SatelliteSnapshot, SatelliteTracker

NEAR_EPOCH = datetime(2023, 5, 15, 14, 0, 0, tzinfo=timezone.utc)
ISS, HUBBLE = DEFAULT_CATALOG[0], DEFAULT_CATALOG[1]


def fixed_clock():
    return NEAR_EPOCH


def tracker(**kwargs) -> SatelliteTracker:
    kwargs.setdefault("clock", fixed_clock)
    kwargs.setdefault("rng", lambda: 0.0)
    return SatelliteTracker(**kwargs)


def test_full_catalog_from_null_island():
    snapshots = tracker().positions(0.0, 0.0)
    assert [s.id for s in snapshots] == list(range(1, 11))
    assert [s.norad_id for s in snapshots] == [e.norad_id for e in DEFAULT_CATALOG]
    for snap in snapshots:
        assert -90.0 <= snap.latitude <= 90.0
        assert -180.0 <= snap.longitude < 180.0
        assert math.isfinite(snap.altitude) and snap.altitude > 100.0
        assert math.isfinite(snap.velocity) and snap.velocity > 0.0


def test_iss_snapshot_values():
    (iss,) = tracker(catalog=Catalog([ISS])).positions(51.0, -0.1)
    assert iss.name == "ISS (ZARYA)"
    assert 380.0 < iss.altitude < 440.0
    assert 7.5 < iss.velocity < 7.9
    assert abs(iss.latitude) <= 52.0


def test_repeated_queries_return_the_same_ids():
    svc = tracker(rng=random.Random(5).random)
    first = svc.positions(40.0, -75.0)
    second = svc.positions(40.0, -75.0)
    assert [s.id for s in first] == [s.id for s in second]
    assert [(s.latitude, s.longitude) for s in first] == [(s.latitude, s.longitude) for s in second]


def test_failed_entries_are_dropped_and_ids_keep_catalog_position():
    broken = dataclasses.replace(ISS, name="BROKEN", line1=ISS.line1[:-1] + "0")
    snapshots = tracker(catalog=Catalog([ISS, broken, HUBBLE])).positions(0.0, 0.0)
    assert [(s.id, s.name) for s in snapshots] == [(1, "ISS (ZARYA)"), (3, "HUBBLE")]


def test_all_entries_failing_yields_empty_list():
    broken = dataclasses.replace(ISS, line2=ISS.line2[:-1] + "0")
    assert tracker(catalog=Catalog([broken, broken])).positions(0.0, 0.0) == []


def test_empty_catalog():
    assert tracker(catalog=Catalog([])).positions(0.0, 0.0) == []


def test_skip_is_logged_with_reason():
    stream = io.StringIO()
    configure_logging(level="WARNING", stream=stream, force=True)
    broken = dataclasses.replace(ISS, name="BROKEN", line1=ISS.line1[:-1] + "0")
    tracker(catalog=Catalog([broken])).positions(48.8566, 2.3522)
    (record,) = [json.loads(line) for line in stream.getvalue().splitlines()]
    assert record["message"] == "propagation_skipped"
    assert record["level"] == "WARNING"
    assert record["extra"]["satellite"] == "BROKEN"
    assert record["extra"]["norad_id"] == "25544"
    assert "checksum" in record["extra"]["reason"]
    assert record["context"] == {"observer_lat": 48.9, "observer_lon": 2.4}


def test_rng_controls_visibility():
    never = tracker(rng=lambda: 1.0).positions(0.0, 0.0)
    assert not any(s.visible for s in never)


def test_visibility_requires_proximity():
    snapshots = tracker(rng=lambda: 0.0).positions(0.0, 0.0)
    for snap in snapshots:
        near = math.hypot(snap.latitude, snap.longitude) < 40.0
        assert snap.visible == near


def test_nan_observer_does_not_raise():
    snapshots = tracker().positions(float("nan"), float("nan"))
    assert len(snapshots) == 10
    assert not any(s.visible for s in snapshots)


def test_snapshot_dict_shape():
    (iss,) = tracker(catalog=Catalog([ISS])).positions(0.0, 0.0)
    payload = iss.as_dict()
    assert set(payload) == {"id", "name", "latitude", "longitude", "altitude", "velocity", "visible", "noradId"}
    assert payload["noradId"] == "25544"
    assert payload["id"] == 1
    assert isinstance(payload["visible"], bool)


def test_snapshots_are_immutable():
    (iss,) = tracker(catalog=Catalog([ISS])).positions(0.0, 0.0)
    with pytest.raises(dataclasses.FrozenInstanceError):
        iss.visible = True  # type: ignore[misc]
    assert isinstance(iss, SatelliteSnapshot)


def test_lookup():
    svc = tracker()
    assert svc.lookup("33591").name == "NOAA 19"
    assert svc.lookup("00000") is None


def test_from_config_uses_catalog_file_and_seed(tmp_path):
    path = tmp_path / "two.tle"
    path.write_text(ISS.as_text() + HUBBLE.as_text(), encoding="utf-8")
    config = AppConfig(base_dir=tmp_path, catalog_path=path, random_seed=42)
    first = SatelliteTracker.from_config(config, clock=fixed_clock).positions(0.0, 0.0)
    second = SatelliteTracker.from_config(config, clock=fixed_clock).positions(0.0, 0.0)
    assert [s.name for s in first] == ["ISS (ZARYA)", "HUBBLE"]
    assert [s.visible for s in first] == [s.visible for s in second]


def test_module_level_entry_point_uses_wall_clock():
    snapshots = get_satellite_positions(0.0, 0.0)
    assert len(snapshots) <= 10
    ids = [s.id for s in snapshots]
    assert ids == sorted(set(ids))
    assert all(1 <= i <= 10 for i in ids)


def test_from_config_catalog_override_skips_configured_file(tmp_path):
    config = AppConfig(base_dir=tmp_path, catalog_path=tmp_path / "stale.tle")
    tracker = SatelliteTracker.from_config(config, catalog=Catalog([ISS]), clock=fixed_clock)
    assert [s.name for s in tracker.positions(0.0, 0.0)] == ["ISS (ZARYA)"]
