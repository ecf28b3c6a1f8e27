"""Current satellite positions for an observer."""
from __future__ import annotations

import datetime as dt
import random
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, List, Optional

from propagate import service as propagation
from propagate.frames import eci_to_geodetic, gmst

from .catalog import DEFAULT_CATALOG, Catalog, load_catalog
from .config import AppConfig
from .logging import get_logger, log_context
from .passes import DEFAULT_STEP, PassPrediction, predict_passes
from .tle import OrbitalElementSet
from .visibility import DEFAULT_VISIBILITY, RandomSource, VisibilitySettings, estimate_visibility

LOGGER = get_logger("service")


@dataclass(frozen=True)
class SatelliteSnapshot:
    """Where one catalog satellite is right now.

    ``id`` is ``1 + position`` in the catalog the snapshot came from; it is
    not a persistent identifier.
    """

    id: int
    name: str
    norad_id: str
    latitude: float
    longitude: float
    altitude: float
    velocity: float
    visible: bool

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "altitude": self.altitude,
            "velocity": self.velocity,
            "visible": self.visible,
            "noradId": self.norad_id,
        }


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class SatelliteTracker:
    """Runs propagation, geodetic conversion and visibility over a catalog."""

    def __init__(
        self,
        catalog: Optional[Catalog] = None,
        clock: Optional[Callable[[], dt.datetime]] = None,
        rng: Optional[RandomSource] = None,
        visibility: VisibilitySettings = DEFAULT_VISIBILITY,
        pass_step: timedelta = DEFAULT_STEP,
    ) -> None:
        self.catalog = catalog if catalog is not None else DEFAULT_CATALOG
        self.visibility = visibility
        self.pass_step = pass_step
        self._clock = clock or _utcnow
        self._rng = rng or random.random

    @classmethod
    def from_config(cls, config: AppConfig, **overrides) -> "SatelliteTracker":
        rng = random.Random(config.random_seed).random if config.random_seed is not None else None
        options = {
            "rng": rng,
            "visibility": config.visibility,
            "pass_step": timedelta(seconds=config.pass_step_seconds),
        }
        options.update(overrides)
        if "catalog" not in options:
            options["catalog"] = load_catalog(config.catalog_path) if config.catalog_path else DEFAULT_CATALOG
        return cls(**options)

    def positions(self, observer_lat: float, observer_lon: float) -> List[SatelliteSnapshot]:
        """Snapshot every catalog entry that can be propagated to now.

        Entries that fail are logged and left out; the remaining snapshots keep
        catalog order and their catalog-position ids.
        """

        now = self._clock()
        theta = gmst(now)
        snapshots: List[SatelliteSnapshot] = []
        with log_context(observer_lat=observer_lat, observer_lon=observer_lon):
            for sat_id, element_set in self.catalog.numbered():
                result = propagation.propagate_at(element_set, now)
                if not result.ok:
                    LOGGER.warning(
                        "propagation_skipped",
                        extra={"satellite": element_set.name, "norad_id": element_set.norad_id,
                               "reason": result.reason},
                    )
                    continue
                snapshot = self._snapshot(sat_id, element_set, result, theta, observer_lat, observer_lon)
                if snapshot is not None:
                    snapshots.append(snapshot)
            LOGGER.debug("positions_computed", extra={"count": len(snapshots), "catalog_size": len(self.catalog)})
        return snapshots

    def _snapshot(
        self,
        sat_id: int,
        element_set: OrbitalElementSet,
        result: propagation.PropagationResult,
        theta: float,
        observer_lat: float,
        observer_lon: float,
    ) -> Optional[SatelliteSnapshot]:
        geodetic = eci_to_geodetic(result.state.position_km, theta)
        if not geodetic.is_finite():
            LOGGER.warning(
                "position_unavailable",
                extra={"satellite": element_set.name, "norad_id": element_set.norad_id},
            )
            return None
        latitude = geodetic.latitude_deg
        longitude = geodetic.longitude_deg
        visible = estimate_visibility(
            observer_lat,
            observer_lon,
            latitude,
            longitude,
            geodetic.height_km,
            rng=self._rng,
            settings=self.visibility,
        )
        return SatelliteSnapshot(
            id=sat_id,
            name=element_set.name,
            norad_id=element_set.norad_id,
            latitude=latitude,
            longitude=longitude,
            altitude=geodetic.height_km,
            velocity=result.state.speed_km_s,
            visible=visible,
        )

    def lookup(self, norad_id: str) -> Optional[OrbitalElementSet]:
        return self.catalog.get(norad_id)

    def passes(
        self,
        norad_id: str,
        observer_lat: float,
        observer_lon: float,
        days: float = 7,
        *,
        start: Optional[dt.datetime] = None,
        min_elevation_deg: float = 0.0,
    ) -> PassPrediction:
        element_set = self.catalog.require(norad_id)
        with log_context(norad_id=norad_id, observer_lat=observer_lat, observer_lon=observer_lon):
            prediction = predict_passes(
                element_set,
                observer_lat,
                observer_lon,
                start=start or self._clock(),
                days=days,
                step=self.pass_step,
                min_elevation_deg=min_elevation_deg,
            )
            LOGGER.info("passes_predicted", extra={"count": len(prediction.passes), "days": days})
        return prediction


def get_satellite_positions(observer_lat: float, observer_lon: float) -> List[SatelliteSnapshot]:
    """Current snapshots of the built-in catalog as seen from the observer."""

    return SatelliteTracker().positions(observer_lat, observer_lon)


__all__ = ["SatelliteSnapshot", "SatelliteTracker", "get_satellite_positions"]
