"""Satellite positions, visibility and passes from two-line element sets."""

from .catalog import DEFAULT_CATALOG, Catalog, CatalogLookupError, load_catalog
from .config import AppConfig, load_config
from .passes import PassPrediction, SatellitePass, predict_passes
from .service import SatelliteSnapshot, SatelliteTracker, get_satellite_positions
from .tle import ElementSetError, OrbitalElementSet, checksum, epoch, parse_text, validate
from .visibility import VisibilitySettings, estimate_visibility

__version__ = "0.1.0"

__all__ = [
    "AppConfig",
    "Catalog",
    "CatalogLookupError",
    "DEFAULT_CATALOG",
    "ElementSetError",
    "OrbitalElementSet",
    "PassPrediction",
    "SatellitePass",
    "SatelliteSnapshot",
    "SatelliteTracker",
    "VisibilitySettings",
    "checksum",
    "epoch",
    "estimate_visibility",
    "get_satellite_positions",
    "load_catalog",
    "load_config",
    "parse_text",
    "predict_passes",
    "validate",
]
