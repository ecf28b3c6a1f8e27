"""Command line interface for the satellite tracker."""
from __future__ import annotations

import argparse
import json
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional, Sequence

from propagate import service as propagation
from propagate.frames import Frame

from .catalog import CatalogLookupError, load_catalog
from .config import LOG_LEVELS, AppConfig, load_config
from .logging import configure_logging, get_logger
from .service import SatelliteTracker
from .tle import validate

LOGGER = get_logger("cli")

EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_ERROR = 2


def parse_datetime(value: str) -> datetime:
    try:
        dt = datetime.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid datetime '{value}'") from exc
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_step(value: str) -> timedelta:
    v = value.strip().lower()
    if v.startswith("pt"):
        v = v[2:]
    try:
        if v.endswith("h"):
            return timedelta(hours=float(v[:-1]))
        if v.endswith("m"):
            return timedelta(minutes=float(v[:-1]))
        if v.endswith("s"):
            return timedelta(seconds=float(v[:-1]))
        return timedelta(seconds=float(v))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid step '{value}'") from exc


def _tracker(ns: argparse.Namespace, config: AppConfig, at: Optional[datetime] = None) -> SatelliteTracker:
    overrides = {}
    if ns.catalog:
        overrides["catalog"] = load_catalog(ns.catalog)
    if at is not None:
        overrides["clock"] = lambda: at
    return SatelliteTracker.from_config(config, **overrides)


def _run_positions(ns: argparse.Namespace, config: AppConfig) -> int:
    tracker = _tracker(ns, config, at=ns.at)
    snapshots = tracker.positions(ns.lat, ns.lon)
    if ns.json:
        print(json.dumps([snap.as_dict() for snap in snapshots], indent=2))
        return EXIT_OK
    for snap in snapshots:
        marker = "*" if snap.visible else " "
        print(
            f"{marker} {snap.id:>3} {snap.name:<16} NORAD {snap.norad_id:>6} "
            f"lat {snap.latitude:8.3f} lon {snap.longitude:9.3f} "
            f"alt {snap.altitude:9.1f} km  v {snap.velocity:6.3f} km/s"
        )
    return EXIT_OK


def _run_lookup(ns: argparse.Namespace, config: AppConfig) -> int:
    tracker = _tracker(ns, config)
    entry = tracker.lookup(ns.norad_id)
    if entry is None:
        LOGGER.error("not_found", extra={"norad_id": ns.norad_id})
        return EXIT_NOT_FOUND
    try:
        validate(entry)
        epoch = entry.epoch
    except ValueError as exc:
        LOGGER.error("invalid_element_set", extra={"norad_id": ns.norad_id, "reason": str(exc)})
        return EXIT_ERROR
    if ns.json:
        payload = {
            "name": entry.name,
            "noradId": entry.norad_id,
            "tle1": entry.line1,
            "tle2": entry.line2,
            "epoch": epoch.isoformat(),
        }
        print(json.dumps(payload, ensure_ascii=False))
    else:
        print(entry.as_text(), end="")
    return EXIT_OK


def _run_passes(ns: argparse.Namespace, config: AppConfig) -> int:
    if not config.passes_enabled:
        LOGGER.error("passes_disabled")
        return EXIT_ERROR
    tracker = _tracker(ns, config)
    try:
        prediction = tracker.passes(
            ns.norad_id,
            ns.lat,
            ns.lon,
            days=ns.days,
            start=ns.start,
            min_elevation_deg=ns.min_elevation,
        )
    except CatalogLookupError:
        LOGGER.error("not_found", extra={"norad_id": ns.norad_id})
        return EXIT_NOT_FOUND
    except propagation.PropagationError as exc:
        LOGGER.error("passes_failed", extra={"norad_id": ns.norad_id, "reason": str(exc)})
        return EXIT_ERROR
    if ns.json:
        print(json.dumps(prediction.as_dict(), indent=2))
    else:
        for item in prediction.passes:
            print(f"{item.start.isoformat()} -> {item.end.isoformat()}  max {item.max_elevation:5.1f} deg")
    return EXIT_OK


def _run_track(ns: argparse.Namespace, config: AppConfig) -> int:
    tracker = _tracker(ns, config)
    entry = tracker.lookup(ns.norad_id)
    if entry is None:
        LOGGER.error("not_found", extra={"norad_id": ns.norad_id})
        return EXIT_NOT_FOUND
    try:
        track = propagation.propagate(
            entry,
            start=ns.start,
            end=ns.end,
            step=ns.step,
            frame=Frame.from_string(ns.frame),
        )
    except (propagation.PropagationError, ValueError) as exc:
        LOGGER.error("track_failed", extra={"norad_id": ns.norad_id, "reason": str(exc)})
        return EXIT_ERROR
    print(json.dumps(track.as_dict(), indent=2))
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sat-tracker", description="Satellite position tracker")
    parser.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS, default=None, help="Logging verbosity (default: SAT_TRACKER_LOG_LEVEL or INFO).")
    parser.add_argument("--catalog", type=Path, help="TLE file to use instead of the built-in catalog.")
    subparsers = parser.add_subparsers(dest="command")

    positions = subparsers.add_parser("positions", help="Current position of every catalog satellite")
    positions.add_argument("--lat", type=float, required=True, help="Observer latitude (degrees)")
    positions.add_argument("--lon", type=float, required=True, help="Observer longitude (degrees)")
    positions.add_argument("--at", type=parse_datetime, help="Instant to evaluate (ISO-8601, default now)")
    positions.add_argument("--json", action="store_true", help="Emit JSON records")
    positions.set_defaults(handler=_run_positions)

    lookup = subparsers.add_parser("lookup", help="Show the element set for a NORAD id")
    lookup.add_argument("norad_id")
    lookup.add_argument("--json", action="store_true", help="Emit JSON")
    lookup.set_defaults(handler=_run_lookup)

    passes = subparsers.add_parser("passes", help="Predict passes over the observer")
    passes.add_argument("norad_id")
    passes.add_argument("--lat", type=float, required=True, help="Observer latitude (degrees)")
    passes.add_argument("--lon", type=float, required=True, help="Observer longitude (degrees)")
    passes.add_argument("--days", type=float, default=7.0, help="Prediction window in days")
    passes.add_argument("--start", type=parse_datetime, help="Window start (ISO-8601, default now)")
    passes.add_argument("--min-elevation", type=float, default=0.0, help="Horizon mask (degrees)")
    passes.add_argument("--json", action="store_true", help="Emit JSON")
    passes.set_defaults(handler=_run_passes)

    track = subparsers.add_parser("track", help="Sample a state-vector track")
    track.add_argument("norad_id")
    track.add_argument("--start", type=parse_datetime, required=True, help="Start time (ISO-8601, default UTC)")
    track.add_argument("--end", type=parse_datetime, required=True, help="End time (ISO-8601, default UTC)")
    track.add_argument("--step", type=parse_step, required=True, help="Step duration (seconds, e.g. 60 or PT5M)")
    track.add_argument("--frame", default="eci", choices=[f.value for f in Frame], help="Output frame")
    track.set_defaults(handler=_run_track)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    ns = parser.parse_args(list(argv) if argv is not None else None)
    if not hasattr(ns, "handler"):
        parser.print_help()
        return 1
    try:
        config = load_config()
    except ValueError as exc:
        configure_logging(ns.log_level)
        LOGGER.error("invalid_configuration", extra={"reason": str(exc)})
        return EXIT_ERROR
    configure_logging(ns.log_level or config.log_level)
    try:
        return ns.handler(ns, config)
    except FileNotFoundError as exc:
        LOGGER.error("catalog_missing", extra={"reason": str(exc)})
        return EXIT_ERROR
    except UnicodeDecodeError as exc:
        LOGGER.error("catalog_unreadable", extra={"reason": str(exc)})
        return EXIT_ERROR


def entrypoint() -> None:
    sys.exit(main())


__all__ = ["build_parser", "entrypoint", "main", "parse_datetime", "parse_step"]
