"""Application configuration loader for sat_tracker."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from .visibility import VisibilitySettings

__all__ = [
    "FeatureFlags",
    "AppConfig",
    "load_config",
]

DEFAULT_PASS_STEP_SECONDS = 60.0
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class FeatureFlags:
    """Feature toggles used throughout the application."""

    passes: bool = True


@dataclass(frozen=True)
class AppConfig:
    """Container for derived application configuration."""

    base_dir: Path
    catalog_path: Optional[Path] = None
    log_level: str = "INFO"
    random_seed: Optional[int] = None
    pass_step_seconds: float = DEFAULT_PASS_STEP_SECONDS
    visibility: VisibilitySettings = field(default_factory=VisibilitySettings)
    feature_flags: FeatureFlags = field(default_factory=FeatureFlags)

    @property
    def passes_enabled(self) -> bool:
        return self.feature_flags.passes


_TRUE_SET = {"1", "true", "yes", "on"}
_FALSE_SET = {"0", "false", "no", "off"}


def _to_bool(value: Optional[str], default: Optional[bool] = None) -> Optional[bool]:
    if value is None:
        return default
    lowered = value.strip().lower()
    if lowered in _TRUE_SET:
        return True
    if lowered in _FALSE_SET:
        return False
    return default


def _to_number(env: Mapping[str, str], key: str, default: float, cast=float):
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw.strip())
    except ValueError as exc:
        raise ValueError(f"{key} must be numeric, got {raw!r}") from exc


def load_config(env: Optional[Mapping[str, str]] = None) -> AppConfig:
    """Load configuration from environment variables."""

    env_map: Mapping[str, str]
    if env is None:
        env_map = os.environ
    else:
        env_map = env

    base_dir = Path(env_map.get("SAT_TRACKER_BASE_DIR", Path(__file__).resolve().parent.parent))

    catalog_raw = env_map.get("SAT_TRACKER_CATALOG")
    catalog_path = Path(catalog_raw).expanduser() if catalog_raw else None
    if catalog_path is not None and not catalog_path.is_absolute():
        catalog_path = base_dir / catalog_path

    seed = _to_number(env_map, "SAT_TRACKER_SEED", None, cast=int)

    step = _to_number(env_map, "SAT_TRACKER_PASS_STEP", DEFAULT_PASS_STEP_SECONDS)
    if step <= 0:
        raise ValueError("SAT_TRACKER_PASS_STEP must be positive")

    visibility = VisibilitySettings(
        max_distance_deg=_to_number(
            env_map, "SAT_TRACKER_VISIBILITY_MAX_DISTANCE", VisibilitySettings.max_distance_deg
        ),
    )

    log_level = env_map.get("SAT_TRACKER_LOG_LEVEL", "INFO").strip().upper()
    if log_level not in LOG_LEVELS:
        raise ValueError(f"SAT_TRACKER_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {log_level!r}")

    flag = _to_bool(env_map.get("SAT_TRACKER_FEATURE_PASSES"), default=True)

    return AppConfig(
        base_dir=base_dir,
        catalog_path=catalog_path,
        log_level=log_level,
        random_seed=seed,
        pass_step_seconds=step,
        visibility=visibility,
        feature_flags=FeatureFlags(passes=bool(flag)),
    )
