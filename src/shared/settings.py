"""Application settings: built-in defaults merged with config/settings.yaml.

Layout of the YAML file
───────────────────────
  api:
    base_url, api_key, page_size, timeout_sec, max_retries,
    retry_delay_sec, rate_limit_delay_sec, chunk_days, source_pause_sec,
    datasets: {solar: 248, wind: 181, hydro: 191}
  thresholds:
    solar: {low: 100, high: 400}   # MW
    ...
  storage:
    max_capacity_mwh, min_safe_pct, max_safe_pct,
    consumption_rate_mwh, initial_level_mwh,
    nominal_power_mw: {solar: 400, wind: 2000, hydro: 1800}

Every key is optional; unknown keys are ignored with a warning.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

from src.contracts.enums import EnergySource
from src.contracts.reading import DEFAULT_THRESHOLDS, Thresholds
from src.shared.config_loader import load_yaml
from src.shared.errors import ConfigError

log = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config") / "settings.yaml"
API_KEY_ENV = "FINGRID_API_KEY"


@dataclass(frozen=True, slots=True)
class ApiSettings:
    base_url: str = "https://data.fingrid.fi/api"
    api_key: str = ""
    page_size: int = 1000
    timeout_sec: float = 30.0
    max_retries: int = 3
    retry_delay_sec: float = 5.0
    rate_limit_delay_sec: float = 10.0
    chunk_days: int = 30
    source_pause_sec: float = 2.0
    datasets: dict[EnergySource, int] = field(
        default_factory=lambda: {
            EnergySource.SOLAR: 248,
            EnergySource.WIND: 181,
            EnergySource.HYDRO: 191,
        }
    )


@dataclass(frozen=True, slots=True)
class StorageSettings:
    max_capacity_mwh: float = 10_000_000.0
    min_safe_pct: float = 15.0
    max_safe_pct: float = 85.0
    consumption_rate_mwh: float = 20_000.0
    initial_level_mwh: float = 5_000_000.0
    nominal_power_mw: dict[EnergySource, float] = field(
        default_factory=lambda: {
            EnergySource.SOLAR: 400.0,
            EnergySource.WIND: 2000.0,
            EnergySource.HYDRO: 1800.0,
        }
    )


@dataclass(frozen=True, slots=True)
class Settings:
    api: ApiSettings = field(default_factory=ApiSettings)
    storage: StorageSettings = field(default_factory=StorageSettings)
    thresholds: dict[EnergySource, Thresholds] = field(
        default_factory=lambda: dict(DEFAULT_THRESHOLDS)
    )


def _per_source(raw: Any, section: str, cast: type = float) -> dict[EnergySource, Any]:
    if not isinstance(raw, dict):
        raise ConfigError(f"'{section}' must be a mapping of source -> value")
    out: dict[EnergySource, Any] = {}
    for key, value in raw.items():
        try:
            out[EnergySource.parse(str(key))] = cast(value)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"{section}: {exc}") from exc
    return out


def _merge_scalars(base: Any, raw: dict[str, Any], section: str, skip: set[str]) -> Any:
    known = {f.name: f for f in fields(base)}
    changes: dict[str, Any] = {}
    for key, value in raw.items():
        if key in skip:
            continue
        if key not in known:
            log.warning("Unknown key %s.%s ignored", section, key)
            continue
        current = getattr(base, key)
        try:
            changes[key] = type(current)(value)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"{section}.{key}: cannot use {value!r}") from exc
    return replace(base, **changes)


def settings_from_dict(cfg: dict[str, Any]) -> Settings:
    """Build Settings from an already parsed YAML mapping."""
    api = ApiSettings()
    raw_api = cfg.get("api") or {}
    api = _merge_scalars(api, raw_api, "api", skip={"datasets"})
    if "datasets" in raw_api:
        api = replace(api, datasets={**api.datasets, **_per_source(raw_api["datasets"], "api.datasets", int)})

    storage = StorageSettings()
    raw_storage = cfg.get("storage") or {}
    storage = _merge_scalars(storage, raw_storage, "storage", skip={"nominal_power_mw"})
    if "nominal_power_mw" in raw_storage:
        storage = replace(
            storage,
            nominal_power_mw={
                **storage.nominal_power_mw,
                **_per_source(raw_storage["nominal_power_mw"], "storage.nominal_power_mw"),
            },
        )
    if storage.max_capacity_mwh <= 0:
        raise ConfigError("storage.max_capacity_mwh must be positive")

    thresholds = dict(DEFAULT_THRESHOLDS)
    for src, bounds in _per_source(cfg.get("thresholds") or {}, "thresholds", dict).items():
        t = Thresholds(
            low=float(bounds.get("low", thresholds[src].low)),
            high=float(bounds.get("high", thresholds[src].high)),
        )
        if t.low > t.high:
            raise ConfigError(f"thresholds.{src.value}: low {t.low} exceeds high {t.high}")
        thresholds[src] = t

    return Settings(api=api, storage=storage, thresholds=thresholds)


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from *path* (default ``config/settings.yaml``).

    A missing file is not an error: built-in defaults are used. The API key
    from the ``FINGRID_API_KEY`` environment variable wins over the file.
    """
    p = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    if p.exists():
        settings = settings_from_dict(load_yaml(p))
        log.info("Settings loaded from %s", p)
    else:
        log.info("No settings file at %s — using defaults", p)
        settings = Settings()

    env_key = os.environ.get(API_KEY_ENV, "").strip()
    if env_key:
        settings = replace(settings, api=replace(settings.api, api_key=env_key))
    return settings
