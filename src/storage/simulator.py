"""Storage Simulator — bounded energy reservoir driven by production readings.

The reservoir is a single scalar ``level`` (MWh) kept inside
``[0, max_capacity_mwh]``. Every function takes the level by value and
returns a new one; status bands are derived from the level on each call
and never stored.

Status bands (share of capacity)
────────────────────────────────
  Critical   < 10 %
  Low        < 30 %
  High       > 90 %
  Normal     otherwise

Two ways of moving the level
────────────────────────────
  update_storage           historical: average output per source from the
                           readings × hours, minus consumption
  simulate_storage_impact  what-if: fixed nominal power of every source
                           that is switched on × hours, minus consumption
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timezone

from src.analyzer.filters import group_by_source
from src.analyzer.statistics import mean
from src.contracts.alert import Alert
from src.contracts.enums import AlertKind, EnergySource, StorageStatus
from src.contracts.reading import Reading
from src.shared.settings import StorageSettings

DEFAULT_STORAGE = StorageSettings()

MAX_CAPACITY = DEFAULT_STORAGE.max_capacity_mwh
DEFAULT_CONSUMPTION_RATE = DEFAULT_STORAGE.consumption_rate_mwh
MIN_SAFE_LEVEL = MAX_CAPACITY * DEFAULT_STORAGE.min_safe_pct / 100
MAX_SAFE_LEVEL = MAX_CAPACITY * DEFAULT_STORAGE.max_safe_pct / 100


@dataclass(frozen=True, slots=True)
class Projection:
    """Result of a what-if projection."""

    level: float
    message: str


def clamp_level(level: float, cfg: StorageSettings = DEFAULT_STORAGE) -> float:
    """Bound *level* to ``[0, capacity]``; NaN (inf - inf) collapses to 0."""
    if math.isnan(level):
        return 0.0
    return min(max(level, 0.0), cfg.max_capacity_mwh)


def percent_of_capacity(level: float, cfg: StorageSettings = DEFAULT_STORAGE) -> float:
    return level / cfg.max_capacity_mwh * 100


def update_storage(
    level: float,
    readings: Iterable[Reading],
    hours_passed: float = 1.0,
    cfg: StorageSettings = DEFAULT_STORAGE,
) -> float:
    """Return the level after *hours_passed* of production and consumption.

    Each source contributes its *average* output over the readings times
    the elapsed hours, so a source sampled more often does not weigh more.
    """
    production = 0.0
    for group in group_by_source(readings).values():
        avg = mean([r.output for r in group]) or 0.0
        production += avg * hours_passed
    consumption = cfg.consumption_rate_mwh * hours_passed
    return clamp_level(level + production - consumption, cfg)


def get_storage_status(level: float, cfg: StorageSettings = DEFAULT_STORAGE) -> StorageStatus:
    pct = percent_of_capacity(level, cfg)
    if pct < 10:
        return StorageStatus.CRITICAL
    if pct < 30:
        return StorageStatus.LOW
    if pct > 90:
        return StorageStatus.HIGH
    return StorageStatus.NORMAL


def check_storage_alerts(
    level: float,
    cfg: StorageSettings = DEFAULT_STORAGE,
    at: datetime | None = None,
) -> Alert | None:
    """At most one alert: below the minimum or above the maximum safe level.

    Storage alerts are not tied to a source; SOLAR is used as placeholder.
    """
    pct = percent_of_capacity(level, cfg)
    if pct < cfg.min_safe_pct:
        kind, word = AlertKind.LOW_OUTPUT, "low"
    elif pct > cfg.max_safe_pct:
        kind, word = AlertKind.HIGH_OUTPUT, "high"
    else:
        return None
    return Alert(
        kind=kind,
        source=EnergySource.SOLAR,
        message=f"Storage level critically {word}: {int(level / 1000)} GWh ({int(pct)}%)",
        timestamp=at or datetime.now(timezone.utc),
    )


def calculate_remaining_hours(
    level: float,
    consumption_rate: float = DEFAULT_CONSUMPTION_RATE,
) -> float:
    """Hours until empty with no production; ``inf`` if nothing is consumed."""
    if consumption_rate <= 0:
        return math.inf
    return level / consumption_rate


def simulate_storage_impact(
    level: float,
    solar_on: bool,
    wind_on: bool,
    hydro_on: bool,
    hours_to_project: int = 24,
    cfg: StorageSettings = DEFAULT_STORAGE,
) -> Projection:
    """Project the level using nominal source power, ignoring stored readings."""
    switched = {
        EnergySource.SOLAR: solar_on,
        EnergySource.WIND: wind_on,
        EnergySource.HYDRO: hydro_on,
    }
    production = sum(
        cfg.nominal_power_mw[src] * hours_to_project for src, on in switched.items() if on
    )
    consumption = cfg.consumption_rate_mwh * hours_to_project
    projected = clamp_level(level + production - consumption, cfg)

    if projected > level:
        change = "increase to"
    elif projected < level:
        change = "decrease to"
    else:
        change = "no change, stays at"
    message = (
        f"Projected {hours_to_project}h impact: {change} "
        f"{projected / 1000:.1f} GWh ({int(percent_of_capacity(projected, cfg))}%)"
    )
    return Projection(level=projected, message=message)


def hours_spanned(readings: Iterable[Reading]) -> float:
    """Hours between the earliest and latest reading; 1.0 if that is zero."""
    stamps = [r.timestamp for r in readings]
    if not stamps:
        return 1.0
    span = (max(stamps) - min(stamps)).total_seconds() / 3600
    return span if span > 0 else 1.0
