"""Synthetic collector — readings without network access.

Used by the ``demo`` command and by tests. Output levels are drawn per
source around the source's status thresholds, so a generated batch
contains Low, Normal and High readings; with ``outage_rate`` > 0 some
readings report exactly 0.0 (equipment malfunction).
"""

from __future__ import annotations

import logging
import random as _random_mod
from datetime import datetime, timedelta, timezone

from src.contracts.enums import EnergySource
from src.contracts.reading import DEFAULT_THRESHOLDS, Reading, Thresholds

log = logging.getLogger(__name__)

LOCATIONS: dict[EnergySource, str] = {
    EnergySource.SOLAR: "Solar Array A",
    EnergySource.WIND: "Turbine Field B",
    EnergySource.HYDRO: "Dam C",
}


def collect_reading(
    source: EnergySource,
    output: float,
    timestamp: datetime | None = None,
    thresholds: dict[EnergySource, Thresholds] | None = None,
) -> Reading:
    """Record one manual reading; timestamp defaults to now (UTC)."""
    return Reading.create(
        timestamp=timestamp or datetime.now(timezone.utc),
        source=source,
        output=output,
        location=LOCATIONS[source],
        thresholds=thresholds,
    )


class SyntheticSource:
    """DataSource that generates one reading per source per ``step``."""

    def __init__(
        self,
        rng: _random_mod.Random,
        thresholds: dict[EnergySource, Thresholds] | None = None,
        step: timedelta = timedelta(hours=1),
        outage_rate: float = 0.02,
    ) -> None:
        self.rng = rng
        self.thresholds = thresholds or DEFAULT_THRESHOLDS
        self.step = step
        self.outage_rate = outage_rate

    def _draw(self, source: EnergySource) -> float:
        if self.rng.random() < self.outage_rate:
            return 0.0
        t = self.thresholds[source]
        # spread 50 % below low .. 25 % above high
        return round(self.rng.uniform(t.low * 0.5, t.high * 1.25), 2)

    def fetch(self, source: EnergySource, start: datetime, end: datetime) -> list[Reading]:
        readings: list[Reading] = []
        ts = start
        while ts <= end:
            readings.append(collect_reading(source, self._draw(source), ts, self.thresholds))
            ts += self.step
        log.debug("Generated %d synthetic %s readings", len(readings), source.value)
        return readings


def generate_readings(
    start: datetime,
    hours: int,
    rng: _random_mod.Random,
    sources: tuple[EnergySource, ...] = tuple(EnergySource),
    thresholds: dict[EnergySource, Thresholds] | None = None,
) -> list[Reading]:
    """Hourly readings for every source in ``[start, start + hours)``."""
    if hours <= 0:
        return []
    source = SyntheticSource(rng, thresholds)
    end = start + timedelta(hours=hours - 1)
    readings: list[Reading] = []
    for src in sources:
        readings.extend(source.fetch(src, start, end))
    return readings
