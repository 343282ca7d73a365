"""Reading — one timestamped energy-output observation for a source."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone

from src.contracts.enums import EnergySource, ReadingStatus


@dataclass(frozen=True, slots=True)
class Thresholds:
    """Low/high output bounds (MW) used to derive a reading's status."""

    low: float
    high: float


DEFAULT_THRESHOLDS: dict[EnergySource, Thresholds] = {
    EnergySource.SOLAR: Thresholds(low=100.0, high=400.0),
    EnergySource.WIND: Thresholds(low=800.0, high=2000.0),
    EnergySource.HYDRO: Thresholds(low=1000.0, high=1800.0),
}


def classify_output(
    output: float,
    source: EnergySource,
    thresholds: dict[EnergySource, Thresholds] | None = None,
) -> ReadingStatus:
    """Map an output value to its status band for *source*."""
    t = (thresholds or DEFAULT_THRESHOLDS)[source]
    if output < t.low:
        return ReadingStatus.LOW
    if output > t.high:
        return ReadingStatus.HIGH
    return ReadingStatus.NORMAL


@dataclass(frozen=True, slots=True)
class Reading:
    """Immutable energy reading.

    ``status`` is fixed when the reading is created and travels with it;
    transformations of ``output`` never recompute it.
    """

    timestamp: datetime     # timezone-aware
    source: EnergySource
    output: float           # MW, >= 0 as reported
    location: str
    status: ReadingStatus

    @classmethod
    def create(
        cls,
        timestamp: datetime,
        source: EnergySource,
        output: float,
        location: str,
        thresholds: dict[EnergySource, Thresholds] | None = None,
    ) -> Reading:
        """Build a reading and derive its status from ``(output, source)``."""
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        return cls(
            timestamp=timestamp,
            source=source,
            output=float(output),
            location=location,
            status=classify_output(output, source, thresholds),
        )

    def with_output(self, output: float) -> Reading:
        """Copy with a new output; status is kept as recorded."""
        return replace(self, output=output)
