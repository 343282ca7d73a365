"""Shared fixtures for Renewable Energy Plant System tests."""

from __future__ import annotations

import io
import time
from collections.abc import Iterable, Iterator
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import pytest

from src.console.display import ConsoleIO
from src.contracts.alert import Alert
from src.contracts.enums import AlertKind, EnergySource, ReadingStatus
from src.contracts.reading import Reading

BASE_TS = datetime(2025, 3, 24, 12, 0, 0, tzinfo=timezone.utc)  # Monday, ISO week 13

# ── Helper: create Reading with sensible defaults ───────────────────────


def make_reading(
    *,
    timestamp: datetime = BASE_TS,
    source: EnergySource = EnergySource.SOLAR,
    output: float = 250.0,
    location: str = "Test Site",
    status: ReadingStatus | None = None,
) -> Reading:
    """Reading with status derived from the default thresholds unless given."""
    if status is None:
        return Reading.create(timestamp, source, output, location)
    return Reading(
        timestamp=timestamp,
        source=source,
        output=output,
        location=location,
        status=status,
    )


def make_alert(
    *,
    kind: AlertKind = AlertKind.HIGH_OUTPUT,
    source: EnergySource = EnergySource.SOLAR,
    message: str = "test alert",
    timestamp: datetime = BASE_TS,
) -> Alert:
    return Alert(kind=kind, source=source, message=message, timestamp=timestamp)


# ── Timestamp helpers ────────────────────────────────────────────────────


def ts(hours: float = 0, base: datetime = BASE_TS) -> datetime:
    """Return a UTC timestamp offset from *base* by *hours*."""
    return base + timedelta(hours=hours)


def series(
    source: EnergySource,
    outputs: Iterable[float],
    start: datetime = BASE_TS,
    step_hours: float = 1,
) -> list[Reading]:
    """Hourly readings for one source, one per value in *outputs*."""
    return [
        make_reading(timestamp=ts(i * step_hours, start), source=source, output=v)
        for i, v in enumerate(outputs)
    ]


# ── Scripted console ────────────────────────────────────────────────────


def scripted_io(lines: Iterable[str]) -> tuple[ConsoleIO, io.StringIO]:
    """ConsoleIO fed from *lines*; EOFError once they run out."""
    it = iter(lines)

    def _input(_prompt: str) -> str:
        try:
            return next(it)
        except StopIteration:
            raise EOFError from None

    out = io.StringIO()
    return ConsoleIO(input_fn=_input, output=out), out


# ── Fixtures ─────────────────────────────────────────────────────────────


@pytest.fixture
def mixed_readings() -> list[Reading]:
    """Two readings per source covering Low, Normal and High bands."""
    return [
        make_reading(timestamp=ts(0), source=EnergySource.SOLAR, output=50.0),     # Low
        make_reading(timestamp=ts(1), source=EnergySource.SOLAR, output=450.0),    # High
        make_reading(timestamp=ts(0), source=EnergySource.WIND, output=1000.0),    # Normal
        make_reading(timestamp=ts(1), source=EnergySource.WIND, output=0.0),       # Low, malfunction
        make_reading(timestamp=ts(0), source=EnergySource.HYDRO, output=1500.0),   # Normal
        make_reading(timestamp=ts(1), source=EnergySource.HYDRO, output=1900.0),   # High
    ]


@pytest.fixture
def utc():
    return timezone.utc


@pytest.fixture
def helsinki(monkeypatch) -> Iterator[ZoneInfo]:
    """Pin the process-local zone to Europe/Helsinki (EET, EEST in summer)."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    try:
        zone = ZoneInfo("Europe/Helsinki")
    except ZoneInfoNotFoundError:
        pytest.skip("tz database not installed")
    monkeypatch.setenv("TZ", "Europe/Helsinki")
    time.tzset()
    yield zone
    monkeypatch.undo()
    time.tzset()
