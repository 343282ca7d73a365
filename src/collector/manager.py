"""Source manager — time windows and on/off switches on top of a DataSource.

Any object with ``fetch(source, start, end) -> list[Reading]`` works as a
data source: the Fingrid client for live data, the synthetic source for
offline sessions and tests.
"""

from __future__ import annotations

import calendar
import logging
import time
from collections.abc import Callable, Iterable
from datetime import date, datetime, time as dtime, timedelta, timezone, tzinfo
from typing import Protocol

from src.contracts.enums import EnergySource
from src.contracts.reading import Reading
from src.shared.clock import localize
from src.shared.errors import InvalidRangeError

log = logging.getLogger(__name__)


class DataSource(Protocol):
    def fetch(self, source: EnergySource, start: datetime, end: datetime) -> list[Reading]: ...


def fetch_all(
    client: DataSource,
    start: datetime,
    end: datetime,
    sources: Iterable[EnergySource] = tuple(EnergySource),
    pause_sec: float = 0.0,
    sleep: Callable[[float], None] = time.sleep,
) -> list[Reading]:
    """Fetch every requested source in turn and concatenate the results.

    Raises:
        InvalidRangeError: If *start* is after *end*; no request is made.
    """
    if start > end:
        raise InvalidRangeError(f"start {start.isoformat()} is after end {end.isoformat()}")
    wanted = list(sources)
    readings: list[Reading] = []
    for i, source in enumerate(wanted):
        if i and pause_sec > 0:
            sleep(pause_sec)
        readings.extend(client.fetch(source, start, end))
    log.info("Collected %d readings from %d sources", len(readings), len(wanted))
    return readings


def fetch_last_hours(
    client: DataSource,
    hours: int,
    sources: Iterable[EnergySource] = tuple(EnergySource),
    now: datetime | None = None,
    **kwargs,
) -> list[Reading]:
    if hours <= 0:
        raise InvalidRangeError(f"hours must be positive, got {hours}")
    end = now or datetime.now(timezone.utc)
    return fetch_all(client, end - timedelta(hours=hours), end, sources, **kwargs)


def _window(first: date, last: date, tz: tzinfo | None) -> tuple[datetime, datetime]:
    """``first`` 00:00:00 to ``last`` 23:59:59, each end in its own local offset."""
    try:
        return (
            localize(datetime.combine(first, dtime.min), tz),
            localize(datetime.combine(last, dtime(23, 59, 59)), tz),
        )
    except (OverflowError, ValueError) as exc:
        raise InvalidRangeError(f"Window {first}..{last} is out of range: {exc}") from exc


def day_bounds(day: date, tz: tzinfo | None = None) -> tuple[datetime, datetime]:
    """Local start of *day* and the last second of it."""
    return _window(day, day, tz)


def week_bounds(year: int, week: int, tz: tzinfo | None = None) -> tuple[datetime, datetime]:
    """Monday 00:00 to Sunday 23:59:59 of ISO *week* in *year*."""
    try:
        monday = date.fromisocalendar(year, week, 1)
        sunday = date.fromisocalendar(year, week, 7)
    except ValueError as exc:
        raise InvalidRangeError(f"Invalid ISO week {year}-W{week}: {exc}") from exc
    return _window(monday, sunday, tz)


def month_bounds(year: int, month: int, tz: tzinfo | None = None) -> tuple[datetime, datetime]:
    if not 1 <= month <= 12:
        raise InvalidRangeError(f"month must be within 1..12, got {month}")
    try:
        first = date(year, month, 1)
        last = first.replace(day=calendar.monthrange(year, month)[1])
    except ValueError as exc:
        raise InvalidRangeError(f"Invalid month {year}-{month}: {exc}") from exc
    return _window(first, last, tz)


def fetch_day(client: DataSource, year: int, month: int, day: int,
              sources: Iterable[EnergySource] = tuple(EnergySource),
              tz: tzinfo | None = None, **kwargs) -> list[Reading]:
    try:
        target = date(year, month, day)
    except ValueError as exc:
        raise InvalidRangeError(f"Invalid date {year}-{month}-{day}: {exc}") from exc
    start, end = day_bounds(target, tz)
    return fetch_all(client, start, end, sources, **kwargs)


def fetch_week(client: DataSource, year: int, week: int,
               sources: Iterable[EnergySource] = tuple(EnergySource),
               tz: tzinfo | None = None, **kwargs) -> list[Reading]:
    start, end = week_bounds(year, week, tz)
    return fetch_all(client, start, end, sources, **kwargs)


def fetch_month(client: DataSource, year: int, month: int,
                sources: Iterable[EnergySource] = tuple(EnergySource),
                tz: tzinfo | None = None, **kwargs) -> list[Reading]:
    start, end = month_bounds(year, month, tz)
    return fetch_all(client, start, end, sources, **kwargs)
