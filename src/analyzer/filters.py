"""Temporal Filter and search helpers over reading sequences.

All filters are pure, order-preserving selections. Calendar fields are
read after converting each timestamp into *tz* (default: the local
timezone of the process), and the week number is always the ISO-8601
week (``datetime.isocalendar().week``), so Monday-based weeks with the
year's first Thursday in week 1.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime, tzinfo

from src.contracts.enums import EnergySource, ReadingStatus
from src.contracts.reading import Reading
from src.shared.clock import to_local
from src.shared.errors import InvalidRangeError


def _check(name: str, value: int, lo: int, hi: int) -> None:
    if not lo <= value <= hi:
        raise InvalidRangeError(f"{name} must be within {lo}..{hi}, got {value}")


def _select(
    readings: Iterable[Reading],
    field: Callable[[datetime], int],
    wanted: int,
    tz: tzinfo | None,
) -> list[Reading]:
    return [r for r in readings if field(to_local(r.timestamp, tz)) == wanted]


def filter_by_hour(readings: Iterable[Reading], hour: int, tz: tzinfo | None = None) -> list[Reading]:
    _check("hour", hour, 0, 23)
    return _select(readings, lambda dt: dt.hour, hour, tz)


def filter_by_day(readings: Iterable[Reading], day: int, tz: tzinfo | None = None) -> list[Reading]:
    """Readings whose day-of-month equals *day* (any month, any year)."""
    _check("day", day, 1, 31)
    return _select(readings, lambda dt: dt.day, day, tz)


def filter_by_week(readings: Iterable[Reading], week: int, tz: tzinfo | None = None) -> list[Reading]:
    """Readings in ISO week *week* (any ISO year)."""
    _check("week", week, 1, 53)
    return _select(readings, lambda dt: dt.isocalendar().week, week, tz)


def filter_by_month(readings: Iterable[Reading], month: int, tz: tzinfo | None = None) -> list[Reading]:
    _check("month", month, 1, 12)
    return _select(readings, lambda dt: dt.month, month, tz)


def filter_by_range(readings: Iterable[Reading], start: datetime, end: datetime) -> list[Reading]:
    """Readings with ``start <= timestamp <= end``.

    Raises:
        InvalidRangeError: If *start* is after *end*.
    """
    if start > end:
        raise InvalidRangeError(f"start {start.isoformat()} is after end {end.isoformat()}")
    return [r for r in readings if start <= r.timestamp <= end]


def search_by_output(readings: Iterable[Reading], minimum: float, maximum: float) -> list[Reading]:
    """Readings with output inside ``[minimum, maximum]``."""
    if minimum > maximum:
        raise InvalidRangeError(f"minimum {minimum} exceeds maximum {maximum}")
    return [r for r in readings if minimum <= r.output <= maximum]


def search_by_status(readings: Iterable[Reading], status: str | ReadingStatus) -> list[Reading]:
    """Readings whose recorded status matches *status* (case-insensitive).

    An unknown status name matches nothing.
    """
    if not isinstance(status, ReadingStatus):
        try:
            status = ReadingStatus.parse(status)
        except ValueError:
            return []
    return [r for r in readings if r.status is status]


def group_by_source(readings: Iterable[Reading]) -> dict[EnergySource, list[Reading]]:
    """Group readings by source, keeping input order inside each group.

    Only sources that actually occur are present in the result.
    """
    groups: dict[EnergySource, list[Reading]] = {}
    for r in readings:
        groups.setdefault(r.source, []).append(r)
    return groups
