"""Statistics Engine — descriptive aggregates over reading outputs.

Every function takes a sequence of floats and returns ``None`` for an
empty input instead of a sentinel number; callers decide how to render
the absence (the console prints "N/A").

  mean       sum / count
  median     middle element, or the average of the two central ones
  mode       most frequent value; ties resolve to the lowest value
  range      max - min
  midrange   (max + min) / 2
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from math import fsum

from src.contracts.enums import EnergySource
from src.contracts.reading import Reading


def mean(values: Sequence[float]) -> float | None:
    if not values:
        return None
    n = len(values)
    try:
        return fsum(values) / n
    except OverflowError:
        # sum exceeds float range; divide first
        return fsum(v / n for v in values)


def median(values: Sequence[float]) -> float | None:
    if not values:
        return None
    ordered = sorted(values)
    n = len(ordered)
    mid = n // 2
    if n % 2:
        return ordered[mid]
    return ordered[mid - 1] / 2 + ordered[mid] / 2


def mode(values: Sequence[float]) -> float | None:
    if not values:
        return None
    counts = Counter(values)
    top = max(counts.values())
    return min(v for v, c in counts.items() if c == top)


def value_range(values: Sequence[float]) -> float | None:
    if not values:
        return None
    return max(values) - min(values)


def midrange(values: Sequence[float]) -> float | None:
    if not values:
        return None
    lo, hi = min(values), max(values)
    # lo/2 + hi/2 cannot overflow to inf for values near float max
    return lo / 2 + hi / 2


@dataclass(frozen=True, slots=True)
class Summary:
    """All five aggregates for one set of values."""

    count: int
    mean: float | None
    median: float | None
    mode: float | None
    range: float | None
    midrange: float | None


def summarize(values: Sequence[float]) -> Summary:
    vals = list(values)
    return Summary(
        count=len(vals),
        mean=mean(vals),
        median=median(vals),
        mode=mode(vals),
        range=value_range(vals),
        midrange=midrange(vals),
    )


def outputs(readings: Iterable[Reading]) -> list[float]:
    return [r.output for r in readings]


def summarize_by_source(readings: Iterable[Reading]) -> dict[EnergySource, Summary]:
    """Summary per source; a source with no readings gets an all-None summary."""
    grouped: dict[EnergySource, list[float]] = {src: [] for src in EnergySource}
    for r in readings:
        grouped[r.source].append(r.output)
    return {src: summarize(vals) for src, vals in grouped.items()}
