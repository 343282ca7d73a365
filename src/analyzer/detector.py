"""Detector — rule-based classification: Reading stream → Alerts.

Three independent passes run over the same readings and their results
are concatenated; a reading may contribute to more than one pass (a
zero-output reading with status Low can feed both the low-output and the
malfunction pass) and nothing is deduplicated.

Passes
──────
  low_output   per source: share of Low readings > ``low_fraction``
               → one aggregate alert (average output, low share in %)
  high_output  one alert per reading with status High
  malfunction  one alert per reading with output exactly 0.0

The detector is pure: no logging, no clock. Alert timestamps come from
the readings themselves.
"""

from __future__ import annotations

from collections.abc import Iterable

from src.analyzer.filters import group_by_source
from src.analyzer.statistics import mean
from src.contracts.alert import Alert
from src.contracts.enums import AlertKind, ReadingStatus
from src.contracts.reading import Reading

DEFAULT_LOW_FRACTION = 0.75


# ═══════════════════════════════════════════════════════════════════════════
#  Public API
# ═══════════════════════════════════════════════════════════════════════════


def detect_issues(
    readings: Iterable[Reading],
    low_fraction: float = DEFAULT_LOW_FRACTION,
) -> list[Alert]:
    """Run all three passes and return their alerts in pass order."""
    data = list(readings)
    if not data:
        return []
    return (
        _detect_low_output(data, low_fraction)
        + _detect_high_output(data)
        + _detect_malfunction(data)
    )


# ═══════════════════════════════════════════════════════════════════════════
#  Pass implementations
# ═══════════════════════════════════════════════════════════════════════════


def _detect_low_output(readings: list[Reading], low_fraction: float) -> list[Alert]:
    alerts: list[Alert] = []
    for source, group in group_by_source(readings).items():
        low = sum(1 for r in group if r.status is ReadingStatus.LOW)
        share = low / len(group)
        if share <= low_fraction:
            continue
        avg = mean([r.output for r in group]) or 0.0
        pct = int(share * 100)
        alerts.append(
            Alert(
                kind=AlertKind.LOW_OUTPUT,
                source=source,
                message=(
                    f"Low energy output from {source.value}: {pct}% of "
                    f"{len(group)} readings below threshold (average {avg:.2f} MW)"
                ),
                timestamp=max(r.timestamp for r in group),
            )
        )
    return alerts


def _detect_high_output(readings: list[Reading]) -> list[Alert]:
    return [
        Alert(
            kind=AlertKind.HIGH_OUTPUT,
            source=r.source,
            message=(
                f"Unusually high energy output from {r.source.value} "
                f"at {r.location}: {r.output:.2f} MW"
            ),
            timestamp=r.timestamp,
        )
        for r in readings
        if r.status is ReadingStatus.HIGH
    ]


def _detect_malfunction(readings: list[Reading]) -> list[Alert]:
    return [
        Alert(
            kind=AlertKind.MALFUNCTION,
            source=r.source,
            message=f"Possible equipment malfunction at {r.location}: no energy output detected",
            timestamp=r.timestamp,
        )
        for r in readings
        if r.output == 0.0
    ]
