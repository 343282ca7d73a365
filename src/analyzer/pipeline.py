"""Pipeline — orchestrator: readings -> statistics -> alerts -> storage -> report.

The analysis itself is read-only: it never changes the session state.
Storage is advanced separately by :func:`src.storage.state.apply_readings`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from src.analyzer.detector import DEFAULT_LOW_FRACTION, detect_issues
from src.analyzer.reporter import write_plots, write_report_txt, write_summary_csv
from src.analyzer.statistics import Summary, summarize_by_source
from src.contracts.alert import Alert
from src.contracts.enums import AlertKind, EnergySource, StorageStatus
from src.contracts.reading import Reading
from src.shared.settings import StorageSettings
from src.storage.simulator import (
    DEFAULT_STORAGE,
    calculate_remaining_hours,
    check_storage_alerts,
    get_storage_status,
)

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    """Everything one analysis pass produces."""

    reading_count: int
    summaries: dict[EnergySource, Summary]
    alerts: list[Alert]
    storage_level: float
    storage_status: StorageStatus
    remaining_hours: float
    storage_alert: Alert | None = None
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def all_alerts(self) -> list[Alert]:
        """Reading alerts followed by the storage alert, if any."""
        return self.alerts + ([self.storage_alert] if self.storage_alert else [])


# ═══════════════════════════════════════════════════════════════════════════
#  Pipeline core
# ═══════════════════════════════════════════════════════════════════════════


def analyze(
    readings: Iterable[Reading],
    storage_level: float,
    storage: StorageSettings = DEFAULT_STORAGE,
    low_fraction: float = DEFAULT_LOW_FRACTION,
) -> AnalysisResult:
    """Summaries per source, reading alerts and storage status in one pass."""
    data = list(readings)
    if not data:
        log.warning("No readings to analyse")

    summaries = summarize_by_source(data)
    alerts = detect_issues(data, low_fraction)
    by_kind = {kind: sum(1 for a in alerts if a.kind is kind) for kind in AlertKind}
    log.info(
        "Analysed %d readings: low=%d high=%d malfunction=%d",
        len(data),
        by_kind[AlertKind.LOW_OUTPUT],
        by_kind[AlertKind.HIGH_OUTPUT],
        by_kind[AlertKind.MALFUNCTION],
    )

    storage_alert = check_storage_alerts(storage_level, storage)
    status = get_storage_status(storage_level, storage)
    if storage_alert is not None:
        log.warning("%s", storage_alert.message)
    log.info("Storage %.0f MWh (%s)", storage_level, status.value)

    return AnalysisResult(
        reading_count=len(data),
        summaries=summaries,
        alerts=alerts,
        storage_level=storage_level,
        storage_status=status,
        remaining_hours=calculate_remaining_hours(storage_level, storage.consumption_rate_mwh),
        storage_alert=storage_alert,
    )


def run_report(
    readings: Iterable[Reading],
    storage_level: float,
    out_dir: str | Path = "out",
    storage: StorageSettings = DEFAULT_STORAGE,
    low_fraction: float = DEFAULT_LOW_FRACTION,
    plots: bool = True,
) -> AnalysisResult:
    """Analyse *readings* and write report.txt, summary.csv and plots into *out_dir*."""
    data = list(readings)
    result = analyze(data, storage_level, storage, low_fraction)

    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)
    write_summary_csv(result.summaries, out / "summary.csv")
    write_report_txt(result, out / "report.txt", storage)
    if plots and data:
        write_plots(data, out / "plots")

    log.info("Report complete. Outputs in %s/", out)
    return result
