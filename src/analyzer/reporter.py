"""Звітування: таблиці pandas, запис CSV, TXT, PNG."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

import pandas as pd

from src.analyzer.statistics import Summary
from src.contracts.enums import SOURCE_ORDER, EnergySource
from src.contracts.reading import Reading
from src.shared.fileio import atomic_write
from src.shared.settings import StorageSettings
from src.storage.simulator import DEFAULT_STORAGE, percent_of_capacity

if TYPE_CHECKING:
    from src.analyzer.pipeline import AnalysisResult

log = logging.getLogger(__name__)

SUMMARY_COLUMNS = ["source", "count", "mean", "median", "mode", "range", "midrange"]
READING_COLUMNS = ["timestamp", "source", "output", "location", "status"]


def fmt_value(value: float | None, unit: str = "MW") -> str:
    """Число з двома знаками або "N/A" для відсутнього значення."""
    return "N/A" if value is None else f"{value:.2f} {unit}".rstrip()


# ═══════════════════════════════════════════════════════════════════════════
#  DataFrames
# ═══════════════════════════════════════════════════════════════════════════


def readings_frame(readings: Iterable[Reading]) -> pd.DataFrame:
    """Readings as a DataFrame, one row per reading, input order kept."""
    rows = [
        {
            "timestamp": r.timestamp,
            "source": r.source.value,
            "output": r.output,
            "location": r.location,
            "status": r.status.value,
        }
        for r in readings
    ]
    return pd.DataFrame(rows, columns=READING_COLUMNS)


def summary_frame(summaries: dict[EnergySource, Summary]) -> pd.DataFrame:
    """One row per source in display order; missing aggregates stay NaN."""
    rows = []
    for src in SOURCE_ORDER:
        s = summaries.get(src)
        if s is None:
            continue
        rows.append(
            {
                "source": src.value,
                "count": s.count,
                "mean": s.mean,
                "median": s.median,
                "mode": s.mode,
                "range": s.range,
                "midrange": s.midrange,
            }
        )
    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)


# ═══════════════════════════════════════════════════════════════════════════
#  CSV / TXT writers
# ═══════════════════════════════════════════════════════════════════════════


def write_summary_csv(summaries: dict[EnergySource, Summary], path: str | Path) -> None:
    df = summary_frame(summaries)
    atomic_write(path, df.to_csv(index=False, float_format="%.4f", na_rep="N/A"))
    log.info("Wrote summary → %s (%d sources)", path, len(df))


def render_report(result: AnalysisResult, storage: StorageSettings = DEFAULT_STORAGE) -> str:
    """Текстовий звіт: статистика, алерти, стан сховища."""
    lines: list[str] = []
    lines.append("=" * 60)
    lines.append("  Renewable Energy Plant System — Analysis Report")
    lines.append("=" * 60)
    lines.append(f"  Generated: {result.generated_at:%Y-%m-%d %H:%M:%S} UTC")
    lines.append(f"  Readings:  {result.reading_count}")
    lines.append("")

    for src in SOURCE_ORDER:
        s = result.summaries.get(src)
        if s is None:
            continue
        lines.append(f"--- {src.section} ({s.count} readings) ---")
        lines.append(f"  Mean:      {fmt_value(s.mean)}")
        lines.append(f"  Median:    {fmt_value(s.median)}")
        lines.append(f"  Mode:      {fmt_value(s.mode)}")
        lines.append(f"  Range:     {fmt_value(s.range)}")
        lines.append(f"  Midrange:  {fmt_value(s.midrange)}")
        lines.append("")

    lines.append("--- Storage ---")
    pct = percent_of_capacity(result.storage_level, storage)
    lines.append(f"  Level:     {result.storage_level / 1000:.1f} GWh ({pct:.1f}%)")
    lines.append(f"  Status:    {result.storage_status.value}")
    lines.append(f"  Remaining: {result.remaining_hours:.1f} h at current consumption")
    lines.append("")

    alerts = result.all_alerts
    lines.append(f"--- Alerts ({len(alerts)}) ---")
    if not alerts:
        lines.append("  No issues detected.")
    for a in alerts:
        lines.append(f"  [{a.kind.label}] {a.timestamp:%Y-%m-%d %H:%M} {a.message}")
    lines.append("")
    lines.append("=" * 60)
    return "\n".join(lines) + "\n"


def write_report_txt(
    result: AnalysisResult,
    path: str | Path,
    storage: StorageSettings = DEFAULT_STORAGE,
) -> None:
    atomic_write(path, render_report(result, storage))
    log.info("Wrote report → %s", path)


# ═══════════════════════════════════════════════════════════════════════════
#  Plots (matplotlib)
# ═══════════════════════════════════════════════════════════════════════════


def write_plots(readings: Iterable[Reading], out_dir: str | Path) -> None:
    """Generate PNG charts into out_dir: output over time and mean per source."""
    try:
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
    except ImportError:
        log.warning("matplotlib not installed — skipping plots")
        return

    df = readings_frame(readings)
    if df.empty:
        return
    plots_dir = Path(out_dir)
    plots_dir.mkdir(parents=True, exist_ok=True)
    colors = {"Solar": "#f39c12", "Hydro": "#3498db", "Wind": "#27ae60"}

    # ── 1. Output over time ──────────────────────────────────────────
    fig, ax = plt.subplots(figsize=(10, 5))
    for name, group in df.groupby("source", sort=False):
        ax.plot(group["timestamp"], group["output"], label=name, color=colors.get(name), linewidth=1)
    ax.set_ylabel("Output (MW)")
    ax.set_title("Energy Output by Source")
    ax.legend()
    fig.autofmt_xdate()
    fig.tight_layout()
    fig.savefig(str(plots_dir / "output.png"), dpi=150)
    plt.close(fig)
    log.info("Wrote %s", plots_dir / "output.png")

    # ── 2. Mean output bar chart ─────────────────────────────────────
    means = df.groupby("source", sort=False)["output"].mean()
    fig, ax = plt.subplots(figsize=(8, 5))
    bars = ax.bar(
        list(means.index),
        list(means.values),
        color=[colors.get(n, "#7f8c8d") for n in means.index],
        edgecolor="black",
        linewidth=0.5,
    )
    for bar, v in zip(bars, means.values):
        ax.text(
            bar.get_x() + bar.get_width() / 2,
            bar.get_height(),
            f"{v:.1f}",
            ha="center",
            va="bottom",
            fontweight="bold",
        )
    ax.set_ylabel("Mean output (MW)")
    ax.set_title("Mean Output by Source")
    fig.tight_layout()
    fig.savefig(str(plots_dir / "mean_output.png"), dpi=150)
    plt.close(fig)
    log.info("Wrote %s", plots_dir / "mean_output.png")
