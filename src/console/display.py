"""Console rendering: paged tables per source, statistics, alerts, storage."""

from __future__ import annotations

import sys
from collections.abc import Callable, Sequence
from datetime import datetime, tzinfo
from typing import TextIO, TypeVar

import pandas as pd

from src.analyzer.reporter import fmt_value, readings_frame
from src.analyzer.statistics import Summary
from src.contracts.alert import Alert
from src.contracts.enums import SOURCE_ORDER, EnergySource
from src.contracts.reading import Reading
from src.shared.clock import to_local
from src.shared.settings import StorageSettings
from src.storage.simulator import (
    calculate_remaining_hours,
    get_storage_status,
    percent_of_capacity,
    simulate_storage_impact,
)
from src.storage.state import AppState

T = TypeVar("T", Reading, Alert)

PAGE_SIZE = 100
TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class ConsoleIO:
    """Prompt/print pair; tests pass a scripted ``input_fn`` and a StringIO."""

    def __init__(
        self,
        input_fn: Callable[[str], str] = input,
        output: TextIO | None = None,
    ) -> None:
        self.input_fn = input_fn
        self.output = output or sys.stdout

    def say(self, text: str = "") -> None:
        print(text, file=self.output)

    def ask(self, prompt: str) -> str:
        """Show *prompt*, return the stripped answer. EOFError ends the session."""
        self.output.write(prompt)
        self.output.flush()
        return self.input_fn("").strip()


def _local(ts: datetime, tz: tzinfo | None) -> str:
    return to_local(ts, tz).strftime(TIME_FORMAT)


# ═══════════════════════════════════════════════════════════════════════════
#  Tables
# ═══════════════════════════════════════════════════════════════════════════


def readings_table(readings: Sequence[Reading], tz: tzinfo | None = None) -> str:
    df = readings_frame(readings)
    if df.empty:
        return "(no readings)"
    df["timestamp"] = [_local(r.timestamp, tz) for r in readings]
    df["output"] = df["output"].map(lambda v: f"{v:.2f}")
    return df.to_string(index=False)


def alerts_table(alerts: Sequence[Alert], tz: tzinfo | None = None) -> str:
    if not alerts:
        return "(no alerts)"
    df = pd.DataFrame(
        {
            "time": [_local(a.timestamp, tz) for a in alerts],
            "type": [a.kind.label for a in alerts],
            "source": [a.source.value for a in alerts],
            "message": [a.message for a in alerts],
        }
    )
    return df.to_string(index=False, justify="left")


# ═══════════════════════════════════════════════════════════════════════════
#  Paging
# ═══════════════════════════════════════════════════════════════════════════


def page_by_source(
    io: ConsoleIO,
    items: Sequence[T],
    render: Callable[[Sequence[T]], str],
    noun: str = "records",
    page_size: int = PAGE_SIZE,
) -> None:
    """Show *items* one source section and one page at a time.

    Enter goes forward, ``p`` back, ``q`` quits. Sources with no items are
    skipped; paging crosses section boundaries in both directions.
    """
    groups = [
        (src, [it for it in items if it.source is src])
        for src in SOURCE_ORDER
    ]
    groups = [(src, group) for src, group in groups if group]
    if not groups:
        io.say(f"\nNo {noun} available to display.")
        return

    # flat list of (source index, page index)
    pages = [
        (gi, p)
        for gi, (_, group) in enumerate(groups)
        for p in range((len(group) + page_size - 1) // page_size)
    ]
    pos = 0
    while True:
        gi, p = pages[pos]
        src, group = groups[gi]
        chunk = group[p * page_size:(p + 1) * page_size]
        io.say(f"\n===== {src.section} =====")
        io.say(render(chunk))
        first = p * page_size + 1
        io.say(f"\nShowing {noun} {first} to {first + len(chunk) - 1} of {len(group)} for {src.section}")

        if len(pages) == 1:
            return
        while True:
            choice = io.ask("Enter = next page, 'p' = previous, 'q' = quit: ").lower()
            if choice == "q":
                return
            if choice == "" and pos < len(pages) - 1:
                pos += 1
                break
            if choice == "p" and pos > 0:
                pos -= 1
                break
            if choice == "":
                io.say("You are at the last page of the last source.")
            elif choice == "p":
                io.say("You are at the first page of the first source.")
            else:
                io.say("Invalid input. Please use Enter, 'p' or 'q'.")


def show_readings(io: ConsoleIO, readings: Sequence[Reading], page_size: int = PAGE_SIZE) -> None:
    page_by_source(io, readings, readings_table, "records", page_size)


def show_alerts(io: ConsoleIO, alerts: Sequence[Alert], page_size: int = PAGE_SIZE) -> None:
    io.say("\n===== SYSTEM ALERTS =====")
    if not alerts:
        io.say("No alerts detected.")
        return
    page_by_source(io, alerts, alerts_table, "alerts", page_size)


# ═══════════════════════════════════════════════════════════════════════════
#  Text blocks
# ═══════════════════════════════════════════════════════════════════════════


def format_statistics(summaries: dict[EnergySource, Summary]) -> str:
    lines = ["\n===== STATISTICAL ANALYSIS BY SOURCE ====="]
    for src in SOURCE_ORDER:
        s = summaries[src]
        lines.append(f"\n--- {src.value} ({s.count} readings) ---")
        lines.append(f"Mean:     {fmt_value(s.mean, '')}")
        lines.append(f"Median:   {fmt_value(s.median, '')}")
        lines.append(f"Mode:     {fmt_value(s.mode, '')}")
        lines.append(f"Range:    {fmt_value(s.range, '')}")
        lines.append(f"Midrange: {fmt_value(s.midrange, '')}")
    return "\n".join(lines)


def format_storage(state: AppState, cfg: StorageSettings) -> str:
    level = state.storage_level
    hours = calculate_remaining_hours(level, cfg.consumption_rate_mwh)
    projection = simulate_storage_impact(level, state.solar_on, state.wind_on, state.hydro_on, cfg=cfg)
    if hours == float("inf"):
        remaining = "no consumption"
    else:
        remaining = f"{int(hours)}h {int(hours % 1 * 60)}m"
    return "\n".join(
        [
            f"Storage Level: {level / 1000:.1f} / {cfg.max_capacity_mwh / 1000:.0f} GWh "
            f"({int(percent_of_capacity(level, cfg))}%)",
            f"Status: {get_storage_status(level, cfg).value}",
            f"Time until depletion at current rate: {remaining}",
            projection.message,
        ]
    )


def on_off(flag: bool) -> str:
    return "ON" if flag else "OFF"
