"""Interactive menu — threads an immutable AppState through every action.

Each handler takes the current state and returns the next one; handlers
that only display something return the state they were given.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date, datetime, timedelta, timezone, tzinfo

from src.analyzer import filters
from src.analyzer.detector import detect_issues
from src.analyzer.statistics import summarize_by_source
from src.analyzer.transforms import apply_threshold, convert_units, normalize, scale
from src.collector import manager
from src.collector.manager import DataSource
from src.console.display import (
    ConsoleIO,
    format_statistics,
    format_storage,
    on_off,
    show_alerts,
    show_readings,
)
from src.contracts.enums import EnergySource
from src.contracts.reading import Reading
from src.datastore.flatfile import load_readings, save_readings
from src.shared.errors import FileError, FormatError, InvalidRangeError
from src.shared.settings import Settings
from src.storage.simulator import check_storage_alerts, simulate_storage_impact
from src.storage.state import AppState, apply_readings

log = logging.getLogger(__name__)

MAIN_MENU = """
===== RENEWABLE ENERGY PLANT SYSTEM =====
1. Collect Real-Time Energy Data
2. View Energy Data
3. Analyze Energy Data
4. Check Alerts
5. View Data from File
6. Control Plant Operation
7. Save Data to File
8. Exit"""

COLLECT_MENU = """
===== COLLECT REAL-TIME ENERGY DATA =====
1. Last hour
2. Last 24 hours
3. Last 7 days
4. Custom date range
5. Back to Main Menu"""

ANALYSIS_MENU = """
===== DATA ANALYSIS =====
1. Calculate Statistics
2. Filter by Date Range
3. Filter by Hour
4. Fetch Day
5. Fetch Week
6. Fetch Month
7. Search by Status
8. Search by Output Range
9. Transform Outputs
0. Back to Main Menu"""

TRANSFORM_MENU = """
===== TRANSFORM OUTPUTS =====
1. Scale energy outputs (multiply by factor)
2. Convert units
3. Normalize values to 0-100 scale
4. Apply min/max thresholds
5. Back to Analysis Menu"""

CHOICE = "Enter your choice: "
# fetch windows are converted to UTC; stay clear of datetime.MAXYEAR
YEAR_RANGE = (1900, 9998)


class Session:
    """One interactive console session.

    ``source`` is any DataSource: the Fingrid client or the synthetic one.
    """

    def __init__(
        self,
        io: ConsoleIO,
        settings: Settings,
        source: DataSource,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
        tz: tzinfo | None = None,
        page_size: int = 100,
    ) -> None:
        self.io = io
        self.settings = settings
        self.source = source
        self.now = now
        self.tz = tz
        self.page_size = page_size

    # ── main loop ────────────────────────────────────────────────────────

    def run(self, state: AppState | None = None) -> AppState:
        """Run until "Exit" (or end of input); return the final state."""
        state = state or AppState.initial(self.settings.storage)
        self.io.say("Starting Renewable Energy Plant System...")
        handlers: dict[str, Callable[[AppState], AppState]] = {
            "1": self.collect,
            "2": self.view,
            "3": self.analyze,
            "4": self.alerts,
            "5": self.load,
            "6": self.control,
            "7": self.save,
        }
        try:
            while True:
                self.io.say(MAIN_MENU)
                choice = self.io.ask(CHOICE)
                if choice == "8":
                    break
                handler = handlers.get(choice)
                if handler is None:
                    self.io.say("Invalid choice. Please try again.")
                    continue
                state = handler(state)
        except (EOFError, KeyboardInterrupt):
            self.io.say("")
        self.io.say("Exiting Renewable Energy Plant System. Goodbye!")
        return state

    # ── helpers ──────────────────────────────────────────────────────────

    def _fetch(
        self, state: AppState, fetch: Callable[..., list[Reading]], *args, **kwargs
    ) -> list[Reading]:
        try:
            return fetch(
                self.source,
                *args,
                **kwargs,
                sources=state.enabled_sources,
                pause_sec=self.settings.api.source_pause_sec,
            )
        except InvalidRangeError as exc:
            log.warning("Fetch rejected: %s", exc)
            self.io.say(f"Error: {exc}")
            return []

    def _show(self, readings: list[Reading]) -> None:
        show_readings(self.io, readings, self.page_size)

    def _ask_int(self, prompt: str, lo: int, hi: int) -> int:
        while True:
            raw = self.io.ask(prompt)
            try:
                value = int(raw)
            except ValueError:
                value = None
            if value is not None and lo <= value <= hi:
                return value
            self.io.say(f"Error: please enter a whole number between {lo} and {hi}.")

    def _ask_float(self, prompt: str, allow_empty: bool = False) -> float | None:
        while True:
            raw = self.io.ask(prompt)
            if allow_empty and not raw:
                return None
            try:
                return float(raw)
            except ValueError:
                self.io.say("Invalid number. Please try again.")

    def _ask_date(self, prompt: str) -> date:
        while True:
            raw = self.io.ask(prompt)
            try:
                return datetime.strptime(raw, "%d/%m/%Y").date()
            except ValueError:
                self.io.say("Invalid date format. Please enter the date as DD/MM/YYYY, e.g. 12/04/2024.")

    def _ask_date_range(self) -> tuple[datetime, datetime] | None:
        start_day = self._ask_date("\nEnter start date (DD/MM/YYYY): ")
        end_day = self._ask_date("Enter end date (DD/MM/YYYY): ")
        if end_day < start_day:
            self.io.say("Error: End date cannot be before start date.")
            return None
        start, _ = manager.day_bounds(start_day, self.tz)
        _, end = manager.day_bounds(end_day, self.tz)
        return start, end

    def _record(self, state: AppState, readings: list[Reading]) -> AppState:
        new_state = apply_readings(state, readings, self.settings.storage)
        if new_state is not state:
            self.io.say(f"Storage updated to: {new_state.storage_level / 1000:.1f} GWh")
        return new_state

    # ── 1. collect ───────────────────────────────────────────────────────

    def collect(self, state: AppState) -> AppState:
        while True:
            self.io.say(COLLECT_MENU)
            choice = self.io.ask(CHOICE)
            now = self.now()
            if choice == "1":
                self.io.say("Fetching data for the last hour...")
                readings = self._fetch(state, manager.fetch_last_hours, 1, now=now)
            elif choice == "2":
                self.io.say("Fetching data for the last 24 hours...")
                readings = self._fetch(state, manager.fetch_last_hours, 24, now=now)
            elif choice == "3":
                self.io.say("Fetching data for the last 7 days...")
                readings = self._fetch(state, manager.fetch_all, now - timedelta(days=7), now)
            elif choice == "4":
                bounds = self._ask_date_range()
                if bounds is None:
                    self.io.say("Operation cancelled.")
                    return state
                self.io.say("Fetching data for the specified date range...")
                readings = self._fetch(state, manager.fetch_all, *bounds)
            elif choice == "5":
                return state
            else:
                self.io.say("Invalid choice. Please try again.")
                continue
            self._show(readings)
            return self._record(state, readings)

    # ── 2. view ──────────────────────────────────────────────────────────

    def view(self, state: AppState) -> AppState:
        if not state.readings:
            self.io.say("\n===== ENERGY DATA =====")
            self.io.say("No data available to view. Please collect or load data first.")
        else:
            self._show(list(state.readings))
        return state

    # ── 3. analyze ───────────────────────────────────────────────────────

    def analyze(self, state: AppState) -> AppState:
        if not state.readings:
            self.io.say("\n===== DATA ANALYSIS =====")
            self.io.say("No data available to analyze. Please collect or load data first.")
            return state
        data = list(state.readings)
        while True:
            self.io.say(ANALYSIS_MENU)
            choice = self.io.ask(CHOICE)
            if choice == "1":
                self.io.say(format_statistics(summarize_by_source(data)))
            elif choice == "2":
                bounds = self._ask_date_range()
                if bounds is not None:
                    self._show(filters.filter_by_range(data, *bounds))
            elif choice == "3":
                hour = self._ask_int("\nEnter hour (0-23): ", 0, 23)
                self._show(filters.filter_by_hour(data, hour, self.tz))
            elif choice == "4":
                year = self._ask_int("\nEnter year (YYYY): ", *YEAR_RANGE)
                month = self._ask_int("Enter month (1-12): ", 1, 12)
                day = self._ask_int("Enter day (1-31): ", 1, 31)
                self.io.say(f"Fetching data for {year}-{month:02d}-{day:02d}...")
                self._show(self._fetch(state, manager.fetch_day, year, month, day, tz=self.tz))
            elif choice == "5":
                year = self._ask_int("\nEnter year (YYYY): ", *YEAR_RANGE)
                week = self._ask_int("Enter week number (1-53): ", 1, 53)
                self.io.say(f"Fetching data for week {week} of {year}...")
                self._show(self._fetch(state, manager.fetch_week, year, week, tz=self.tz))
            elif choice == "6":
                year = self._ask_int("\nEnter year (YYYY): ", *YEAR_RANGE)
                month = self._ask_int("Enter month (1-12): ", 1, 12)
                self.io.say(f"Fetching data for {year}-{month:02d}...")
                self._show(self._fetch(state, manager.fetch_month, year, month, tz=self.tz))
            elif choice == "7":
                status = self.io.ask("Enter status to search (Low, Normal, High): ")
                self._show(filters.search_by_status(data, status))
            elif choice == "8":
                lo = self._ask_float("Minimum output (MW): ")
                hi = self._ask_float("Maximum output (MW): ")
                try:
                    self._show(filters.search_by_output(data, lo, hi))
                except InvalidRangeError as exc:
                    self.io.say(f"Error: {exc}")
            elif choice == "9":
                self.transform(data)
            elif choice == "0":
                return state
            else:
                self.io.say("Invalid choice. Please try again.")

    def transform(self, data: list[Reading]) -> None:
        """Show transformed copies of *data*; the session readings stay as they are."""
        self.io.say(TRANSFORM_MENU)
        while True:
            choice = self.io.ask(CHOICE)
            if choice == "1":
                factor = self._ask_float("Enter scaling factor: ")
                result = scale(data, factor)
                self.io.say(f"Scaled {len(result)} energy records by factor {factor}")
            elif choice == "2":
                src = self.io.ask("From unit (MW, GW, kW): ")
                dst = self.io.ask("To unit (MW, GW, kW): ")
                result = convert_units(data, src, dst)
                self.io.say(f"Converted {len(result)} energy records from {src} to {dst}")
            elif choice == "3":
                result = normalize(data)
                self.io.say("Normalized energy values to 0-100 scale")
            elif choice == "4":
                lo = self._ask_float("Minimum threshold (empty for none): ", allow_empty=True)
                hi = self._ask_float("Maximum threshold (empty for none): ", allow_empty=True)
                result = apply_threshold(data, lo, hi)
                self.io.say(
                    f"Applied thresholds: min={'none' if lo is None else lo}, "
                    f"max={'none' if hi is None else hi}"
                )
            elif choice == "5":
                return
            else:
                self.io.say("Invalid choice. Please try again.")
                continue
            self._show(result)
            return

    # ── 4. alerts ────────────────────────────────────────────────────────

    def alerts(self, state: AppState) -> AppState:
        if not state.readings:
            self.io.say("\n===== SYSTEM ALERTS =====")
            self.io.say("No data available to check alerts. Please collect or load data first.")
            return state
        found = detect_issues(state.readings)
        storage_alert = check_storage_alerts(state.storage_level, self.settings.storage, at=self.now())
        if storage_alert is not None:
            self.io.say(f"\n[Storage] {storage_alert.message}")
        show_alerts(self.io, found, self.page_size)
        return state

    # ── 5. load ──────────────────────────────────────────────────────────

    def load(self, state: AppState) -> AppState:
        path = self.io.ask("Enter filename to load: ")
        try:
            readings = load_readings(path, self.tz)
        except FileError as exc:
            self.io.say(str(exc))
            return state
        if not readings:
            self.io.say("No data available in the selected file.")
            return state
        self._show(readings)
        return state.with_readings(readings)

    # ── 6. control ───────────────────────────────────────────────────────

    def control(self, state: AppState) -> AppState:
        cfg = self.settings.storage
        toggles = {"2": EnergySource.SOLAR, "3": EnergySource.HYDRO, "4": EnergySource.WIND}
        names = {
            EnergySource.SOLAR: "Solar panels",
            EnergySource.HYDRO: "Hydro plant",
            EnergySource.WIND: "Wind turbines",
        }
        while True:
            self.io.say("\n===== CONTROL PLANT OPERATION =====")
            self.io.say(format_storage(state, cfg))
            self.io.say("1. Adjust Storage Level")
            self.io.say(f"2. Toggle Solar Panels (Currently: {on_off(state.solar_on)})")
            self.io.say(f"3. Toggle Hydro Plant (Currently: {on_off(state.hydro_on)})")
            self.io.say(f"4. Toggle Wind Turbines (Currently: {on_off(state.wind_on)})")
            self.io.say("5. Simulate Storage Impact")
            self.io.say("6. Back to Main Menu")
            choice = self.io.ask(CHOICE)
            if choice == "1":
                max_gwh = cfg.max_capacity_mwh / 1000
                while True:
                    gwh = self._ask_float(f"Enter new storage level in GWh (0-{max_gwh:g}): ")
                    if 0 <= gwh <= max_gwh:
                        break
                    self.io.say(f"Invalid value. Please enter a number between 0 and {max_gwh:g}.")
                state = state.with_storage_level(gwh * 1000, cfg)
                self.io.say(f"Storage level set to {gwh:.1f} GWh")
            elif choice in toggles:
                src = toggles[choice]
                state = state.toggle(src)
                self.io.say(f"{names[src]} turned {on_off(state.is_on(src))}")
            elif choice == "5":
                hours = self._ask_int("Enter hours to simulate (1-168): ", 1, 168)
                projection = simulate_storage_impact(
                    state.storage_level, state.solar_on, state.wind_on, state.hydro_on, hours, cfg
                )
                self.io.say(f"Simulation result: {projection.message}")
            elif choice == "6":
                return state
            else:
                self.io.say("Invalid choice. Please try again.")

    # ── 7. save ──────────────────────────────────────────────────────────

    def save(self, state: AppState) -> AppState:
        if not state.readings:
            self.io.say("No data to save. Please collect or load data first.")
            return state
        while True:
            path = self.io.ask("Enter filename to save (must end with .csv or .xls): ")
            try:
                count = save_readings(state.readings, path, self.tz)
            except (FormatError, FileError) as exc:
                self.io.say(str(exc))
                continue
            self.io.say(f"Saved {count} readings to {path}")
            return state
