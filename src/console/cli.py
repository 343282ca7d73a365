"""CLI entry-point for the Renewable Energy Plant System.

Usage examples
--------------
# Interactive menu against the Fingrid API (needs FINGRID_API_KEY):
python -m src.console interactive

# Interactive menu on synthetic data, no network:
python -m src.console interactive --synthetic --seed 7

# Fetch the last 24 hours and save them:
python -m src.console fetch --hours 24 --out data/last24.csv

# Analyse a saved file and write report.txt / summary.csv / plots:
python -m src.console analyze --input data/last24.csv --out-dir out

# What-if storage projection with wind switched off:
python -m src.console simulate --level-gwh 4000 --hours 48 --off wind

# End-to-end offline demo:
python -m src.console demo --hours 72 --out-dir out/demo
"""

from __future__ import annotations

import argparse
import logging
from datetime import datetime, timedelta, timezone

from src.analyzer.pipeline import run_report
from src.collector import manager
from src.collector.fingrid import FingridClient
from src.collector.synthetic import SyntheticSource, generate_readings
from src.console.display import ConsoleIO, format_storage
from src.console.menu import Session
from src.contracts.enums import EnergySource
from src.datastore.flatfile import check_suffix, load_readings, save_readings
from src.shared.errors import RepsError
from src.shared.logger import setup_logging
from src.shared.seed import init_seed
from src.shared.settings import Settings, load_settings
from src.storage.simulator import simulate_storage_impact
from src.storage.state import AppState, apply_readings

log = logging.getLogger(__name__)


def _sources(text: str | None) -> list[EnergySource]:
    """Comma-separated source names; empty / None means none."""
    if not text:
        return []
    try:
        return [EnergySource.parse(part) for part in text.split(",") if part.strip()]
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _iso(text: str) -> datetime:
    try:
        dt = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"not an ISO-8601 timestamp: {text!r}") from exc
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="reps",
        description="Renewable Energy Plant System — collect, analyse and simulate plant output",
    )
    p.add_argument(
        "--config",
        default=None,
        help="Path to settings.yaml. Default: config/settings.yaml (built-in defaults if missing).",
    )
    p.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level. Default: INFO",
    )
    p.add_argument(
        "--log-file",
        default=None,
        help="Write the log to this file instead of stderr (handy for the interactive menu).",
    )
    p.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for synthetic data (default: random, logged for replay).",
    )
    sub = p.add_subparsers(dest="command")

    it = sub.add_parser("interactive", help="Menu-driven console session (default).")
    it.add_argument(
        "--synthetic",
        action="store_true",
        default=False,
        help="Use generated readings instead of the Fingrid API.",
    )

    fe = sub.add_parser("fetch", help="Fetch readings from the Fingrid API and save them.")
    fe.add_argument("--hours", type=int, default=24, help="Last N hours (default: 24).")
    fe.add_argument("--start", type=_iso, default=None, help="Range start, ISO-8601 (overrides --hours).")
    fe.add_argument("--end", type=_iso, default=None, help="Range end, ISO-8601 (default: now).")
    fe.add_argument(
        "--sources",
        type=_sources,
        default=list(EnergySource),
        help="Comma-separated sources (default: solar,wind,hydro).",
    )
    fe.add_argument("--out", required=True, help="Output file (.csv or .xls).")

    an = sub.add_parser("analyze", help="Analyse a saved readings file.")
    an.add_argument("--input", required=True, help="Readings file written by 'fetch' or the menu.")
    an.add_argument("--out-dir", default="out", help="Output directory. Default: out/")
    an.add_argument(
        "--level-gwh",
        type=float,
        default=None,
        help="Storage level before the readings, GWh (default: configured initial level).",
    )
    an.add_argument("--no-plots", action="store_true", default=False, help="Skip PNG charts.")

    si = sub.add_parser("simulate", help="Project the storage level with nominal source power.")
    si.add_argument("--level-gwh", type=float, default=None, help="Starting level, GWh.")
    si.add_argument("--hours", type=int, default=24, help="Projection horizon (default: 24).")
    si.add_argument("--off", type=_sources, default=[], help="Comma-separated sources switched off.")

    de = sub.add_parser("demo", help="Offline end-to-end run on synthetic readings.")
    de.add_argument("--hours", type=int, default=48, help="Hours of generated data (default: 48).")
    de.add_argument("--out-dir", default="out/demo", help="Output directory. Default: out/demo/")
    return p


# ═══════════════════════════════════════════════════════════════════════════
#  Commands
# ═══════════════════════════════════════════════════════════════════════════


def _initial_state(settings: Settings, level_gwh: float | None) -> AppState:
    state = AppState.initial(settings.storage)
    if level_gwh is not None:
        state = state.with_storage_level(level_gwh * 1000, settings.storage)
    return state


def cmd_interactive(args: argparse.Namespace, settings: Settings) -> int:
    if args.synthetic:
        source = SyntheticSource(init_seed(args.seed), settings.thresholds)
    else:
        source = FingridClient(settings.api, settings.thresholds)
    Session(ConsoleIO(), settings, source).run()
    return 0


def cmd_fetch(args: argparse.Namespace, settings: Settings) -> int:
    check_suffix(args.out)
    client = FingridClient(settings.api, settings.thresholds)
    end = args.end or datetime.now(timezone.utc)
    if args.start is not None:
        readings = manager.fetch_all(
            client, args.start, end, args.sources, pause_sec=settings.api.source_pause_sec
        )
    else:
        readings = manager.fetch_last_hours(
            client, args.hours, args.sources, now=end, pause_sec=settings.api.source_pause_sec
        )
    if not readings:
        log.warning("No readings fetched — nothing saved")
        return 1
    save_readings(readings, args.out)
    print(f"Saved {len(readings)} readings to {args.out}")
    return 0


def cmd_analyze(args: argparse.Namespace, settings: Settings) -> int:
    readings = load_readings(args.input)
    state = apply_readings(_initial_state(settings, args.level_gwh), readings, settings.storage)
    result = run_report(
        state.readings,
        state.storage_level,
        args.out_dir,
        settings.storage,
        plots=not args.no_plots,
    )
    print(f"Analysed {result.reading_count} readings, {len(result.all_alerts)} alerts → {args.out_dir}/")
    return 0


def cmd_simulate(args: argparse.Namespace, settings: Settings) -> int:
    state = _initial_state(settings, args.level_gwh)
    for src in args.off:
        if state.is_on(src):
            state = state.toggle(src)
    print(format_storage(state, settings.storage))
    projection = simulate_storage_impact(
        state.storage_level, state.solar_on, state.wind_on, state.hydro_on,
        args.hours, settings.storage,
    )
    print(f"Simulation result: {projection.message}")
    return 0


def cmd_demo(args: argparse.Namespace, settings: Settings) -> int:
    rng = init_seed(args.seed)
    end = datetime.now(timezone.utc).replace(minute=0, second=0, microsecond=0)
    start = end - timedelta(hours=max(args.hours - 1, 0))
    readings = generate_readings(start, args.hours, rng, thresholds=settings.thresholds)
    state = apply_readings(AppState.initial(settings.storage), readings, settings.storage)

    save_readings(state.readings, f"{args.out_dir}/readings.csv")
    result = run_report(state.readings, state.storage_level, args.out_dir, settings.storage)
    print(
        f"Demo: {result.reading_count} readings, {len(result.all_alerts)} alerts, "
        f"storage {result.storage_level / 1000:.1f} GWh ({result.storage_status.value}) → {args.out_dir}/"
    )
    return 0


COMMANDS = {
    "interactive": cmd_interactive,
    "fetch": cmd_fetch,
    "analyze": cmd_analyze,
    "simulate": cmd_simulate,
    "demo": cmd_demo,
}


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level, args.log_file)

    command = args.command or "interactive"
    if args.command is None:
        args.synthetic = False

    try:
        settings = load_settings(args.config)
        return COMMANDS[command](args, settings)
    except RepsError as exc:
        log.error("%s", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
