"""Flat-file store — readings saved as one CSV section per energy source.

File layout
───────────
    ===== SOLAR =====
    timestamp,source,energyOutput,location,status
    24/03/2025 14:00:00,Solar,512.3,Fingrid Solar Plant,High
    <blank>
    ===== HYDRO =====
    timestamp,source,energyOutput,location,status
    <blank>
    NO DATA FOR HYDRO. ...
    <blank>
    ===== WIND =====
    ...

Timestamps are written as ``dd/MM/yyyy HH:mm:ss`` in the system local
zone, summer time included (or the zone passed as ``tz``). The section
header, not the ``source`` column, decides a row's source on load; the
stored status is kept as is.
"""

from __future__ import annotations

import csv
import io
import logging
from collections.abc import Iterable
from datetime import datetime, tzinfo
from pathlib import Path

from src.contracts.enums import SOURCE_ORDER, EnergySource, ReadingStatus
from src.contracts.reading import Reading
from src.shared.clock import localize, to_local
from src.shared.errors import FileError, FormatError
from src.shared.fileio import atomic_write

log = logging.getLogger(__name__)

ALLOWED_SUFFIXES = (".csv", ".xls")
HEADER = ["timestamp", "source", "energyOutput", "location", "status"]
TIMESTAMP_FORMAT = "%d/%m/%Y %H:%M:%S"


def _section_line(source: EnergySource) -> str:
    return f"===== {source.section} ====="


def _no_data_line(source: EnergySource) -> str:
    name = source.section
    return (
        f"NO DATA FOR {name}. IT WAS PROBABLY TURNED OFF WHILE THIS FILE "
        f"WAS SAVED OR THERE IS ACTUALLY NO DATA FOR {name}"
    )


def check_suffix(path: str | Path) -> None:
    """Raise FormatError unless *path* ends in ``.csv`` or ``.xls``."""
    if Path(path).suffix.lower() not in ALLOWED_SUFFIXES:
        raise FormatError(f"Invalid file extension for {path}: use .csv or .xls only")


# ═══════════════════════════════════════════════════════════════════════════
#  Save
# ═══════════════════════════════════════════════════════════════════════════


def render(readings: Iterable[Reading], tz: tzinfo | None = None) -> str:
    """Serialise *readings* into the sectioned text layout."""
    data = list(readings)
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    for source in SOURCE_ORDER:
        rows = [r for r in data if r.source is source]
        buf.write(_section_line(source) + "\n")
        writer.writerow(HEADER)
        if not rows:
            buf.write("\n" + _no_data_line(source) + "\n")
        for r in rows:
            writer.writerow([
                to_local(r.timestamp, tz).strftime(TIMESTAMP_FORMAT),
                r.source.value,
                repr(r.output),
                r.location,
                r.status.value,
            ])
        buf.write("\n")
    return buf.getvalue()


def save_readings(readings: Iterable[Reading], path: str | Path, tz: tzinfo | None = None) -> int:
    """Write *readings* to *path* atomically; return the number of rows written.

    Raises:
        FormatError: If the extension is not ``.csv`` / ``.xls``.
        FileError: If the file cannot be written.
    """
    check_suffix(path)
    data = list(readings)
    try:
        atomic_write(path, render(data, tz))
    except OSError as exc:
        raise FileError(f"Error saving {path}: {exc}") from exc
    log.info("Saved %d readings → %s", len(data), path)
    return len(data)


# ═══════════════════════════════════════════════════════════════════════════
#  Load
# ═══════════════════════════════════════════════════════════════════════════


def _parse_row(fields: list[str], source: EnergySource, tz: tzinfo | None) -> Reading:
    if len(fields) < len(HEADER):
        raise ValueError(f"expected {len(HEADER)} fields, got {len(fields)}")
    ts = localize(datetime.strptime(fields[0], TIMESTAMP_FORMAT), tz)
    return Reading(
        timestamp=ts,
        source=source,
        output=float(fields[2]),
        location=fields[3],
        status=ReadingStatus.parse(fields[4]),
    )


def parse(lines: Iterable[str], tz: tzinfo | None = None) -> list[Reading]:
    """Parse the sectioned layout; malformed rows are skipped with a warning."""
    sections = {_section_line(s): s for s in EnergySource}
    current: EnergySource | None = None
    in_rows = False
    readings: list[Reading] = []

    for line_no, raw in enumerate(lines, 1):
        line = raw.rstrip("\r\n")
        if not line.strip():
            in_rows = False
        elif line.strip() in sections:
            current, in_rows = sections[line.strip()], False
        elif line.startswith("timestamp,source,"):
            in_rows = True
        elif line.startswith("NO DATA FOR"):
            in_rows = False
        elif in_rows and current is not None:
            fields = next(csv.reader([line]))
            try:
                readings.append(_parse_row(fields, current, tz))
            except (ValueError, OverflowError) as exc:
                log.warning("Skipping line %d: %s", line_no, exc)
    return readings


def load_readings(path: str | Path, tz: tzinfo | None = None) -> list[Reading]:
    """Load readings saved by :func:`save_readings`, in file order.

    Raises:
        FileError: If the file does not exist or cannot be read.
    """
    p = Path(path)
    if not p.is_file():
        raise FileError(f"File '{path}' does not exist")
    try:
        with p.open(encoding="utf-8") as fh:
            readings = parse(fh, tz)
    except (OSError, UnicodeDecodeError) as exc:
        raise FileError(f"Error reading {path}: {exc}") from exc
    log.info("Loaded %d readings from %s", len(readings), path)
    return readings
