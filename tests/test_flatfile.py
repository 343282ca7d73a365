"""Тести сховища у плоских файлах: збереження, завантаження, формат."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from src.contracts.enums import EnergySource, ReadingStatus
from src.datastore.flatfile import load_readings, parse, render, save_readings
from src.shared.errors import FileError, FormatError
from tests.conftest import make_reading, series

UTC = timezone.utc


class TestRender:
    def test_sections_in_fixed_order(self, mixed_readings):
        text = render(mixed_readings, UTC)
        assert text.index("===== SOLAR =====") < text.index("===== HYDRO =====") < text.index("===== WIND =====")
        assert text.count("timestamp,source,energyOutput,location,status") == 3

    def test_row_format(self):
        r = make_reading(
            timestamp=datetime(2025, 3, 4, 5, 6, 7, tzinfo=UTC), output=512.5, location="Roof"
        )
        assert "04/03/2025 05:06:07,Solar,512.5,Roof,High" in render([r], UTC).splitlines()

    def test_no_data_marker(self):
        text = render(series(EnergySource.WIND, [1000.0]), UTC)
        assert "NO DATA FOR SOLAR" in text
        assert "NO DATA FOR HYDRO" in text
        assert "NO DATA FOR WIND" not in text

    def test_local_time_conversion(self):
        helsinki = timezone(timedelta(hours=2))
        r = make_reading(timestamp=datetime(2025, 3, 4, 22, 0, tzinfo=UTC))
        assert "05/03/2025 00:00:00" in render([r], helsinki)


class TestSaveLoad:
    def test_round_trip_keeps_fields(self, tmp_path, mixed_readings):
        path = tmp_path / "data.csv"
        assert save_readings(mixed_readings, path, UTC) == 6
        loaded = load_readings(path, UTC)
        key = lambda r: (r.source, r.timestamp, r.output, r.location, r.status)  # noqa: E731
        assert sorted(map(key, loaded)) == sorted(map(key, mixed_readings))

    def test_file_order_by_section(self, tmp_path, mixed_readings):
        path = tmp_path / "data.csv"
        save_readings(mixed_readings, path, UTC)
        sources = [r.source for r in load_readings(path, UTC)]
        assert sources == [EnergySource.SOLAR] * 2 + [EnergySource.HYDRO] * 2 + [EnergySource.WIND] * 2

    def test_status_kept_as_stored(self, tmp_path):
        r = make_reading(output=999.0, status=ReadingStatus.LOW)
        path = tmp_path / "data.xls"
        save_readings([r], path, UTC)
        assert load_readings(path, UTC)[0].status is ReadingStatus.LOW

    def test_empty_save_loads_empty(self, tmp_path):
        path = tmp_path / "empty.csv"
        save_readings([], path, UTC)
        assert load_readings(path, UTC) == []

    def test_location_with_comma(self, tmp_path):
        r = make_reading(location="Dam C, north bank")
        path = tmp_path / "data.csv"
        save_readings([r], path, UTC)
        assert load_readings(path, UTC)[0].location == "Dam C, north bank"

    @pytest.mark.parametrize("name", ["data.txt", "data.json", "data"])
    def test_bad_extension(self, tmp_path, name):
        with pytest.raises(FormatError):
            save_readings([], tmp_path / name)
        assert not (tmp_path / name).exists()

    def test_overwrite_leaves_no_temp_files(self, tmp_path, mixed_readings):
        path = tmp_path / "data.csv"
        save_readings(mixed_readings, path, UTC)
        save_readings(mixed_readings[:1], path, UTC)
        assert [p.name for p in tmp_path.iterdir()] == ["data.csv"]
        assert len(load_readings(path, UTC)) == 1

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileError):
            load_readings(tmp_path / "missing.csv")


class TestParse:
    def test_malformed_rows_skipped(self, caplog):
        lines = [
            "===== SOLAR =====",
            "timestamp,source,energyOutput,location,status",
            "01/03/2025 10:00:00,Solar,120.0,A,Normal",
            "not a date,Solar,1.0,A,Low",
            "01/03/2025 11:00:00,Solar,abc,A,Low",
            "01/03/2025 12:00:00,Solar,5.0,A,Unknown",
            "01/03/2025 13:00:00,Solar",
            "01/03/2025 14:00:00,Solar,130.0,A,Normal",
        ]
        with caplog.at_level("WARNING"):
            readings = parse(lines, UTC)
        assert [r.output for r in readings] == [120.0, 130.0]
        assert caplog.text.count("Skipping line") == 4

    def test_section_decides_source(self):
        lines = [
            "===== HYDRO =====",
            "timestamp,source,energyOutput,location,status",
            "01/03/2025 10:00:00,Solar,1200.0,A,Normal",
        ]
        assert parse(lines, UTC)[0].source is EnergySource.HYDRO

    def test_rows_before_header_ignored(self):
        lines = ["===== WIND =====", "01/03/2025 10:00:00,Wind,1.0,A,Low"]
        assert parse(lines, UTC) == []
