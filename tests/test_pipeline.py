"""Tests for src.analyzer.pipeline and src.analyzer.reporter."""

from __future__ import annotations

import logging

import pandas as pd

from src.analyzer.pipeline import analyze, run_report
from src.analyzer.reporter import (
    fmt_value,
    readings_frame,
    render_report,
    summary_frame,
    write_summary_csv,
)
from src.analyzer.statistics import summarize_by_source
from src.contracts.enums import AlertKind, EnergySource, StorageStatus
from tests.conftest import series


class TestAnalyze:
    def test_counts_and_alerts(self, mixed_readings):
        result = analyze(mixed_readings, 5_000_000)
        assert result.reading_count == 6
        kinds = [a.kind for a in result.alerts]
        assert kinds.count(AlertKind.HIGH_OUTPUT) == 2
        assert kinds.count(AlertKind.MALFUNCTION) == 1
        assert result.storage_status is StorageStatus.NORMAL
        assert result.storage_alert is None
        assert result.remaining_hours == 250.0

    def test_storage_alert_appended(self, mixed_readings):
        result = analyze(mixed_readings, 100_000)
        assert result.storage_alert is not None
        assert result.all_alerts[-1] is result.storage_alert
        assert result.storage_status is StorageStatus.CRITICAL

    def test_empty_input(self, caplog):
        with caplog.at_level(logging.WARNING):
            result = analyze([], 5_000_000)
        assert result.alerts == []
        assert all(s.count == 0 for s in result.summaries.values())
        assert "No readings" in caplog.text

    def test_logs_alert_counts(self, mixed_readings, caplog):
        with caplog.at_level(logging.INFO, logger="src.analyzer.pipeline"):
            analyze(mixed_readings, 5_000_000)
        assert "high=2" in caplog.text
        assert "malfunction=1" in caplog.text

    def test_does_not_mutate_input(self, mixed_readings):
        before = list(mixed_readings)
        analyze(mixed_readings, 5_000_000)
        assert mixed_readings == before


class TestReporter:
    def test_fmt_value(self):
        assert fmt_value(None) == "N/A"
        assert fmt_value(1.234) == "1.23 MW"
        assert fmt_value(2.0, "") == "2.00"

    def test_readings_frame(self, mixed_readings):
        df = readings_frame(mixed_readings)
        assert list(df.columns) == ["timestamp", "source", "output", "location", "status"]
        assert len(df) == 6
        assert df["output"].tolist()[:2] == [50.0, 450.0]

    def test_readings_frame_empty(self):
        assert readings_frame([]).empty

    def test_summary_frame_order_and_missing(self):
        df = summary_frame(summarize_by_source(series(EnergySource.WIND, [900.0, 1100.0])))
        assert df["source"].tolist() == ["Solar", "Hydro", "Wind"]
        assert df.loc[2, "mean"] == 1000.0
        assert pd.isna(df.loc[0, "mean"])

    def test_summary_csv(self, tmp_path, mixed_readings):
        path = tmp_path / "summary.csv"
        write_summary_csv(summarize_by_source(mixed_readings), path)
        df = pd.read_csv(path)
        assert df["count"].tolist() == [2, 2, 2]

    def test_report_text(self, mixed_readings):
        text = render_report(analyze(mixed_readings, 5_000_000))
        assert "--- SOLAR (2 readings) ---" in text
        assert "Mean:      250.00 MW" in text
        assert "5000.0 GWh (50.0%)" in text
        assert "[Equipment Malfunction]" in text

    def test_report_empty_source_na(self):
        text = render_report(analyze(series(EnergySource.HYDRO, [1500.0]), 5_000_000))
        assert "Mean:      N/A" in text
        assert "No issues detected." in text


class TestRunReport:
    def test_writes_outputs(self, tmp_path, mixed_readings):
        result = run_report(mixed_readings, 5_000_000, tmp_path, plots=False)
        assert (tmp_path / "summary.csv").exists()
        assert (tmp_path / "report.txt").exists()
        assert not (tmp_path / "plots").exists()
        assert result.reading_count == 6
