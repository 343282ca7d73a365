"""Tests for src.storage.simulator — bounded reservoir model."""

from __future__ import annotations

import math

import pytest

from src.contracts.enums import AlertKind, EnergySource, StorageStatus
from src.shared.settings import StorageSettings
from src.storage.simulator import (
    DEFAULT_CONSUMPTION_RATE,
    MAX_CAPACITY,
    MAX_SAFE_LEVEL,
    MIN_SAFE_LEVEL,
    calculate_remaining_hours,
    check_storage_alerts,
    clamp_level,
    get_storage_status,
    hours_spanned,
    simulate_storage_impact,
    update_storage,
)
from tests.conftest import make_reading, series, ts


class TestConstants:
    def test_defaults(self):
        assert MAX_CAPACITY == 10_000_000
        assert DEFAULT_CONSUMPTION_RATE == 20_000
        assert MIN_SAFE_LEVEL == 1_500_000
        assert MAX_SAFE_LEVEL == 8_500_000


class TestUpdateStorage:
    def test_uses_average_per_source(self):
        # solar avg 300, wind avg 1000 -> +1300, consumption -20000
        data = series(EnergySource.SOLAR, [200.0, 400.0]) + series(EnergySource.WIND, [1000.0])
        assert update_storage(5_000_000, data, 1.0) == 5_000_000 + 1300 - 20_000

    def test_scales_with_hours(self):
        data = series(EnergySource.HYDRO, [2000.0])
        assert update_storage(5_000_000, data, 10.0) == 5_000_000 + (2000 - 20_000) * 10

    def test_no_readings_only_consumption(self):
        assert update_storage(100_000, [], 2.0) == 60_000

    @pytest.mark.parametrize(
        "level,output,hours",
        [
            (0.0, 0.0, 1e6),
            (MAX_CAPACITY, 1e12, 1e6),
            (5e6, 1e308, 1e308),
            (-1e9, 0.0, 1.0),
            (5e6, 0.0, -1e308),
        ],
    )
    def test_always_within_bounds(self, level, output, hours):
        data = [make_reading(source=EnergySource.HYDRO, output=output)]
        result = update_storage(level, data, hours)
        assert 0 <= result <= MAX_CAPACITY

    def test_custom_capacity(self):
        cfg = StorageSettings(max_capacity_mwh=1000.0, consumption_rate_mwh=0.0)
        data = series(EnergySource.WIND, [5000.0])
        assert update_storage(500.0, data, 1.0, cfg) == 1000.0


class TestClamp:
    def test_nan_collapses_to_zero(self):
        assert clamp_level(math.nan) == 0.0

    def test_bounds(self):
        assert clamp_level(-1.0) == 0.0
        assert clamp_level(MAX_CAPACITY * 2) == MAX_CAPACITY


class TestStatus:
    @pytest.mark.parametrize(
        "pct,status",
        [(0, StorageStatus.CRITICAL), (9.99, StorageStatus.CRITICAL), (10, StorageStatus.LOW),
         (29.9, StorageStatus.LOW), (30, StorageStatus.NORMAL), (90, StorageStatus.NORMAL),
         (90.1, StorageStatus.HIGH), (100, StorageStatus.HIGH)],
    )
    def test_bands(self, pct, status):
        assert get_storage_status(MAX_CAPACITY * pct / 100) is status


class TestStorageAlerts:
    def test_low(self):
        alert = check_storage_alerts(1_000_000, at=ts(0))
        assert alert.kind is AlertKind.LOW_OUTPUT
        assert alert.source is EnergySource.SOLAR
        assert alert.message == "Storage level critically low: 1000 GWh (10%)"
        assert alert.timestamp == ts(0)

    def test_high(self):
        alert = check_storage_alerts(9_000_000)
        assert alert.kind is AlertKind.HIGH_OUTPUT
        assert "9000 GWh (90%)" in alert.message

    @pytest.mark.parametrize("level", [1_500_000, 5_000_000, 8_500_000])
    def test_safe_band_no_alert(self, level):
        assert check_storage_alerts(level) is None


class TestRemainingHours:
    def test_simple(self):
        assert calculate_remaining_hours(40_000, 20_000) == 2.0

    @pytest.mark.parametrize("rate", [0.0, -5.0])
    def test_no_consumption_is_infinite(self, rate):
        assert calculate_remaining_hours(1_000, rate) == math.inf


class TestSimulateImpact:
    def test_all_sources_on(self):
        # (400 + 2000 + 1800 - 20000) * 24 = -379_200
        p = simulate_storage_impact(5_000_000, True, True, True)
        assert p.level == 5_000_000 - 379_200
        assert p.message == "Projected 24h impact: decrease to 4620.8 GWh (46%)"

    def test_all_off_matches_pure_consumption(self):
        p = simulate_storage_impact(5_000_000, False, False, False, hours_to_project=10)
        assert p.level == 5_000_000 - 200_000

    def test_increase_message(self):
        cfg = StorageSettings(consumption_rate_mwh=0.0)
        p = simulate_storage_impact(5_000_000, True, False, False, 1, cfg)
        assert p.level == 5_000_400
        assert "increase" in p.message

    def test_clamped(self):
        p = simulate_storage_impact(10_000, False, False, False, hours_to_project=168)
        assert p.level == 0.0

    def test_empty_storage_stays_empty(self):
        p = simulate_storage_impact(0.0, False, False, False)
        assert p.level == 0.0
        assert p.message == "Projected 24h impact: no change, stays at 0.0 GWh (0%)"

    def test_full_storage_stays_full(self):
        cfg = StorageSettings(consumption_rate_mwh=0.0)
        p = simulate_storage_impact(cfg.max_capacity_mwh, True, True, True, 24, cfg)
        assert p.level == cfg.max_capacity_mwh
        assert "no change, stays at 10000.0 GWh (100%)" in p.message


class TestHoursSpanned:
    def test_span(self):
        data = series(EnergySource.SOLAR, [1.0, 1.0, 1.0])
        assert hours_spanned(data) == 2.0

    def test_empty_and_single(self):
        assert hours_spanned([]) == 1.0
        assert hours_spanned([make_reading()]) == 1.0
