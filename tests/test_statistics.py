"""Tests for src.analyzer.statistics — descriptive aggregates."""

from __future__ import annotations

import math

import pytest

from src.analyzer.statistics import (
    mean,
    median,
    midrange,
    mode,
    outputs,
    summarize,
    summarize_by_source,
    value_range,
)
from src.contracts.enums import EnergySource
from tests.conftest import make_reading, series

ALL = (mean, median, mode, value_range, midrange)


class TestEmptyInput:
    @pytest.mark.parametrize("fn", ALL, ids=lambda f: f.__name__)
    def test_empty_gives_none(self, fn):
        assert fn([]) is None

    def test_summary_of_empty(self):
        s = summarize([])
        assert s.count == 0
        assert (s.mean, s.median, s.mode, s.range, s.midrange) == (None,) * 5


class TestMean:
    def test_known_value(self):
        assert mean([1, 2, 3, 4, 5]) == 3.0

    def test_single_value(self):
        assert mean([7.5]) == 7.5

    def test_large_values_stay_finite(self):
        assert math.isfinite(mean([1e308, 1e308]))


class TestMedian:
    def test_even_count_averages_middle_pair(self):
        assert median([1, 3, 5, 7]) == 4.0

    def test_odd_count_takes_middle(self):
        assert median([1, 3, 5, 7, 9]) == 5.0

    def test_unsorted_input(self):
        assert median([9, 1, 5]) == 5


class TestMode:
    def test_most_frequent(self):
        assert mode([1.0, 2.0, 2.0, 3.0]) == 2.0

    def test_tie_resolves_to_lowest(self):
        assert mode([5.0, 5.0, 1.0, 1.0, 9.0]) == 1.0

    def test_all_distinct_gives_minimum(self):
        assert mode([3.0, 2.0, 8.0]) == 2.0


class TestRangeAndMidrange:
    @pytest.mark.parametrize(
        "xs",
        [[1.0], [4.0, -2.0, 10.0], [0.0, 0.0], [1e300, -1e300], [3.3, 3.3, 9.1]],
    )
    def test_range_non_negative_and_midrange_bounded(self, xs):
        r = value_range(xs)
        m = midrange(xs)
        assert r == max(xs) - min(xs)
        assert r >= 0
        assert min(xs) <= m <= max(xs)
        assert math.isfinite(m)

    def test_midrange_value(self):
        assert midrange([2.0, 10.0, 4.0]) == 6.0


class TestSummaries:
    def test_summarize_bundles_all(self):
        s = summarize([1.0, 2.0, 2.0, 5.0])
        assert s.count == 4
        assert s.mean == 2.5
        assert s.median == 2.0
        assert s.mode == 2.0
        assert s.range == 4.0
        assert s.midrange == 3.0

    def test_outputs_in_order(self):
        data = series(EnergySource.WIND, [900.0, 1200.0])
        assert outputs(data) == [900.0, 1200.0]

    def test_by_source_covers_every_source(self):
        data = [make_reading(source=EnergySource.HYDRO, output=1500.0)]
        result = summarize_by_source(data)
        assert set(result) == set(EnergySource)
        assert result[EnergySource.HYDRO].mean == 1500.0
        assert result[EnergySource.SOLAR].count == 0
        assert result[EnergySource.SOLAR].mean is None

    def test_by_source_keeps_sources_apart(self, mixed_readings):
        result = summarize_by_source(mixed_readings)
        assert result[EnergySource.SOLAR].mean == 250.0
        assert result[EnergySource.WIND].range == 1000.0
        assert result[EnergySource.HYDRO].median == 1700.0
