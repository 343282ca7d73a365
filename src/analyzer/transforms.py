"""Value Transform Pipeline — output transformations over any mappable container.

Every operation here is built on :func:`transform_output`, which is the
single place that touches ``Reading.output``; container shape is handled
by :func:`src.analyzer.functor.fmap`. Status is never recomputed.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

from src.analyzer.functor import contents, fmap

C = TypeVar("C")

# (from, to) -> multiplier
UNIT_FACTORS: dict[tuple[str, str], float] = {
    ("MW", "GW"): 0.001,
    ("MW", "kW"): 1000.0,
    ("GW", "MW"): 1000.0,
    ("kW", "MW"): 0.001,
    ("GW", "kW"): 1_000_000.0,
    ("kW", "GW"): 0.000001,
}


def transform_output(data: C, fn: Callable[[float], float]) -> C:
    """Apply *fn* to the output of every reading inside *data*."""
    return fmap(data, lambda r: r.with_output(fn(r.output)))


def scale(data: C, factor: float) -> C:
    return transform_output(data, lambda v: v * factor)


def unit_factor(from_unit: str, to_unit: str) -> float:
    """Multiplier for a unit pair; unknown pairs and identity give 1.0."""
    return UNIT_FACTORS.get((from_unit, to_unit), 1.0)


def convert_units(data: C, from_unit: str, to_unit: str) -> C:
    return scale(data, unit_factor(from_unit, to_unit))


def normalize(data: C) -> C:
    """Rescale outputs linearly onto 0..100 using the container's min/max.

    Empty containers and containers whose outputs are all equal are
    returned unchanged.
    """
    values = [r.output for r in contents(data)]
    if not values:
        return data
    lo, hi = min(values), max(values)
    span = hi - lo
    if span == 0:
        return data
    return transform_output(data, lambda v: (v - lo) / span * 100.0)


def apply_threshold(data: C, minimum: float | None = None, maximum: float | None = None) -> C:
    """Clamp outputs to ``[minimum, maximum]``; a missing bound is not applied."""

    def clamp(v: float) -> float:
        if minimum is not None:
            v = max(v, minimum)
        if maximum is not None:
            v = min(v, maximum)
        return v

    return transform_output(data, clamp)

