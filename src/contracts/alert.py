"""Модель оповіщення (Alert)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from src.contracts.enums import AlertKind, EnergySource


@dataclass(frozen=True, slots=True)
class Alert:
    """Оповіщення, згенероване детектором або симулятором сховища."""

    kind: AlertKind
    source: EnergySource    # placeholder SOLAR for storage alerts
    message: str
    timestamp: datetime
