"""REPS data contract — canonical value types shared by all modules."""

from src.contracts.alert import Alert
from src.contracts.enums import AlertKind, EnergySource, ReadingStatus, StorageStatus
from src.contracts.reading import DEFAULT_THRESHOLDS, Reading, Thresholds, classify_output

__all__ = [
    "DEFAULT_THRESHOLDS",
    "Alert",
    "AlertKind",
    "EnergySource",
    "Reading",
    "ReadingStatus",
    "StorageStatus",
    "Thresholds",
    "classify_output",
]
