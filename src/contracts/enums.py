"""Canonical enumerations shared by every REPS module."""

from __future__ import annotations

from enum import Enum


class EnergySource(str, Enum):
    SOLAR = "Solar"
    WIND = "Wind"
    HYDRO = "Hydro"

    @property
    def section(self) -> str:
        """Upper-case name used for file sections and console headings."""
        return self.value.upper()

    @classmethod
    def parse(cls, text: str) -> EnergySource:
        """Case-insensitive lookup by value or member name."""
        needle = text.strip().lower()
        for member in cls:
            if needle in (member.value.lower(), member.name.lower()):
                return member
        raise ValueError(f"Unknown energy source: {text!r}")


class ReadingStatus(str, Enum):
    LOW = "Low"
    NORMAL = "Normal"
    HIGH = "High"

    @classmethod
    def parse(cls, text: str) -> ReadingStatus:
        needle = text.strip().lower()
        for member in cls:
            if member.value.lower() == needle:
                return member
        raise ValueError(f"Unknown reading status: {text!r}")


class AlertKind(str, Enum):
    LOW_OUTPUT = "low_output"
    HIGH_OUTPUT = "high_output"
    MALFUNCTION = "malfunction"

    @property
    def label(self) -> str:
        return _ALERT_LABELS[self]


_ALERT_LABELS = {
    AlertKind.LOW_OUTPUT: "Low Output",
    AlertKind.HIGH_OUTPUT: "High Output",
    AlertKind.MALFUNCTION: "Equipment Malfunction",
}


class StorageStatus(str, Enum):
    CRITICAL = "Critical"
    LOW = "Low"
    NORMAL = "Normal"
    HIGH = "High"


# Display / file order used by the console and the flat-file store
SOURCE_ORDER: tuple[EnergySource, ...] = (
    EnergySource.SOLAR,
    EnergySource.HYDRO,
    EnergySource.WIND,
)
