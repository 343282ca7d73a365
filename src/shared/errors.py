"""Error taxonomy shared by the collector, the store and the console.

The analysis core signals "no data" with ``None`` and never raises for
well-typed, in-range input; everything here belongs to the edges.
"""

from __future__ import annotations


class RepsError(Exception):
    """Base class for all application errors."""


class InvalidRangeError(RepsError, ValueError):
    """Malformed or inverted time bounds / calendar parameters."""


class FormatError(RepsError):
    """File name or content not accepted by the flat-file store."""


class FileError(RepsError):
    """A data file is missing or cannot be read."""


class ConfigError(RepsError):
    """Configuration file has an unexpected structure."""


class DataSourceError(RepsError):
    """A request to the external data provider failed for good."""
