"""Local calendar helpers shared by filters, fetch windows, the file store and the console.

``tz=None`` means the system local zone *with its summer-time rules*:
every conversion goes through ``astimezone`` so each instant gets the
offset in force at that instant, not the offset of "now".
"""

from __future__ import annotations

from datetime import datetime, tzinfo


def to_local(ts: datetime, tz: tzinfo | None = None) -> datetime:
    """Aware *ts* seen in *tz* (system local zone if None)."""
    return ts.astimezone(tz)


def localize(naive: datetime, tz: tzinfo | None = None) -> datetime:
    """Attach *tz* to a wall-clock time; None reads it as system local time.

    Raises:
        OverflowError / ValueError: for wall-clock times at the edge of the
            supported year range.
    """
    if tz is None:
        # naive.astimezone() interprets naive as local time (mktime)
        return naive.astimezone()
    return naive.replace(tzinfo=tz)
