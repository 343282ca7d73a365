"""Fingrid open-data client — fetches production readings per energy source.

Request model
─────────────
  GET {base_url}/datasets/{dataset_id}/data
      ?startTime=..Z&endTime=..Z&page=N&pageSize=1000
  header x-api-key

Ranges longer than ``chunk_days`` are split into consecutive chunks;
inside a chunk pages are pulled one after another until
``pagination.currentPage == pagination.lastPage``.

Retry policy (per page, ``max_retries`` attempts)
─────────────────────────────────────────────────
  429                       wait ``rate_limit_delay_sec`` and retry
  5xx / timeout / reset     wait ``retry_delay_sec * 2**(attempt-1)`` and retry
  401 / 403 / 404 / DNS     give up immediately
  other request errors      give up immediately
  unexpected JSON layout    give up immediately
  malformed single event    skipped with a warning, the page is kept

Giving up on a page ends its chunk: the readings collected so far are
returned, so the caller always gets a (possibly empty) prefix of the data.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterator
from datetime import datetime, timedelta, timezone
from typing import Any

import requests

from src.contracts.enums import EnergySource
from src.contracts.reading import Reading, Thresholds
from src.shared.errors import DataSourceError, InvalidRangeError
from src.shared.settings import ApiSettings

log = logging.getLogger(__name__)

LOCATIONS: dict[EnergySource, str] = {
    EnergySource.SOLAR: "Fingrid Solar Plant",
    EnergySource.WIND: "Fingrid Wind Farm",
    EnergySource.HYDRO: "Fingrid Hydro Station",
}

_FATAL_STATUS = {401, 403, 404}


def format_timestamp(ts: datetime) -> str:
    """ISO-8601 UTC with a ``Z`` suffix, as the API expects."""
    return ts.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_timestamp(text: str) -> datetime:
    dt = datetime.fromisoformat(text.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


class _RetryableError(Exception):
    """One attempt failed but another may succeed."""

    def __init__(self, message: str, delay: float) -> None:
        super().__init__(message)
        self.delay = delay


class FingridClient:
    """Synchronous client with its own retry budget and backoff."""

    def __init__(
        self,
        api: ApiSettings,
        thresholds: dict[EnergySource, Thresholds] | None = None,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.api = api
        self.thresholds = thresholds
        self.sleep = sleep
        self.session = session or self._create_session()

    def _create_session(self) -> requests.Session:
        session = requests.Session()
        session.headers.update({"Accept": "application/json"})
        if self.api.api_key:
            session.headers["x-api-key"] = self.api.api_key
        else:
            log.warning("No Fingrid API key configured — requests will likely be rejected")
        return session

    # ── public ───────────────────────────────────────────────────────────

    def fetch(self, source: EnergySource, start: datetime, end: datetime) -> list[Reading]:
        """Fetch readings for *source* in ``[start, end]``.

        Raises:
            InvalidRangeError: If *start* is after *end*.
        """
        if start > end:
            raise InvalidRangeError(f"start {start.isoformat()} is after end {end.isoformat()}")

        chunks = list(self._chunks(start, end))
        if len(chunks) > 1:
            log.info(
                "Large range (%d days) for %s — fetching in %d chunks",
                (end - start).days, source.value, len(chunks),
            )

        readings: list[Reading] = []
        for chunk_start, chunk_end in chunks:
            got = self._fetch_chunk(source, chunk_start, chunk_end)
            log.debug(
                "Chunk %s → %s: %d readings",
                format_timestamp(chunk_start), format_timestamp(chunk_end), len(got),
            )
            readings.extend(got)

        log.info("Fetched %d %s readings", len(readings), source.value)
        return readings

    # ── internals ────────────────────────────────────────────────────────

    def _chunks(self, start: datetime, end: datetime) -> Iterator[tuple[datetime, datetime]]:
        step = timedelta(days=self.api.chunk_days)
        if end - start <= step:
            yield start, end
            return
        cursor = start
        while cursor < end:
            yield cursor, min(cursor + step, end)
            cursor += step

    def _fetch_chunk(self, source: EnergySource, start: datetime, end: datetime) -> list[Reading]:
        dataset_id = self.api.datasets[source]
        readings: list[Reading] = []
        page, last_page = 1, 1
        while page <= last_page:
            try:
                body = self._fetch_page(dataset_id, start, end, page)
                events, current, last_page = self._unpack(body, page)
            except DataSourceError as exc:
                log.error("Giving up on %s page %d: %s", source.value, page, exc)
                break
            readings.extend(self._convert(events, source))
            log.debug("Retrieved %d events (page %d of %d)", len(events), current, last_page)
            page = max(current, page) + 1
        return readings

    def _fetch_page(self, dataset_id: int, start: datetime, end: datetime, page: int) -> dict[str, Any]:
        url = f"{self.api.base_url.rstrip('/')}/datasets/{dataset_id}/data"
        params = {
            "startTime": format_timestamp(start),
            "endTime": format_timestamp(end),
            "page": page,
            "pageSize": self.api.page_size,
        }
        for attempt in range(1, self.api.max_retries + 1):
            try:
                return self._attempt(url, params, attempt)
            except _RetryableError as exc:
                if attempt == self.api.max_retries:
                    raise DataSourceError(f"{exc} (after {attempt} attempts)") from exc
                log.warning(
                    "%s (attempt %d/%d) — retrying in %.1fs",
                    exc, attempt, self.api.max_retries, exc.delay,
                )
                self.sleep(exc.delay)
        raise DataSourceError("retry budget is zero")

    def _attempt(self, url: str, params: dict[str, Any], attempt: int) -> dict[str, Any]:
        backoff = self.api.retry_delay_sec * 2 ** (attempt - 1)
        try:
            resp = self.session.get(url, params=params, timeout=self.api.timeout_sec)
        except requests.Timeout as exc:
            raise _RetryableError(f"Network timeout: {exc}", backoff) from exc
        except requests.ConnectionError as exc:
            if "resolve" in str(exc).lower():
                raise DataSourceError(f"Cannot reach API host: {exc}") from exc
            raise _RetryableError(f"Connection error: {exc}", backoff) from exc
        except requests.RequestException as exc:
            raise DataSourceError(f"Request failed: {exc}") from exc

        if resp.status_code == 429:
            raise _RetryableError("Rate limit hit", self.api.rate_limit_delay_sec)
        if resp.status_code in _FATAL_STATUS:
            hint = "check the API key" if resp.status_code in (401, 403) else "check the dataset id"
            raise DataSourceError(f"HTTP {resp.status_code} — {hint}")
        if resp.status_code >= 500:
            raise _RetryableError(f"Server error HTTP {resp.status_code}", backoff)
        if resp.status_code != 200:
            raise DataSourceError(f"Unexpected HTTP {resp.status_code}")

        try:
            body = resp.json()
        except ValueError as exc:
            raise DataSourceError(f"Response is not JSON: {resp.text[:200]}") from exc
        if not isinstance(body, dict) or not isinstance(body.get("data"), list):
            raise DataSourceError(f"Unexpected data format: {str(body)[:200]}")
        return body

    @staticmethod
    def _unpack(body: dict[str, Any], page: int) -> tuple[list[Any], int, int]:
        pagination = body.get("pagination") or {}
        try:
            current = int(pagination.get("currentPage", page))
            last = int(pagination.get("lastPage", current))
        except (AttributeError, TypeError, ValueError) as exc:
            raise DataSourceError(f"Unexpected pagination block: {str(pagination)[:200]}") from exc
        return body["data"], current, last

    def _convert(self, events: list[Any], source: EnergySource) -> list[Reading]:
        """Events → readings; null values are dropped, malformed events skipped."""
        readings: list[Reading] = []
        for event in events:
            try:
                if event.get("value") is None:
                    continue
                readings.append(self._to_reading(event, source))
            except (AttributeError, KeyError, TypeError, ValueError) as exc:
                log.warning("Skipping malformed %s event %s: %r", source.value, str(event)[:120], exc)
        return readings

    def _to_reading(self, event: dict[str, Any], source: EnergySource) -> Reading:
        return Reading.create(
            timestamp=parse_timestamp(event["startTime"]),
            source=source,
            output=float(event["value"]),
            location=LOCATIONS[source],
            thresholds=self.thresholds,
        )
