"""
archive_client.py — Social Media Archive REST API Client
=========================================================
Fetches the activity records the archive has accumulated **up to and
including** a given day, one request per day.

Endpoint
--------
``GET /api/activities?access_token=<token>&set=<collection>&toDate=YYYY-MM-DD``

Response body::

    {"items": [{"key": "instagram", "count": 1520.0}, ...]}

Snapshot semantics
------------------
``toDate`` returns a cumulative "to-date" snapshot, not the delta for that
single day.  Each day's payload is used as that day's value as-is; nothing
downstream differences neighbouring days.

Concurrency
-----------
:meth:`ArchiveClient.fetch_window` fires one request per day on a thread
pool.  Results land in a day-indexed list; if any day fails the run is
aborted once every outstanding request has settled, raising the error of
the earliest failing day.
"""

from __future__ import annotations

import datetime
import math
import re
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import requests

from activity_timeline.config import Settings
from activity_timeline.utils import get_logger, iso_day

logger = get_logger("timeline.archive")

_MAX_BACKOFF_SECONDS = 30.0
_TOKEN_PARAM = re.compile(r"access_token=[^&\s]+")


class FetchError(Exception):
    """Raised when one day's activity snapshot cannot be retrieved."""

    def __init__(
        self,
        message: str,
        day: datetime.date | None = None,
        status_code: int | None = None,
    ) -> None:
        self.day = day
        self.status_code = status_code
        prefix = f"[{iso_day(day)}] " if day is not None else ""
        status = f" (HTTP {status_code})" if status_code is not None else ""
        super().__init__(f"{prefix}{message}{status}")


@dataclass(frozen=True)
class DayRecord:
    """One ``{key, count}`` entry of a day's snapshot."""

    key: str
    count: int


class ArchiveClient:
    """
    Archive API client with per-request timeout, a small retry budget for
    transient failures, and a parallel per-day window fetch.

    Parameters
    ----------
    settings : Settings
        Supplies token, endpoint, timeout and retry parameters.
    session : requests.Session, optional
        Injected by tests; a fresh session is created otherwise.
    """

    def __init__(
        self,
        settings: Settings,
        session: requests.Session | None = None,
    ) -> None:
        if not settings.access_token:
            raise FetchError("ArchiveClient requires an access token")
        self._settings = settings
        self._url = f"{settings.base_url}{settings.activities_path}"
        self._session = session or requests.Session()
        self._session.headers.update({
            "Accept": "application/json",
            "User-Agent": "ActivityTimeline/1.0",
        })

    # ── lifecycle ───────────────────────────────────────────────────────

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "ArchiveClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ═════════════════════════════════════════════════════════════════════
    #  HTTP
    # ═════════════════════════════════════════════════════════════════════

    def _redact(self, text: str) -> str:
        """Strip the access token from text that may echo the request URL."""
        text = _TOKEN_PARAM.sub("access_token=***", text)
        token = self._settings.access_token
        return text.replace(token, "***") if token else text

    def _retry_after(self, resp: requests.Response) -> float:
        """Numeric ``Retry-After`` in seconds, clamped to [0, 30]; 0 if unusable."""
        try:
            value = float(resp.headers.get("Retry-After", ""))
        except (TypeError, ValueError):
            return 0.0
        if not math.isfinite(value):
            return 0.0
        return min(max(value, 0.0), _MAX_BACKOFF_SECONDS)

    def _backoff(self, attempt: int) -> float:
        return min(self._settings.backoff_seconds * 2 ** (attempt - 1), _MAX_BACKOFF_SECONDS)

    def _request(self, day: datetime.date) -> Dict[str, Any]:
        """GET one day's snapshot with timeout, retries & exponential backoff."""
        params = {
            "access_token": self._settings.access_token,
            "set": self._settings.collection_id,
            "toDate": iso_day(day),
        }
        retries = self._settings.max_retries
        last_error = ""
        last_status: Optional[int] = None
        wait = 0.0

        for attempt in range(1 + retries):
            if attempt > 0:
                wait = wait or self._backoff(attempt)
                logger.info(
                    "Retry %d/%d for %s — waiting %.1fs...",
                    attempt, retries, iso_day(day), wait,
                )
                time.sleep(wait)
                wait = 0.0

            try:
                resp = self._session.get(
                    self._url,
                    params=params,
                    timeout=self._settings.request_timeout,
                )
            except requests.RequestException as exc:
                last_error = self._redact(str(exc))[:500]
                last_status = None
                logger.error(
                    "[API ERROR] Network failure for %s (attempt %d/%d): %s",
                    iso_day(day), attempt + 1, retries + 1, type(exc).__name__,
                )
                continue

            if resp.status_code == 429:
                last_error = "rate limited"
                last_status = resp.status_code
                wait = self._retry_after(resp)
                logger.warning(
                    "[API ERROR] 429 Rate Limited for %s (attempt %d/%d)",
                    iso_day(day), attempt + 1, retries + 1,
                )
                continue

            if resp.status_code >= 500:
                last_error = self._redact(resp.text)[:500]
                last_status = resp.status_code
                logger.error(
                    "[API ERROR] Server %d for %s (attempt %d/%d): %s",
                    resp.status_code, iso_day(day), attempt + 1, retries + 1,
                    last_error,
                )
                continue

            if not resp.ok:
                logger.error(
                    "[API ERROR] Client %d for %s: %s",
                    resp.status_code, iso_day(day), self._redact(resp.text)[:500],
                )
                raise FetchError(
                    f"Archive API rejected the request: {self._redact(resp.text)[:200]}",
                    day=day,
                    status_code=resp.status_code,
                )

            try:
                return resp.json()
            except ValueError as exc:
                raise FetchError(
                    f"Archive API returned a non-JSON body: {exc}",
                    day=day,
                    status_code=resp.status_code,
                ) from exc

        raise FetchError(
            f"Failed after {retries + 1} attempts: {last_error}",
            day=day,
            status_code=last_status,
        )

    # ═════════════════════════════════════════════════════════════════════
    #  Payload parsing
    # ═════════════════════════════════════════════════════════════════════

    @staticmethod
    def parse_items(payload: Any, day: datetime.date | None = None) -> List[DayRecord]:
        """
        Validate an ``{"items": [...]}`` body and truncate counts to ints.

        Raises ``FetchError`` for any structural problem; a malformed item
        poisons the whole day rather than being silently skipped.
        """
        if not isinstance(payload, dict) or not isinstance(payload.get("items"), list):
            raise FetchError("Malformed payload: expected an object with an 'items' list", day=day)

        records: List[DayRecord] = []
        for pos, item in enumerate(payload["items"]):
            if not isinstance(item, dict):
                raise FetchError(f"Malformed item #{pos}: {item!r}", day=day)
            key = item.get("key")
            count = item.get("count")
            if not isinstance(key, str):
                raise FetchError(f"Malformed item #{pos}: missing string 'key'", day=day)
            if isinstance(count, bool) or not isinstance(count, (int, float)):
                raise FetchError(f"Malformed item #{pos} ({key}): non-numeric 'count'", day=day)
            if not math.isfinite(count):
                raise FetchError(f"Malformed item #{pos} ({key}): non-finite 'count'", day=day)
            records.append(DayRecord(key=key, count=int(count)))
        return records

    # ═════════════════════════════════════════════════════════════════════
    #  Public API
    # ═════════════════════════════════════════════════════════════════════

    def fetch_day(self, day: datetime.date) -> List[DayRecord]:
        """Return the cumulative activity snapshot as of ``day``."""
        payload = self._request(day)
        records = self.parse_items(payload, day=day)
        logger.debug("Fetched %d activity keys as of %s", len(records), iso_day(day))
        return records

    def fetch_window(self, days: Sequence[datetime.date]) -> List[List[DayRecord]]:
        """
        Fetch every day in parallel; result ``i`` belongs to ``days[i]``.

        All requests are allowed to settle before the earliest failing
        day's ``FetchError`` is raised.
        """
        if not days:
            return []

        workers = min(self._settings.max_workers, len(days))
        logger.info(
            "Fetching %d daily snapshots (%s → %s) with %d workers",
            len(days), iso_day(days[0]), iso_day(days[-1]), workers,
        )

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="archive") as pool:
            futures: List[Future] = [pool.submit(self.fetch_day, day) for day in days]

        results: List[List[DayRecord]] = []
        for day, fut in zip(days, futures):
            exc = fut.exception()
            if exc is not None:
                failed = sum(1 for f in futures if f.exception() is not None)
                logger.error(
                    "%d of %d daily fetches failed; first failure on %s",
                    failed, len(days), iso_day(day),
                )
                if isinstance(exc, FetchError):
                    raise exc
                raise FetchError(f"Unexpected fetch failure: {exc}", day=day) from exc
            results.append(fut.result())
        return results
