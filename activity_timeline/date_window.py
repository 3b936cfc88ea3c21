"""
date_window.py — Calendar Window Construction
==============================================
Derives the inclusive list of calendar days a run covers.

Two modes:

- explicit start:  ``start = <arg>``, ``end = start + N`` days
- default window:  ``end = today``,  ``start = end - N`` days

Either way the window holds ``N + 1`` days, one per archive fetch.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import List

import pandas as pd

from activity_timeline.utils import get_logger

logger = get_logger("timeline.window")


class InvalidDateError(ValueError):
    """Raised when the start-date argument cannot be parsed."""


@dataclass(frozen=True)
class DateWindow:
    """Inclusive, day-granular window: ``end == start + length_days``."""

    start: datetime.date
    end: datetime.date
    length_days: int

    def __post_init__(self) -> None:
        if self.end - self.start != datetime.timedelta(days=self.length_days):
            raise ValueError(
                f"Window end {self.end} is not {self.length_days} days after {self.start}"
            )

    @property
    def days(self) -> List[datetime.date]:
        """Every calendar day from ``start`` to ``end`` inclusive."""
        return [ts.date() for ts in pd.date_range(self.start, self.end, freq="D")]

    def __len__(self) -> int:
        return self.length_days + 1


def parse_start_date(text: str) -> datetime.date:
    """
    Parse a CLI date argument (``2021-03-15``, ``2021-03-15T09:30:00Z``, ...).

    Time of day and any UTC offset are dropped: only the calendar day counts.
    """
    if text is None or not str(text).strip():
        raise InvalidDateError("Empty date argument")
    try:
        ts = pd.Timestamp(str(text).strip())
    except (ValueError, TypeError, OverflowError) as exc:
        raise InvalidDateError(f"Cannot parse {text!r} as a date: {exc}") from exc
    if pd.isna(ts):
        raise InvalidDateError(f"Cannot parse {text!r} as a date")
    return ts.date()


def build_window(
    date_arg: str | None,
    length_days: int = 7,
    today: datetime.date | None = None,
) -> DateWindow:
    """
    Build the run's :class:`DateWindow`.

    Parameters
    ----------
    date_arg : str, optional
        Window start.  When omitted the window is the ``length_days`` days
        ending ``today``.
    length_days : int
        Fixed window length ``N``; the window spans ``N + 1`` days.
    today : date, optional
        Reference "now" for the default window (injected by tests).
    """
    if length_days < 1:
        raise ValueError(f"length_days must be >= 1, got {length_days}")

    if date_arg:
        start = parse_start_date(date_arg)
        end = start + datetime.timedelta(days=length_days)
    else:
        end = today or datetime.date.today()
        start = end - datetime.timedelta(days=length_days)
        logger.info(
            "No date provided, using the %d days ending today (%s → %s)",
            length_days, start.isoformat(), end.isoformat(),
        )

    return DateWindow(start=start, end=end, length_days=length_days)
