"""
aggregator.py — Key × Day Matrix Assembly
==========================================
Joins the per-day snapshots into one rectangular matrix:

- rows:    every key seen on any day, in first-seen order
- columns: every day of the window, in order
- cells:   that day's (truncated) count, 0 where the key is absent

Every series has exactly one slot per day, however sparse the key's
activity, because the frontend assumes uniform-length series.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

import pandas as pd

from activity_timeline.archive_client import DayRecord
from activity_timeline.utils import get_logger

logger = get_logger("timeline.aggregate")


@dataclass
class KeyGroup:
    """One activity key's series across the window."""

    key: str
    index: int
    day_values: List[int]
    display_values: List[int] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "index": self.index,
            "day_values": list(self.day_values),
            "display_values": list(self.display_values),
        }


@dataclass
class AggregateResult:
    groups: List[KeyGroup]
    max_value: int
    n_days: int


def build_matrix(day_records: Sequence[Sequence[DayRecord]]) -> pd.DataFrame:
    """
    Pivot the day-indexed snapshots into a key × day-index integer frame.

    Duplicate keys within one day keep their first occurrence.
    """
    n_days = len(day_records)
    rows = [
        (day_idx, rec.key, rec.count)
        for day_idx, records in enumerate(day_records)
        for rec in records
    ]
    if not rows:
        return pd.DataFrame(
            index=pd.Index([], name="key"),
            columns=pd.RangeIndex(n_days, name="day"),
            dtype="int64",
        )

    long = pd.DataFrame(rows, columns=["day", "key", "count"])
    keys = list(pd.unique(long["key"]))

    dupes = long.duplicated(subset=["day", "key"], keep="first")
    if dupes.any():
        logger.warning(
            "Dropping %d duplicate key entries (first occurrence per day wins): %s",
            int(dupes.sum()), sorted(long.loc[dupes, "key"].unique())[:10],
        )
        long = long.loc[~dupes]

    matrix = (
        long.pivot(index="key", columns="day", values="count")
        .reindex(index=keys, columns=range(n_days))
        .fillna(0)
        .astype("int64")
    )
    matrix.index.name = "key"
    matrix.columns.name = "day"
    return matrix


def aggregate_days(day_records: Sequence[Sequence[DayRecord]]) -> AggregateResult:
    """
    Build one :class:`KeyGroup` per distinct key and track the global max.

    ``display_values`` starts as an independent copy of the raw series so
    the scaler can overwrite ``day_values`` without touching it.
    """
    n_days = len(day_records)
    matrix = build_matrix(day_records)

    groups: List[KeyGroup] = []
    for index, (key, row) in enumerate(matrix.iterrows()):
        raw = [int(v) for v in row.to_numpy()]
        groups.append(KeyGroup(key=key, index=index, day_values=raw, display_values=list(raw)))

    max_value = max(0, int(matrix.to_numpy().max())) if matrix.size else 0

    logger.info(
        "Aggregated %d keys across %d days (max count = %d)",
        len(groups), n_days, max_value,
    )
    return AggregateResult(groups=groups, max_value=max_value, n_days=n_days)
