"""
dataset.py — Output Artifact
=============================
The single JSON document the frontend reads::

    {
      "start_date": "03-01-2021",
      "end_date":   "03-08-2021",
      "groups": [
        {"key": "...", "index": 0, "day_values": [...scaled], "display_values": [...raw]},
        ...
      ]
    }

Writes are atomic: the document goes to a temporary file beside the
target, which then replaces it.  A failed run leaves any previous artifact
untouched.
"""

from __future__ import annotations

import json
import os
import pathlib
import stat
import tempfile
from dataclasses import dataclass, field
from typing import Any, Dict, List

import pandas as pd

from activity_timeline.aggregator import KeyGroup
from activity_timeline.date_window import DateWindow
from activity_timeline.utils import format_day, get_logger

logger = get_logger("timeline.dataset")


class DatasetError(OSError):
    """Base class for artifact I/O failures."""


class DatasetWriteError(DatasetError):
    """Raised when the output artifact cannot be written."""


class DatasetReadError(DatasetError):
    """Raised when an emitted artifact cannot be read back."""


@dataclass
class Dataset:
    start_date: str
    end_date: str
    groups: List[KeyGroup] = field(default_factory=list)

    @classmethod
    def from_window(
        cls,
        window: DateWindow,
        groups: List[KeyGroup],
        date_format: str = "%m-%d-%Y",
    ) -> "Dataset":
        return cls(
            start_date=format_day(window.start, date_format),
            end_date=format_day(window.end, date_format),
            groups=list(groups),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start_date": self.start_date,
            "end_date": self.end_date,
            "groups": [g.to_dict() for g in self.groups],
        }


def _target_mode(path: pathlib.Path) -> int:
    """Keep an existing artifact's permissions; otherwise 0666 minus the umask."""
    if path.exists():
        return stat.S_IMODE(path.stat().st_mode)
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def write_dataset(dataset: Dataset, path: pathlib.Path | str) -> pathlib.Path:
    """Serialise ``dataset`` to ``path``, overwriting any existing file."""
    path = pathlib.Path(path)
    body = json.dumps(dataset.to_dict())
    tmp_name = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.name}.", suffix=".tmp", dir=path.parent,
        )
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(body)
        os.chmod(tmp_name, _target_mode(path))
        os.replace(tmp_name, path)
    except OSError as exc:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise DatasetWriteError(f"Cannot write dataset to {path}: {exc}") from exc

    logger.info(
        "Dataset written → %s (%d groups, %d bytes)",
        path, len(dataset.groups), len(body.encode("utf-8")),
    )
    return path


# ═════════════════════════════════════════════════════════════════════════════
#  INSPECTION
# ═════════════════════════════════════════════════════════════════════════════

def load_dataset(path: pathlib.Path | str) -> Dict[str, Any]:
    """Read a previously emitted artifact."""
    path = pathlib.Path(path)
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        raise DatasetReadError(f"Cannot read dataset at {path}: {exc}") from exc


def dataset_to_frame(payload: Dict[str, Any], date_format: str = "%m-%d-%Y") -> pd.DataFrame:
    """
    Flatten an artifact to one row per (key, day).

    Columns: ``key, index, day, date, raw, scaled``.  ``date`` is derived
    from ``start_date`` parsed with ``date_format``.
    """
    start = pd.to_datetime(payload["start_date"], format=date_format)
    rows = []
    for group in payload.get("groups", []):
        for day, (raw, scaled) in enumerate(
            zip(group["display_values"], group["day_values"])
        ):
            rows.append({
                "key": group["key"],
                "index": group["index"],
                "day": day,
                "date": start + pd.Timedelta(days=day),
                "raw": raw,
                "scaled": scaled,
            })
    return pd.DataFrame(rows, columns=["key", "index", "day", "date", "raw", "scaled"])


def key_totals(frame: pd.DataFrame) -> pd.DataFrame:
    """Per-key raw/scaled totals and peak, busiest key first."""
    if frame.empty:
        return pd.DataFrame(columns=["key", "raw_total", "raw_peak", "scaled_total"])
    totals = (
        frame.groupby("key", sort=False)
        .agg(raw_total=("raw", "sum"), raw_peak=("raw", "max"), scaled_total=("scaled", "sum"))
        .reset_index()
        .sort_values(["raw_total", "key"], ascending=[False, True])
        .reset_index(drop=True)
    )
    return totals
