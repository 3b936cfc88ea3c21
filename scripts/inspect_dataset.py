#!/usr/bin/env python3
"""
Summarise an emitted timeline dataset.

Prints the window and per-key totals (raw and scaled), busiest key first.

Usage
-----
  python scripts/inspect_dataset.py                 # reads ./data.json
  python scripts/inspect_dataset.py path/to/data.json --top 10
  python scripts/inspect_dataset.py --csv out/long.csv   # long-form export
"""

from __future__ import annotations

import argparse
import pathlib
import sys

SCRIPT_DIR = pathlib.Path(__file__).resolve().parent
PROJECT_ROOT = SCRIPT_DIR.parent
sys.path.insert(0, str(PROJECT_ROOT))

from activity_timeline.dataset import (  # noqa: E402
    DatasetReadError,
    dataset_to_frame,
    key_totals,
    load_dataset,
)


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Print per-key totals for an activity timeline dataset.",
    )
    parser.add_argument(
        "path",
        nargs="?",
        type=pathlib.Path,
        default=pathlib.Path("data.json"),
        help="Dataset JSON (default: data.json).",
    )
    parser.add_argument(
        "--top",
        type=int,
        default=20,
        help="Number of keys to print (default: 20).",
    )
    parser.add_argument(
        "--date-format",
        default="%m-%d-%Y",
        help="strftime format the dataset dates were written with (default: %%m-%%d-%%Y).",
    )
    parser.add_argument(
        "--csv",
        type=pathlib.Path,
        default=None,
        help="Also write the long-form (key, day) table to this CSV path.",
    )
    args = parser.parse_args()

    try:
        payload = load_dataset(args.path)
    except DatasetReadError as exc:
        print(exc)
        sys.exit(1)

    frame = dataset_to_frame(payload, date_format=args.date_format)
    totals = key_totals(frame)

    print(f"Window: {payload['start_date']} → {payload['end_date']}")
    print(f"Keys:   {len(totals)}")
    print()
    if totals.empty:
        print("No activity in window.")
    else:
        print(totals.head(args.top).to_string(index=False))

    if args.csv is not None:
        args.csv.parent.mkdir(parents=True, exist_ok=True)
        frame.to_csv(args.csv, index=False)
        print(f"\nWrote {len(frame):,} rows → {args.csv}")


if __name__ == "__main__":
    main()
