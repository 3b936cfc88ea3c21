#!/usr/bin/env python3
"""
Render a heatmap PNG of an emitted timeline dataset.

Usage
-----
  python scripts/preview_dataset.py                       # data.json → preview.png
  python scripts/preview_dataset.py data.json -o out/week.png --top 40
"""

from __future__ import annotations

import argparse
import pathlib
import sys

SCRIPT_DIR = pathlib.Path(__file__).resolve().parent
PROJECT_ROOT = SCRIPT_DIR.parent
sys.path.insert(0, str(PROJECT_ROOT))

from activity_timeline.dataset import DatasetReadError, load_dataset  # noqa: E402
from activity_timeline.preview import render_preview  # noqa: E402


def main() -> None:
    parser = argparse.ArgumentParser(description="Heatmap preview of a timeline dataset.")
    parser.add_argument(
        "path",
        nargs="?",
        type=pathlib.Path,
        default=pathlib.Path("data.json"),
    )
    parser.add_argument(
        "-o", "--output",
        type=pathlib.Path,
        default=pathlib.Path("preview.png"),
    )
    parser.add_argument("--top", type=int, default=25, help="Keys to show (default: 25).")
    parser.add_argument(
        "--date-format",
        default="%m-%d-%Y",
        help="strftime format the dataset dates were written with (default: %%m-%%d-%%Y).",
    )
    args = parser.parse_args()

    try:
        payload = load_dataset(args.path)
    except DatasetReadError as exc:
        print(exc)
        sys.exit(1)

    out = render_preview(payload, args.output, top_n=args.top, date_format=args.date_format)
    print(f"Wrote → {out}")


if __name__ == "__main__":
    main()
